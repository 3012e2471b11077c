"""SlideAvatar: turn slide decks into narrated, templated avatar videos."""

__version__ = "0.1.0"
