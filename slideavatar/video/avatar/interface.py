"""
Templated video service interface (video package)
"""

from abc import ABC, abstractmethod
from typing import Any


class TemplateVideoInterface(ABC):
    """Abstract interface for services rendering videos from a template"""

    @abstractmethod
    async def submit(self, template_id: str, payload: dict[str, Any]) -> str:
        """Start video generation and return the service's video id"""
        raise NotImplementedError

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the service is available/configured"""
        raise NotImplementedError
