"""Source documents: format detection, text extraction, generation and rendering."""
