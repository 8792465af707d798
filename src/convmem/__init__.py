"""convmem — file-based conversation memory with an active index and archival."""

__version__ = "0.1.0"
