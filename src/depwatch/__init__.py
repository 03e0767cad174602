"""depwatch - find and remove node_modules folders to reclaim disk space."""

__version__ = "0.1.0"
