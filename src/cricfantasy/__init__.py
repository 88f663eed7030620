"""Fantasy cricket team building and contest entry service."""

__version__ = "0.1.0"
