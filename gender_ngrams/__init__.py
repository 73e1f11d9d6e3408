"""Character n-gram gender classification for first names."""

__version__ = "0.1.0"
