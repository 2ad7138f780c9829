"""Keep a VERSION.txt release history in sync with git tags and commits."""

__version__ = "0.1.0"
