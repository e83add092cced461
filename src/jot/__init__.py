"""jot: local, encrypted personal journaling."""

__version__ = "0.1.0"
