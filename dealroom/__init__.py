"""Deal-room categorized document manager."""

__version__ = "0.1.0"
