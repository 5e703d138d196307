"""Lead-capture form submission API."""

__version__ = "1.0.0"
