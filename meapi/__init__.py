"""Me-API Playground — personal profile aggregate over SQLite."""

__version__ = "1.0.0"
