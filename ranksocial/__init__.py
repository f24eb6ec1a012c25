"""Social feed client with ranked profiles backed by a hosted table API."""

__version__ = "0.1.0"
