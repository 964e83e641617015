"""Phone order service: place orders with only a phone number."""

__version__ = "2.0.0"
