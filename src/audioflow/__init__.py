"""AudioFlow - local music folder browser and player."""

__version__ = "0.1.0"
