"""Personal image hosting API with per-user storage and public galleries."""

__version__ = "1.0.0"
