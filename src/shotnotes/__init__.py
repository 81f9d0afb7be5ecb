"""ShotNotes - content relationship and recommendation engine for screenshots."""

__version__ = "0.1.0"
