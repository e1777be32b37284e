"""PawTrail - route planning for pet walks."""

__version__ = "1.0.0"
