"""Equipment inspection tracking for rope-access PPE."""

__version__ = "1.0.0"
