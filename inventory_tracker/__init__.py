"""Single-user inventory tracker with CSV-backed persistence."""

__version__ = "1.0.0"
