"""Team task tracking with a deterministic status/overdue engine and AI meeting extraction."""

__version__ = "0.1.0"
