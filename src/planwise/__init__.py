"""planwise - recurring task planner."""

__version__ = "0.1.0"
