"""Family meal planner: markdown recipe import."""

__version__ = "0.1.0"
