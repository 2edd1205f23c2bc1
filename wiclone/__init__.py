"""Clone Azure Boards work items and their child trees."""

__version__ = "0.1.0"
