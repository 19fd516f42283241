"""Rating, ranking and bracket projection engine for collegiate basketball leagues."""

__version__ = "0.1.0"
