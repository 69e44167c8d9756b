"""Survey response aggregation and reporting toolkit."""

__version__ = "0.1.0"
