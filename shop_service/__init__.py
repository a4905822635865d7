"""Console shop management: role-based order and product commands over SQL."""

__version__ = "0.1.0"
