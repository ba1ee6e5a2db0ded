"""HTTP API for the employee SQL chat."""

__version__ = "0.1.0"
