"""REST API and its Python client."""

from .client import APIClientError, HoopDataAPIClient

__all__ = ["APIClientError", "HoopDataAPIClient"]
