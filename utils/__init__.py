"""Shared utilities for the backend."""
from utils.case import dict_keys_to_camel, row_to_camel
from utils.logging import configure_logging

__all__ = [
    "configure_logging",
    "dict_keys_to_camel",
    "row_to_camel",
]
