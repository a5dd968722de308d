"""
API module for the REST surface.
"""

from .rest_api import GAMapRestAPI, get_viewer

__all__ = [
    "GAMapRestAPI",
    "get_viewer",
]
