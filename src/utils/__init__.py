"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.io import load_json, save_json

__all__ = [
    "load_json",
    "save_json",
]
