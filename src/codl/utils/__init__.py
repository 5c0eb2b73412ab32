"""Utility functions for codl.

Available via `from codl.utils import ...` for power users.
Not re-exported at the top-level `codl` package.
"""

from codl.utils.filename import (
    clean_filename,
    filename_from_content_disposition,
    filename_from_url,
    resolve_filename,
    unique_filename,
)

__all__ = [
    "clean_filename",
    "filename_from_content_disposition",
    "filename_from_url",
    "resolve_filename",
    "unique_filename",
]
