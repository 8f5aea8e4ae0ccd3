"""File-descriptor helpers, a buffered token reader, exact number conversion and a progress bar."""

__version__ = "0.1.0"
__all__ = [
    "exceptions",
    "progress",
    "float_to_string",
    "fixed_dtoa",
    "strtod",
    "fileops",
    "file_piece",
]