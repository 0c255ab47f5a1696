"""Controller document I/O."""

from blendfold.core.io.documents import (
    detect_format,
    load_controller,
    read_document,
    save_controller,
    write_document,
)

__all__ = [
    "detect_format",
    "load_controller",
    "read_document",
    "save_controller",
    "write_document",
]
