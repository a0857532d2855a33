"""Backup export and import."""

from wellflow.export.backup import (
    default_export_filename,
    export_document,
    import_document,
    read_import,
    write_export,
)

__all__ = [
    "default_export_filename",
    "export_document",
    "import_document",
    "read_import",
    "write_export",
]
