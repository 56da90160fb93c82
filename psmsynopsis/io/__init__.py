"""Reading tab-delimited search engine results."""

from .columns import (
    ColumnSchema,
    build_schema,
    default_schema,
    detect_schema,
    looks_like_header,
)

from .reader import (
    PSMFileReader,
    ReadSummary,
    read_matches,
    split_proteins,
)

__all__ = [
    # Columns
    'ColumnSchema',
    'build_schema',
    'default_schema',
    'detect_schema',
    'looks_like_header',

    # Reader
    'PSMFileReader',
    'ReadSummary',
    'read_matches',
    'split_proteins',
]
