"""Header detection and column schema.

The header is mapped to field indices once per file; rows are then read by
index. A file without a header (second column is an integer) is read with
the profile's default column order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import CANONICAL_FIELDS, REQUIRED_FIELDS, ToolProfile
from ..errors import HeaderError
from ..utils import parse_int

logger = logging.getLogger(__name__)


@dataclass
class ColumnSchema:
    """Field name -> column index for one input file.

    Canonical fields that are absent from the header have index None.
    """

    indices: Dict[str, Optional[int]] = field(default_factory=dict)
    extra_indices: Dict[str, int] = field(default_factory=dict)
    unknown_columns: List[str] = field(default_factory=list)
    has_header: bool = True

    def index_of(self, name: str) -> Optional[int]:
        return self.indices.get(name)

    def has(self, name: str) -> bool:
        return self.indices.get(name) is not None

    def validate(self, required: Sequence[str] = REQUIRED_FIELDS) -> None:
        """Raise HeaderError if a required field has no column."""
        missing = [name for name in required if not self.has(name)]
        if missing:
            raise HeaderError(f"Required column(s) not found in the header: {', '.join(missing)}")

    def value(self, fields: Sequence[str], name: str) -> Optional[str]:
        """Stripped text of field ``name`` in a split row, or None if absent."""
        index = self.indices.get(name)
        if index is None or index >= len(fields):
            return None
        return fields[index].strip()

    def extras(self, fields: Sequence[str]) -> Dict[str, str]:
        """Values of the pass-through columns in a split row."""
        return {
            name: fields[index].strip() if index < len(fields) else ''
            for name, index in self.extra_indices.items()
        }


def looks_like_header(fields: Sequence[str]) -> bool:
    """False when the second column is an integer (a data row)."""
    if len(fields) < 2:
        return True
    return parse_int(fields[1].strip()) is None


def build_schema(header_fields: Sequence[str], profile: ToolProfile) -> ColumnSchema:
    """Map header names (case-insensitive) to canonical and extra fields.

    Unknown header names are logged as warnings and otherwise ignored.

    Parameters
    ----------
    header_fields : sequence of str
        Split header line
    profile : ToolProfile
        Provides the header name -> field mapping

    Returns
    -------
    ColumnSchema
        Schema with an index (or None) for every canonical field
    """
    lookup = {name.lower(): target for name, target in profile.column_names.items()}

    schema = ColumnSchema(indices={name: None for name in CANONICAL_FIELDS})

    for index, header in enumerate(header_fields):
        key = header.strip().lower()
        if not key:
            continue

        if key not in lookup:
            schema.unknown_columns.append(header.strip())
            continue

        target = lookup[key]
        if target is None:
            continue

        if target in schema.indices:
            if schema.indices[target] is None:
                schema.indices[target] = index
        elif target in profile.extra_columns:
            schema.extra_indices.setdefault(target, index)

    for header in schema.unknown_columns:
        logger.warning(f"Unrecognized column header for {profile.name}: {header}")

    return schema


def default_schema(profile: ToolProfile) -> ColumnSchema:
    """Schema for a headerless file, using the profile's default column order."""
    if not profile.default_columns:
        raise HeaderError(f"{profile.name} files must have a header line")

    schema = build_schema(profile.default_columns, profile)
    schema.has_header = False
    return schema


def detect_schema(first_fields: Sequence[str], profile: ToolProfile) -> ColumnSchema:
    """Build and validate the schema from the first non-blank line.

    Returns
    -------
    ColumnSchema
        ``has_header`` is False when ``first_fields`` is already a data row

    Raises
    ------
    HeaderError
        If a required field is missing
    """
    if looks_like_header(first_fields):
        schema = build_schema(first_fields, profile)
    else:
        logger.info(f"No header line found; using the default {profile.name} column order")
        schema = default_schema(profile)

    schema.validate()
    return schema
