"""Synopsis emission: protein expansion, final ordering and TSV output.

Each accepted match is expanded into one row per protein it maps to. Rows
are ordered deterministically and numbered with strictly increasing result
IDs starting at 1.

Examples
--------
>>> rows = emit_synopsis(matches, ToolProfile.for_tool("moda"))   # doctest: +SKIP
>>> write_synopsis(rows, "sample_syn.txt", profile)                # doctest: +SKIP
"""

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Sequence, TextIO, Union

import pandas as pd

from .config import ToolProfile
from .constants import UNKNOWN_PROTEIN
from .records import NormalizedMatch
from .utils import format_number, mass_error_to_string, split_protein_position

logger = logging.getLogger(__name__)


SYNOPSIS_COLUMNS = (
    'ResultID',
    'Scan',
    'Charge',
    'PrecursorMZ',
    'DelM',
    'DelM_PPM',
    'MH',
    'Peptide',
    'Protein',
    'Score',
    'Rank',
    'QValue',
)

# Values below this are written as 0 (ppm and Q-value columns)
SMALL_VALUE_THRESHOLD = 0.00005


class SynopsisRow(NamedTuple):
    """One output row: a match paired with one of its proteins."""
    result_id: int
    match: NormalizedMatch
    protein: str
    peptide_position: str


def expand_protein_mappings(
    matches: Iterable[NormalizedMatch],
    delimiter: Optional[str] = None,
) -> List[SynopsisRow]:
    """One row per (match, protein); ``result_id`` is left at 0.

    A match without proteins yields a single ``Unknown_Protein`` row.
    Protein lists are normally split when the file is read; pass
    ``delimiter`` to also split entries that still hold several proteins.
    """
    rows = []
    for match in matches:
        entries = match.proteins
        if delimiter:
            entries = [part.strip() for entry in entries
                       for part in entry.split(delimiter) if part.strip()]

        if not entries:
            rows.append(SynopsisRow(0, match, UNKNOWN_PROTEIN, ''))
            continue

        for protein_entry in entries:
            name, position = split_protein_position(protein_entry)
            rows.append(SynopsisRow(0, match, name or UNKNOWN_PROTEIN, position))

    return rows


def synopsis_sort_key(profile: ToolProfile):
    """Key function ordering rows by the profile's sort keys."""
    direction = -1.0 if profile.higher_score_is_better else 1.0

    def key(row: SynopsisRow):
        parts = []
        for name in profile.sort_keys:
            if name == 'score':
                parts.append(direction * row.match.score)
            elif name == 'scan':
                parts.append(row.match.scan)
            elif name == 'charge':
                parts.append(row.match.charge)
            elif name == 'peptide':
                parts.append(row.match.peptide)
            elif name == 'protein':
                parts.append(row.protein)
        return tuple(parts)

    return key


def emit_synopsis(
    matches: Sequence[NormalizedMatch],
    profile: ToolProfile,
    first_hits: bool = False,
) -> List[SynopsisRow]:
    """Filter, expand, order and number the synopsis rows.

    Parameters
    ----------
    matches : sequence of NormalizedMatch
        Ranked matches with Q-values assigned
    profile : ToolProfile
        Supplies the acceptance threshold and sort key order
    first_hits : bool
        Keep only rank-1 matches of each scan

    Returns
    -------
    List[SynopsisRow]
        Rows with result IDs 1..n
    """
    accepted = [
        match for match in matches
        if profile.accepts(match.score) and (not first_hits or match.rank == 1)
    ]

    rows = expand_protein_mappings(accepted)
    rows.sort(key=synopsis_sort_key(profile))

    rows = [row._replace(result_id=result_id) for result_id, row in enumerate(rows, start=1)]

    logger.info(
        f"✓ {len(accepted):,} of {len(matches):,} matches pass the {profile.name} "
        f"threshold; {len(rows):,} synopsis rows"
    )
    return rows


def format_row(row: SynopsisRow, profile: ToolProfile) -> List[str]:
    """Text fields of one synopsis row, in column order."""
    match = row.match
    values = [
        str(row.result_id),
        str(match.scan),
        str(match.charge),
        format_number(match.precursor_mz, 6),
        mass_error_to_string(match.del_m),
        format_number(match.del_m_ppm, 5, SMALL_VALUE_THRESHOLD),
        format_number(match.mh, 6),
        match.peptide,
        row.protein,
        f"{match.score:.6g}",
        str(match.rank),
        format_number(match.qvalue, 5, SMALL_VALUE_THRESHOLD),
    ]
    values.extend(match.extra.get(name, '') for name in profile.extra_columns)
    return values


def synopsis_header(profile: ToolProfile) -> List[str]:
    return list(SYNOPSIS_COLUMNS) + list(profile.extra_columns)


def write_synopsis(
    rows: Sequence[SynopsisRow],
    path_or_handle: Union[str, Path, TextIO],
    profile: ToolProfile,
) -> int:
    """Write rows as a tab-delimited synopsis file.

    Returns
    -------
    int
        Number of data rows written
    """
    if hasattr(path_or_handle, 'write'):
        _write_rows(rows, path_or_handle, profile)
    else:
        output_path = Path(path_or_handle)
        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            _write_rows(rows, f, profile)
        logger.info(f"✓ Wrote {len(rows):,} rows to {output_path.name}")

    return len(rows)


def _write_rows(rows: Sequence[SynopsisRow], handle: TextIO, profile: ToolProfile) -> None:
    handle.write('\t'.join(synopsis_header(profile)) + '\n')
    for row in rows:
        handle.write('\t'.join(format_row(row, profile)) + '\n')


def synopsis_frame(rows: Sequence[SynopsisRow], profile: ToolProfile) -> pd.DataFrame:
    """The synopsis table as a DataFrame with numeric columns kept numeric."""
    records = []
    for row in rows:
        match = row.match
        record = {
            'ResultID': row.result_id,
            'Scan': match.scan,
            'Charge': match.charge,
            'PrecursorMZ': match.precursor_mz,
            'DelM': match.del_m,
            'DelM_PPM': match.del_m_ppm,
            'MH': match.mh,
            'Peptide': match.peptide,
            'Protein': row.protein,
            'Score': match.score,
            'Rank': match.rank,
            'QValue': match.qvalue,
        }
        for name in profile.extra_columns:
            record[name] = match.extra.get(name, '')
        records.append(record)

    return pd.DataFrame(records, columns=synopsis_header(profile))
