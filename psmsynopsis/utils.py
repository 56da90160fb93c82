"""Shared helpers: score tie comparison, sequence cleanup and number formatting.

All floating point tie decisions in psmsynopsis go through
:func:`scores_tied`, so ranking and grouping share one epsilon.

Formatting helpers produce fixed-precision text so that synopsis files are
byte-for-byte reproducible for identical input.
"""

import math
import re
from typing import Optional, Tuple

from .constants import SCORE_EPSILON


# =============================================================================
# Tie Comparison
# =============================================================================

def scores_tied(score_a: float, score_b: float, epsilon: float = SCORE_EPSILON) -> bool:
    """Return True if two scores are equal within ``epsilon``.

    Parameters
    ----------
    score_a, score_b : float
        Scores to compare
    epsilon : float
        Maximum absolute difference considered a tie (default: machine epsilon)

    Examples
    --------
    >>> scores_tied(50.0, 50.0)
    True
    >>> scores_tied(50.0, 40.0)
    False
    """
    return abs(score_a - score_b) <= epsilon


# =============================================================================
# Sequence Helpers
# =============================================================================

def split_prefix_suffix(sequence: str) -> Tuple[str, str, str]:
    """Split ``K.PEPTIDE.R`` into prefix residue, primary sequence and suffix residue.

    Sequences without flanking residues are returned unchanged with empty
    prefix and suffix.

    Examples
    --------
    >>> split_prefix_suffix("K.PEPT+15.995IDE.R")
    ('K', 'PEPT+15.995IDE', 'R')
    >>> split_prefix_suffix("PEPTIDE")
    ('', 'PEPTIDE', '')
    """
    sequence = sequence.strip()
    if len(sequence) >= 4 and sequence[1] == '.' and sequence[-2] == '.':
        return sequence[0], sequence[2:-2], sequence[-1]
    return '', sequence, ''


def clean_sequence(sequence: str) -> str:
    """Return only the A-Z residue letters of an annotated sequence.

    Examples
    --------
    >>> clean_sequence("K.A+15.995BC-2.5D.R")
    'ABCD'
    """
    _, primary, _ = split_prefix_suffix(sequence)
    return ''.join(c for c in primary if 'A' <= c <= 'Z')


PROTEIN_POSITION_PATTERN = re.compile(r"(.+)\[([^\]]+)\]")


def split_protein_position(protein_entry: str) -> Tuple[str, str]:
    """Split ``Name[Position]`` into name and position; position is empty if absent.

    Protein names are truncated at the first space (descriptions are dropped).

    Examples
    --------
    >>> split_protein_position("ref|YP_001038741.1[R.67~78.L(2)]")
    ('ref|YP_001038741.1', 'R.67~78.L(2)')
    >>> split_protein_position("sp|P12345|ALBU_HUMAN Serum albumin")
    ('sp|P12345|ALBU_HUMAN', '')
    """
    entry = protein_entry.strip()
    match = PROTEIN_POSITION_PATTERN.fullmatch(entry)
    if match:
        name, position = match.group(1), match.group(2)
    else:
        name, position = entry, ''

    space = name.find(' ')
    if space > 0:
        name = name[:space]
    return name, position


def parse_float(text: Optional[str]) -> Optional[float]:
    """Parse a finite float, returning None for empty, non-numeric, NaN or infinite text.

    Examples
    --------
    >>> parse_float("1e-3")
    0.001
    >>> parse_float("nan") is None
    True
    """
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse an int (tolerating "2.0"), returning None when not numeric."""
    value = parse_float(text)
    if value is None or not value.is_integer():
        return None
    return int(value)


# =============================================================================
# Number Formatting
# =============================================================================

def format_number(value: float, digits: int, zero_threshold: float = 0.0) -> str:
    """Format ``value`` with ``digits`` decimals, trimming trailing zeros.

    Values whose magnitude is below ``zero_threshold`` are written as ``0``.

    Examples
    --------
    >>> format_number(1.23456789, 5)
    '1.23457'
    >>> format_number(0.00001, 5, 0.00005)
    '0'
    >>> format_number(2.5, 6)
    '2.5'
    """
    if abs(value) < zero_threshold:
        return '0'

    text = f"{value:.{digits}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text


def mass_error_to_string(mass_error_da: float) -> str:
    """Format a mass error in Da.

    Errors below 1e-6 Da are written as ``0``; small errors get six decimals,
    everything else five.
    """
    if abs(mass_error_da) < 0.000001:
        return '0'

    if abs(mass_error_da) < 0.0001:
        return format_number(mass_error_da, 6, 0.0000001)

    return format_number(mass_error_da, 5, 0.000001)
