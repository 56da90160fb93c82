"""Canonical peptide-spectrum match record."""

from dataclasses import dataclass, field
from typing import Dict, List

from .modifications.resolver import ModificationEntry


@dataclass
class NormalizedMatch:
    """One PSM, normalized from a tool-specific input line.

    Created once per input line, mutated in place by ranking and FDR
    estimation, and discarded after the synopsis rows are written.
    """

    scan: int
    charge: int
    peptide: str                  # Annotated sequence, as reported
    clean_sequence: str
    score: float
    proteins: List[str] = field(default_factory=list)
    modifications: List[ModificationEntry] = field(default_factory=list)

    calculated_mono_mass: float = 0.0
    observed_precursor_mass: float = 0.0
    precursor_mz: float = 0.0
    mh: float = 0.0
    del_m: float = 0.0
    del_m_ppm: float = 0.0

    rank: int = 0
    fdr: float = 1.0
    qvalue: float = 1.0

    # Tool-specific pass-through columns
    extra: Dict[str, str] = field(default_factory=dict)
    line_number: int = 0

    @property
    def total_mod_mass(self) -> float:
        return sum(entry.mass for entry in self.modifications)

    def __repr__(self) -> str:
        return (
            f"NormalizedMatch(scan={self.scan}, charge={self.charge}, "
            f"peptide={self.peptide!r}, score={self.score}, rank={self.rank}, "
            f"qvalue={self.qvalue:.4f})"
        )
