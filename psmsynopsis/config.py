"""Per-tool processing profiles.

A :class:`ToolProfile` captures everything that differs between search
engines: header names, score direction and acceptance threshold, the
modification annotation syntax, protein list delimiter and the columns
passed through to the synopsis.

Examples
--------
>>> profile = ToolProfile.for_tool("msfragger")
>>> profile.higher_score_is_better
False
>>> profile.accepts(0.01)
True
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .constants import (
    DECOY_PROTEIN_PREFIXES,
    DECOY_PROTEIN_SUFFIXES,
    DEFAULT_MASS_TOLERANCE_DA,
    DEFAULT_MAX_DELTA_MASS_DA,
)
from .scoring.fdr import DecoyMatcher, DuplicateKey


# Canonical fields every schema can map to
CANONICAL_FIELDS = (
    'scan',
    'charge',
    'peptide',
    'score',
    'proteins',
    'precursor_mz',
    'observed_mass',
    'calculated_mass',
    'mod_list',
)

REQUIRED_FIELDS = ('scan', 'charge', 'peptide', 'score')

SORT_FIELDS = ('score', 'scan', 'charge', 'peptide', 'protein')


class ModSyntax(Enum):
    """How a tool reports peptide modifications."""
    INLINE = "inline"       # Masses embedded in the sequence, e.g. PEPT+79.966IDE
    MOD_LIST = "mod_list"   # Side-channel list, e.g. 1M(15.9949), N-term(42.0106)
    NAMED = "named"         # Side-channel names, e.g. Oxidation 1,Dehydro 3


@dataclass
class ToolProfile:
    """Column mapping and processing parameters for one search engine.

    ``column_names`` maps header names (case-insensitive) to a canonical
    field, to the name of an extra pass-through column, or to None for
    known columns that are not used.
    """

    name: str
    column_names: Dict[str, Optional[str]] = field(default_factory=dict)
    default_columns: Tuple[str, ...] = ()     # Header names assumed when the file has no header

    # Scoring
    higher_score_is_better: bool = True
    score_threshold: Optional[float] = None   # Synopsis acceptance (None = keep all)

    # Modifications
    mod_syntax: ModSyntax = ModSyntax.INLINE
    mod_list_includes_static: bool = False

    # Proteins and grouping
    protein_delimiter: str = ';'
    duplicate_key: DuplicateKey = DuplicateKey.ANNOTATED
    decoy_prefixes: Tuple[str, ...] = DECOY_PROTEIN_PREFIXES
    decoy_suffixes: Tuple[str, ...] = DECOY_PROTEIN_SUFFIXES

    # Output
    sort_keys: Tuple[str, ...] = SORT_FIELDS
    extra_columns: Tuple[str, ...] = ()

    # Mass validation
    mass_tolerance_da: float = DEFAULT_MASS_TOLERANCE_DA
    max_delta_mass_da: float = DEFAULT_MAX_DELTA_MASS_DA

    def __post_init__(self):
        unknown = [key for key in self.sort_keys if key not in SORT_FIELDS]
        if unknown:
            raise ValueError(f"Unknown sort key(s) {unknown}. Valid options: {', '.join(SORT_FIELDS)}")
        self.duplicate_key = DuplicateKey.parse(self.duplicate_key)

    def accepts(self, score: float) -> bool:
        """Return True if ``score`` passes the synopsis acceptance threshold."""
        if self.score_threshold is None:
            return True
        if self.higher_score_is_better:
            return score >= self.score_threshold
        return score <= self.score_threshold

    def decoy_matcher(self) -> DecoyMatcher:
        return DecoyMatcher(self.decoy_prefixes, self.decoy_suffixes)

    @classmethod
    def for_tool(cls, tool: str) -> 'ToolProfile':
        """Create the profile for a supported search engine.

        Args:
            tool: One of ``moda``, ``modplus``, ``msfragger``, ``mspathfinder``
                (case-insensitive)

        Returns:
            ToolProfile with tool-specific defaults
        """
        key = tool.strip().lower()

        if key == 'moda':
            columns = {
                'SpectrumFile': None,
                'Index': 'scan',
                'ObservedMW': 'observed_mass',
                'Charge': 'charge',
                'CalculatedMW': 'calculated_mass',
                'DeltaMass': None,
                'Score': 'MODa_Score',
                'Probability': 'score',
                'Peptide': 'peptide',
                'Protein': 'proteins',
                'PeptidePosition': None,
            }
            return cls(
                name='MODa',
                column_names=columns,
                default_columns=tuple(columns),
                higher_score_is_better=True,
                score_threshold=0.05,
                mod_syntax=ModSyntax.INLINE,
                protein_delimiter=';',
                extra_columns=('MODa_Score',),
            )

        elif key == 'modplus':
            columns = {
                'SpectrumFile': None,
                'Index': 'Spectrum_Index',
                'ScanNo': 'scan',
                'ObservedMW': 'observed_mass',
                'Charge': 'charge',
                'CalculatedMW': 'calculated_mass',
                'DeltaMass': None,
                'Score': 'MODPlus_Score',
                'Probability': 'score',
                'Peptide': 'peptide',
                'NTT': 'NTT',
                'Protein': 'proteins',
                'ModificationAnnotation': None,
            }
            return cls(
                name='MODPlus',
                column_names=columns,
                default_columns=tuple(columns),
                higher_score_is_better=True,
                score_threshold=0.05,
                mod_syntax=ModSyntax.INLINE,
                protein_delimiter=';',
                extra_columns=('Spectrum_Index', 'NTT', 'MODPlus_Score'),
            )

        elif key == 'msfragger':
            columns = {
                'scannum': 'scan',
                'precursor_neutral_mass': 'observed_mass',
                'retention_time': None,
                'charge': 'charge',
                'hit_rank': None,
                'peptide': 'peptide',
                'peptide_prev_aa': None,
                'peptide_next_aa': None,
                'protein': 'proteins',
                'num_matched_ions': 'Num_Matched_Ions',
                'tot_num_ions': None,
                'calc_neutral_pep_mass': 'calculated_mass',
                'massdiff': None,
                'num_tol_term': 'NTT',
                'num_missed_cleavages': None,
                'modification_info': 'mod_list',
                'hyperscore': 'Hyperscore',
                'nextscore': None,
                'expectscore': 'score',
                'best_locs': None,
                'score_without_delta_mass': None,
                'best_score_with_delta_mass': None,
                'second_best_score_with_delta_mass': None,
                'delta_score': None,
                'alternative_proteins': None,
            }
            return cls(
                name='MSFragger',
                column_names=columns,
                default_columns=tuple(columns),
                higher_score_is_better=False,
                score_threshold=0.75,
                mod_syntax=ModSyntax.MOD_LIST,
                mod_list_includes_static=True,
                protein_delimiter=',',
                duplicate_key=DuplicateKey.CLEAN,
                extra_columns=('Hyperscore', 'NTT', 'Num_Matched_Ions'),
            )

        elif key == 'mspathfinder':
            columns = {
                'Scan': 'scan',
                'Pre': None,
                'Sequence': 'peptide',
                'Post': None,
                'Modifications': 'mod_list',
                'Composition': None,
                'ProteinName': 'proteins',
                'ProteinDesc': None,
                'ProteinLength': None,
                'Start': None,
                'End': None,
                'Charge': 'charge',
                'MostAbundantIsotopeMz': 'precursor_mz',
                'Mass': 'calculated_mass',
                '#MatchedFragments': 'Matched_Fragments',
                'Probability': None,
                'SpecEValue': 'score',
                'EValue': 'EValue',
                'QValue': None,
                'PepQValue': None,
            }
            return cls(
                name='MSPathFinder',
                column_names=columns,
                default_columns=tuple(columns),
                higher_score_is_better=False,
                score_threshold=None,
                mod_syntax=ModSyntax.NAMED,
                protein_delimiter=';',
                duplicate_key=DuplicateKey.CLEAN,
                extra_columns=('Matched_Fragments', 'EValue'),
            )

        else:
            raise ValueError(
                f"Unknown tool: {tool}. Use 'moda', 'modplus', 'msfragger' or 'mspathfinder'."
            )
