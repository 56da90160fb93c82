"""End-to-end processing of one search engine result file.

Read and normalize every row, order the matches best-first, rank each scan,
estimate FDR and Q-values, then write the synopsis (and optionally the
modification summary).

Examples
--------
>>> from psmsynopsis import ModificationCatalog, ToolProfile, process_file
>>> catalog = ModificationCatalog.from_records([
...     {"mass": 57.021464, "type": "static", "target_residues": "C", "name": "Carbamidomethyl"},
... ])
>>> result = process_file("sample_moda.txt", "sample_syn.txt",
...                       ToolProfile.for_tool("moda"), catalog)   # doctest: +SKIP
>>> result.status                                                  # doctest: +SKIP
<ProcessingStatus.SUCCESS: 'success'>
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .config import ToolProfile
from .errors import ErrorCollector, HeaderError
from .io.reader import PSMFileReader
from .modifications import ModificationCatalog, write_mod_summary
from .records import NormalizedMatch
from .scoring import DuplicateKey, assign_ranks_per_scan, compute_fdr_and_qvalues, fdr_statistics
from .synopsis import emit_synopsis, write_synopsis

logger = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """Outcome of processing one file."""
    SUCCESS = "success"
    INVALID_INPUT_FILE = "invalid_input_file"
    INVALID_HEADER = "invalid_header"
    NO_VALID_ROWS = "no_valid_rows"
    ERROR_CREATING_OUTPUT = "error_creating_output"
    ABORTED = "aborted"


@dataclass
class ProcessingResult:
    """Status, counts and messages from :func:`process_file`."""

    status: ProcessingStatus
    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    lines_read: int = 0
    matches_read: int = 0
    invalid_rows: int = 0
    rows_written: int = 0
    error_messages: List[str] = field(default_factory=list)
    fdr_stats: Dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status is ProcessingStatus.SUCCESS


def sort_best_first(
    matches: List[NormalizedMatch],
    higher_is_better: bool,
    duplicate_key: DuplicateKey = DuplicateKey.ANNOTATED,
) -> None:
    """Order matches in place: score (better first), scan, charge, peptide, protein.

    The peptide tie-break uses the same sequence form as FDR grouping, so
    rows of one duplicate group are always contiguous.
    """
    direction = -1.0 if higher_is_better else 1.0
    clean = duplicate_key is DuplicateKey.CLEAN
    matches.sort(key=lambda m: (
        direction * m.score,
        m.scan,
        m.charge,
        m.clean_sequence if clean else m.peptide,
        m.proteins[0] if m.proteins else '',
    ))


def score_matches(matches: List[NormalizedMatch], profile: ToolProfile) -> Dict[str, float]:
    """Sort, rank and assign FDR/Q-values to ``matches`` in place.

    Returns
    -------
    dict
        Target/decoy statistics from :func:`~psmsynopsis.scoring.fdr_statistics`
    """
    sort_best_first(matches, profile.higher_score_is_better, profile.duplicate_key)

    n_scans = assign_ranks_per_scan(matches, profile.higher_score_is_better)
    logger.info(f"Ranked {len(matches):,} matches across {n_scans:,} scans")

    decoy_matcher = profile.decoy_matcher()
    compute_fdr_and_qvalues(matches, decoy_matcher, profile.duplicate_key)

    stats = fdr_statistics(matches, decoy_matcher)
    logger.info(
        f"✓ FDR: {stats['n_targets']:,} targets, {stats['n_decoys']:,} decoys; "
        f"{stats['n_targets_fdr01']:,} targets at 1% FDR"
    )
    return stats


def process_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    profile: ToolProfile,
    catalog: Optional[ModificationCatalog] = None,
    abort: Optional[Callable[[], bool]] = None,
    first_hits: bool = False,
    mod_summary_path: Optional[Union[str, Path]] = None,
    errors: Optional[ErrorCollector] = None,
) -> ProcessingResult:
    """Convert one result file into a synopsis file.

    Parameters
    ----------
    input_path : str or Path
        Tab-delimited search engine results
    output_path : str or Path
        Synopsis file to create
    profile : ToolProfile
        Search engine profile
    catalog : ModificationCatalog, optional
        Modification definitions (default: empty catalog)
    abort : callable, optional
        Polled once per input line; buffered rows are still written
    first_hits : bool
        Write only rank-1 matches of each scan
    mod_summary_path : str or Path, optional
        Also write the modification summary here
    errors : ErrorCollector, optional
        Collector for row-level messages (default: a new collector)

    Returns
    -------
    ProcessingResult
        Never raises for bad input; the status reports file-level failures
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    catalog = catalog if catalog is not None else ModificationCatalog()
    errors = errors if errors is not None else ErrorCollector()

    result = ProcessingResult(ProcessingStatus.SUCCESS, input_path, output_path)

    reader = PSMFileReader(profile, catalog, errors)
    try:
        summary = reader.read(input_path, abort=abort)
    except FileNotFoundError as e:
        logger.error(str(e))
        result.status = ProcessingStatus.INVALID_INPUT_FILE
        result.error_messages = [str(e)]
        return result
    except HeaderError as e:
        logger.error(f"Invalid header in {input_path.name}: {e}")
        result.status = ProcessingStatus.INVALID_HEADER
        result.error_messages = [str(e)]
        return result
    except OSError as e:
        logger.error(f"Error reading {input_path.name}: {e}")
        result.status = ProcessingStatus.INVALID_INPUT_FILE
        result.error_messages = [str(e)]
        return result

    result.lines_read = summary.lines_read
    result.matches_read = len(summary.matches)
    result.invalid_rows = summary.invalid_rows

    errors.report(f"Invalid lines in {input_path.name}")
    result.error_messages = list(errors)

    if not summary.matches:
        if summary.aborted:
            result.status = ProcessingStatus.ABORTED
            return result
        logger.error(f"No valid matches found in {input_path.name}")
        result.status = ProcessingStatus.NO_VALID_ROWS
        return result

    matches = summary.matches
    result.fdr_stats = score_matches(matches, profile)

    rows = emit_synopsis(matches, profile, first_hits=first_hits)

    try:
        result.rows_written = write_synopsis(rows, output_path, profile)
        if mod_summary_path is not None:
            write_mod_summary(catalog, mod_summary_path)
    except OSError as e:
        logger.error(f"Error creating {output_path.name}: {e}")
        result.status = ProcessingStatus.ERROR_CREATING_OUTPUT
        result.error_messages.append(str(e))
        return result

    if summary.aborted:
        result.status = ProcessingStatus.ABORTED

    return result
