"""psmsynopsis - Normalize peptide-spectrum matches from proteomics search engines.

Reads tool-specific result files (MODa, MODPlus, MSFragger, MSPathFinder),
resolves peptide modifications against a modification catalog, validates
peptide masses, computes isotope-corrected precursor mass errors, ranks
matches per spectrum, estimates FDR and Q-values from decoy proteins, and
writes a canonical tab-delimited synopsis file.
"""

__version__ = "0.1.0"

# Import main submodules for convenient access
from psmsynopsis import constants
from psmsynopsis import modifications
from psmsynopsis import mass
from psmsynopsis import scoring
from psmsynopsis import io
from psmsynopsis import synopsis
from psmsynopsis import pipeline

from psmsynopsis.config import ModSyntax, ToolProfile
from psmsynopsis.errors import (
    ErrorCollector,
    HeaderError,
    PeriodicWarning,
    PSMProcessingError,
    RowParseError,
    RowResult,
)
from psmsynopsis.modifications import ModificationCatalog, ModificationDefinition, ModificationType
from psmsynopsis.records import NormalizedMatch
from psmsynopsis.pipeline import ProcessingResult, ProcessingStatus, process_file

__all__ = [
    "constants",
    "modifications",
    "mass",
    "scoring",
    "io",
    "synopsis",
    "pipeline",

    # Configuration
    "ModSyntax",
    "ToolProfile",

    # Errors
    "ErrorCollector",
    "HeaderError",
    "PeriodicWarning",
    "PSMProcessingError",
    "RowParseError",
    "RowResult",

    # Records and catalog
    "ModificationCatalog",
    "ModificationDefinition",
    "ModificationType",
    "NormalizedMatch",

    # Processing
    "ProcessingResult",
    "ProcessingStatus",
    "process_file",
]
