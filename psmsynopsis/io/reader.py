"""Streaming reader turning tab-delimited search results into matches.

Each non-blank line is parsed independently. Bad rows never raise: they
produce a :class:`~psmsynopsis.errors.RowResult` carrying a
:class:`~psmsynopsis.errors.RowParseError`, whose message is added to the
file's :class:`~psmsynopsis.errors.ErrorCollector`.

Per row, the modification tokens are resolved against the catalog, the
theoretical mass is reconciled with the tool-reported mass, and the
isotope-corrected precursor mass error is computed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..config import ModSyntax, ToolProfile
from ..errors import ErrorCollector, PeriodicWarning, RowParseError, RowResult
from ..mass import convolute_mass, correct_delta_mass, reconcile_mass
from ..modifications import (
    ModificationCatalog,
    resolve_modifications,
    tokenize_inline,
    tokenize_mod_list,
    tokenize_named_mods,
)
from ..records import NormalizedMatch
from ..utils import clean_sequence, parse_float, parse_int
from .columns import ColumnSchema, detect_schema

logger = logging.getLogger(__name__)


@dataclass
class ReadSummary:
    """Outcome of reading one input file."""

    matches: List[NormalizedMatch] = field(default_factory=list)
    schema: Optional[ColumnSchema] = None
    lines_read: int = 0
    invalid_rows: int = 0
    aborted: bool = False


def split_proteins(text: Optional[str], delimiter: str) -> List[str]:
    """Split a protein list, dropping empty entries."""
    if not text:
        return []
    return [protein.strip() for protein in text.split(delimiter) if protein.strip()]


class PSMFileReader:
    """Parse the rows of one search-engine result file.

    Parameters
    ----------
    profile : ToolProfile
        Column mapping and processing parameters
    catalog : ModificationCatalog
        Modification definitions; unseen dynamic masses are registered here
    errors : ErrorCollector, optional
        Receives row-level error messages (default: a new collector)
    """

    def __init__(
        self,
        profile: ToolProfile,
        catalog: ModificationCatalog,
        errors: Optional[ErrorCollector] = None,
    ):
        self.profile = profile
        self.catalog = catalog
        self.errors = errors if errors is not None else ErrorCollector()
        self.mass_warner = PeriodicWarning(log=logger)
        self.delta_warner = PeriodicWarning(log=logger)

    def _tokenize(self, peptide: str, mod_list: Optional[str]):
        syntax = self.profile.mod_syntax

        if syntax is ModSyntax.INLINE:
            return tokenize_inline(peptide, self.errors)

        clean = clean_sequence(peptide)
        if syntax is ModSyntax.MOD_LIST:
            return clean, tokenize_mod_list(mod_list or '', clean, self.errors)
        return clean, tokenize_named_mods(mod_list or '', clean, self.errors)

    def parse_row(
        self,
        fields: Sequence[str],
        schema: ColumnSchema,
        line_number: int = 0,
    ) -> RowResult:
        """Convert one split input line into a NormalizedMatch.

        Returns
        -------
        RowResult
            ``match`` on success, otherwise ``error`` describing the problem
        """
        def failure(message: str) -> RowResult:
            return RowResult(error=RowParseError(message, line_number))

        scan_text = schema.value(fields, 'scan')
        scan = parse_int(scan_text)
        if scan is None:
            return failure(f"Invalid scan number '{scan_text}'")

        charge_text = schema.value(fields, 'charge')
        charge = parse_int(charge_text)
        if charge is None or charge < 0:
            return failure(f"Invalid charge '{charge_text}' for scan {scan}")

        peptide = schema.value(fields, 'peptide')
        if not peptide:
            return failure(f"Peptide is empty for scan {scan}")

        score_text = schema.value(fields, 'score')
        score = parse_float(score_text)
        if score is None:
            return failure(f"Invalid score '{score_text}' for scan {scan}")

        clean, tokens = self._tokenize(peptide, schema.value(fields, 'mod_list'))
        if not clean:
            return failure(f"Peptide {peptide} does not contain any residues")

        modifications = resolve_modifications(
            tokens,
            clean,
            self.catalog,
            self.errors,
            include_static=not self.profile.mod_list_includes_static,
            update_counts=True,
        )

        reconciliation = reconcile_mass(
            clean,
            modifications,
            parse_float(schema.value(fields, 'calculated_mass')),
            tool_name=self.profile.name,
            warner=self.mass_warner,
            tolerance_da=self.profile.mass_tolerance_da,
            peptide=peptide,
        )
        theoretical = reconciliation.theoretical_mass

        observed = parse_float(schema.value(fields, 'observed_mass'))
        precursor_mz = parse_float(schema.value(fields, 'precursor_mz'))

        if observed is None and precursor_mz is not None:
            observed = convolute_mass(precursor_mz, charge, 0)
        if observed is None:
            observed = theoretical
        if precursor_mz is None:
            precursor_mz = convolute_mass(observed, 0, charge) if charge > 0 else observed

        delta = correct_delta_mass(
            observed,
            theoretical,
            warner=self.delta_warner,
            max_delta_mass=self.profile.max_delta_mass_da,
            peptide=peptide,
            scan=scan,
        )

        match = NormalizedMatch(
            scan=scan,
            charge=charge,
            peptide=peptide,
            clean_sequence=clean,
            score=score,
            proteins=split_proteins(schema.value(fields, 'proteins'), self.profile.protein_delimiter),
            modifications=modifications,
            calculated_mono_mass=theoretical,
            observed_precursor_mass=observed,
            precursor_mz=precursor_mz,
            mh=reconciliation.mh,
            del_m=delta.del_m,
            del_m_ppm=delta.del_m_ppm,
            extra=schema.extras(fields),
            line_number=line_number,
        )
        return RowResult(match=match)

    def read(
        self,
        input_path: Union[str, Path],
        abort: Optional[Callable[[], bool]] = None,
    ) -> ReadSummary:
        """Stream ``input_path`` line by line into NormalizedMatch records.

        Parameters
        ----------
        input_path : str or Path
            Tab-delimited search result file
        abort : callable, optional
            Polled once per line; when it returns True reading stops and the
            rows read so far are kept

        Returns
        -------
        ReadSummary

        Raises
        ------
        FileNotFoundError
            If the input file does not exist
        HeaderError
            If the header lacks a required column
        """
        input_path = Path(input_path)

        if not input_path.exists():
            raise FileNotFoundError(f"Input file not found: {input_path}")

        logger.info(f"Reading {self.profile.name} results: {input_path.name}")

        summary = ReadSummary()

        # Undecodable bytes become U+FFFD instead of failing the file
        with open(input_path, encoding='utf-8', errors='replace') as f:
            for line_number, line in enumerate(f, start=1):
                if abort is not None and abort():
                    logger.warning(f"Processing aborted at line {line_number}")
                    summary.aborted = True
                    break

                if not line.strip():
                    continue

                fields = line.rstrip('\r\n').split('\t')

                if summary.schema is None:
                    summary.schema = detect_schema(fields, self.profile)
                    if summary.schema.has_header:
                        continue

                summary.lines_read += 1
                result = self.parse_row(fields, summary.schema, line_number)

                if result.ok:
                    summary.matches.append(result.match)
                else:
                    summary.invalid_rows += 1
                    self.errors.add(str(result.error))

        logger.info(
            f"✓ Parsed {len(summary.matches):,} matches from {summary.lines_read:,} lines "
            f"({summary.invalid_rows:,} invalid)"
        )

        return summary


def read_matches(
    input_path: Union[str, Path],
    profile: ToolProfile,
    catalog: ModificationCatalog,
    errors: Optional[ErrorCollector] = None,
    abort: Optional[Callable[[], bool]] = None,
) -> ReadSummary:
    """Convenience wrapper around :meth:`PSMFileReader.read`."""
    return PSMFileReader(profile, catalog, errors).read(input_path, abort=abort)
