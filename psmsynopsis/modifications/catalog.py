"""Modification definitions and the per-run modification catalog.

The catalog is loaded once per run from the search engine's parameter file
(by an external loader) and is read-only afterwards, except that
:meth:`ModificationCatalog.resolve` registers a new dynamic definition when a
PSM reports a modification mass the catalog has not seen yet.

Examples
--------
>>> catalog = ModificationCatalog.from_records([
...     {"mass": 57.021464, "type": "static", "target_residues": "C",
...      "name": "Carbamidomethyl"},
...     {"mass": 15.994915, "type": "dynamic", "target_residues": "M",
...      "name": "Oxidation"},
... ])
>>> catalog.resolve(15.995, ModificationType.DYNAMIC, "M").name
'Oxidation'
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Mapping, Optional

import pandas as pd

from ..constants import (
    C_TERMINAL_SYMBOL,
    MASS_DIGITS_OF_PRECISION,
    N_TERMINAL_SYMBOL,
)

logger = logging.getLogger(__name__)


class ModificationType(Enum):
    """How a modification is applied to a peptide."""
    STATIC = "static"                    # Every occurrence of the target residue
    DYNAMIC = "dynamic"                  # Only where reported for one PSM
    TERMINAL_STATIC = "terminal-static"  # Every peptide N- or C-terminus

    @classmethod
    def parse(cls, value) -> 'ModificationType':
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace('_', '-')
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unknown modification type: {value}")


class TerminusState(Enum):
    """Location of a residue relative to the peptide termini."""
    NONE = 0
    N_TERMINUS = 1
    C_TERMINUS = 2


@dataclass
class ModificationDefinition:
    """A single catalog entry.

    ``target_residues`` lists one-letter residue codes; ``<`` and ``>`` mark
    the peptide N- and C-terminus. An empty string matches any residue.
    """

    mass: float
    mod_type: ModificationType
    target_residues: str = ""
    name: str = ""
    occurrence_count: int = 0

    def targets(self, residue: str) -> bool:
        return bool(residue) and residue in self.target_residues

    @property
    def is_terminal(self) -> bool:
        return (N_TERMINAL_SYMBOL in self.target_residues
                or C_TERMINAL_SYMBOL in self.target_residues)


def masses_match(mass_a: float, mass_b: float, digits: int = MASS_DIGITS_OF_PRECISION) -> bool:
    """True if two modification masses agree when rounded to ``digits`` decimals."""
    return round(abs(mass_a - mass_b), digits) == 0


class ModificationCatalog:
    """Ordered registry of modification definitions.

    Parameters
    ----------
    definitions : iterable of ModificationDefinition, optional
        Initial entries (order is preserved and significant for lookups)
    digits_of_precision : int
        Decimals used when comparing masses (default: 3)
    """

    def __init__(
        self,
        definitions: Optional[Iterable[ModificationDefinition]] = None,
        digits_of_precision: int = MASS_DIGITS_OF_PRECISION,
    ):
        self.digits_of_precision = digits_of_precision
        self._definitions: List[ModificationDefinition] = list(definitions or [])

    @classmethod
    def from_records(cls, records: Iterable[Mapping], **kwargs) -> 'ModificationCatalog':
        """Build a catalog from ``{mass, type, target_residues, name}`` mappings.

        ``target_residues`` may be a string, an iterable of characters, or
        None (any residue).
        """
        definitions = []
        for record in records:
            residues = record.get("target_residues") or ""
            if not isinstance(residues, str):
                residues = "".join(sorted(residues))

            definitions.append(ModificationDefinition(
                mass=float(record["mass"]),
                mod_type=ModificationType.parse(record.get("type", "dynamic")),
                target_residues=residues,
                name=record.get("name", "") or "",
            ))

        catalog = cls(definitions, **kwargs)
        logger.info(f"Loaded {len(catalog)} modification definitions")
        return catalog

    # -------------------------------------------------------------------------
    # Registry access
    # -------------------------------------------------------------------------

    def add(self, definition: ModificationDefinition) -> ModificationDefinition:
        self._definitions.append(definition)
        return definition

    def static_definitions(self) -> List[ModificationDefinition]:
        """Static and terminal-static entries, in catalog order."""
        return [
            d for d in self._definitions
            if d.mod_type in (ModificationType.STATIC, ModificationType.TERMINAL_STATIC)
        ]

    def find_by_name(self, name: str) -> Optional[ModificationDefinition]:
        """Return the first entry whose name matches ``name`` (case-insensitive)."""
        wanted = name.strip().lower()
        for definition in self._definitions:
            if definition.name.lower() == wanted:
                return definition
        return None

    def lookup(
        self,
        mass: float,
        mod_type: ModificationType,
        residue: Optional[str] = None,
        terminus: TerminusState = TerminusState.NONE,
        strict: bool = False,
    ) -> Optional[ModificationDefinition]:
        """Find an existing entry by mass and type, without creating one.

        Lookup order:

        1. same type and mass, with ``residue`` in the target residues (or a
           terminus symbol matching ``terminus``)
        2. same type and mass, with no target residues
        3. same type and mass, any target residues; ``residue`` is appended
           to the entry's targets (skipped when ``strict`` is True)
        """
        candidates = [
            d for d in self._definitions
            if d.mod_type == mod_type and masses_match(d.mass, mass, self.digits_of_precision)
        ]

        if residue or terminus != TerminusState.NONE:
            for definition in candidates:
                if not definition.target_residues:
                    continue
                if residue and definition.targets(residue):
                    return definition
                if terminus == TerminusState.N_TERMINUS and definition.targets(N_TERMINAL_SYMBOL):
                    return definition
                if terminus == TerminusState.C_TERMINUS and definition.targets(C_TERMINAL_SYMBOL):
                    return definition

        for definition in candidates:
            if not definition.target_residues:
                return definition

        if strict:
            return None

        for definition in candidates:
            if residue and not definition.targets(residue):
                definition.target_residues += residue
            return definition

        return None

    def resolve(
        self,
        mass: float,
        mod_type: ModificationType,
        residue: Optional[str] = None,
        terminus: TerminusState = TerminusState.NONE,
        register_unknown: bool = True,
    ) -> ModificationDefinition:
        """Find the catalog entry for a modification mass, creating one if needed.

        Uses :meth:`lookup`; when nothing matches, a new entry named after
        the mass is created and, if ``register_unknown`` is True, added to
        the catalog so later PSMs resolve to the same entry.

        Parameters
        ----------
        mass : float
            Modification mass (Da)
        mod_type : ModificationType
            Type to look up
        residue : str, optional
            Modified residue symbol
        terminus : TerminusState
            Terminus state of the modified residue
        register_unknown : bool
            Add newly created entries to the catalog (default: True)

        Returns
        -------
        ModificationDefinition
        """
        definition = self.lookup(mass, mod_type, residue, terminus)
        if definition is not None:
            return definition

        digits = self.digits_of_precision
        definition = ModificationDefinition(
            mass=mass,
            mod_type=mod_type,
            target_residues=residue or "",
            name=f"{mass:+.{digits}f}",
        )
        if register_unknown:
            self.add(definition)
            logger.debug(f"Registered new {mod_type.value} modification {definition.name}")
        return definition

    def increment_occurrence(self, definition: ModificationDefinition) -> None:
        definition.occurrence_count += 1

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary_frame(self) -> pd.DataFrame:
        """Catalog contents and usage counts as a DataFrame."""
        return pd.DataFrame(
            {
                "Modification_Mass": [d.mass for d in self._definitions],
                "Target_Residues": [d.target_residues for d in self._definitions],
                "Modification_Type": [d.mod_type.value for d in self._definitions],
                "Modification_Name": [d.name for d in self._definitions],
                "Occurrence_Count": [d.occurrence_count for d in self._definitions],
            }
        )

    def write_summary(self, path) -> None:
        """Write the modification summary as a tab-delimited file."""
        frame = self.summary_frame()
        frame["Modification_Mass"] = frame["Modification_Mass"].map(lambda m: f"{m:.6f}")
        frame.to_csv(path, sep="\t", index=False)
        logger.info(f"✓ Wrote {len(frame)} modification definitions to {path}")

    def __iter__(self) -> Iterator[ModificationDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        n_static = len(self.static_definitions())
        return (
            f"ModificationCatalog(n_definitions={len(self)}, "
            f"n_static={n_static})"
        )


def write_mod_summary(catalog: ModificationCatalog, path) -> None:
    """Write ``catalog``'s modification summary to ``path``."""
    catalog.write_summary(path)
