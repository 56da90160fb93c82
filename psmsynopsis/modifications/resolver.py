"""Resolve modification tokens into concrete modification entries.

Dynamic modifications come from the tokens reported by the search engine.
Static modifications are never annotated by the tools, so they are
re-derived by scanning every residue of the clean sequence against the
catalog's static definitions.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..constants import C_TERMINAL_SYMBOL, N_TERMINAL_SYMBOL
from ..errors import ErrorCollector
from .catalog import (
    ModificationCatalog,
    ModificationDefinition,
    ModificationType,
    TerminusState,
)
from .tokenizer import ModToken, terminus_for_position


@dataclass(frozen=True)
class ModificationEntry:
    """A modification applied at one residue of one match."""

    mass: float
    residue: str
    position: int  # 1-based
    terminus: TerminusState
    definition: Optional[ModificationDefinition] = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return self.definition.name if self.definition is not None else f"{self.mass:+.3f}"


def _static_matches(definition: ModificationDefinition, residue: str,
                    position: int, n_residues: int) -> bool:
    return (
        definition.targets(residue)
        or (position == 1 and definition.targets(N_TERMINAL_SYMBOL))
        or (position == n_residues and definition.targets(C_TERMINAL_SYMBOL))
    )


def resolve_modifications(
    tokens: Iterable[ModToken],
    clean_sequence: str,
    catalog: ModificationCatalog,
    errors: Optional[ErrorCollector] = None,
    include_static: bool = True,
    update_counts: bool = False,
) -> List[ModificationEntry]:
    """Turn dynamic tokens plus catalog static mods into ``ModificationEntry`` values.

    Parameters
    ----------
    tokens : iterable of ModToken
        Tokens from one of the tokenizers
    clean_sequence : str
        Unmodified peptide sequence
    catalog : ModificationCatalog
        Modification definitions for this run
    errors : ErrorCollector, optional
        Receives a message for each unresolvable modification name
    include_static : bool
        Re-derive static modifications from the catalog (default: True).
        Set to False for tools whose modification list already contains
        the static modifications; numeric tokens then resolve against
        static definitions first.
    update_counts : bool
        Increment each applied definition's occurrence count

    Returns
    -------
    List[ModificationEntry]
        Entries sorted by residue position

    Notes
    -----
    A terminal residue may carry both a residue static mod and a terminal
    static mod; both are added, as in double COOH methylation of a
    C-terminal D or E.
    """
    n_residues = len(clean_sequence)
    entries = []

    if n_residues == 0:
        return entries

    for token in tokens:
        position = min(max(token.position, 1), n_residues)
        residue = clean_sequence[position - 1]
        terminus = terminus_for_position(position, n_residues)

        if isinstance(token.value, str):
            definition = catalog.find_by_name(token.value)
            if definition is None:
                if errors is not None:
                    errors.add(f"Modification name {token.value} is not defined in "
                               f"the modification catalog; cannot determine its mass")
                continue
            mass = definition.mass
        else:
            mass = token.value
            definition = None
            if not include_static:
                definition = catalog.lookup(mass, ModificationType.STATIC, residue, terminus, strict=True)
                if definition is None:
                    definition = catalog.lookup(
                        mass, ModificationType.TERMINAL_STATIC, residue, terminus, strict=True)
            if definition is None:
                definition = catalog.resolve(mass, ModificationType.DYNAMIC, residue, terminus)

        entries.append(ModificationEntry(mass, residue, position, terminus, definition))

    if include_static:
        static_definitions = catalog.static_definitions()
        for position, residue in enumerate(clean_sequence, start=1):
            for definition in static_definitions:
                if _static_matches(definition, residue, position, n_residues):
                    entries.append(ModificationEntry(
                        definition.mass,
                        residue,
                        position,
                        terminus_for_position(position, n_residues),
                        definition,
                    ))

    if update_counts:
        for entry in entries:
            if entry.definition is not None:
                catalog.increment_occurrence(entry.definition)

    entries.sort(key=lambda entry: entry.position)
    return entries


def total_modification_mass(entries: Iterable[ModificationEntry]) -> float:
    """Sum of the masses of ``entries``."""
    return sum(entry.mass for entry in entries)


def modification_description(entries: Iterable[ModificationEntry]) -> str:
    """Describe entries as ``<residue><position>:<name>`` joined by commas.

    Examples
    --------
    >>> entries = [ModificationEntry(15.995, 'M', 2, TerminusState.NONE)]
    >>> modification_description(entries)
    'M2:+15.995'
    """
    return ",".join(f"{entry.residue}{entry.position}:{entry.name}" for entry in entries)
