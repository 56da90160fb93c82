"""Extract modification tokens from annotated peptide sequences.

Search engines report modifications in one of three syntaxes:

- inline masses trailing the modified residue: ``A+15.995BC-2.5D``
- a side-channel comma list of residue number, residue and mass:
  ``15M(15.9949), N-term(42.0106)``
- a side-channel comma list of modification name and residue number:
  ``Dehydro 52,Oxidation 7``

Each tokenizer returns ``ModToken`` tuples of (mass or name, 1-based
position, terminus hint, residue). Static modifications are never annotated
by the tools; they are re-derived by the resolver.

Examples
--------
>>> clean, tokens = tokenize_inline("A+15.995BC-2.5D")
>>> clean
'ABCD'
>>> [(t.value, t.position) for t in tokens]
[(15.995, 1), (-2.5, 3)]
"""

import re
from typing import List, NamedTuple, Optional, Tuple, Union

from ..constants import C_TERMINAL_SYMBOL, N_TERMINAL_SYMBOL, NO_RESIDUE
from ..errors import ErrorCollector
from ..utils import split_prefix_suffix
from .catalog import ModificationCatalog, TerminusState


class ModToken(NamedTuple):
    """One modification found in an annotation, before catalog resolution."""
    value: Union[float, str]  # Mass (Da) or modification name
    position: int             # 1-based residue position
    terminus: TerminusState
    residue: str


RESIDUE_MOD_PATTERN = re.compile(
    r"(?P<number>\d+)(?P<residue>[A-Z])\((?P<mass>[0-9.+-]+)\)"
)
TERMINAL_MOD_PATTERN = re.compile(r"(?P<terminus>[^ ]+-term)\((?P<mass>[0-9.+-]+)\)")
NAMED_MOD_PATTERN = re.compile(r"(?P<name>.+) (?P<number>\d+)")
# A sign or digit starts a mass; signs, digits and periods continue it
INLINE_MASS_PATTERN = re.compile(r"([+\-0-9][+\-0-9.]*)")


def terminus_for_position(position: int, sequence_length: int) -> TerminusState:
    """Classify a 1-based position as N-terminal, C-terminal or neither."""
    if position <= 1:
        return TerminusState.N_TERMINUS
    if position >= sequence_length:
        return TerminusState.C_TERMINUS
    return TerminusState.NONE


def _report(errors: Optional[ErrorCollector], message: str) -> None:
    if errors is not None:
        errors.add(message)


# =============================================================================
# Inline Masses
# =============================================================================

def tokenize_inline(
    annotated: str,
    errors: Optional[ErrorCollector] = None,
) -> Tuple[str, List[ModToken]]:
    """Parse a sequence with inline modification masses.

    A mass always trails the residue it modifies. A mass appearing before
    any residue is assigned to position 1 (the peptide N-terminus).
    Flanking residues (``K.PEPTIDE.R``) are removed first.

    Parameters
    ----------
    annotated : str
        Annotated sequence, e.g. ``"K.A+15.995BC-2.5D.R"``
    errors : ErrorCollector, optional
        Receives a message for each mass that cannot be parsed

    Returns
    -------
    clean_sequence : str
        Residue letters only
    tokens : List[ModToken]
        Dynamic modification tokens in sequence order
    """
    _, primary, _ = split_prefix_suffix(annotated)

    residues = []
    pending = []
    tokens = []

    accumulating = False
    most_recent_residue = NO_RESIDUE
    residue_count = 0

    def finalize():
        digits = ''.join(pending).rstrip('.')
        try:
            mass = float(digits)
        except ValueError:
            _report(errors, f"Invalid modification mass '{digits}' in {annotated}")
            return
        position = max(residue_count, 1)
        tokens.append(ModToken(mass, position, TerminusState.NONE, most_recent_residue))

    for character in primary:
        if 'A' <= character <= 'Z':
            if accumulating:
                finalize()
                accumulating = False
                pending.clear()

            most_recent_residue = character
            residue_count += 1
            residues.append(character)

        elif character in '+-' or character.isdigit():
            if not accumulating:
                accumulating = True
                pending.clear()
            pending.append(character)

        elif character == '.' and accumulating:
            pending.append(character)

    if accumulating:
        finalize()

    clean = ''.join(residues)

    # Terminus state depends on the final sequence length
    n_residues = len(clean)
    tokens = [
        token._replace(
            terminus=terminus_for_position(token.position, n_residues),
            residue=clean[token.position - 1] if n_residues else token.residue,
        )
        for token in tokens
    ]
    return clean, tokens


# =============================================================================
# Side-Channel Lists
# =============================================================================

def tokenize_mod_list(
    mod_list: str,
    clean_sequence: str,
    errors: Optional[ErrorCollector] = None,
) -> List[ModToken]:
    """Parse a comma-separated residue/terminus modification list.

    Parameters
    ----------
    mod_list : str
        For example ``"1M(15.9949), 5C(57.0215)"`` or ``"N-term(42.0106)"``
    clean_sequence : str
        Unmodified peptide sequence the list refers to
    errors : ErrorCollector, optional
        Receives one message per skipped entry

    Returns
    -------
    List[ModToken]
        Tokens for every valid entry; invalid entries are skipped
    """
    tokens = []
    final_position = len(clean_sequence)

    if not mod_list or not mod_list.strip() or final_position == 0:
        return tokens

    for entry in mod_list.split(','):
        entry = entry.strip()
        if not entry:
            continue

        residue_match = RESIDUE_MOD_PATTERN.fullmatch(entry)
        terminal_match = None if residue_match else TERMINAL_MOD_PATTERN.fullmatch(entry)

        if residue_match is None and terminal_match is None:
            _report(errors, f"Invalid modification entry; expected residue number, "
                            f"symbol and mass: {entry}")
            continue

        match = residue_match or terminal_match
        try:
            mass = float(match.group("mass"))
        except ValueError:
            _report(errors, f"Unable to parse the modification mass in {entry}")
            continue

        if residue_match:
            position = min(max(int(residue_match.group("number")), 1), final_position)
            terminus = terminus_for_position(position, final_position)
            residue = residue_match.group("residue")
        else:
            terminus_name = terminal_match.group("terminus")
            if terminus_name == "N-term":
                position = 1
                terminus = TerminusState.N_TERMINUS
            elif terminus_name == "C-term":
                position = final_position
                terminus = TerminusState.C_TERMINUS
            else:
                _report(errors, f"Unrecognized terminus name in modification entry: {entry}")
                continue
            residue = clean_sequence[position - 1]

        tokens.append(ModToken(mass, position, terminus, residue))

    return tokens


def tokenize_named_mods(
    mod_list: str,
    clean_sequence: str,
    errors: Optional[ErrorCollector] = None,
) -> List[ModToken]:
    """Parse a comma-separated list of ``<name> <residue number>`` entries.

    Examples
    --------
    >>> [(t.value, t.position) for t in tokenize_named_mods("Dehydro 3", "PEPTIDE")]
    [('Dehydro', 3)]
    """
    tokens = []
    final_position = len(clean_sequence)

    if not mod_list or not mod_list.strip() or final_position == 0:
        return tokens

    for entry in mod_list.split(','):
        entry = entry.strip()
        if not entry:
            continue

        match = NAMED_MOD_PATTERN.fullmatch(entry)
        if match is None:
            _report(errors, f"Modification entry does not have a name "
                            f"followed by a residue number: {entry}")
            continue

        # Position 0 is the N-terminus
        position = min(max(int(match.group("number")), 1), final_position)
        tokens.append(ModToken(
            match.group("name").strip(),
            position,
            terminus_for_position(position, final_position),
            clean_sequence[position - 1],
        ))

    return tokens


# =============================================================================
# Independent Total
# =============================================================================

def compute_total_mod_mass(annotated: str, catalog: ModificationCatalog) -> float:
    """Sum inline modification masses plus every matching static modification.

    This is computed directly from the annotation, independently of the
    tokenizer and resolver, and is used to cross-check them.
    """
    _, primary, _ = split_prefix_suffix(annotated)

    total = 0.0
    for match in INLINE_MASS_PATTERN.finditer(primary):
        # A trailing period is left when the mass follows the final residue
        text = match.group(1).rstrip('.')
        try:
            total += float(text)
        except ValueError:
            continue

    letter_indices = [i for i, c in enumerate(primary) if 'A' <= c <= 'Z']
    if not letter_indices:
        return total

    first_index = letter_indices[0]
    last_index = letter_indices[-1]

    for index in letter_indices:
        character = primary[index]
        for definition in catalog.static_definitions():
            if (definition.targets(character)
                    or (index == first_index and definition.targets(N_TERMINAL_SYMBOL))
                    or (index == last_index and definition.targets(C_TERMINAL_SYMBOL))):
                total += definition.mass

    return total
