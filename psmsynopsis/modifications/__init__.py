"""Modification handling: catalog, tokenizers and resolver.

Turns the modification annotations of many search engines (inline masses,
residue/mass lists, name/position lists) into concrete, position-resolved
modification entries backed by a per-run catalog.
"""

from .catalog import (
    ModificationCatalog,
    ModificationDefinition,
    ModificationType,
    TerminusState,
    masses_match,
    write_mod_summary,
)

from .tokenizer import (
    ModToken,
    tokenize_inline,
    tokenize_mod_list,
    tokenize_named_mods,
    compute_total_mod_mass,
    terminus_for_position,
)

from .resolver import (
    ModificationEntry,
    resolve_modifications,
    total_modification_mass,
    modification_description,
)

__all__ = [
    # Catalog
    'ModificationCatalog',
    'ModificationDefinition',
    'ModificationType',
    'TerminusState',
    'masses_match',
    'write_mod_summary',

    # Tokenizers
    'ModToken',
    'tokenize_inline',
    'tokenize_mod_list',
    'tokenize_named_mods',
    'compute_total_mod_mass',
    'terminus_for_position',

    # Resolver
    'ModificationEntry',
    'resolve_modifications',
    'total_modification_mass',
    'modification_description',
]
