"""Peptide mass calculation, mass reconciliation and precursor error correction."""

from .calculator import (
    encode_peptide_to_ord,
    calculate_neutral_mass,
    compute_sequence_mass,
    convolute_mass,
    mass_to_ppm,
    ppm_to_mass,
)

from .reconciliation import (
    MassReconciliation,
    reconcile_mass,
    mass_tolerance_for,
    modification_mass_matches,
)

from .delta import (
    DeltaMassResult,
    correct_delta_mass,
    nearest_isotope_offset,
)

__all__ = [
    # Calculator
    'encode_peptide_to_ord',
    'calculate_neutral_mass',
    'compute_sequence_mass',
    'convolute_mass',
    'mass_to_ppm',
    'ppm_to_mass',

    # Reconciliation
    'MassReconciliation',
    'reconcile_mass',
    'mass_tolerance_for',
    'modification_mass_matches',

    # Delta mass
    'DeltaMassResult',
    'correct_delta_mass',
    'nearest_isotope_offset',
]
