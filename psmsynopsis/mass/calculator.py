"""Peptide mass calculation and charge-state conversion.

Residue masses are summed with a Numba JIT kernel over ord()-encoded
sequences, the same encoding used for the ``AA_MASSES`` lookup array.

Examples
--------
>>> mass = compute_sequence_mass("PEPTIDE")
>>> round(mass, 4)
799.36
>>> mh = convolute_mass(mass, 0, 1)  # Neutral mass to (M+H)+
"""

from typing import Iterable

import numba
import numpy as np

from ..constants import AA_MASSES, H2O_MASS, PROTON_MASS


def encode_peptide_to_ord(peptide: str) -> np.ndarray:
    """Encode peptide string to ord() array for Numba processing.

    Examples
    --------
    >>> encode_peptide_to_ord("PEP")
    array([80, 69, 80], dtype=uint8)
    """
    return np.array([ord(c) for c in peptide], dtype=np.uint8)


@numba.jit(nopython=True, cache=True)
def calculate_neutral_mass(peptide_ord: np.ndarray, total_mod_mass: float) -> float:
    """Neutral monoisotopic mass from an ord() array plus modification mass.

    Parameters
    ----------
    peptide_ord : np.ndarray (uint8)
        Peptide sequence as ord() values
    total_mod_mass : float
        Sum of all modification masses (Da)

    Returns
    -------
    float
        Neutral mass including terminal H2O and modifications
    """
    total = 0.0
    for i in range(len(peptide_ord)):
        total += AA_MASSES[peptide_ord[i]]
    return total + H2O_MASS + total_mod_mass


def compute_sequence_mass(clean_sequence: str, modification_masses: Iterable[float] = ()) -> float:
    """Theoretical monoisotopic mass of a clean sequence with modifications.

    Parameters
    ----------
    clean_sequence : str
        Residue letters only (use :func:`psmsynopsis.utils.clean_sequence`)
    modification_masses : iterable of float
        Masses of every applied modification

    Returns
    -------
    float
        Neutral monoisotopic mass (Da); 0 for an empty sequence
    """
    if not clean_sequence:
        return 0.0

    total_mod_mass = float(sum(modification_masses))
    return calculate_neutral_mass(encode_peptide_to_ord(clean_sequence), total_mod_mass)


def convolute_mass(
    mass_mz: float,
    current_charge: int,
    desired_charge: int = 1,
    charge_carrier_mass: float = PROTON_MASS,
) -> float:
    """Convert an m/z value from one charge state to another.

    A charge of 0 means the neutral monoisotopic mass. Negative charges are
    not supported and return 0.

    Parameters
    ----------
    mass_mz : float
        m/z (or neutral mass when ``current_charge`` is 0)
    current_charge : int
        Charge of ``mass_mz``
    desired_charge : int
        Charge to convert to (default: 1, i.e. (M+H)+)
    charge_carrier_mass : float
        Mass of the charge carrier (default: proton)

    Examples
    --------
    >>> neutral = convolute_mass(500.5, 2, 0)   # m/z at 2+ to neutral mass
    >>> round(convolute_mass(neutral, 0, 2), 6)
    500.5
    """
    if current_charge == desired_charge:
        return mass_mz

    if current_charge < 0 or desired_charge < 0:
        return 0.0

    # First convert to M+H
    if current_charge == 1:
        mh = mass_mz
    elif current_charge > 1:
        mh = mass_mz * current_charge - charge_carrier_mass * (current_charge - 1)
    else:
        mh = mass_mz + charge_carrier_mass

    if desired_charge > 1:
        return (mh + charge_carrier_mass * (desired_charge - 1)) / desired_charge
    if desired_charge == 1:
        return mh
    return mh - charge_carrier_mass


def mass_to_ppm(mass_difference: float, reference_mass: float) -> float:
    """Convert a mass difference (Da) to ppm of ``reference_mass``."""
    return mass_difference * 1e6 / reference_mass


def ppm_to_mass(ppm: float, reference_mass: float) -> float:
    """Convert ppm of ``reference_mass`` to a mass difference (Da)."""
    return ppm / 1e6 * reference_mass
