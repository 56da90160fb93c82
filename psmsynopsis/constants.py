"""Physical constants, amino acid masses and processing defaults.

This module provides the physical constants, residue masses, tolerances and
decoy naming conventions used throughout psmsynopsis. Mass values are
sourced from NIST or established proteomics standards.

Residue masses are provided in both dictionary and ord()-indexed array
formats, so that they can be used from plain Python and from Numba
JIT-compiled kernels.

Key Features
------------
- Correct PROTON_MASS (1.007276466622 Da, not hydrogen atom mass!)
- ord()-indexed AA_MASSES array for the Numba mass kernels
- Support for non-standard amino acids (X, Z, B, J, U, O)
- C13 isotope spacing used by the delta-mass corrector
- Terminus symbols used in modification target residue lists

Sources
-------
- NIST physical constants: https://physics.nist.gov/cgi-bin/cuu/Value
- IUPAC amino acid masses: https://www.unimod.org/masses.html
"""

import sys

import numpy as np

# =============================================================================
# Fundamental Physical Constants (NIST values)
# =============================================================================

# Proton mass (NOT hydrogen atom mass!)
# Source: NIST 2018 CODATA
PROTON_MASS = 1.007276466622  # Da

# Electron mass
ELECTRON_MASS = 0.000548579909  # Da

# Water mass (H2O), added once per peptide for the free termini
H2O_MASS = 18.010564684  # Da

# =============================================================================
# Isotope Masses
# =============================================================================

# Mass difference between C13 and C12
# Spacing of adjacent isotope peaks used for precursor isotope correction
C13_MASS_DIFFERENCE = 1.00335483  # Da

# =============================================================================
# Amino Acid Monoisotopic Masses (Da)
# =============================================================================

# Residue masses (not including N/C terminal groups)
AA_MASSES_DICT = {
    'A': 71.037114,   # Alanine
    'R': 156.101111,  # Arginine
    'N': 114.042927,  # Asparagine
    'D': 115.026943,  # Aspartic acid
    'C': 103.009185,  # Cysteine (unmodified)
    'E': 129.042593,  # Glutamic acid
    'Q': 128.058578,  # Glutamine
    'G': 57.021464,   # Glycine
    'H': 137.058912,  # Histidine
    'I': 113.084064,  # Isoleucine
    'L': 113.084064,  # Leucine
    'K': 128.094963,  # Lysine
    'M': 131.040485,  # Methionine
    'F': 147.068414,  # Phenylalanine
    'P': 97.052764,   # Proline
    'S': 87.032028,   # Serine
    'T': 101.047679,  # Threonine
    'W': 186.079313,  # Tryptophan
    'Y': 163.063320,  # Tyrosine
    'V': 99.068414,   # Valine
}

# Non-standard amino acids mapped to the mass of their closest standard equivalent
AA_MASSES_NONSTANDARD = {
    'X': 113.084064,  # Unknown → Leu/Ile
    'Z': 128.058578,  # Glu/Gln → Gln
    'B': 114.042927,  # Asp/Asn → Asn
    'J': 113.084064,  # Leu/Ile → Leu
    'U': 150.953636,  # Selenocysteine
    'O': 237.147727,  # Pyrrolysine
}

# ord()-indexed lookup array for Numba access
# Access via: AA_MASSES[ord('A')] → 71.037114
AA_MASSES = np.zeros(256, dtype=np.float64)

for aa, mass in AA_MASSES_DICT.items():
    AA_MASSES[ord(aa)] = mass

for aa, mass in AA_MASSES_NONSTANDARD.items():
    AA_MASSES[ord(aa)] = mass

# =============================================================================
# Common Modification Masses
# =============================================================================

# Carbamidomethylation of Cysteine (Unimod:4)
CARBAMIDOMETHYL_MASS = 57.021464

# Oxidation of Methionine (Unimod:35)
OXIDATION_MASS = 15.994915

# Acetylation (Protein N-term, Unimod:1)
ACETYL_MASS = 42.010565

# Phosphorylation (Unimod:21)
PHOSPHO_MASS = 79.966331

# =============================================================================
# Terminus Symbols
# =============================================================================

# Used in modification target residue lists
N_TERMINAL_SYMBOL = '<'
C_TERMINAL_SYMBOL = '>'

# Placeholder residue for tokens that precede any residue
NO_RESIDUE = '-'

# =============================================================================
# Processing Defaults
# =============================================================================

# Machine epsilon used for every floating point tie comparison
SCORE_EPSILON = sys.float_info.epsilon

# Tool-reported masses smaller than this are treated as missing
MASS_EPSILON = 1e-9

# Minimum allowed difference between recomputed and tool-reported mass (Da)
DEFAULT_MASS_TOLERANCE_DA = 0.1

# Precursor delta masses above this are not isotope-corrected (Da)
DEFAULT_MAX_DELTA_MASS_DA = 15.0

# Digits used when matching modification masses against the catalog
MASS_DIGITS_OF_PRECISION = 3

# Maximum number of row-level error messages retained per file
MAX_ERROR_MESSAGE_COUNT = 255

# Rate-limited warnings: always shown for the first N occurrences
WARNING_ALWAYS_SHOW_COUNT = 10

# =============================================================================
# Decoy Protein Naming Conventions
# =============================================================================

# Prefixes (case-insensitive) marking reversed or scrambled proteins
DECOY_PROTEIN_PREFIXES = (
    'reversed_',   # DMS-generated protein collections
    'REV_',        # MSGFDB
    'scrambled_',  # DMS-generated protein collections
    'xxx_',        # MS-GF+ and MSFragger
    'REV__',       # MSFragger
    'xxx.',        # InSpecT
)

# Suffixes (case-insensitive) marking reversed proteins
DECOY_PROTEIN_SUFFIXES = (
    ':reversed',   # X!Tandem
)

# Name used when a PSM reports no protein at all
UNKNOWN_PROTEIN = 'Unknown_Protein'


def validate_constants():
    """Validate that constants are physically reasonable.

    Raises AssertionError if any constant is out of expected range.
    """
    # Proton mass should be ~1.007276, NOT 1.007825 (hydrogen atom)
    assert 1.0072 < PROTON_MASS < 1.0073, f"PROTON_MASS is wrong: {PROTON_MASS}"

    assert 18.00 < H2O_MASS < 18.02, f"H2O_MASS is wrong: {H2O_MASS}"

    assert 1.003 < C13_MASS_DIFFERENCE < 1.004, \
        f"C13_MASS_DIFFERENCE is wrong: {C13_MASS_DIFFERENCE}"

    for aa, mass in AA_MASSES_DICT.items():
        assert 50.0 < mass < 250.0, f"AA {aa} mass is out of range: {mass}"
