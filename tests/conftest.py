"""Pytest configuration for psmsynopsis tests.

Common fixtures: a modification catalog with the usual static and dynamic
modifications, tool profiles, and a factory for NormalizedMatch records.
"""

import numpy as np
import pytest

from psmsynopsis.config import ToolProfile
from psmsynopsis.constants import (
    ACETYL_MASS,
    CARBAMIDOMETHYL_MASS,
    OXIDATION_MASS,
    PHOSPHO_MASS,
)
from psmsynopsis.modifications import ModificationCatalog
from psmsynopsis.records import NormalizedMatch


@pytest.fixture
def catalog_records():
    """Modification records as loaded from a search parameter file."""
    return [
        {"mass": CARBAMIDOMETHYL_MASS, "type": "static", "target_residues": "C",
         "name": "Carbamidomethyl"},
        {"mass": OXIDATION_MASS, "type": "dynamic", "target_residues": "M",
         "name": "Oxidation"},
        {"mass": PHOSPHO_MASS, "type": "dynamic", "target_residues": "STY",
         "name": "Phospho"},
        {"mass": ACETYL_MASS, "type": "dynamic", "target_residues": "<",
         "name": "Acetyl"},
    ]


@pytest.fixture
def catalog(catalog_records):
    """Catalog with static carbamidomethyl C and common dynamic mods."""
    return ModificationCatalog.from_records(catalog_records)


@pytest.fixture
def empty_catalog():
    return ModificationCatalog()


@pytest.fixture
def moda_profile():
    return ToolProfile.for_tool("moda")


@pytest.fixture
def simple_profile():
    """Minimal profile: higher score is better, no threshold, inline mods."""
    return ToolProfile(
        name="TestTool",
        column_names={
            "Scan": "scan",
            "Charge": "charge",
            "Peptide": "peptide",
            "Score": "score",
            "Protein": "proteins",
            "PrecursorMZ": "precursor_mz",
            "CalculatedMass": "calculated_mass",
        },
        default_columns=("Scan", "Charge", "Peptide", "Score", "Protein",
                         "PrecursorMZ", "CalculatedMass"),
        higher_score_is_better=True,
    )


@pytest.fixture
def make_match():
    """Factory for NormalizedMatch records with sensible defaults."""
    def _make(scan=1, charge=2, peptide="PEPTIDE", score=10.0, proteins=None, **kwargs):
        return NormalizedMatch(
            scan=scan,
            charge=charge,
            peptide=peptide,
            clean_sequence=kwargs.pop("clean_sequence", peptide),
            score=score,
            proteins=list(proteins) if proteins is not None else ["sp|P12345|PROT_HUMAN"],
            **kwargs,
        )
    return _make


# Random seed for reproducibility
@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
