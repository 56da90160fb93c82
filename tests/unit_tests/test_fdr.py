"""Tests for FDR and Q-value estimation.

Tests cover:
1. Decoy protein classification
2. Duplicate groups (one count per scan/charge/peptide group)
3. Running FDR and Q-value monotonicity
4. Global statistics
"""

import numpy as np
import pytest

from psmsynopsis.scoring import (
    DecoyMatcher,
    DuplicateKey,
    compute_fdr_and_qvalues,
    duplicate_groups,
    fdr_statistics,
)
from psmsynopsis.scoring.fdr import _qvalues_from_fdr


FORWARD = "sp|P12345|ALBU_HUMAN"
DECOY = "REV_sp|P12345|ALBU_HUMAN"


class TestDecoyMatcher:
    """Test decoy naming conventions."""

    @pytest.mark.parametrize("protein", [
        "reversed_P12345",
        "REV_P12345",
        "rev_P12345",
        "scrambled_P12345",
        "xxx_P12345",
        "XXX.P12345",
        "REV__P12345",
        "P12345:reversed",
        "REV_P12345[K.12~20.R(2)]",
    ])
    def test_decoys(self, protein):
        assert DecoyMatcher().is_decoy(protein)

    @pytest.mark.parametrize("protein", [
        "P12345",
        "sp|P12345|REVERSE_HUMAN",
        "",
    ])
    def test_forward(self, protein):
        assert not DecoyMatcher().is_decoy(protein)

    def test_custom_prefix(self):
        matcher = DecoyMatcher(prefixes=["DECOY_"], suffixes=[])
        assert matcher.is_decoy("decoy_P12345")
        assert not matcher.is_decoy("REV_P12345")

    def test_all_decoys(self):
        matcher = DecoyMatcher()
        assert matcher.all_decoys([DECOY, "xxx_Q99999"])
        assert not matcher.all_decoys([DECOY, FORWARD])
        assert not matcher.all_decoys([])


class TestDuplicateGroups:
    """Test contiguous scan/charge/peptide grouping."""

    def test_contiguous_runs(self, make_match):
        matches = [
            make_match(scan=1, peptide="PEPTIDE", proteins=[FORWARD]),
            make_match(scan=1, peptide="PEPTIDE", proteins=[DECOY]),
            make_match(scan=2, peptide="PEPTIDE"),
            make_match(scan=2, charge=3, peptide="PEPTIDE"),
        ]
        assert list(duplicate_groups(matches)) == [(0, 2), (2, 3), (3, 4)]

    def test_annotated_vs_clean_key(self, make_match):
        matches = [
            make_match(scan=1, peptide="PEPM+15.995TIDE", clean_sequence="PEPMTIDE"),
            make_match(scan=1, peptide="PEPMTIDE", clean_sequence="PEPMTIDE"),
        ]
        assert len(list(duplicate_groups(matches, DuplicateKey.ANNOTATED))) == 2
        assert len(list(duplicate_groups(matches, DuplicateKey.CLEAN))) == 1

    def test_parse_duplicate_key(self):
        assert DuplicateKey.parse("clean") is DuplicateKey.CLEAN
        with pytest.raises(ValueError):
            DuplicateKey.parse("sequence")


class TestFDR:
    """Test running FDR and Q-values."""

    def test_counting_walk(self, make_match):
        """Ten groups: decoy, forward, forward, decoy, then six forward."""
        kinds = ["D", "F", "F", "D", "F", "F", "F", "F", "F", "F"]
        matches = [
            make_match(scan=i + 1, score=100.0 - i, proteins=[DECOY if k == "D" else FORWARD])
            for i, k in enumerate(kinds)
        ]
        fdr, qvalue = compute_fdr_and_qvalues(matches, DecoyMatcher())

        expected_fdr = [1.0, 1.0, 0.5, 1.0, 2 / 3, 0.5, 0.4, 2 / 6, 2 / 7, 0.25]
        np.testing.assert_allclose(fdr, expected_fdr)

        # Last group: 2 reverse / 8 forward
        assert matches[-1].fdr == pytest.approx(0.25)
        # Best group: minimum FDR from there to the end
        assert matches[0].qvalue == pytest.approx(min(expected_fdr))

    def test_qvalue_is_suffix_minimum(self, make_match):
        is_decoy = np.random.rand(200) < 0.2
        matches = [
            make_match(scan=i + 1, score=1000.0 - i, proteins=[DECOY if d else FORWARD])
            for i, d in enumerate(is_decoy)
        ]
        fdr, qvalue = compute_fdr_and_qvalues(matches, DecoyMatcher())

        for i in range(len(matches)):
            assert qvalue[i] == pytest.approx(min(fdr[i:].min(), 1.0))

        # Non-decreasing from best to worst
        assert np.all(np.diff(qvalue) >= 0)
        assert np.all(qvalue <= 1.0)

    def test_group_counted_once(self, make_match):
        """Rows of one group share FDR; the group counts once."""
        matches = [
            make_match(scan=1, score=50.0, proteins=[FORWARD]),
            make_match(scan=1, score=50.0, proteins=["sp|Q99999|OTHER_HUMAN"]),
            make_match(scan=2, score=40.0, proteins=[DECOY]),
        ]
        fdr, _ = compute_fdr_and_qvalues(matches, DecoyMatcher())

        assert fdr[0] == fdr[1] == pytest.approx(0.0)
        assert fdr[2] == pytest.approx(1.0)

    def test_mixed_group_is_forward(self, make_match):
        """A group is decoy only if every protein is a decoy."""
        matches = [
            make_match(scan=1, score=50.0, proteins=[DECOY]),
            make_match(scan=1, score=50.0, proteins=[FORWARD]),
        ]
        fdr, _ = compute_fdr_and_qvalues(matches, DecoyMatcher())
        assert fdr[0] == pytest.approx(0.0)

    def test_all_decoy_groups(self, make_match):
        matches = [make_match(scan=i, proteins=[DECOY]) for i in range(3)]
        fdr, qvalue = compute_fdr_and_qvalues(matches)

        assert np.all(fdr == 1.0)
        assert np.all(qvalue == 1.0)

    def test_values_written_to_matches(self, make_match):
        matches = [make_match(scan=1, proteins=[FORWARD]), make_match(scan=2, proteins=[DECOY])]
        _, qvalue = compute_fdr_and_qvalues(matches)

        assert [m.qvalue for m in matches] == pytest.approx(list(qvalue))

    def test_empty(self):
        fdr, qvalue = compute_fdr_and_qvalues([])
        assert len(fdr) == 0
        assert len(qvalue) == 0


class TestQValueKernel:

    def test_clamped_start(self):
        qvalue = _qvalues_from_fdr(np.array([0.5, 2.0, 3.0]))
        np.testing.assert_allclose(qvalue, [0.5, 1.0, 1.0])

    def test_running_minimum(self):
        qvalue = _qvalues_from_fdr(np.array([0.1, 0.3, 0.2, 0.4]))
        np.testing.assert_allclose(qvalue, [0.1, 0.2, 0.2, 0.4])


class TestFDRStatistics:

    def test_statistics(self, make_match):
        matches = [
            make_match(scan=1, proteins=[FORWARD], qvalue=0.0),
            make_match(scan=2, proteins=[FORWARD], qvalue=0.03),
            make_match(scan=3, proteins=[FORWARD], qvalue=0.08),
            make_match(scan=4, proteins=[DECOY], qvalue=0.08),
        ]
        stats = fdr_statistics(matches)

        assert stats["n_targets"] == 3
        assert stats["n_decoys"] == 1
        assert stats["decoy_fraction"] == pytest.approx(0.25)
        assert stats["n_targets_fdr01"] == 1
        assert stats["n_targets_fdr05"] == 2
        assert stats["n_targets_fdr10"] == 3

    def test_empty(self):
        stats = fdr_statistics([])
        assert stats["n_targets"] == 0
        assert stats["decoy_fraction"] == 0.0
