"""End-to-end tests for processing one result file."""

import pandas as pd
import pytest

from psmsynopsis.config import ToolProfile
from psmsynopsis.mass import compute_sequence_mass, convolute_mass
from psmsynopsis.pipeline import ProcessingStatus, process_file, score_matches, sort_best_first
from psmsynopsis.scoring import DuplicateKey


def moda_lines(rows):
    header = ["SpectrumFile", "Index", "ObservedMW", "Charge", "CalculatedMW", "DeltaMass",
              "Score", "Probability", "Peptide", "Protein", "PeptidePosition"]
    lines = ["\t".join(header)]
    for index, peptide, charge, probability, protein in rows:
        clean = "".join(c for c in peptide.split(".")[1] if c.isalpha())
        calculated = compute_sequence_mass(clean)
        lines.append("\t".join([
            "sample.mgf", str(index), f"{calculated:.4f}", str(charge), f"{calculated:.4f}",
            "0", "50", str(probability), peptide, protein, "",
        ]))
    return "\n".join(lines) + "\n"


@pytest.fixture
def moda_input(tmp_path):
    path = tmp_path / "sample_moda.txt"
    path.write_text(moda_lines([
        (101, "K.PEPTIDE.R", 2, 0.99, "sp|P1|A_HUMAN"),
        (101, "K.PEPTIDES.R", 2, 0.99, "sp|P2|B_HUMAN;sp|P3|C_HUMAN"),
        (101, "K.PEPTIDER.R", 2, 0.80, "REV_sp|P4|D_HUMAN"),
        (102, "R.SAMPLER.K", 3, 0.95, "sp|P5|E_HUMAN"),
        (103, "R.SAMPLERS.K", 2, 0.01, "sp|P6|F_HUMAN"),
    ]))
    return path


class TestProcessFile:
    """Test the full read-rank-FDR-write pipeline."""

    def test_success(self, moda_input, moda_profile, catalog, tmp_path):
        output = tmp_path / "sample_syn.txt"
        result = process_file(moda_input, output, moda_profile, catalog)

        assert result.status is ProcessingStatus.SUCCESS
        assert result.success
        assert result.matches_read == 5
        assert result.invalid_rows == 0

        frame = pd.read_csv(output, sep="\t")
        # Probability 0.01 is below the MODa threshold; PEPTIDES maps to two proteins
        assert len(frame) == 5
        assert result.rows_written == 5
        assert list(frame["ResultID"]) == [1, 2, 3, 4, 5]
        assert "MODa_Score" in frame.columns

    def test_ranks_and_qvalues(self, moda_input, moda_profile, catalog, tmp_path):
        output = tmp_path / "sample_syn.txt"
        process_file(moda_input, output, moda_profile, catalog)

        frame = pd.read_csv(output, sep="\t")
        by_peptide = frame.drop_duplicates("Peptide").set_index("Peptide")

        assert by_peptide.loc["K.PEPTIDE.R", "Rank"] == 1
        assert by_peptide.loc["K.PEPTIDES.R", "Rank"] == 1
        assert by_peptide.loc["K.PEPTIDER.R", "Rank"] == 2
        assert by_peptide.loc["R.SAMPLER.K", "Rank"] == 1

        assert (frame["QValue"] <= 1.0).all()
        # Rows are written best-first, so Q-values never decrease
        assert (frame["QValue"].diff().dropna() >= 0).all()
        assert set(frame["Protein"]) >= {"sp|P2|B_HUMAN", "sp|P3|C_HUMAN"}

    def test_first_hits(self, moda_input, moda_profile, catalog, tmp_path):
        output = tmp_path / "sample_fht.txt"
        result = process_file(moda_input, output, moda_profile, catalog, first_hits=True)

        frame = pd.read_csv(output, sep="\t")
        assert (frame["Rank"] == 1).all()
        assert result.rows_written == 4

    def test_mod_summary(self, moda_input, moda_profile, catalog, tmp_path):
        summary_path = tmp_path / "mod_summary.txt"
        process_file(moda_input, tmp_path / "syn.txt", moda_profile, catalog,
                     mod_summary_path=summary_path)

        summary = pd.read_csv(summary_path, sep="\t")
        assert "Occurrence_Count" in summary.columns

    def test_missing_input(self, tmp_path, moda_profile):
        result = process_file(tmp_path / "missing.txt", tmp_path / "syn.txt", moda_profile)

        assert result.status is ProcessingStatus.INVALID_INPUT_FILE
        assert not (tmp_path / "syn.txt").exists()

    def test_invalid_header(self, tmp_path, moda_profile):
        path = tmp_path / "bad.txt"
        path.write_text("Index\tPeptide\n")
        result = process_file(path, tmp_path / "syn.txt", moda_profile)

        assert result.status is ProcessingStatus.INVALID_HEADER
        assert result.error_messages

    def test_no_valid_rows(self, tmp_path, moda_profile):
        path = tmp_path / "empty.txt"
        path.write_text(moda_lines([]))
        result = process_file(path, tmp_path / "syn.txt", moda_profile)

        assert result.status is ProcessingStatus.NO_VALID_ROWS

    def test_invalid_rows_collected(self, tmp_path, moda_profile, catalog):
        path = tmp_path / "mixed.txt"
        text = moda_lines([(5, "K.PEPTIDE.R", 2, 0.9, "sp|P1|A_HUMAN")])
        text += "sample.mgf\tnot_a_scan\t800\t2\t800\t0\t50\t0.9\tK.PEPTIDE.R\tP1\t\n"
        path.write_text(text)

        result = process_file(path, tmp_path / "syn.txt", moda_profile, catalog)

        assert result.status is ProcessingStatus.SUCCESS
        assert result.invalid_rows == 1
        assert any("not_a_scan" in message for message in result.error_messages)

    def test_abort_still_writes(self, moda_input, moda_profile, catalog, tmp_path):
        calls = []

        def abort():
            calls.append(1)
            return len(calls) > 3   # header plus two data rows

        output = tmp_path / "syn.txt"
        result = process_file(moda_input, output, moda_profile, catalog, abort=abort)

        assert result.status is ProcessingStatus.ABORTED
        assert result.matches_read == 2
        assert output.exists()

    def test_undecodable_bytes(self, moda_profile, catalog, tmp_path):
        path = tmp_path / "latin1.txt"
        text = moda_lines([(7, "K.PEPTIDE.R", 2, 0.9, "PROTPLACEHOLDER")])
        head, tail = text.encode("utf-8").split(b"PROTPLACEHOLDER")
        path.write_bytes(head + b"Prot\xff\xfe" + tail)

        output = tmp_path / "syn.txt"
        result = process_file(path, output, moda_profile, catalog)

        assert result.status is ProcessingStatus.SUCCESS
        assert result.matches_read == 1
        frame = pd.read_csv(output, sep="\t", encoding="utf-8")
        assert frame.loc[0, "Protein"].startswith("Prot")

    def test_output_error(self, moda_input, moda_profile, catalog, tmp_path):
        output = tmp_path / "no_such_dir" / "syn.txt"
        result = process_file(moda_input, output, moda_profile, catalog)

        assert result.status is ProcessingStatus.ERROR_CREATING_OUTPUT


class TestScoreMatches:
    """Test in-memory scoring of normalized matches."""

    def test_sort_best_first(self, make_match):
        matches = [
            make_match(scan=2, score=10.0),
            make_match(scan=1, score=10.0),
            make_match(scan=3, score=30.0),
        ]
        sort_best_first(matches, higher_is_better=True)
        assert [m.scan for m in matches] == [3, 1, 2]

    def test_score_matches(self, make_match):
        profile = ToolProfile(name="T")
        matches = [
            make_match(scan=1, score=30.0, proteins=["P1"]),
            make_match(scan=1, score=20.0, proteins=["REV_P2"]),
            make_match(scan=2, score=25.0, proteins=["P3"]),
        ]
        stats = score_matches(matches, profile)

        assert [m.scan for m in matches] == [1, 2, 1]
        assert [m.rank for m in matches] == [1, 1, 2]
        assert [m.qvalue for m in matches] == pytest.approx([0.0, 0.0, 0.5])
        assert stats["n_decoys"] == 1

    def test_clean_key_keeps_groups_contiguous(self, make_match):
        """Modified forms of one clean peptide form a single decoy group."""
        profile = ToolProfile(name="T", duplicate_key=DuplicateKey.CLEAN)
        matches = [
            make_match(scan=5, peptide="PEP+16.0TIDEM", clean_sequence="PEPTIDEM",
                       score=10.0, proteins=["REV_a"]),
            make_match(scan=5, peptide="PEPAAA", clean_sequence="PEPAAA",
                       score=10.0, proteins=["fwd"]),
            make_match(scan=5, peptide="PEPT+16.0IDEM", clean_sequence="PEPTIDEM",
                       score=10.0, proteins=["REV_b"]),
        ]
        score_matches(matches, profile)

        assert [m.clean_sequence for m in matches] == ["PEPAAA", "PEPTIDEM", "PEPTIDEM"]
        assert [m.fdr for m in matches] == pytest.approx([0.0, 1.0, 1.0])

    def test_annotated_tie_break_by_default(self, make_match):
        matches = [
            make_match(scan=5, peptide="PEPT+16.0IDEM", clean_sequence="PEPTIDEM"),
            make_match(scan=5, peptide="PEPAAA", clean_sequence="PEPAAA"),
        ]
        sort_best_first(matches, higher_is_better=True)
        assert [m.peptide for m in matches] == ["PEPAAA", "PEPT+16.0IDEM"]

    def test_precursor_from_observed_mass(self, moda_input, moda_profile, catalog, tmp_path):
        output = tmp_path / "syn.txt"
        process_file(moda_input, output, moda_profile, catalog)

        frame = pd.read_csv(output, sep="\t").set_index("Peptide")
        expected = convolute_mass(compute_sequence_mass("SAMPLER"), 0, 3)
        assert frame.loc["R.SAMPLER.K", "PrecursorMZ"] == pytest.approx(expected, abs=1e-3)
