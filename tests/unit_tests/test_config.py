"""Tests for tool profiles."""

import pytest

from psmsynopsis.config import REQUIRED_FIELDS, ModSyntax, ToolProfile
from psmsynopsis.scoring import DuplicateKey


class TestToolProfiles:
    """Test the per-tool presets."""

    @pytest.mark.parametrize("tool", ["moda", "modplus", "msfragger", "mspathfinder"])
    def test_presets_map_required_fields(self, tool):
        profile = ToolProfile.for_tool(tool)
        mapped = set(value for value in profile.column_names.values() if value)

        for name in REQUIRED_FIELDS:
            assert name in mapped
        for name in profile.extra_columns:
            assert name in mapped
        assert profile.default_columns

    def test_case_insensitive_name(self):
        assert ToolProfile.for_tool("  MODa ").name == "MODa"

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unknown tool"):
            ToolProfile.for_tool("sequest")

    def test_score_directions(self):
        assert ToolProfile.for_tool("moda").higher_score_is_better
        assert ToolProfile.for_tool("modplus").higher_score_is_better
        assert not ToolProfile.for_tool("msfragger").higher_score_is_better
        assert not ToolProfile.for_tool("mspathfinder").higher_score_is_better

    def test_mod_syntax(self):
        assert ToolProfile.for_tool("moda").mod_syntax is ModSyntax.INLINE
        assert ToolProfile.for_tool("msfragger").mod_syntax is ModSyntax.MOD_LIST
        assert ToolProfile.for_tool("msfragger").mod_list_includes_static
        assert ToolProfile.for_tool("mspathfinder").mod_syntax is ModSyntax.NAMED


class TestAcceptance:

    def test_higher_is_better(self):
        profile = ToolProfile(name="P", higher_score_is_better=True, score_threshold=0.05)
        assert profile.accepts(0.05)
        assert profile.accepts(0.9)
        assert not profile.accepts(0.01)

    def test_lower_is_better(self):
        profile = ToolProfile(name="E", higher_score_is_better=False, score_threshold=0.75)
        assert profile.accepts(0.001)
        assert not profile.accepts(1.5)

    def test_no_threshold(self):
        assert ToolProfile(name="All").accepts(-1e9)


class TestProfileOptions:

    def test_duplicate_key_from_string(self):
        profile = ToolProfile(name="P", duplicate_key="clean")
        assert profile.duplicate_key is DuplicateKey.CLEAN

    def test_decoy_matcher_uses_prefixes(self):
        profile = ToolProfile(name="P", decoy_prefixes=("DECOY_",), decoy_suffixes=())
        matcher = profile.decoy_matcher()

        assert matcher.is_decoy("DECOY_P12345")
        assert not matcher.is_decoy("REV_P12345")
