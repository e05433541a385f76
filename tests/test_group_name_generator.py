"""
Unit tests for group name generation.
"""
import pytest

from app.services.domain.group_name_generator import GroupNameGenerator, UNKNOWN_ABBREVIATION


@pytest.fixture
def generator():
    return GroupNameGenerator()


# ============================================================
# Abbreviation Tests
# ============================================================

class TestAbbreviation:
    """Tests for the generic abbreviation rule."""

    @pytest.mark.parametrize("text, expected", [
        ("Can Tho Cluster", "CTC"),
        ("jasmine-85", "J8"),
        ("dai_thom_8_extra", "DT8"),
        ("Cluster", "CLU"),
        ("om", "OM"),
    ])
    def test_abbreviation(self, text, expected):
        assert GroupNameGenerator.get_abbreviation(text, 3) == expected

    def test_initials_truncated(self):
        assert GroupNameGenerator.get_abbreviation("a b c d e", 3) == "ABC"

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_text(self, text):
        assert GroupNameGenerator.get_abbreviation(text, 3) == UNKNOWN_ABBREVIATION


class TestSeasonAbbreviation:
    """Tests for the season lookup table."""

    @pytest.mark.parametrize("season, expected", [
        ("Winter", "W"),
        ("Spring 2025", "SP"),
        ("SUMMER", "SU"),
        ("Autumn", "A"),
        ("Mua Dong", "MD"),
        ("mua xuan", "MX"),
        ("Vu Dong", "D"),
    ])
    def test_known_seasons(self, generator, season, expected):
        assert generator.get_season_abbreviation(season) == expected

    def test_multi_word_entry_wins_over_its_parts(self, generator):
        """'Mua Dong' is not reduced to the single-word 'dong' entry."""
        assert generator.get_season_abbreviation("Mua Dong Xuan") == "MD"

    def test_unknown_season_falls_back(self, generator):
        assert generator.get_season_abbreviation("Wet") == "WE"

    def test_empty_season(self, generator):
        assert generator.get_season_abbreviation("") == UNKNOWN_ABBREVIATION


# ============================================================
# Full Name Tests
# ============================================================

class TestGenerateGroupName:
    """Tests for complete group names."""

    def test_name_format(self, generator):
        name = generator.generate_group_name("Can Tho Cluster", "Winter", 2024, "Jasmine", 1)

        assert name == "CTC-W24-JAS-G01"

    def test_two_digit_sequence(self, generator):
        name = generator.generate_group_name("CLS", "Spring", 2025, "ST 25", 12)

        assert name == "CLS-SP25-S2-G12"

    def test_year_padded(self, generator):
        name = generator.generate_group_name("CLS", "Winter", 2005, "OM", 3)

        assert name == "CLS-W05-OM-G03"

    def test_missing_names_use_placeholder(self, generator):
        name = generator.generate_group_name("", "", 2025, "", 1)

        assert name == "UNK-UNK25-UNK-G01"
