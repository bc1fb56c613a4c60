"""Tests for show_normalizer.py functions."""

import pytest

from show_normalizer import normalize, title_case

SAMPLES = [
    "",
    ".",
    "...",
    "  Some Show  ",
    "Some Show - ",
    "a..b...c",
    "..Pilot  Part.",
    "A\tB",
    ".\t.a",
    " . ",
    "The.Office.US",
    "x . y",
    "İstanbul Nights",
    "İ",
]


class TestNormalize:
    """Tests for normalize function."""

    def test_spaces_become_dots(self):
        assert normalize("Some Show") == "some.show"

    def test_trims_whitespace(self):
        assert normalize("   Some Show   ") == "some.show"

    def test_collapses_dot_runs(self):
        assert normalize("a..b...c") == "a.b.c"

    def test_space_dot_mix_collapses(self):
        assert normalize("x . y") == "x.y"

    def test_strips_edge_dots(self):
        assert normalize("..Pilot  Part.") == "pilot.part"

    def test_single_dot_is_kept(self):
        assert normalize(".") == "."
        assert normalize("...") == "."

    def test_empty(self):
        assert normalize("") == ""
        assert normalize("   ") == ""

    def test_lower_cases(self):
        assert normalize("The OFFICE") == "the.office"

    def test_tabs_treated_like_spaces(self):
        assert normalize("A\tB") == "a.b"

    def test_growing_lowercase_keeps_case(self):
        assert normalize("İ") == "İ"
        assert normalize("İstanbul Nights") == "İstanbul.nights"

    def test_hyphen_is_not_a_separator(self):
        """Only whitespace and dots are rewritten."""
        assert normalize("Spider-Man") == "spider-man"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = normalize(text)
        assert normalize(once) == once

    @pytest.mark.parametrize("text", SAMPLES)
    def test_never_longer(self, text):
        assert len(normalize(text)) <= len(text)


class TestTitleCase:
    """Tests for title_case function."""

    def test_basic(self):
        assert title_case("some.show") == "Some.Show"

    def test_stopwords_mid_string_stay_lower(self):
        assert title_case("war.of.the.worlds") == "War.of.the.Worlds"

    def test_leading_stopword_is_capitalized(self):
        assert title_case("the.great.war") == "The.Great.War"

    def test_and(self):
        assert title_case("of.mice.and.men") == "Of.Mice.and.Men"

    def test_upper_stopword_is_lowered(self):
        assert title_case("war.OF.THE.worlds") == "War.of.the.Worlds"

    def test_rest_of_word_untouched(self):
        assert title_case("the.x-files.mcu") == "The.X-files.Mcu"

    def test_empty_segments_dropped(self):
        assert title_case(".x..men.") == "X.Men"
        assert title_case(".") == ""
        assert title_case("") == ""

    def test_digits_unchanged(self):
        assert title_case("24.legacy") == "24.Legacy"
