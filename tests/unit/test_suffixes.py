"""
Unit tests for trailing qualifier classification.
"""

import pytest

from rugbylive.reconcile.suffixes import SuffixClassifier


@pytest.fixture
def classifier():
    return SuffixClassifier()


class TestStrip:

    def test_women_marker(self, classifier):
        assert classifier.strip("Crusaders (W)") == ("Crusaders", "women")

    def test_longest_token_wins(self, classifier):
        assert classifier.suffix_of("Crusaders Women (W)") == " Women (W)"
        assert classifier.strip("Crusaders Women (W)") == ("Crusaders", "women")

    def test_no_suffix(self, classifier):
        assert classifier.strip("Blues") == ("Blues", None)

    def test_age_group_spellings_share_a_class(self, classifier):
        assert classifier.class_of("Chiefs U20") == "u20"
        assert classifier.class_of("Chiefs Under 20") == "u20"

    def test_token_alone_is_not_a_suffix(self, classifier):
        assert classifier.suffix_of("W") is None


class TestCompatible:

    def test_unsuffixed_vs_women(self, classifier):
        assert not classifier.compatible("Crusaders", "Crusaders Women")

    def test_w_marker_vs_women(self, classifier):
        assert classifier.compatible("Crusaders (W)", "Crusaders Women")
        assert classifier.compatible("Crusaders Women", "Crusaders (W)")

    def test_same_class_different_token(self, classifier):
        assert classifier.compatible("Crusaders W", "Crusaders Women")

    def test_development_side(self, classifier):
        assert not classifier.compatible("Australia A", "Australia")

    def test_both_unsuffixed(self, classifier):
        assert classifier.compatible("Blues", "Chiefs")

    def test_comparison_key(self, classifier):
        assert classifier.comparison_key("Crusaders (W)") == classifier.comparison_key("Crusaders Women")
        assert classifier.comparison_key("CRUSADERS") == ("crusaders", None)
