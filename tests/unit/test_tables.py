"""
Unit tests for the static reference tables.
"""

import pytest

from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables


def test_default_tables_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_TABLES.league_standardization["T14"] = "Something Else"


def test_non_idempotent_standardization_rejected():
    with pytest.raises(ValueError):
        ReferenceTables(league_standardization={"A": "B", "B": "C"})


def test_alias_listed_for_two_leagues_rejected():
    with pytest.raises(ValueError):
        ReferenceTables(league_alt_names={"League One": ("L1",), "League Two": ("l1",)})


def test_split_year_lookup():
    assert DEFAULT_TABLES.is_split_year("Top 14")
    assert not DEFAULT_TABLES.is_split_year("Super Rugby Pacific")
    assert not DEFAULT_TABLES.is_split_year("Unknown League")


def test_league_profile_lookup():
    profile = DEFAULT_TABLES.league_profile("Top 14")
    assert profile.country == "FRA"
    assert profile.tier == 1
    assert DEFAULT_TABLES.league_profile("Unknown League") is None
