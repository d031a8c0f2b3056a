"""
Tests for the static jurisdiction catalogue.
"""

from src.judgefinder import jurisdictions


def test_catalogue_ids_unique():
    ids = [j.id for j in jurisdictions.JURISDICTIONS]
    assert len(ids) == len(set(ids)) == 8


def test_pinned():
    assert [j.title for j in jurisdictions.pinned()] == ["California", "Federal", "Los Angeles County"]


def test_matching_title():
    assert [j.id for j in jurisdictions.matching("santa")] == ["santa-clara-county"]


def test_matching_description_case_insensitive():
    assert [j.id for j in jurisdictions.matching("SILICON")] == ["santa-clara-county"]
    assert jurisdictions.matching("zzz") == []
