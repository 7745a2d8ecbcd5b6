import math

import pytest

from shelf import facets
from shelf.facets import build_facets, complexity_band, facet_values, year_values
from shelf.models import Item


def make(item_id, **kwargs):
    return Item(item_id=item_id, owned_count=1, **kwargs)


class TestFacetValues:
    def test_article_insensitive_sort(self):
        items = [make("1", publishers=("The Crew", "Azul", "An Age"))]
        assert facet_values(items, "publishers") == ["An Age", "Azul", "The Crew"]

    def test_case_insensitive_sort(self):
        items = [make("1", categories=("banana", "Apple")), make("2", categories=("cherry",))]
        assert facet_values(items, "categories") == ["Apple", "banana", "cherry"]

    def test_distinct_across_items(self):
        items = [
            make("1", mechanisms=("Drafting", "Set Collection")),
            make("2", mechanisms=("Drafting",)),
            make("3"),
        ]
        assert facet_values(items, "mechanisms") == ["Drafting", "Set Collection"]

    def test_article_only_stripped_as_whole_word(self):
        items = [make("1", designers=("Theo", "Anne", "The Op"))]
        assert facet_values(items, "designers") == ["Anne", "The Op", "Theo"]

    def test_scalar_attribute(self):
        items = [make("1", item_type="Base Game"), make("2", item_type="Expansion"), make("3", item_type="")]
        assert facet_values(items, "item_type") == ["Base Game", "Expansion"]

    def test_optional_scalar_skips_none(self):
        items = [make("1", family=None), make("2", family="Series: Azul")]
        assert facet_values(items, "family") == ["Series: Azul"]

    def test_exclude(self):
        items = [make("1", designers=("JR Honeycutt", "Uwe Rosenberg"))]
        assert facet_values(items, "designers", exclude=["JR Honeycutt"]) == ["Uwe Rosenberg"]

    def test_empty_catalog(self):
        assert facet_values([], "categories") == []


def test_year_values_newest_first():
    items = [make("1", year_published=2017), make("2", year_published=2019), make("3"), make("4", year_published=2017)]
    assert year_values(items) == [2019, 2017]


def test_build_facets(catalog, monkeypatch):
    monkeypatch.setattr(facets, "_HIDDEN_DESIGNERS_RAW", "Thomas Sing, ")
    result = build_facets(catalog)
    assert set(result) == {"categories", "mechanisms", "designers", "artists", "publishers", "years"}
    assert result["categories"] == ["Abstract Strategy", "Card Game", "Economic", "Strategy"]
    assert "Thomas Sing" not in result["designers"]
    assert "Michael Kiesling" in result["designers"]
    assert result["artists"] == []
    assert result["years"] == [2019, 2018, 2017]


class TestComplexityBand:
    @pytest.mark.parametrize(
        "weight,label",
        [
            (1.0, "Low"),
            (2.0, "Low"),
            (2.01, "Medium"),
            (2.5, "Medium"),
            (2.51, "High"),
            (5.0, "High"),
            (0.0, "Low"),
            (7.5, "High"),
        ],
    )
    def test_bands(self, weight, label):
        assert complexity_band(weight) == label

    def test_unclassifiable(self):
        assert complexity_band(math.nan) == ""
        assert complexity_band(None) == ""
