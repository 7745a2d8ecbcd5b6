import dataclasses
import logging

import pytest

from feeds import FeedError
from shelf.catalog import Catalog, load_catalog, parse_catalog

from .samples import FEED_HEADER, FEED_ROWS, SAMPLE_FEED


class TestParseCatalog:
    def test_sample_feed(self, catalog):
        assert [it.item_id for it in catalog] == ["101", "102", "103", "105"]
        assert len(catalog) == 4
        assert catalog.dropped_unowned == 1
        assert catalog.skipped_rows == 0
        assert catalog.source == "sample.csv"

    def test_row_values(self, catalog):
        azul = catalog.get("101")
        assert azul.name == "Azul"
        assert azul.mechanisms == ("Drafting", "Pattern Building, Tiles")
        assert azul.retail_price == pytest.approx(39.99)
        assert azul.curator_name == "Sam"
        assert azul.curator_note == "Pretty tiles"

        crew = catalog.get("102")
        assert (crew.min_time, crew.max_time) == (20, 20)
        assert crew.categories == ("Card Game", "Strategy")

        expansion = catalog.get("103")
        assert expansion.item_type == "Expansion"
        assert (expansion.min_time, expansion.max_time) == (30, 45)
        assert expansion.retail_price == 0.0

    def test_unowned_never_in_catalog(self, catalog):
        assert catalog.get("104") is None

    def test_negative_owned_count_admitted(self):
        result = parse_catalog("objectname,own\nLoaned Out,-1\n")
        assert [it.name for it in result] == ["Loaned Out"]
        assert result.dropped_unowned == 0

    def test_malformed_row_skipped(self, caplog):
        bad = "999,Short Row,2,4"
        text = "\n".join([FEED_HEADER, FEED_ROWS[0], bad, FEED_ROWS[1]])
        with caplog.at_level(logging.WARNING):
            result = parse_catalog(text)
        assert [it.item_id for it in result] == ["101", "102"]
        assert result.skipped_rows == 1
        assert "Skipping malformed row 3" in caplog.text

    def test_row_one_field_short_does_not_disturb_neighbours(self):
        short = FEED_ROWS[1].rsplit(",", 1)[0]
        good = parse_catalog("\n".join([FEED_HEADER, FEED_ROWS[0], FEED_ROWS[4]]))
        mixed = parse_catalog("\n".join([FEED_HEADER, FEED_ROWS[0], short, FEED_ROWS[4]]))
        assert [it.name for it in mixed] == [it.name for it in good]
        assert mixed.skipped_rows == 1

    def test_trailing_delimiter_row_accepted(self):
        text = "\n".join([FEED_HEADER, FEED_ROWS[0] + ","])
        assert [it.item_id for it in parse_catalog(text)] == ["101"]

    def test_blank_lines_and_crlf(self):
        text = "\r\n\r\n".join([FEED_HEADER, FEED_ROWS[0], FEED_ROWS[4]])
        assert len(parse_catalog(text)) == 2

    def test_empty_feed(self):
        result = parse_catalog("\n  \n")
        assert len(result) == 0
        assert result.items == ()

    def test_header_only(self):
        assert len(parse_catalog(FEED_HEADER)) == 0

    def test_case_insensitive_headers_and_unknown_columns(self):
        text = "ObjectName,OWN,Shelf Colour\nAzul,1,blue\n"
        result = parse_catalog(text)
        assert [it.name for it in result] == ["Azul"]
        assert result.items[0].item_id == "item-1"

    def test_loaded_at_is_utc(self, catalog):
        assert catalog.loaded_at.endswith("+00:00")


class TestCatalogValue:
    def test_immutable(self, catalog):
        with pytest.raises(dataclasses.FrozenInstanceError):
            catalog.items = ()
        with pytest.raises(dataclasses.FrozenInstanceError):
            catalog.items[0].name = "Changed"

    def test_item_to_dict(self, catalog):
        data = catalog.get("101").to_dict()
        assert data["categories"] == ["Abstract Strategy"]
        assert data["year_published"] == 2017

    def test_default_catalog_empty(self):
        assert len(Catalog()) == 0


class TestLoadCatalog:
    def test_success(self):
        result = load_catalog("https://example.com/feed.csv", fetch=lambda url: SAMPLE_FEED)
        assert result.ok
        assert result.error is None
        assert len(result.catalog) == 4
        assert result.catalog.source == "https://example.com/feed.csv"

    def test_transport_failure_gives_empty_catalog(self):
        def failing(url):
            raise FeedError("HTTP error! status: 500")

        result = load_catalog("https://example.com/feed.csv", fetch=failing)
        assert not result.ok
        assert result.error == "HTTP error! status: 500"
        assert len(result.catalog) == 0

    def test_file_source(self, tmp_path):
        path = tmp_path / "feed.csv"
        path.write_text(SAMPLE_FEED, encoding="utf-8")
        result = load_catalog(str(path))
        assert result.ok
        assert len(result.catalog) == 4

    def test_missing_file(self, tmp_path):
        result = load_catalog(str(tmp_path / "missing.csv"))
        assert not result.ok
        assert len(result.catalog) == 0

    def test_reload_builds_new_catalog(self):
        first = load_catalog("feed", fetch=lambda url: SAMPLE_FEED).catalog
        second = load_catalog("feed", fetch=lambda url: SAMPLE_FEED).catalog
        assert first is not second
        assert [it.item_id for it in first] == [it.item_id for it in second]
