"""
Tests for the canonical location store.
"""
import pytest

from satsmap.core.exceptions import RecordWriteError
from satsmap.schemas.location import LocationRecord, LocationSource


def make_record(location_id, type="node", lat=40.0, lon=-74.0, tags=None, nodes=None,
                source=LocationSource.OVERPASS):
    return LocationRecord(
        id=location_id,
        type=type,
        lat=lat,
        lon=lon,
        tags=tags,
        nodes=nodes,
        source=source,
    )


class TestUpsert:
    def test_insert_then_read_back(self, store):
        store.upsert(make_record(1, tags={"name": "Cafe"}))

        rows = store.all()

        assert len(rows) == 1
        assert rows[0]["id"] == 1
        assert rows[0]["tags"] == {"name": "Cafe"}
        assert rows[0]["source"] == "overpass"

    def test_same_record_twice_only_moves_timestamp(self, store, clock):
        record = make_record(7, tags={"name": "Cafe"})

        store.upsert(record)
        first = store.by_id(7)
        clock.advance(60)
        store.upsert(record)
        second = store.by_id(7)

        assert len(store.all()) == 1
        assert first["last_updated"] != second["last_updated"]
        first.pop("last_updated")
        second.pop("last_updated")
        assert first == second

    def test_later_write_replaces_whole_row(self, store):
        store.upsert(make_record(42, tags={"a": "1"}))
        store.upsert(make_record(
            42, type="way", lat=1.0, lon=2.0, tags={"b": "2"}, nodes=[9, 10],
            source=LocationSource.BTCMAP,
        ))

        row = store.by_id(42)

        assert row["type"] == "way"
        assert (row["lat"], row["lon"]) == (1.0, 2.0)
        assert row["tags"] == {"b": "2"}
        assert row["nodes"] == [9, 10]
        assert row["source"] == "btcmap"

    def test_replacement_clears_fields_missing_from_new_record(self, store):
        store.upsert(make_record(3, type="way", nodes=[1, 2], tags={"name": "Mall"}))
        store.upsert(make_record(3, type="node"))

        row = store.by_id(3)

        assert row["nodes"] == []
        assert row["tags"] == {}

    def test_write_failure_raises_and_leaves_no_row(self, store):
        broken = LocationRecord.model_construct(
            id=5, type=None, lat=None, lon=None, tags=None, nodes=None,
            source=LocationSource.OVERPASS,
        )

        with pytest.raises(RecordWriteError) as exc_info:
            store.upsert(broken)

        assert exc_info.value.location_id == 5
        assert store.by_id(5) is None

    def test_store_still_usable_after_failed_write(self, store):
        broken = LocationRecord.model_construct(
            id=5, type=None, lat=None, lon=None, tags=None, nodes=None,
            source=LocationSource.OVERPASS,
        )
        with pytest.raises(RecordWriteError):
            store.upsert(broken)

        store.upsert(make_record(6))
        assert store.by_id(6) is not None


class TestReads:
    def test_rows_without_coordinates_are_hidden_from_lists(self, store):
        store.upsert(make_record(1))
        store.upsert(make_record(2, type="way", lat=None, lon=None, nodes=[1]))

        assert [row["id"] for row in store.all()] == [1]
        assert [row["id"] for row in store.coordinates_only()] == [1]

    def test_rows_without_coordinates_still_found_by_id(self, store):
        store.upsert(make_record(2, type="way", lat=None, lon=None, nodes=[1]))

        row = store.by_id(2)

        assert row is not None
        assert row["lat"] is None

    def test_unknown_id_returns_none(self, store):
        assert store.by_id(999) is None

    def test_coordinates_projection(self, store):
        store.upsert(make_record(1, lat=10.0, lon=20.0, tags={"name": "x"}))

        assert store.coordinates_only() == [{"id": 1, "type": "node", "lat": 10.0, "lon": 20.0}]

    def test_all_ordered_by_id(self, store):
        for location_id in (30, 10, 20):
            store.upsert(make_record(location_id))

        assert [row["id"] for row in store.all()] == [10, 20, 30]

    def test_init_is_idempotent(self, store):
        store.upsert(make_record(1))
        store.init()
        store.init()
        assert store.by_id(1) is not None


class TestPaymentStats:
    def test_empty_store(self, store):
        stats = store.payment_stats()

        assert stats.total_locations == 0
        assert stats.nodes == 0
        assert stats.ways == 0
        assert stats.countries == {}
        assert store.last_updated() is None

    def test_counts_by_type(self, store):
        store.upsert(make_record(1))
        store.upsert(make_record(2))
        store.upsert(make_record(3, type="way"))
        store.upsert(make_record(4, type="relation"))

        stats = store.payment_stats()

        assert stats.total_locations == 4
        assert stats.nodes == 2
        assert stats.ways == 1

    def test_totals_include_rows_without_coordinates(self, store):
        store.upsert(make_record(1, lat=None, lon=None))
        assert store.payment_stats().total_locations == 1

    def test_country_distribution(self, store):
        store.upsert(make_record(1, tags={"addr:country": "US"}))
        store.upsert(make_record(2, tags={"addr:country": "US"}))
        store.upsert(make_record(3, tags={"addr:country": "DE"}))
        store.upsert(make_record(4, tags={"name": "No country"}))
        store.upsert(make_record(5))

        stats = store.payment_stats()

        assert stats.countries == {"US": 2, "DE": 1}

    def test_country_counts_every_non_null_value(self, store):
        store.upsert(make_record(1, tags={"addr:country": ""}))
        store.upsert(make_record(2, tags={"addr:country": 0}))
        store.upsert(make_record(3, tags={"addr:country": None}))

        stats = store.payment_stats()

        assert stats.countries == {"": 1, "0": 1}

    def test_last_updated_is_newest_write(self, store, clock):
        store.upsert(make_record(1))
        clock.advance(120)
        store.upsert(make_record(2))

        newest = store.last_updated()

        assert newest.replace(tzinfo=None) == clock.now.replace(tzinfo=None)
