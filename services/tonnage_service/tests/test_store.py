"""
Calculation history persistence: insert, search, sort, paging, delete, clear.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from tonnage_service.models import CalculationRecord
from tonnage_service.store import CalculationStore, normalize_order, sort_column


@pytest.fixture
def store(database):
    return CalculationStore(database)


@pytest.fixture
def history(store, make_record):
    """Three records an hour apart, oldest first."""
    base = datetime(2026, 10, 19, 8, 0, 0)
    records = [
        make_record(2500, 890, 30, "0.9884", created_at=base),
        make_record(1000, 850, 15, "1.0", created_at=base + timedelta(hours=1)),
        make_record(12500, 850, 20, "0.9959", created_at=base + timedelta(hours=2)),
    ]
    for record in records:
        store.insert(record)
    return records


def volumes(page):
    return [row.volume for row in page.rows]


def test_insert_assigns_id_and_timestamp(store, make_record):
    first = store.insert(make_record(2500, 890, 30, "0.9884"))
    second = store.insert(make_record(1000, 850, 15))

    assert first.id is not None
    assert second.id > first.id
    assert isinstance(first.created_at, datetime)
    assert second.created_at >= first.created_at


def test_round_trip(store, make_record):
    record = make_record(2500, 890, 30, "0.9884")
    record.used_density = Decimal("890.0")
    record.used_temperature = Decimal("30.00")
    store.insert(record)

    page = store.list()

    assert page.total == 1
    row = page.rows[0]
    assert row.volume == Decimal("2500")
    assert row.density == Decimal("890")
    assert row.temperature == Decimal("30")
    assert row.vcf == Decimal("0.9884")
    assert row.used_density == Decimal("890")
    assert row.used_temperature == Decimal("30")
    assert row.tonnage == Decimal("2.19919")


def test_default_order_is_newest_first(store, history):
    page = store.list()

    assert page.total == 3
    assert volumes(page) == [Decimal("12500"), Decimal("1000"), Decimal("2500")]


class TestSearch:
    def test_substring_over_numeric_fields(self, store, history):
        page = store.list(search="2500")

        assert page.total == 2
        assert sorted(volumes(page)) == [Decimal("2500"), Decimal("12500")]

    def test_matches_tonnage_text(self, store, history):
        # 2500 * 890 * 0.9884 / 1e6 = 2.19919
        page = store.list(search="2.199")

        assert volumes(page) == [Decimal("2500")]

    def test_matches_formatted_timestamp(self, store, history):
        page = store.list(search="2026-10-19 09:00")

        assert page.total == 1
        assert volumes(page) == [Decimal("1000")]

    def test_no_match(self, store, history):
        page = store.list(search="77777")

        assert page.total == 0
        assert page.rows == []
        assert page.pages == 0

    def test_like_wildcards_are_literal(self, store, history):
        assert store.list(search="%").total == 0
        assert store.list(search="_").total == 0

    def test_empty_search_returns_everything(self, store, history):
        assert store.list(search="").total == 3


class TestSort:
    def test_volume_ascending(self, store, history):
        page = store.list(sort="volume", order="asc")

        assert volumes(page) == sorted(volumes(page))
        assert volumes(page)[0] == Decimal("1000")

    def test_tonnage_descending(self, store, history):
        page = store.list(sort="tonnage", order="DESC")
        tonnages = [row.tonnage for row in page.rows]

        assert tonnages == sorted(tonnages, reverse=True)

    def test_camel_case_created_at(self, store, history):
        page = store.list(sort="createdAt", order="ASC")

        assert volumes(page) == [Decimal("2500"), Decimal("1000"), Decimal("12500")]

    @pytest.mark.parametrize("sort", ["id", "vcf", "volume; DROP TABLE oil_tonnages", "", None])
    def test_unknown_column_falls_back_to_created_at_desc(self, store, history, sort):
        page = store.list(sort=sort, order="DESC")

        assert volumes(page) == [Decimal("12500"), Decimal("1000"), Decimal("2500")]
        assert store.list().total == 3

    def test_unknown_order_is_descending(self, store, history):
        page = store.list(sort="volume", order="sideways")

        assert volumes(page) == [Decimal("12500"), Decimal("2500"), Decimal("1000")]


def test_sort_helpers():
    assert sort_column("tonnage") is CalculationRecord.tonnage
    assert sort_column("1; SELECT 1") is CalculationRecord.created_at
    assert normalize_order("aSc") == "ASC"
    assert normalize_order("desc") == "DESC"
    assert normalize_order(None) == "DESC"


def test_pagination(store, make_record):
    base = datetime(2026, 1, 1)
    for i in range(5):
        store.insert(make_record(100 + i, 850, 15, created_at=base + timedelta(minutes=i)))

    first = store.list(page=1, limit=2, sort="volume", order="asc")
    last = store.list(page=3, limit=2, sort="volume", order="asc")

    assert first.total == 5
    assert first.pages == 3
    assert volumes(first) == [Decimal("100"), Decimal("101")]
    assert volumes(last) == [Decimal("104")]
    assert store.list(page=4, limit=2).rows == []


def test_delete_by_id(store, history):
    target = history[1]

    assert store.delete_by_id(target.id) is True
    assert store.delete_by_id(target.id) is False
    assert Decimal("1000") not in volumes(store.list())
    assert store.list().total == 2


def test_delete_missing_id(store):
    assert store.delete_by_id(424242) is False


def test_clear_all(store, history):
    assert store.clear_all() == 3

    page = store.list()
    assert page.total == 0
    assert page.rows == []
