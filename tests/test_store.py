"""
Unit tests for the schedule record store and its queries.
"""
import pytest

from workforce_core.filters import ScheduleFilters
from workforce_core.mapping import ScheduleRecord, map_rows
from workforce_core.store import RecordStore, UnknownFieldError, sort_records


pytestmark = pytest.mark.unit


class TestByDate:
    """Same-day lookup is independent of the query's date encoding"""

    @pytest.mark.parametrize("query", ["2025-05-10", "05-10-2025", "05/10/2025", "5/10/25", "05-10-25"])
    def test_any_accepted_format(self, store, query):
        assert [r.id for r in store.by_date(query)] == ["1", "2"]

    def test_scenario_single_match(self):
        records = map_rows([{"Name": "Sun Hengly", "Date": "5/10/25", "Shifts": "9PM-3AM", "Position": "NOC"}]).records
        store = RecordStore(records)
        assert len(store.by_date("2025-05-10")) == 1

    def test_bad_query_date_matches_nothing(self, store):
        assert store.by_date("13-45-2025") == []

    def test_uncomparable_record_never_matches(self):
        store = RecordStore([ScheduleRecord(id="1", name="A", date="13-45-2025")])
        assert store.by_date("13-45-2025") == []

    def test_records_stored_unnormalized_still_match(self):
        store = RecordStore([ScheduleRecord(id="1", name="A", date="5/10/25")])
        assert len(store.by_date("2025-05-10")) == 1


class TestOtherQueries:
    """Month, search, field filters and distinct values"""

    def test_by_month(self, store):
        assert [r.id for r in store.by_month(2025, 5)] == ["1", "2", "3", "4"]
        assert [r.id for r in store.by_month(2025, 6)] == ["5"]
        assert store.by_month(2024, 5) == []

    def test_by_month_two_digit_year_record(self):
        store = RecordStore([ScheduleRecord(id="1", name="A", date="05-10-25")])
        assert len(store.by_month(2025, 5)) == 1

    def test_search_is_case_insensitive(self, store):
        assert [r.id for r in store.search("noc")] == ["1", "3"]
        assert [r.id for r in store.search("AUN")] == ["4", "5"]

    def test_search_matches_date_text(self, store):
        assert [r.id for r in store.search("06-01")] == ["5"]

    def test_empty_search_returns_everything(self, store):
        assert len(store.search("  ")) == 5

    def test_filter_by_field_is_exact(self, store):
        assert [r.id for r in store.filter_by_field("position", "Team Lead")] == ["4", "5"]
        assert store.filter_by_field("position", "team lead") == []

    def test_distinct_values_keep_first_seen_order(self, store):
        assert store.distinct_values("name") == ["Sun Hengly", "Chea Pisey", "Aun Ratha"]

    def test_unknown_field(self, store):
        with pytest.raises(UnknownFieldError):
            store.distinct_values("date")

    def test_month_calendar(self, store):
        days = store.month_calendar(2025, 5)
        assert sorted(days) == [10, 11, 20]
        assert len(days[10]) == 2


class TestReplaceAll:
    """The record set is swapped wholesale"""

    def test_replace_discards_previous(self, store):
        store.replace_all([ScheduleRecord(id="1", name="New", date="01-01-2026")])
        assert [r.name for r in store.records] == ["New"]
        assert store.by_date("2025-05-10") == []

    def test_queries_do_not_mutate(self, store):
        before = store.records
        store.search("noc")
        store.by_month(2025, 5)
        assert store.records == before

    def test_empty_store(self):
        store = RecordStore()
        assert len(store) == 0
        assert store.by_date("2025-05-10") == []
        assert store.search("x") == []
        assert store.distinct_values("shift") == []

    def test_reset(self, store):
        store.reset()
        assert len(store) == 0


class TestApplyFilters:
    """Combined search/filter/sort used by the pages"""

    def test_all_means_no_filter(self, store):
        assert len(store.apply_filters(ScheduleFilters())) == 5

    def test_combined(self, store):
        rows = store.apply_filters(ScheduleFilters(query="sun", position="NOC", date="2025-05-11"))
        assert [r.id for r in rows] == ["3"]

    def test_sort_descending_by_date(self, store):
        rows = store.apply_filters(ScheduleFilters(sort_field="date", ascending=False))
        assert [r.id for r in rows] == ["5", "4", "3", "1", "2"]

    def test_sort_by_name(self, store):
        rows = store.apply_filters(ScheduleFilters(sort_field="name"))
        assert [r.name for r in rows] == ["Aun Ratha", "Aun Ratha", "Chea Pisey", "Sun Hengly", "Sun Hengly"]


def test_sort_records_puts_uncomparable_dates_last():
    records = [
        ScheduleRecord(id="1", name="A", date="junk"),
        ScheduleRecord(id="2", name="B", date="2025-01-02"),
        ScheduleRecord(id="3", name="C", date="01-01-2025"),
    ]
    assert [r.id for r in sort_records(records, "date")] == ["3", "2", "1"]
    assert [r.id for r in sort_records(records, "date", ascending=False)] == ["2", "3", "1"]
