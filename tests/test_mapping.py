"""
Unit tests for header mapping of decoded rows onto schedule records.
"""
import pytest

from workforce_core.mapping import NO_DATA_WARNING, ScheduleRecord, map_rows, resolve_field


pytestmark = pytest.mark.unit


class TestMapRows:
    """Alias resolution, normalization and malformed-row tolerance"""

    def test_scenario_row(self):
        result = map_rows([{"Name": "Sun Hengly", "Date": "5/10/25", "Shifts": "9PM-3AM", "Position": "NOC"}])
        assert result.records == [ScheduleRecord(id="1", name="Sun Hengly", date="05-10-2025", shift="9PM-3AM", position="NOC")]
        assert result.warnings == []

    def test_shifts_header_beats_shift(self):
        result = map_rows([{"name": "A", "date": "2025-05-10", "shifts": "8AM-5PM", "shift": "Morning"}])
        assert result.records[0].shift == "8AM-5PM"

    def test_falls_back_to_next_alias_when_empty(self):
        result = map_rows([{"name": "A", "date": "2025-05-10", "shifts": "", "shift": "Morning"}])
        assert result.records[0].shift == "Morning"

    def test_missing_optional_fields_are_empty(self):
        result = map_rows([{"name": "A", "date": "2025-05-10"}])
        assert result.records[0].shift == ""
        assert result.records[0].position == ""

    def test_rows_without_date_are_dropped(self):
        rows = [{"name": f"Staff {i}", "date": "" if i < 3 else "2025-05-10"} for i in range(10)]
        result = map_rows(rows)
        assert len(result.records) == 7
        assert result.dropped_rows == 3
        assert result.summary() == "Loaded 7 of 10 rows"

    def test_rows_without_name_are_dropped(self):
        result = map_rows([{"name": "  ", "date": "2025-05-10"}, {"name": "B", "date": "2025-05-10"}])
        assert [r.name for r in result.records] == ["B"]

    def test_ids_are_sequential_over_kept_rows(self):
        rows = [
            {"name": "A", "date": "2025-05-10"},
            {"name": "", "date": "2025-05-10"},
            {"name": "C", "date": "2025-05-11"},
        ]
        assert [r.id for r in map_rows(rows).records] == ["1", "2"]

    def test_bad_date_kept_verbatim_with_warning(self):
        result = map_rows([{"name": "A", "date": "13-45-2025"}])
        assert result.records[0].date == "13-45-2025"
        assert any("row 1" in w for w in result.warnings)

    def test_numeric_cells_become_text(self):
        result = map_rows([{"name": "A", "date": "2025-05-10", "position": 7.0}])
        assert result.records[0].position == "7"

    def test_custom_aliases(self):
        result = map_rows([{"agent": "A", "work day": "2025-05-10"}], aliases={"name": ("agent",), "date": ("work day",)})
        assert result.records[0].name == "A"
        assert result.records[0].date == "05-10-2025"


class TestNoData:
    """Empty or unrecognisable input yields an empty result, never an exception"""

    @pytest.mark.parametrize("rows", [[], None])
    def test_empty_input(self, rows):
        result = map_rows(rows)
        assert result.records == []
        assert result.no_data
        assert NO_DATA_WARNING in result.warnings

    def test_non_mapping_rows(self):
        result = map_rows([["Name", "Date"], ["A", "2025-05-10"]])
        assert result.no_data

    def test_table_without_required_headers(self):
        result = map_rows([{"foo": "A", "bar": "2025-05-10"}])
        assert result.no_data
        assert result.total_rows == 1


def test_resolve_field_is_case_insensitive():
    assert resolve_field({"POSITION": " NOC "}, ("position",)) == "NOC"
