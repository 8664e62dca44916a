"""Tests for CSV loading, coercion and normalisation."""

from operator import attrgetter

import httpx
import pytest

from chartkit.data_pipeline import INVALID, DataPipeline, average, coerce_number, parse_rows
from chartkit.errors import DataLoadError
from chartkit.records import EMPTY, Record


def energy_row(row):
    value = coerce_number(row.get("energy"))
    if value is None:
        return INVALID
    return Record(value=value, category=row.get("tech"), key=row.get("tech"))


def year_row(row):
    year = coerce_number(row.get("Year"))
    value = coerce_number(row.get("Price"))
    if year is None or value is None:
        return INVALID
    return Record(value=value, key=int(year))


class TestCoerceNumber:
    def test_plain_and_decimal(self):
        assert coerce_number("42") == 42.0
        assert coerce_number(" 3.5 ") == 3.5
        assert coerce_number("-1e2") == -100.0

    def test_numbers_pass_through(self):
        assert coerce_number(7) == 7.0

    def test_blank_is_invalid(self):
        assert coerce_number("") is None
        assert coerce_number("   ") is None
        assert coerce_number(None) is None

    def test_malformed_is_invalid(self):
        assert coerce_number("abc") is None
        assert coerce_number("12kWh") is None

    def test_digit_separators_are_invalid(self):
        assert coerce_number("1_000") is None
        assert coerce_number("1,000") is None

    def test_non_ascii_digits_are_invalid(self):
        assert coerce_number("\u0661\u0662") is None

    def test_leading_and_trailing_point(self):
        assert coerce_number(".5") == 0.5
        assert coerce_number("5.") == 5.0
        assert coerce_number("+2E3") == 2000.0

    def test_non_finite_is_invalid(self):
        assert coerce_number("NaN") is None
        assert coerce_number("inf") is None
        assert coerce_number(float("-inf")) is None


class TestParseRows:
    def test_cells_stay_text(self):
        rows = parse_rows("a,b\n1,\n2,x\n")
        assert rows == [{"a": "1", "b": ""}, {"a": "2", "b": "x"}]

    def test_long_line_cut_to_header(self):
        rows = parse_rows("a,b\n1,2,3\n4,5\n")
        assert rows == [{"a": "1", "b": "2"}, {"a": "4", "b": "5"}]

    def test_short_line_gets_blank_cells(self):
        assert parse_rows("a,b\n1\n") == [{"a": "1", "b": ""}]

    def test_header_only(self):
        assert parse_rows("a,b\n") == []

    def test_empty_text_raises(self):
        with pytest.raises(DataLoadError):
            parse_rows("", "empty.csv")


class TestNormalise:
    def test_drops_invalid_rows_and_keeps_order(self):
        rows = [
            {"tech": "LCD", "energy": "100"},
            {"tech": "LED", "energy": ""},
            {"tech": "OLED", "energy": "176"},
            {"tech": "X", "energy": "n/a"},
            {"tech": "LED", "energy": "120"},
        ]
        dataset = DataPipeline(energy_row).normalise(rows)
        assert [r.category for r in dataset] == ["LCD", "OLED", "LED"]
        assert all(r is not INVALID for r in dataset)

    def test_every_value_is_finite(self):
        rows = [{"tech": "A", "energy": v} for v in ("1", "nan", "inf", "2.5")]
        dataset = DataPipeline(energy_row).normalise(rows)
        assert [r.value for r in dataset] == [1.0, 2.5]

    def test_all_invalid_gives_empty(self):
        dataset = DataPipeline(energy_row).normalise([{"tech": "A", "energy": ""}])
        assert dataset == EMPTY

    def test_sorted_when_key_given(self):
        rows = [{"Year": y, "Price": "1"} for y in ("2019", "2016", "2018")]
        dataset = DataPipeline(year_row, sort_key=attrgetter("key")).normalise(rows)
        assert [r.key for r in dataset] == [2016, 2018, 2019]

    def test_sort_is_stable_and_idempotent(self):
        rows = [
            {"Year": "2017", "Price": "1"},
            {"Year": "2016", "Price": "2"},
            {"Year": "2017", "Price": "3"},
        ]
        pipeline = DataPipeline(year_row, sort_key=attrgetter("key"))
        dataset = pipeline.normalise(rows)
        assert [r.value for r in dataset] == [2.0, 1.0, 3.0]
        resorted = tuple(sorted(dataset, key=attrgetter("key")))
        assert resorted == dataset


class TestAverage:
    def test_mean_of_values(self):
        dataset = tuple(Record(value=v) for v in (100.0, 120.0, 176.0))
        assert average(dataset) == pytest.approx(132.0)

    def test_five_values(self):
        dataset = tuple(Record(value=v) for v in (100.0, 150.0, 200.0, 120.0, 90.0))
        assert average(dataset) == pytest.approx(132.0)

    def test_empty_is_zero(self):
        assert average(EMPTY) == 0.0


class TestLoad:
    @pytest.mark.asyncio
    async def test_ragged_file_keeps_good_rows(self, write_csv):
        source = write_csv("tech,energy\nLCD,100\nLED,120,extra\nOLED,176\n")
        dataset = await DataPipeline(energy_row).load(source)
        assert [r.category for r in dataset] == ["LCD", "LED", "OLED"]

    @pytest.mark.asyncio
    async def test_load_file(self, write_csv):
        source = write_csv("tech,energy\nLCD,100\nLED,\nOLED,176\n")
        dataset = await DataPipeline(energy_row).load(source)
        assert [r.value for r in dataset] == [100.0, 176.0]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError) as exc:
            await DataPipeline(energy_row).load(tmp_path / "nope.csv")
        assert "nope.csv" in str(exc.value)

    @pytest.mark.asyncio
    async def test_empty_file(self, write_csv):
        with pytest.raises(DataLoadError):
            await DataPipeline(energy_row).load(write_csv(""))

    @pytest.mark.asyncio
    async def test_binary_file(self, tmp_path):
        path = tmp_path / "blob.csv"
        path.write_bytes(b"\xff\xfe\x00\x81")
        with pytest.raises(DataLoadError, match="not a text file"):
            await DataPipeline(energy_row).load(str(path))

    @pytest.mark.asyncio
    async def test_load_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/energy.csv"
            return httpx.Response(200, text="tech,energy\nLCD,100\nOLED,176\n")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            dataset = await DataPipeline(energy_row, client=client).load("https://data.test/energy.csv")
        assert [r.category for r in dataset] == ["LCD", "OLED"]

    @pytest.mark.asyncio
    async def test_url_http_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(DataLoadError, match="HTTP 404"):
                await DataPipeline(energy_row, client=client).load("https://data.test/missing.csv")

    @pytest.mark.asyncio
    async def test_url_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(DataLoadError, match="unreachable"):
                await DataPipeline(energy_row, client=client).load("https://data.test/energy.csv")
