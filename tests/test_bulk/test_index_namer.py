"""索引名解析与文档ID模板单元测试."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from bulkflow.bulk.document_id import DocumentIdTemplate
from bulkflow.bulk.exceptions import IndexNameError
from bulkflow.bulk.index_namer import IndexNamer, parse_timestamp
from bulkflow.config import DocumentIdTemplateError
from bulkflow.events import JsonEvent

NOW = datetime(2024, 3, 5, 10, 30, tzinfo=UTC)


class TestIndexNamer:
    """IndexNamer 测试."""

    def test_fixed_index_returns_literal_name(self) -> None:
        """测试固定模式返回配置的索引名."""
        namer = IndexNamer("events")
        assert namer.resolve(JsonEvent({"message": "hi"}), NOW) == "events"

    def test_prefix_appends_date(self) -> None:
        """测试滚动模式拼接 yyyy.MM.dd 日期."""
        namer = IndexNamer("abc-", is_prefix=True)
        assert namer.resolve(JsonEvent({}), NOW) == "abc-2024.03.05"

    def test_prefix_uses_clock_when_now_not_given(self) -> None:
        """测试未传入时刻时使用注入的时钟."""
        namer = IndexNamer("abc-", is_prefix=True, now_func=lambda: NOW)
        assert namer.resolve(JsonEvent({})) == "abc-2024.03.05"

    def test_naive_clock_is_treated_as_utc(self) -> None:
        """测试 naive 时间视为 UTC."""
        namer = IndexNamer("abc-", is_prefix=True, now_func=lambda: datetime(2024, 1, 9))
        assert namer.resolve(JsonEvent({})) == "abc-2024.01.09"

    def test_timestamp_field_is_used(self) -> None:
        """测试按时间戳字段取日期."""
        namer = IndexNamer("abc-", is_prefix=True, timestamp_field="@timestamp")
        event = JsonEvent({"@timestamp": "2023-07-14T08:00:00Z"})
        assert namer.resolve(event, NOW) == "abc-2023.07.14"

    def test_timestamp_offset_is_converted_to_utc(self) -> None:
        """测试带时区偏移的时间戳按 UTC 取日期."""
        namer = IndexNamer("abc-", is_prefix=True, timestamp_field="ts")
        event = JsonEvent({"ts": "2024-03-05T23:30:00-02:00"})
        assert namer.resolve(event, NOW) == "abc-2024.03.06"

    def test_missing_timestamp_falls_back_to_now(self) -> None:
        """测试事件缺少时间戳字段时取当前时间."""
        namer = IndexNamer("abc-", is_prefix=True, timestamp_field="@timestamp")
        assert namer.resolve(JsonEvent({"message": "hi"}), NOW) == "abc-2024.03.05"

    def test_invalid_timestamp_raises_error(self) -> None:
        """测试无法解析的时间戳报错."""
        namer = IndexNamer("abc-", is_prefix=True, timestamp_field="@timestamp")
        with pytest.raises(IndexNameError):
            namer.resolve(JsonEvent({"@timestamp": "yesterday"}), NOW)

    def test_resolve_is_deterministic(self) -> None:
        """测试相同事件与时刻得到相同索引名."""
        namer = IndexNamer("abc-", is_prefix=True, timestamp_field="ts")
        event = JsonEvent({"message": "hi"})
        assert namer.resolve(event, NOW) == namer.resolve(event, NOW)


class TestParseTimestamp:
    """parse_timestamp 测试."""

    def test_epoch_seconds(self) -> None:
        """测试秒级时间戳."""
        assert parse_timestamp("1704067200") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_epoch_millis(self) -> None:
        """测试毫秒级时间戳."""
        assert parse_timestamp("1704067200000") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_iso_with_offset(self) -> None:
        """测试带偏移的 ISO 8601."""
        parsed = parse_timestamp("2024-01-01T08:00:00+08:00")
        assert parsed == datetime(2024, 1, 1, tzinfo=UTC)
        assert parsed.tzinfo == UTC

    def test_date_only(self) -> None:
        """测试纯日期."""
        assert parse_timestamp("2024-01-31") == datetime(2024, 1, 31, tzinfo=UTC)

    def test_aware_datetime_round_trip(self) -> None:
        """测试非 UTC 时区转换."""
        tz = timezone(timedelta(hours=-5))
        value = datetime(2024, 1, 1, 20, 0, tzinfo=tz).isoformat()
        assert parse_timestamp(value).date().isoformat() == "2024-01-02"


class TestDocumentIdTemplate:
    """DocumentIdTemplate 测试."""

    def test_single_placeholder(self) -> None:
        """测试单个占位符."""
        template = DocumentIdTemplate("{uuid}")
        assert template.render(JsonEvent({"uuid": "abc"})) == "abc"

    def test_multiple_placeholders_and_literals(self) -> None:
        """测试多个占位符与字面量混合."""
        template = DocumentIdTemplate("{host}/{seq}-x")
        assert template.fields == ("host", "seq")
        assert template.render(JsonEvent({"host": "web1", "seq": 7})) == "web1/7-x"

    def test_template_without_placeholders(self) -> None:
        """测试无占位符的模板原样返回."""
        assert DocumentIdTemplate("static").render(JsonEvent({})) == "static"

    def test_missing_field_raises_error(self) -> None:
        """测试字段缺失时报错而不是保留占位符."""
        template = DocumentIdTemplate("{uuid}")
        with pytest.raises(DocumentIdTemplateError, match="uuid"):
            template.render(JsonEvent({"message": "hi"}))

    def test_null_field_raises_error(self) -> None:
        """测试字段值为 None 视为缺失."""
        with pytest.raises(DocumentIdTemplateError):
            DocumentIdTemplate("{uuid}").render(JsonEvent({"uuid": None}))

    def test_empty_template_raises_error(self) -> None:
        """测试空模板报错."""
        with pytest.raises(DocumentIdTemplateError):
            DocumentIdTemplate("")
