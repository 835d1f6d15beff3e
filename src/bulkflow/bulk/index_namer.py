"""索引名解析模块.

固定模式直接返回配置的索引名；滚动模式在前缀后拼接 ``yyyy.MM.dd`` 格式的日期，
日期取自事件的时间戳字段，未配置或事件中缺失该字段时取当前时间。日期统一按 UTC 计算。
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from ..events import Event
from .exceptions import IndexNameError

INDEX_DATE_FORMAT = "%Y.%m.%d"


class IndexNamer:
    """事件到索引名的映射.

    Args:
        index: 固定索引名或滚动索引前缀
        is_prefix: index 是否为滚动前缀
        timestamp_field: 用于取日期的事件字段
        now_func: 自定义获取当前时间的函数，主要用于测试

    Examples:
        >>> namer = IndexNamer("logs-", is_prefix=True)
        >>> namer.resolve(event, now=datetime(2024, 1, 31, tzinfo=UTC))
        'logs-2024.01.31'
    """

    def __init__(
        self,
        index: str,
        is_prefix: bool = False,
        timestamp_field: str | None = None,
        now_func: Callable[[], datetime] | None = None,
    ) -> None:
        self.index = index
        self.is_prefix = is_prefix
        self.timestamp_field = timestamp_field
        self._now_func = now_func

    def now(self) -> datetime:
        """获取当前时间（UTC）."""
        if self._now_func is not None:
            return _to_utc(self._now_func())
        return datetime.now(tz=UTC)

    def resolve(self, event: Event, now: datetime | None = None) -> str:
        """解析事件应写入的索引名.

        Args:
            event: 待写入的事件
            now: 当前时间，未指定时调用时钟；同一批次应传入同一时刻

        Returns:
            索引名

        Raises:
            IndexNameError: 时间戳字段无法解析
        """
        if not self.is_prefix:
            return self.index
        return self.index + self._event_date(event, now).strftime(INDEX_DATE_FORMAT)

    def _event_date(self, event: Event, now: datetime | None) -> datetime:
        if self.timestamp_field and event.has(self.timestamp_field):
            return parse_timestamp(event.value_as_string(self.timestamp_field))
        return _to_utc(now) if now is not None else self.now()


def _to_utc(dt: datetime) -> datetime:
    # naive datetime 视为 UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_timestamp(value: str) -> datetime:
    """解析事件时间戳为 UTC datetime.

    支持 ISO 8601 字符串（可带 Z 或时区偏移）以及秒级或毫秒级数字时间戳。

    Raises:
        IndexNameError: 无法解析
    """
    text = value.strip()
    if text.isdigit():
        timestamp = int(text)
        # 毫秒级时间戳（> 1e12 认为是毫秒）
        if timestamp > 1e12:
            timestamp = timestamp / 1000
        try:
            return datetime.fromtimestamp(timestamp, tz=UTC)
        except (ValueError, OSError, OverflowError) as e:
            raise IndexNameError(f"无效的时间戳: {value!r}，错误: {e}") from e
    try:
        return _to_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise IndexNameError(
            f"无法解析时间戳: {value!r}，支持 ISO 8601 (如 '2024-01-01T00:00:00Z') 和数字时间戳"
        ) from e
