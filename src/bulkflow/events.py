"""事件数据模型模块.

客户端只依赖事件的两种能力：按字段名读取字符串值（用于文档ID模板和时间戳提取），
以及序列化为 bulk 请求体中的文档行。
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Event(Protocol):
    """可被批量索引的事件协议."""

    def has(self, field: str) -> bool: ...

    def value_as_string(self, field: str) -> str: ...

    def to_json(self) -> bytes: ...


class JsonEvent:
    """基于字典的 JSON 事件.

    Args:
        data: 事件字段字典

    Examples:
        >>> event = JsonEvent({"message": "hello", "uuid": "42"})
        >>> event.value_as_string("uuid")
        '42'
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = dict(data)

    def has(self, field: str) -> bool:
        """判断字段是否存在且不为 None."""
        return self._data.get(field) is not None

    def value_as_string(self, field: str) -> str:
        """以字符串形式读取字段值.

        Raises:
            KeyError: 字段不存在
        """
        value = self._data[field]
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        return str(value)

    def to_json(self) -> bytes:
        """序列化为单行 JSON."""
        return json.dumps(self._data, ensure_ascii=False, separators=(",", ":")).encode(
            "utf-8"
        )

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonEvent):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"JsonEvent({self._data!r})"
