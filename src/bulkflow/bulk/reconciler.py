"""bulk 响应解析模块.

把 bulk 响应体中的 items 按顺序与提交的事件一一对应。服务端回报的条目少于提交的
文档数时，缺失部分补为失败条目并记录缺失数量，成功数只统计服务端明确回报成功的文档。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..events import Event
from .models import NOT_REPORTED, BulkEntryError, BulkResponse, BulkResponseEntry

logger = logging.getLogger(__name__)


def _parse_error(error: Any) -> BulkEntryError:
    """解析单个文档的错误信息."""
    if not isinstance(error, Mapping):
        return BulkEntryError(error_type="unknown", reason=str(error))

    caused_by = None
    if "caused_by" in error:
        caused_by_info = error["caused_by"]
        if isinstance(caused_by_info, Mapping):
            caused_by = (
                f"{caused_by_info.get('type', '')}: {caused_by_info.get('reason', '')}"
            )
        else:
            caused_by = str(caused_by_info)

    return BulkEntryError(
        error_type=error.get("type", "unknown"),
        reason=error.get("reason", "unknown error"),
        caused_by=caused_by,
    )


def _parse_item(item: Any, event: Event, index_name: str | None) -> BulkResponseEntry:
    """解析单个 items 元素，格式为 {操作类型: 结果}."""
    if not isinstance(item, Mapping) or len(item) != 1:
        return BulkResponseEntry(
            event=event,
            operation=None,
            index_name=index_name,
            success=False,
            error=BulkEntryError(
                error_type="malformed_item", reason=f"无法解析的响应条目: {item!r}"
            ),
        )

    operation, result = next(iter(item.items()))
    if not isinstance(result, Mapping):
        result = {}

    version = result.get("_version")
    error = _parse_error(result["error"]) if result.get("error") else None
    raw_status = result.get("status", 0)
    try:
        status = int(raw_status or 0)
    except (TypeError, ValueError):
        logger.warning(f"bulk 响应条目状态码无法解析: {raw_status!r}")
        status = 0
        if error is None:
            error = BulkEntryError(
                error_type="malformed_item", reason=f"无法解析的状态码: {raw_status!r}"
            )

    return BulkResponseEntry(
        event=event,
        operation=operation,
        index_name=result.get("_index", index_name),
        doc_id=result.get("_id"),
        version=str(version) if version is not None else None,
        status=status,
        success=error is None and 200 <= status < 300,
        error=error,
    )


def reconcile(
    body: Mapping[str, Any],
    events: Sequence[Event],
    index_names: Sequence[str] | None = None,
    attempts: int = 1,
    took: float = 0.0,
) -> BulkResponse:
    """解析 bulk 响应体并与提交的事件对应.

    Args:
        body: bulk 响应体
        events: 按提交顺序排列的事件
        index_names: 每个事件提交时的目标索引，用于填充未回报的条目
        attempts: 实际发送请求的次数
        took: 整批耗时（秒）

    Returns:
        与 events 等长、顺序一致的 BulkResponse
    """
    items = body.get("items") if isinstance(body, Mapping) else None
    if not isinstance(items, list):
        logger.warning(f"bulk 响应缺少 items 字段，{len(events)} 个文档均未回报结果")
        items = []

    if len(items) > len(events):
        logger.warning(
            f"bulk 响应条目数多于提交的文档数: {len(items)} > {len(events)}，多余条目已忽略"
        )

    entries: list[BulkResponseEntry] = []
    for i, event in enumerate(events):
        index_name = index_names[i] if index_names is not None else None
        if i < len(items):
            entries.append(_parse_item(items[i], event, index_name))
        else:
            entries.append(
                BulkResponseEntry(
                    event=event,
                    operation=None,
                    index_name=index_name,
                    success=False,
                    reported=False,
                    error=BulkEntryError(
                        error_type=NOT_REPORTED, reason="服务端未回报该文档的写入结果"
                    ),
                )
            )

    missing_count = max(0, len(events) - len(items))
    if missing_count:
        logger.warning(
            f"bulk 响应条目数少于提交的文档数: 提交 {len(events)}，"
            f"回报 {len(items)}，缺失 {missing_count}"
        )

    return BulkResponse(
        entries=entries,
        took=took,
        attempts=attempts,
        missing_count=missing_count,
    )
