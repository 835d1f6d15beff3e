"""批量写入数据模型定义模块."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from ..events import Event

NOT_REPORTED = "not_reported"


@dataclass
class BulkEntryError:
    """单个文档的写入错误.

    Attributes:
        error_type: 错误类型，例如 mapper_parsing_exception
        reason: 错误原因
        caused_by: 根本原因
    """

    error_type: str
    reason: str
    caused_by: str | None = None


@dataclass
class BulkResponseEntry:
    """单个文档的写入结果.

    Attributes:
        event: 对应的原始事件
        operation: 操作类型（index 或 update），未回报时为 None
        index_name: 实际写入的索引名
        doc_id: 文档ID
        version: 文档版本号，首次写入为 "1"，此后每次写入递增
        status: 文档级 HTTP 状态码
        success: 是否写入成功
        error: 错误详情
        reported: 服务端是否回报了该文档的结果
    """

    event: Event
    operation: str | None
    index_name: str | None
    doc_id: str | None = None
    version: str | None = None
    status: int = 0
    success: bool = False
    error: BulkEntryError | None = None
    reported: bool = True


@dataclass
class BulkResponse:
    """一次批量写入的结果.

    entries 与提交的事件一一对应且顺序一致。服务端回报的结果少于提交的文档数时，
    缺失部分以 reported=False 的失败条目补齐，missing_count 记录缺失数量。

    Attributes:
        entries: 按提交顺序排列的文档结果
        took: 整批耗时（秒，含重试）
        attempts: 实际发送请求的次数
        missing_count: 服务端未回报结果的文档数
    """

    entries: list[BulkResponseEntry] = field(default_factory=list)
    took: float = 0.0
    attempts: int = 0
    missing_count: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BulkResponseEntry]:
        return iter(self.entries)

    @property
    def total(self) -> int:
        """提交的文档总数."""
        return len(self.entries)

    @property
    def success(self) -> int:
        """服务端明确回报成功的文档数."""
        return sum(1 for entry in self.entries if entry.success)

    def count(self) -> int:
        """成功写入的文档数，与 success 相同."""
        return self.success

    @property
    def failed(self) -> int:
        """失败（含未回报）的文档数."""
        return self.total - self.success

    def index_names(self) -> set[str]:
        """写入涉及的索引名集合."""
        return {
            entry.index_name
            for entry in self.entries
            if entry.reported and entry.index_name
        }

    def types(self) -> set[str]:
        """服务端回报的操作类型集合."""
        return {entry.operation for entry in self.entries if entry.operation}

    def versions(self) -> set[str]:
        """服务端回报的文档版本集合."""
        return {entry.version for entry in self.entries if entry.version is not None}

    def events(self) -> list[Event]:
        """按提交顺序返回原始事件."""
        return [entry.event for entry in self.entries]

    def failed_entries(self) -> list[BulkResponseEntry]:
        return [entry for entry in self.entries if not entry.success]

    def is_complete(self) -> bool:
        """判断服务端是否回报了全部文档的结果."""
        return self.missing_count == 0

    def is_success(self) -> bool:
        """判断是否全部写入成功."""
        return self.failed == 0

    def get_error_summary(self) -> str:
        """获取错误摘要."""
        failed = self.failed_entries()
        if not failed:
            return "No errors"
        summary = f"Total errors: {len(failed)}\n"
        for i, entry in enumerate(failed[:10], 1):  # 只显示前10个错误
            reason = entry.error.reason if entry.error else "unknown error"
            summary += (
                f"{i}. [{entry.operation or 'unknown'}] "
                f"Index: {entry.index_name}, DocID: {entry.doc_id}, "
                f"Status: {entry.status}, Reason: {reason}\n"
            )
        if len(failed) > 10:
            summary += f"... and {len(failed) - 10} more errors\n"
        return summary
