"""批量写入模块.

该模块提供把事件批量写入 Elasticsearch 的客户端，包括：
- 固定索引与按日期滚动的索引名解析
- 基于事件字段的文档ID模板
- Basic Auth 与请求签名认证
- 并发受限的请求调度与整批重试
- 逐文档的响应解析与部分失败统计

示例用法:
    >>> from bulkflow.bulk import BulkClient
    >>> from bulkflow.config import resolve_config
    >>> client = BulkClient(resolve_config({"url": url, "type": "_doc", "index": "logs"}))
    >>> response = client.post(events).result()
    >>> print(f"成功: {response.success}, 失败: {response.failed}")
"""

from .auth import RequestSigner
from .dispatcher import Dispatcher
from .document_id import DocumentIdTemplate
from .exceptions import (
    BulkCancelledError,
    BulkDeliveryError,
    BulkOperationError,
    BulkRetryExhaustedError,
    IndexNameError,
)
from .index_namer import IndexNamer
from .models import BulkEntryError, BulkResponse, BulkResponseEntry
from .reconciler import reconcile
from .retry import RetryTimer
from .tool import BulkClient, BulkFuture

__all__ = [
    "BulkClient",
    "BulkFuture",
    "BulkResponse",
    "BulkResponseEntry",
    "BulkEntryError",
    "Dispatcher",
    "DocumentIdTemplate",
    "IndexNamer",
    "RequestSigner",
    "RetryTimer",
    "reconcile",
    "BulkOperationError",
    "BulkDeliveryError",
    "BulkRetryExhaustedError",
    "BulkCancelledError",
    "IndexNameError",
]
