"""bulkflow - Elasticsearch 批量事件写入客户端.

这是一个在日志/事件处理管道中把大量小事件批量写入 Elasticsearch 的 Python 库。

主要功能:
    - resolve_config: 校验并解析声明式配置
    - of_parameters / ClientRegistry: 按身份缓存客户端
    - BulkClient: 批量写入、认证、重试、并发控制与响应解析

使用示例:
    from bulkflow import JsonEvent, of_parameters

    client = of_parameters(
        {"url": "http://localhost:9200", "type": "_doc", "index_prefix": "logs-"}
    )
    response = client.post([JsonEvent({"message": "hello"})]).result()
"""

__version__ = "0.1.0"

# 导出批量写入客户端
from bulkflow.bulk import (
    BulkClient,
    BulkFuture,
    BulkResponse,
    BulkResponseEntry,
    RequestSigner,
)

# 导出异常
from bulkflow.bulk.exceptions import (
    BulkCancelledError,
    BulkDeliveryError,
    BulkOperationError,
    BulkRetryExhaustedError,
    IndexNameError,
)

# 导出配置
from bulkflow.config import (
    ClientConfig,
    ConfigurationError,
    DocumentIdTemplateError,
    resolve_config,
)

# 导出事件模型
from bulkflow.events import Event, JsonEvent
from bulkflow.exceptions import BulkflowError

# 导出注册表
from bulkflow.registry import ClientIdentity, ClientRegistry, of_parameters

__all__ = [
    # 版本
    "__version__",
    # 客户端
    "BulkClient",
    "BulkFuture",
    "BulkResponse",
    "BulkResponseEntry",
    "RequestSigner",
    # 配置
    "ClientConfig",
    "resolve_config",
    # 注册表
    "ClientRegistry",
    "ClientIdentity",
    "of_parameters",
    # 事件
    "Event",
    "JsonEvent",
    # 异常
    "BulkflowError",
    "ConfigurationError",
    "DocumentIdTemplateError",
    "BulkOperationError",
    "BulkDeliveryError",
    "BulkRetryExhaustedError",
    "BulkCancelledError",
    "IndexNameError",
]
