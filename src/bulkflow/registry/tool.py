"""客户端注册表模块.

保证每个 (url, index, is_prefix) 身份在进程内至多只有一个 BulkClient，
重复的配置复用同一个客户端及其连接池。

使用示例:
    from bulkflow.registry import ClientRegistry

    registry = ClientRegistry()
    client = registry.of_parameters(
        {"url": "http://localhost:9200", "type": "_doc", "index": "logs"}
    )
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from ..bulk.tool import BulkClient
from ..config.models import ClientConfig
from ..config.tool import resolve_config
from .models import ClientIdentity

logger = logging.getLogger(__name__)


class ClientRegistry:
    """BulkClient 注册表.

    命中缓存时直接返回已有实例，不会用新配置重新配置它；未命中时在注册表级别的锁内
    构建，并发请求同一新身份的调用方拿到同一个实例。注册表不淘汰实例。

    Args:
        client_factory: 根据 ClientConfig 构建客户端的函数，默认为 BulkClient

    Examples:
        >>> registry = ClientRegistry()
        >>> a = registry.of_parameters({"url": url, "type": "_doc", "index": "logs"})
        >>> b = registry.of_parameters({"url": url, "type": "_doc", "index": "logs"})
        >>> a is b
        True
    """

    def __init__(
        self, client_factory: Callable[[ClientConfig], BulkClient] | None = None
    ) -> None:
        self._client_factory = client_factory or BulkClient
        self._clients: dict[ClientIdentity, BulkClient] = {}
        self._lock = threading.Lock()

    def of_parameters(self, config: Mapping[str, Any] | ClientConfig) -> BulkClient:
        """获取配置对应的客户端.

        Args:
            config: 配置字典或已解析的 ClientConfig

        Returns:
            BulkClient 实例

        Raises:
            ConfigurationError: 配置不合法
        """
        if not isinstance(config, ClientConfig):
            config = resolve_config(config)
        identity = ClientIdentity.of(config)

        with self._lock:
            client = self._clients.get(identity)
            if client is not None:
                logger.debug(f"使用缓存的客户端: {identity}")
                return client
            logger.debug(f"创建新的客户端: {identity}")
            client = self._client_factory(config)
            self._clients[identity] = client
            return client

    def get(self, identity: ClientIdentity) -> BulkClient | None:
        with self._lock:
            return self._clients.get(identity)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._clients

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)


_default_registry = ClientRegistry()


def of_parameters(config: Mapping[str, Any] | ClientConfig) -> BulkClient:
    """从进程级默认注册表获取客户端."""
    return _default_registry.of_parameters(config)
