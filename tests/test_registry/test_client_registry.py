"""ClientRegistry 单元测试.

覆盖身份计算、缓存命中、不重新配置已有实例以及并发构建时只创建一个实例。
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest

from bulkflow.bulk import BulkClient
from bulkflow.config import ConfigurationError, resolve_config
from bulkflow.registry import ClientIdentity, ClientRegistry, of_parameters


URL = "http://localhost:9200"


@pytest.fixture
def factory() -> MagicMock:
    """每次调用返回一个新对象的客户端工厂."""
    return MagicMock(side_effect=lambda config: MagicMock(config=config))


@pytest.fixture
def registry(factory) -> ClientRegistry:
    return ClientRegistry(client_factory=factory)


class TestClientIdentity:
    """ClientIdentity 测试."""

    def test_identity_from_config(self) -> None:
        """测试由配置计算身份."""
        config = resolve_config({"url": URL, "type": "_doc", "index_prefix": "logs-"})
        assert ClientIdentity.of(config) == ClientIdentity(URL, "logs-", True)

    def test_identity_is_hashable_and_immutable(self) -> None:
        """测试身份可哈希且不可修改."""
        identity = ClientIdentity(URL, "logs", False)
        assert {identity: 1}[ClientIdentity(URL, "logs", False)] == 1
        with pytest.raises(AttributeError):
            identity.url = "http://other:9200"


class TestOfParameters:
    """of_parameters 测试."""

    def test_same_identity_returns_same_instance(self, registry, factory) -> None:
        """测试相同身份返回同一实例."""
        a = registry.of_parameters({"url": URL, "type": "_doc", "index": "logs"})
        b = registry.of_parameters({"url": URL, "type": "_doc", "index": "logs"})
        assert a is b
        assert factory.call_count == 1
        assert len(registry) == 1

    @pytest.mark.parametrize(
        "other",
        [
            {"url": "http://other:9200", "type": "_doc", "index": "logs"},
            {"url": URL, "type": "_doc", "index": "metrics"},
            {"url": URL, "type": "_doc", "index_prefix": "logs"},
        ],
    )
    def test_different_identity_returns_new_instance(self, registry, other) -> None:
        """测试身份任一部分不同都返回新实例."""
        a = registry.of_parameters({"url": URL, "type": "_doc", "index": "logs"})
        b = registry.of_parameters(other)
        assert a is not b
        assert len(registry) == 2

    def test_cached_instance_is_not_reconfigured(self, registry, factory) -> None:
        """测试命中缓存时不会用新的认证或重试配置重新配置."""
        first = registry.of_parameters({"url": URL, "type": "_doc", "index": "logs"})
        second = registry.of_parameters(
            {
                "url": URL,
                "type": "_doc",
                "index": "logs",
                "basic_auth": "elastic:changeme",
                "retry": {"policy": "fixed", "attempts": 3},
            }
        )
        assert second is first
        assert second.config.basic_auth is None
        assert second.config.retry is None
        assert factory.call_count == 1

    def test_index_prefix_precedence_shares_identity(self, registry) -> None:
        """测试同时配置 index 与 index_prefix 时按前缀计算身份."""
        a = registry.of_parameters(
            {"url": URL, "type": "_doc", "index": "logs", "index_prefix": "logs-"}
        )
        b = registry.of_parameters({"url": URL, "type": "_doc", "index_prefix": "logs-"})
        assert a is b
        assert ClientIdentity(URL, "logs-", True) in registry
        assert registry.get(ClientIdentity(URL, "logs-", True)) is a

    def test_accepts_resolved_config(self, registry) -> None:
        """测试接受已解析的 ClientConfig."""
        config = resolve_config({"url": URL, "type": "_doc", "index": "logs"})
        assert registry.of_parameters(config) is registry.of_parameters(config)

    def test_invalid_config_raises_and_caches_nothing(self, registry, factory) -> None:
        """测试配置不合法时报错且不缓存."""
        with pytest.raises(ConfigurationError):
            registry.of_parameters({"url": URL, "index": "logs"})
        assert len(registry) == 0
        factory.assert_not_called()

    def test_concurrent_construction_creates_one_instance(self) -> None:
        """测试并发请求同一新身份时只构建一个实例."""
        calls = []
        lock = threading.Lock()

        def slow_factory(config):
            with lock:
                calls.append(config)
            time.sleep(0.05)
            return MagicMock(config=config)

        registry = ClientRegistry(client_factory=slow_factory)
        config = {"url": URL, "type": "_doc", "index_prefix": "race-"}

        with ThreadPoolExecutor(max_workers=16) as pool:
            clients = list(pool.map(lambda _: registry.of_parameters(config), range(16)))

        assert len(calls) == 1
        assert all(client is clients[0] for client in clients)


class TestDefaultRegistry:
    """进程级默认注册表测试."""

    @patch("bulkflow.bulk.tool.Elasticsearch")
    def test_default_registry_builds_bulk_client(self, mock_es) -> None:
        """测试默认注册表构建 BulkClient 并缓存."""
        config = {"url": "http://default-registry:9200", "type": "_doc", "index": "logs"}
        client = of_parameters(config)
        try:
            assert isinstance(client, BulkClient)
            assert of_parameters(config) is client
            mock_es.assert_called_once()
        finally:
            client.dispatcher.shutdown(wait=False)
