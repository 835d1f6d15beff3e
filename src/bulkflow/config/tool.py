"""客户端配置解析模块.

将声明式的配置字典校验并规范化为 ClientConfig。

使用示例:
    from bulkflow.config import resolve_config

    config = resolve_config(
        {
            "url": "http://localhost:9200",
            "type": "_doc",
            "index_prefix": "logs-",
            "retry": {"policy": "linear", "attempts": 5},
        }
    )
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .exceptions import ConfigurationError
from .models import (
    DEFAULT_ATTEMPTS,
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MAX_REQUESTS,
    DEFAULT_MAX_REQUESTS_PER_HOST,
    DEFAULT_REQUEST_TIMEOUT,
    BasicAuth,
    ClientConfig,
    DispatcherConfig,
    RetryConfig,
    RetryPolicy,
)

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("url", "type")


def _exists(config: Mapping[str, Any], key: str) -> bool:
    return config.get(key) is not None


def _as_int(config: Mapping[str, Any], key: str, default: int, *aliases: str) -> int:
    """按键名（及别名）读取整数配置."""
    for name in (key, *aliases):
        if _exists(config, name):
            value = config[name]
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"{name} 必须是整数，当前值: {value!r}") from e
    return default


def _as_mapping(config: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = config[key]
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{key} 必须是字典，当前类型: {type(value).__name__}")
    return value


def _resolve_index(config: Mapping[str, Any]) -> tuple[str, bool]:
    """解析索引目标，返回 (索引名或前缀, 是否为前缀)."""
    has_prefix = _exists(config, "index_prefix")
    has_index = _exists(config, "index")
    if not has_prefix and not has_index:
        raise ConfigurationError("缺少必需配置项: 需要 index 或 index_prefix 其中之一")
    if has_prefix and has_index:
        logger.warning(
            "同时配置了 index 和 index_prefix，使用 index_prefix: "
            f"{config['index_prefix']!r}，忽略 index: {config['index']!r}"
        )
    if has_prefix:
        return str(config["index_prefix"]), True
    return str(config["index"]), False


def _resolve_retry(config: Mapping[str, Any]) -> RetryConfig:
    retry = _as_mapping(config, "retry")
    if not _exists(retry, "policy"):
        raise ConfigurationError("retry 配置缺少必需项: policy")
    try:
        policy = RetryPolicy(str(retry["policy"]).lower())
    except ValueError as e:
        supported = ", ".join(p.value for p in RetryPolicy)
        raise ConfigurationError(
            f"不支持的重试策略: {retry['policy']!r}，支持: {supported}"
        ) from e
    return RetryConfig(
        policy=policy,
        attempts=_as_int(retry, "attempts", DEFAULT_ATTEMPTS),
        delay_ms=_as_int(retry, "delayMs", DEFAULT_DELAY_MS, "delay_ms"),
        max_delay_ms=_as_int(retry, "maxDelayMs", DEFAULT_MAX_DELAY_MS, "max_delay_ms"),
    )


def _resolve_dispatcher(config: Mapping[str, Any]) -> DispatcherConfig:
    dispatcher = _as_mapping(config, "dispatcher")
    max_requests = _as_int(dispatcher, "max_concurrent_requests", DEFAULT_MAX_REQUESTS)
    # 只配置总上限时，单主机上限与之相同
    per_host_default = (
        max_requests
        if _exists(dispatcher, "max_concurrent_requests")
        else DEFAULT_MAX_REQUESTS_PER_HOST
    )
    return DispatcherConfig(
        max_concurrent_requests=max_requests,
        max_concurrent_requests_per_host=_as_int(
            dispatcher, "max_concurrent_requests_per_host", per_host_default
        ),
        threadpool=dispatcher.get("threadpool"),
    )


def resolve_config(config: Mapping[str, Any]) -> ClientConfig:
    """校验并规范化客户端配置字典.

    Args:
        config: 声明式配置字典，支持的键见 ClientConfig

    Returns:
        ClientConfig 实例

    Raises:
        ConfigurationError: 缺少必需键或取值不合法
    """
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"配置必须是字典，当前类型: {type(config).__name__}")

    missing = [key for key in REQUIRED_KEYS if not _exists(config, key)]
    if missing:
        raise ConfigurationError(f"缺少必需配置项: {', '.join(missing)}")

    index, is_prefix = _resolve_index(config)

    basic_auth = None
    if _exists(config, "basic_auth"):
        basic_auth = BasicAuth.parse(config["basic_auth"])

    timeout = DEFAULT_REQUEST_TIMEOUT
    if _exists(config, "timeout"):
        try:
            timeout = float(config["timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"timeout 必须是数字，当前值: {config['timeout']!r}"
            ) from e

    return ClientConfig(
        url=str(config["url"]),
        type=str(config["type"]),
        index=index,
        is_prefix=is_prefix,
        document_id=config.get("document_id"),
        signer=config.get("signer"),
        basic_auth=basic_auth,
        timestamp_field=config.get("timestamp_field"),
        retry=_resolve_retry(config) if _exists(config, "retry") else None,
        dispatcher=(
            _resolve_dispatcher(config) if _exists(config, "dispatcher") else None
        ),
        request_timeout=timeout,
    )
