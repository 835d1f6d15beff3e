"""客户端配置数据模型定义模块.

提供客户端构建所需的配置模型，包括：
- RetryPolicy: 重试退避策略枚举
- RetryConfig: 重试配置
- DispatcherConfig: 并发调度配置
- BasicAuth: Basic Auth 凭据
- ClientConfig: 完整的客户端配置
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 20
DEFAULT_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 60000
DEFAULT_MAX_REQUESTS = 64
DEFAULT_MAX_REQUESTS_PER_HOST = 5
DEFAULT_REQUEST_TIMEOUT = 30.0

# 客户端面向 Elasticsearch 8.x，映射类型只剩 _doc
DOCUMENT_TYPE = "_doc"


class RetryPolicy(str, Enum):
    """重试退避策略.

    Attributes:
        FIXED: 每次等待固定时长
        LINEAR: 等待时长随尝试次数线性增长
        EXPONENTIAL: 等待时长随尝试次数指数增长
    """

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryConfig:
    """重试配置模型.

    Attributes:
        policy: 退避策略
        attempts: 最大尝试次数（含首次），默认 20
        delay_ms: 基础等待时长（毫秒），默认 1000
        max_delay_ms: 单次等待上限（毫秒），默认 60000

    Raises:
        ConfigurationError: 当参数不合法时抛出
    """

    policy: RetryPolicy = RetryPolicy.LINEAR
    attempts: int = DEFAULT_ATTEMPTS
    delay_ms: int = DEFAULT_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS

    def __post_init__(self) -> None:
        """校验重试配置参数合法性."""
        if self.attempts < 1:
            raise ConfigurationError(f"retry.attempts 必须 >= 1，当前值: {self.attempts}")
        if self.delay_ms < 0:
            raise ConfigurationError(f"retry.delayMs 必须 >= 0，当前值: {self.delay_ms}")
        if self.max_delay_ms < self.delay_ms:
            raise ConfigurationError(
                f"retry.maxDelayMs 不能小于 delayMs: {self.max_delay_ms} < {self.delay_ms}"
            )


@dataclass(frozen=True)
class DispatcherConfig:
    """并发调度配置模型.

    Attributes:
        max_concurrent_requests: 同时在途的最大请求数，默认 64
        max_concurrent_requests_per_host: 单个目标主机同时在途的最大请求数，默认 5
        threadpool: 自定义执行器，为 None 时按 max_concurrent_requests 创建线程池

    Raises:
        ConfigurationError: 当参数不合法时抛出
    """

    max_concurrent_requests: int = DEFAULT_MAX_REQUESTS
    max_concurrent_requests_per_host: int = DEFAULT_MAX_REQUESTS_PER_HOST
    threadpool: Executor | None = None

    def __post_init__(self) -> None:
        """校验调度配置参数合法性."""
        if self.max_concurrent_requests < 1:
            raise ConfigurationError(
                f"max_concurrent_requests 必须 >= 1，当前值: {self.max_concurrent_requests}"
            )
        if self.max_concurrent_requests_per_host < 1:
            raise ConfigurationError(
                "max_concurrent_requests_per_host 必须 >= 1，"
                f"当前值: {self.max_concurrent_requests_per_host}"
            )
        if self.threadpool is not None and not callable(
            getattr(self.threadpool, "submit", None)
        ):
            raise ConfigurationError(
                f"threadpool 必须是 Executor 实例，当前类型: {type(self.threadpool).__name__}"
            )


@dataclass(frozen=True)
class BasicAuth:
    """Basic Auth 凭据.

    Attributes:
        username: 用户名
        password: 密码
    """

    username: str
    password: str

    @classmethod
    def parse(cls, value: str) -> BasicAuth:
        """解析 ``user:password`` 格式的凭据字符串.

        密码取第一个冒号之后的全部内容，因此密码本身可以包含冒号。

        Raises:
            ConfigurationError: 格式不合法
        """
        if not isinstance(value, str) or ":" not in value:
            raise ConfigurationError(
                f"basic_auth 格式不合法，期望 'user:password'，实际为: {value!r}"
            )
        username, _, password = value.partition(":")
        if not username:
            raise ConfigurationError(
                f"basic_auth 格式不合法，用户名不能为空: {value!r}"
            )
        return cls(username=username, password=password)

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ClientConfig:
    """批量客户端配置模型.

    固定索引与滚动前缀通过 is_prefix 区分：is_prefix 为 True 时 index 是前缀，
    实际索引名为前缀加日期。signer 与 basic_auth 互斥，同时配置时 signer 优先，
    basic_auth 被丢弃并记录警告。

    Attributes:
        url: ES 服务地址（必需）
        type: 文档类型（必需），8.x 下只能为 "_doc"
        index: 固定索引名或滚动索引前缀（必需）
        is_prefix: index 是否为滚动前缀，默认 False
        document_id: 文档ID模板，例如 "{uuid}"
        signer: 请求签名器，需提供 sign(method, url, headers, body) 方法
        basic_auth: Basic Auth 凭据
        timestamp_field: 滚动索引取日期所用的事件字段，未配置时使用当前时间
        retry: 重试配置，为 None 时不重试
        dispatcher: 并发调度配置，为 None 时使用默认限制
        request_timeout: 单次请求超时时间（秒），默认 30

    Raises:
        ConfigurationError: 当参数不合法时抛出

    Examples:
        >>> config = ClientConfig(
        ...     url="http://localhost:9200",
        ...     type="_doc",
        ...     index="logs-",
        ...     is_prefix=True,
        ...     document_id="{uuid}",
        ... )
    """

    url: str
    type: str
    index: str
    is_prefix: bool = False
    document_id: str | None = None
    signer: Any = None
    basic_auth: BasicAuth | None = None
    timestamp_field: str | None = None
    retry: RetryConfig | None = None
    dispatcher: DispatcherConfig | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        """校验客户端配置并处理认证方式优先级."""
        for name in ("url", "type", "index"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"{name} 必须是非空字符串，当前值: {value!r}")
        if self.type != DOCUMENT_TYPE:
            raise ConfigurationError(
                f"type 只支持 {DOCUMENT_TYPE!r}（Elasticsearch 8.x 已移除映射类型），"
                f"当前值: {self.type!r}"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"timeout 必须 > 0，当前值: {self.request_timeout}"
            )
        if self.signer is not None and not callable(getattr(self.signer, "sign", None)):
            raise ConfigurationError(
                f"signer 必须提供 sign 方法，当前类型: {type(self.signer).__name__}"
            )
        if self.signer is not None and self.basic_auth is not None:
            logger.warning("客户端不能同时使用签名认证和 Basic Auth，已禁用 Basic Auth")
            object.__setattr__(self, "basic_auth", None)

    @property
    def max_attempts(self) -> int:
        """最大尝试次数，未配置重试时为 1."""
        return self.retry.attempts if self.retry is not None else 1
