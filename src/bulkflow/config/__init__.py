"""客户端配置模块 - 将声明式配置字典解析为类型化的客户端配置.

主要组件:
    - resolve_config: 配置解析入口
    - ClientConfig: 客户端配置模型
    - RetryConfig / RetryPolicy: 重试配置
    - DispatcherConfig: 并发调度配置
    - BasicAuth: Basic Auth 凭据
"""

from .exceptions import ConfigurationError, DocumentIdTemplateError
from .models import (
    BasicAuth,
    ClientConfig,
    DispatcherConfig,
    RetryConfig,
    RetryPolicy,
)
from .tool import resolve_config

__all__ = [
    # 解析
    "resolve_config",
    # 模型
    "ClientConfig",
    "RetryConfig",
    "RetryPolicy",
    "DispatcherConfig",
    "BasicAuth",
    # 异常
    "ConfigurationError",
    "DocumentIdTemplateError",
]
