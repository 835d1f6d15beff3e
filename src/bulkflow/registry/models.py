"""客户端注册表数据模型定义模块."""

from __future__ import annotations

from dataclasses import dataclass

from ..config.models import ClientConfig


@dataclass(frozen=True)
class ClientIdentity:
    """客户端身份，作为注册表的缓存键.

    Attributes:
        url: ES 服务地址
        index: 固定索引名或滚动索引前缀
        is_prefix: index 是否为滚动前缀
    """

    url: str
    index: str
    is_prefix: bool

    @classmethod
    def of(cls, config: ClientConfig) -> ClientIdentity:
        return cls(url=config.url, index=config.index, is_prefix=config.is_prefix)
