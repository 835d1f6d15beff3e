"""客户端注册表模块 - 按身份缓存 BulkClient，避免重复创建连接池.

主要组件:
    - ClientRegistry: 客户端注册表
    - ClientIdentity: 缓存键 (url, index, is_prefix)
    - of_parameters: 进程级默认注册表入口
"""

from .models import ClientIdentity
from .tool import ClientRegistry, of_parameters

__all__ = [
    "ClientRegistry",
    "ClientIdentity",
    "of_parameters",
]
