"""请求认证模块.

Basic Auth 直接交给 Elasticsearch 客户端处理；签名认证（例如 AWS SigV4）通过
RequestSigner 在每次发送前对请求签名，签名结果以请求头的形式附加。

签名覆盖的方法、路径和请求头必须与实际发出的请求一致：签名模式下 bulk 请求固定为
POST，content-type 与 accept 直接使用 8.x 客户端的兼容模式取值，客户端不会再改写。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable
from urllib.parse import urlsplit

from .exceptions import BulkDeliveryError

BULK_METHOD = "POST"
BULK_PATH = "/_bulk"
BULK_CONTENT_TYPE = "application/vnd.elasticsearch+x-ndjson; compatible-with=8"
BULK_ACCEPT = "application/vnd.elasticsearch+json; compatible-with=8"


@runtime_checkable
class RequestSigner(Protocol):
    """请求签名器协议.

    sign 接收即将发送的请求，返回需要附加到请求上的签名头。
    """

    def sign(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
    ) -> Mapping[str, str]: ...


def bulk_headers(url: str) -> dict[str, str]:
    """bulk 请求实际发送的请求头（签名前）."""
    return {
        "content-type": BULK_CONTENT_TYPE,
        "accept": BULK_ACCEPT,
        "host": urlsplit(url).netloc,
    }


def signed_headers(signer: RequestSigner, url: str, body: bytes) -> dict[str, str]:
    """对 bulk 请求签名并返回完整的请求头.

    Args:
        signer: 请求签名器
        url: bulk 端点完整地址
        body: 请求体

    Returns:
        包含签名的请求头字典

    Raises:
        BulkDeliveryError: 签名失败或签名结果不合法
    """
    headers = bulk_headers(url)
    try:
        signature = signer.sign(BULK_METHOD, url, dict(headers), body)
    except Exception as e:
        raise BulkDeliveryError(f"请求签名失败: {e}") from e
    if not isinstance(signature, Mapping):
        raise BulkDeliveryError(
            f"签名器必须返回请求头字典，实际返回: {type(signature).__name__}"
        )
    headers.update({str(k): str(v) for k, v in signature.items()})
    return headers
