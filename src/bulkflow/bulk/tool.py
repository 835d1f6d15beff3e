"""批量写入客户端核心模块."""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import CancelledError, Future
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError
from elasticsearch.exceptions import ConnectionError as ESConnectionError
from elasticsearch.exceptions import ConnectionTimeout, TransportError

from ..config.models import ClientConfig
from ..events import Event
from .auth import BULK_METHOD, BULK_PATH, signed_headers
from .dispatcher import Dispatcher
from .document_id import DocumentIdTemplate
from .exceptions import (
    BulkCancelledError,
    BulkDeliveryError,
    BulkRetryExhaustedError,
)
from .index_namer import IndexNamer
from .models import BulkResponse
from .reconciler import reconcile
from .retry import RetryTimer

logger = logging.getLogger(__name__)


def _is_transient(error: Exception) -> bool:
    """判断异常是否可以通过重试恢复（连接失败、超时、429、5xx）."""
    if isinstance(error, (ESConnectionError, ConnectionTimeout)):
        return True
    if isinstance(error, ApiError):
        status = error.status_code
        return status == 429 or status >= 500
    return False


class BulkFuture:
    """一次 post 调用的结果句柄.

    完成时恰好产生一个结果：BulkResponse 或整批失败的异常。cancel() 会尽力中止
    尚未完成的投递，已观察到取消的重试循环不会再发送请求；已在发送中的请求仍会完成，
    其结果照常交付。
    """

    def __init__(self, future: Future, cancel_event: threading.Event) -> None:
        self._future = future
        self._cancel_event = cancel_event

    def cancel(self) -> bool:
        """请求取消.

        Returns:
            已完成时返回 False；否则返回 True，表示取消请求已登记。投递是否真正
            中止以 cancelled() 为准。
        """
        if self._future.done():
            return False
        self._cancel_event.set()
        self._future.cancel()
        return True

    def cancelled(self) -> bool:
        """投递是否因取消而中止."""
        if self._future.cancelled():
            return True
        if not self._future.done():
            return False
        return isinstance(self._future.exception(), BulkCancelledError)

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> BulkResponse:
        """等待并返回写入结果.

        Raises:
            CancelledError: 调用已被取消
            BulkDeliveryError: 整批投递失败
        """
        try:
            return self._future.result(timeout)
        except BulkCancelledError as e:
            raise CancelledError() from e

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """等待并返回整批失败的异常，成功时返回 None.

        Raises:
            CancelledError: 调用已被取消
        """
        error = self._future.exception(timeout)
        if isinstance(error, BulkCancelledError):
            raise CancelledError() from error
        return error

    def add_done_callback(self, fn: Callable[[BulkFuture], Any]) -> None:
        self._future.add_done_callback(lambda _: fn(self))


class BulkClient:
    """Elasticsearch 批量写入客户端.

    持有一个 Elasticsearch 客户端，负责索引名解析、文档ID模板、认证、重试和响应解析。
    构建后配置不再变化，可在多个线程间共享并发调用 post。

    Args:
        config: 客户端配置
        es_client: 自定义 Elasticsearch 客户端，默认按配置创建
        now_func: 自定义获取当前时间的函数，主要用于测试

    Examples:
        >>> client = BulkClient(
        ...     ClientConfig(url="http://localhost:9200", type="_doc", index="logs-", is_prefix=True)
        ... )
        >>> response = client.post_sync([JsonEvent({"message": "hello"})])
        >>> print(f"成功: {response.success}, 失败: {response.failed}")
    """

    def __init__(
        self,
        config: ClientConfig,
        es_client: Elasticsearch | None = None,
        now_func: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.index_namer = IndexNamer(
            config.index,
            is_prefix=config.is_prefix,
            timestamp_field=config.timestamp_field,
            now_func=now_func,
        )
        self.document_id = (
            DocumentIdTemplate(config.document_id) if config.document_id else None
        )
        self.retry_timer = RetryTimer(config.retry)
        self.dispatcher = Dispatcher(config.dispatcher)
        self.bulk_url = config.url.rstrip("/") + "/_bulk"
        self._host = urlsplit(config.url).netloc
        self._es = es_client if es_client is not None else self._create_client()
        logger.info(
            f"初始化批量写入客户端: url={config.url}, index={config.index}, "
            f"is_prefix={config.is_prefix}, max_attempts={self.retry_timer.max_attempts}"
        )

    def _create_client(self) -> Elasticsearch:
        """根据配置创建 Elasticsearch 客户端实例.

        客户端自身的重试被关闭，由 post 的重试循环统一控制。
        """
        kwargs: dict = {
            "hosts": [self.config.url],
            "max_retries": 0,
            "retry_on_timeout": False,
            "request_timeout": self.config.request_timeout,
            "connections_per_node": self.dispatcher.max_requests_per_host,
        }

        # Basic Auth 认证
        if self.config.basic_auth is not None:
            kwargs["basic_auth"] = (
                self.config.basic_auth.username,
                self.config.basic_auth.password,
            )

        return Elasticsearch(**kwargs)

    @property
    def client(self) -> Elasticsearch:
        """底层 Elasticsearch 客户端."""
        return self._es

    def _action_line(self, index_name: str, event: Event) -> bytes:
        # 8.x 只接受 _doc 类型，动作行不写 _type
        meta: dict[str, str] = {"_index": index_name}
        if self.document_id is not None:
            meta["_id"] = self.document_id.render(event)
        return json.dumps({"index": meta}, separators=(",", ":")).encode("utf-8")

    def build_payload(self, events: Sequence[Event]) -> tuple[bytes, list[str]]:
        """把事件序列化为 bulk 请求体.

        Args:
            events: 待写入的事件

        Returns:
            元组：(NDJSON 请求体, 每个事件的目标索引)

        Raises:
            DocumentIdTemplateError: 事件缺少文档ID模板引用的字段
            IndexNameError: 时间戳字段无法解析
        """
        now = self.index_namer.now()
        lines: list[bytes] = []
        index_names: list[str] = []
        for event in events:
            index_name = self.index_namer.resolve(event, now)
            index_names.append(index_name)
            lines.append(self._action_line(index_name, event))
            lines.append(event.to_json())
        return b"\n".join(lines) + b"\n", index_names

    def _send(self, payload: bytes) -> Any:
        if self.config.signer is not None:
            # 签名模式自行发出请求，保证签名内容与线上请求一致
            headers = signed_headers(self.config.signer, self.bulk_url, payload)
            return self._es.perform_request(
                BULK_METHOD, BULK_PATH, headers=headers, body=payload
            )
        return self._es.bulk(operations=payload)

    def _deliver(
        self,
        payload: bytes,
        events: list[Event],
        index_names: list[str],
        cancel_event: threading.Event,
    ) -> BulkResponse:
        """发送请求并按重试策略处理瞬时失败，整批作为一个单元重试."""
        start_time = time.time()
        delays = self.retry_timer.delays()
        attempt = 0

        while True:
            if cancel_event.is_set():
                raise BulkCancelledError(f"批量写入已取消，已尝试 {attempt} 次")
            attempt += 1
            try:
                with self.dispatcher.slot(self._host):
                    logger.debug(f"发送 bulk 请求: 文档数 {len(events)}，第 {attempt} 次尝试")
                    response = self._send(payload)
            except (
                ApiError,
                ESConnectionError,
                ConnectionTimeout,
                TransportError,
            ) as e:
                if not _is_transient(e):
                    logger.error(f"bulk 请求失败且不可重试: {str(e)}")
                    raise BulkDeliveryError(f"bulk 请求失败: {str(e)}") from e
                if not self.retry_timer.should_retry(attempt):
                    logger.error(f"bulk 请求重试次数耗尽 ({attempt} 次): {str(e)}")
                    raise BulkRetryExhaustedError(
                        f"bulk 请求重试次数耗尽 ({attempt} 次): {str(e)}"
                    ) from e
                delay = next(delays)
                logger.warning(
                    f"bulk 请求遇到异常，{delay:.3f} 秒后第 {attempt + 1} 次尝试: {str(e)}"
                )
                if cancel_event.wait(delay):
                    raise BulkCancelledError(
                        f"批量写入在重试等待中被取消，已尝试 {attempt} 次"
                    ) from e
                continue

            result = reconcile(
                getattr(response, "body", response),
                events,
                index_names=index_names,
                attempts=attempt,
                took=time.time() - start_time,
            )
            if result.failed > 0:
                logger.warning(
                    f"bulk 写入完成: 成功 {result.success}, 失败 {result.failed}"
                )
            else:
                logger.info(f"bulk 写入完成: 全部成功 ({result.success})")
            return result

    def post(self, events: Iterable[Event]) -> BulkFuture:
        """异步批量写入事件.

        请求体在调用线程中构建，因此文档ID模板和索引名错误会同步抛出；投递和重试在
        调度器中执行。

        Args:
            events: 待写入的事件

        Returns:
            BulkFuture，完成时给出与 events 等长、顺序一致的 BulkResponse

        Raises:
            DocumentIdTemplateError: 事件缺少文档ID模板引用的字段
            IndexNameError: 时间戳字段无法解析
        """
        events = list(events)
        cancel_event = threading.Event()
        if not events:
            future: Future = Future()
            future.set_result(BulkResponse())
            return BulkFuture(future, cancel_event)

        payload, index_names = self.build_payload(events)
        future = self.dispatcher.submit(
            self._deliver, payload, events, index_names, cancel_event
        )
        return BulkFuture(future, cancel_event)

    def post_sync(
        self, events: Iterable[Event], timeout: float | None = None
    ) -> BulkResponse:
        """同步批量写入事件，阻塞直到得到结果."""
        return self.post(events).result(timeout)

    def close(self) -> None:
        """关闭底层客户端和自建线程池."""
        self.dispatcher.shutdown()
        self._es.close()

    def __repr__(self) -> str:
        return (
            f"BulkClient(url={self.config.url!r}, index={self.config.index!r}, "
            f"is_prefix={self.config.is_prefix})"
        )
