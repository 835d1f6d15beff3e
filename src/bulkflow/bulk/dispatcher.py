"""请求调度模块.

Dispatcher 控制同时在途的请求数：总上限与单主机上限。每次 HTTP 尝试需同时占用
一个总槽位和一个主机槽位，槽位不足时排队等待而不是失败。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any

from ..config.models import DispatcherConfig

logger = logging.getLogger(__name__)


class Dispatcher:
    """并发受限的请求调度器.

    Args:
        config: 调度配置，为 None 时使用默认限制

    Attributes:
        max_requests: 同时在途的最大请求数
        max_requests_per_host: 单主机同时在途的最大请求数
        executor: 执行投递任务的执行器
    """

    def __init__(self, config: DispatcherConfig | None = None) -> None:
        if config is not None:
            logger.info(
                f"配置 HTTP 请求调度器: max_requests={config.max_concurrent_requests}, "
                f"max_requests_per_host={config.max_concurrent_requests_per_host}, "
                f"custom_threadpool={config.threadpool is not None}"
            )
        config = config or DispatcherConfig()
        self.max_requests = config.max_concurrent_requests
        self.max_requests_per_host = config.max_concurrent_requests_per_host
        self._owns_executor = config.threadpool is None
        self.executor: Executor = config.threadpool or ThreadPoolExecutor(
            max_workers=self.max_requests,
            thread_name_prefix="bulkflow-dispatcher",
        )
        self._slots = threading.BoundedSemaphore(self.max_requests)
        self._host_slots: dict[str, threading.BoundedSemaphore] = {}
        self._lock = threading.Lock()

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """提交投递任务.

        执行器拒绝任务时异常直接抛给调用方。
        """
        return self.executor.submit(fn, *args)

    def _host_semaphore(self, host: str) -> threading.BoundedSemaphore:
        with self._lock:
            semaphore = self._host_slots.get(host)
            if semaphore is None:
                semaphore = threading.BoundedSemaphore(self.max_requests_per_host)
                self._host_slots[host] = semaphore
            return semaphore

    @contextmanager
    def slot(self, host: str) -> Iterator[None]:
        """占用一个发往 host 的请求槽位，槽位不足时阻塞等待."""
        host_semaphore = self._host_semaphore(host)
        with self._slots:
            with host_semaphore:
                yield

    def shutdown(self, wait: bool = True) -> None:
        """关闭自建的线程池，自定义执行器由调用方管理."""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    def __repr__(self) -> str:
        return (
            f"Dispatcher(max_requests={self.max_requests}, "
            f"max_requests_per_host={self.max_requests_per_host})"
        )
