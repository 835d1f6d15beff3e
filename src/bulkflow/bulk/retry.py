"""重试计时模块.

RetryTimer 把重试配置转换为两次尝试之间的等待时长序列，与具体的调度方式解耦。
"""

from __future__ import annotations

from collections.abc import Iterator

from ..config.models import RetryConfig, RetryPolicy


class RetryTimer:
    """重试等待时长生成器.

    Args:
        config: 重试配置，为 None 表示不重试（只尝试一次）

    Examples:
        >>> timer = RetryTimer(RetryConfig(policy=RetryPolicy.LINEAR, delay_ms=100))
        >>> delays = timer.delays()
        >>> next(delays), next(delays)
        (0.1, 0.2)
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self.config = config

    @property
    def max_attempts(self) -> int:
        """最大尝试次数（含首次）."""
        return self.config.attempts if self.config is not None else 1

    def should_retry(self, attempt: int) -> bool:
        """第 attempt 次尝试失败后是否允许继续重试."""
        return attempt < self.max_attempts

    def delay(self, retry: int) -> float:
        """计算第 retry 次重试前的等待时长（秒）.

        Raises:
            ValueError: retry 小于 1
        """
        if retry < 1:
            raise ValueError("retry 必须 >= 1")
        if self.config is None:
            return 0.0
        base = self.config.delay_ms
        if self.config.policy == RetryPolicy.FIXED:
            delay_ms = base
        elif self.config.policy == RetryPolicy.LINEAR:
            delay_ms = base * retry
        else:
            delay_ms = base * (2 ** (retry - 1))
        return min(delay_ms, self.config.max_delay_ms) / 1000

    def delays(self) -> Iterator[float]:
        """按重试顺序生成等待时长."""
        retry = 1
        while True:
            yield self.delay(retry)
            retry += 1
