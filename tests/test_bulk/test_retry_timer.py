"""重试计时单元测试."""

import unittest
from itertools import islice

from bulkflow.bulk.retry import RetryTimer
from bulkflow.config import RetryConfig, RetryPolicy


class TestRetryTimer(unittest.TestCase):
    """RetryTimer 单元测试."""

    def test_fixed_policy(self):
        """测试固定等待."""
        timer = RetryTimer(RetryConfig(policy=RetryPolicy.FIXED, delay_ms=200))
        self.assertEqual(list(islice(timer.delays(), 3)), [0.2, 0.2, 0.2])

    def test_linear_policy(self):
        """测试线性增长."""
        timer = RetryTimer(RetryConfig(policy=RetryPolicy.LINEAR, delay_ms=100))
        self.assertEqual(list(islice(timer.delays(), 3)), [0.1, 0.2, 0.3])

    def test_exponential_policy(self):
        """测试指数增长."""
        timer = RetryTimer(RetryConfig(policy=RetryPolicy.EXPONENTIAL, delay_ms=100))
        self.assertEqual(list(islice(timer.delays(), 4)), [0.1, 0.2, 0.4, 0.8])

    def test_delay_is_capped(self):
        """测试单次等待不超过上限."""
        timer = RetryTimer(
            RetryConfig(policy=RetryPolicy.EXPONENTIAL, delay_ms=1000, max_delay_ms=3000)
        )
        self.assertEqual(timer.delay(10), 3.0)

    def test_should_retry(self):
        """测试重试次数判断."""
        timer = RetryTimer(RetryConfig(attempts=3))
        self.assertEqual(timer.max_attempts, 3)
        self.assertTrue(timer.should_retry(2))
        self.assertFalse(timer.should_retry(3))

    def test_no_config_means_single_attempt(self):
        """测试无重试配置时只尝试一次."""
        timer = RetryTimer()
        self.assertEqual(timer.max_attempts, 1)
        self.assertFalse(timer.should_retry(1))

    def test_invalid_retry_number(self):
        """测试重试序号小于 1 报错."""
        with self.assertRaises(ValueError):
            RetryTimer(RetryConfig()).delay(0)


if __name__ == "__main__":
    unittest.main()
