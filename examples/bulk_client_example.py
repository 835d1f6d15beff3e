"""批量写入客户端使用示例.

本文件展示了如何从声明式配置获取 BulkClient 并批量写入事件。
"""

import logging
from uuid import uuid4

from bulkflow import JsonEvent, of_parameters

logging.basicConfig(level=logging.INFO)

# 相同 (url, index_prefix) 的配置会复用同一个客户端
client = of_parameters(
    {
        "url": "http://localhost:9200",
        "type": "_doc",
        "index_prefix": "events-",  # 实际索引名为 events-yyyy.MM.dd
        "document_id": "{uuid}",  # 使用 uuid 字段作为文档ID
        "timestamp_field": "@timestamp",
        "retry": {"policy": "exponential", "attempts": 5, "delayMs": 200},
        "dispatcher": {"max_concurrent_requests": 4},
    }
)


# ==================== 示例1：异步写入 ====================
def example_async_post():
    """提交一批事件并等待结果."""
    events = [
        JsonEvent({"uuid": str(uuid4()), "message": "Hello mighty mouse"})
        for _ in range(100)
    ]

    future = client.post(events)
    response = future.result(timeout=30)

    print("批量写入结果:")
    print(f"  总数: {response.total}")
    print(f"  成功: {response.success}")
    print(f"  失败: {response.failed}")
    print(f"  索引: {sorted(response.index_names())}")
    print(f"  尝试次数: {response.attempts}")

    if not response.is_complete():
        print(f"  服务端未回报: {response.missing_count}")
    if response.failed > 0:
        print(f"  错误摘要:\n{response.get_error_summary()}")

    return response


# ==================== 示例2：同步写入 ====================
def example_sync_post():
    """阻塞写入并逐条检查结果."""
    events = [
        JsonEvent(
            {
                "uuid": str(uuid4()),
                "message": f"event {i}",
                "@timestamp": "2024-01-01T00:00:00Z",
            }
        )
        for i in range(10)
    ]

    response = client.post_sync(events)
    for entry in response:
        status = "ok" if entry.success else entry.error.reason
        print(f"  {entry.index_name} {entry.doc_id} v{entry.version}: {status}")

    return response


if __name__ == "__main__":
    example_async_post()
    example_sync_post()
    client.close()
