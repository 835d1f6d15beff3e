"""批量写入异常定义模块."""

from ..exceptions import BulkflowError


class BulkOperationError(BulkflowError):
    """批量写入基础异常类."""

    pass


class BulkDeliveryError(BulkOperationError):
    """整批投递失败异常.

    当请求无法送达或服务端返回不可重试的错误时抛出，作用于整个批次。
    """

    pass


class BulkRetryExhaustedError(BulkDeliveryError):
    """批量写入重试次数耗尽异常."""

    pass


class BulkCancelledError(BulkOperationError):
    """批量写入在重试过程中被取消."""

    pass


class IndexNameError(BulkOperationError):
    """索引名解析异常.

    当滚动索引所用的时间戳字段无法解析为日期时抛出。
    """

    pass
