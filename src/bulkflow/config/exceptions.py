"""客户端配置异常定义模块."""

from ..exceptions import BulkflowError


class ConfigurationError(BulkflowError):
    """配置校验异常.

    当配置缺少必需键、取值不合法或无法解析时抛出，例如缺少 url、
    basic_auth 不是 user:password 格式等。
    """

    pass


class DocumentIdTemplateError(ConfigurationError):
    """文档ID模板解析异常.

    当模板中的占位符在事件中找不到对应字段时抛出。
    """

    pass
