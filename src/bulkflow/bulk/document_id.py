"""文档ID模板模块."""

from __future__ import annotations

import re

from ..config.exceptions import DocumentIdTemplateError
from ..events import Event

_PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")


class DocumentIdTemplate:
    """按事件字段生成文档ID.

    模板中的 ``{field}`` 占位符替换为事件对应字段的字符串值，例如 "{host}-{uuid}"。
    字段缺失时抛出异常，不会把占位符原样写入ID。

    Args:
        template: 文档ID模板
    """

    def __init__(self, template: str) -> None:
        if not isinstance(template, str) or not template:
            raise DocumentIdTemplateError(f"document_id 模板必须是非空字符串: {template!r}")
        self.template = template
        self.fields = tuple(_PLACEHOLDER_PATTERN.findall(template))

    def render(self, event: Event) -> str:
        """生成事件的文档ID.

        Raises:
            DocumentIdTemplateError: 事件缺少模板引用的字段
        """

        def substitute(match: re.Match[str]) -> str:
            field = match.group(1)
            if not event.has(field):
                raise DocumentIdTemplateError(
                    f"document_id 模板 {self.template!r} 引用的字段 {field!r} 在事件中不存在"
                )
            return event.value_as_string(field)

        return _PLACEHOLDER_PATTERN.sub(substitute, self.template)
