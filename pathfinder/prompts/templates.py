"""
Prompt Template System

Templates with {variable} placeholders, used for both the chat replies and
the curation request.
"""

from typing import Any, Optional
from string import Formatter

from pathfinder.exceptions import PromptTemplateError


class PromptTemplate:
    """Reusable template for generating text with {variable} placeholders."""

    def __init__(
        self,
        template: str,
        name: Optional[str] = None,
        defaults: Optional[dict[str, Any]] = None,
    ):
        self.template = template.strip()
        self.name = name or "unnamed"
        self.defaults = defaults or {}
        self.required_vars = self._extract_variables()

    def _extract_variables(self) -> set[str]:
        variables = set()
        for _, field_name, _, _ in Formatter().parse(self.template):
            if field_name:
                variables.add(field_name.split(".")[0].split("[")[0])
        return variables

    def render(self, **kwargs: Any) -> str:
        values = {**self.defaults, **kwargs}
        missing = self.required_vars - set(values.keys())
        if missing:
            raise PromptTemplateError(template_name=self.name, missing_vars=list(missing))
        return self.template.format(**values)

    def __repr__(self) -> str:
        return f"PromptTemplate(name='{self.name}', vars={self.required_vars})"
