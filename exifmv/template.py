"""
template.py - Destination template rendering.

Templates use Jinja2 substitution syntax ({{SysName}}); conditionals,
loops and filters are whatever Jinja2 provides.
"""

from typing import Mapping, Set

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, Undefined, UndefinedError, meta

from exifmv.errors import ConfigurationError, MissingPropertyError, TemplateRenderError

INDEX_PROPERTY = "SysIdx"


class TemplateRenderer:
    """Render one destination template against property contexts."""

    def __init__(self, template: str, strict: bool = True):
        self.source = template
        self.strict = strict
        self.env = Environment(
            undefined=StrictUndefined if strict else Undefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        try:
            self.template = self.env.from_string(template)
            self.referenced: Set[str] = meta.find_undeclared_variables(self.env.parse(template))
        except TemplateSyntaxError as e:
            raise ConfigurationError(f"Template syntax error in '{template}': {e}") from e

    def render(self, context: Mapping[str, str]) -> str:
        """
        Expand the template.

        Raises:
            MissingPropertyError: strict mode and an undefined name is used
            TemplateRenderError: evaluation failed for this context
        """
        try:
            return self.template.render(dict(context))
        except UndefinedError as e:
            raise MissingPropertyError(f"Template '{self.source}': {e.message}") from e
        except Exception as e:
            raise TemplateRenderError(f"Template '{self.source}' failed: {e}") from e

    def __call__(self, context: Mapping[str, str]) -> str:
        return self.render(context)


def format_index(idx: int, width: int) -> str:
    return str(idx).zfill(width)


def render_context(bag: Mapping[str, str], idx: int, width: int) -> dict:
    """Property bag plus the zero-padded SysIdx value."""
    context = dict(bag)
    context[INDEX_PROPERTY] = format_index(idx, width)
    return context
