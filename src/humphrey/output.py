"""
Output module for humphrey.

Renders one result mapping per page as JSON, through a Jinja2 template,
or as raw extracted lines.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional

import jinja2

from .config import Config
from .errors import TemplateError

logger = logging.getLogger(__name__)

HTML_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"}


class Renderer(ABC):
    """Abstract base class for output renderers."""

    @abstractmethod
    def render(self, result: Dict[str, Any]) -> str:
        """
        Render the result of one page.

        Args:
            result: Result mapping, URL key included

        Returns:
            Text to write to the output stream
        """
        pass


class JSONRenderer(Renderer):
    """Renders each result as one JSON document."""

    def __init__(self, pretty: bool = False, escape_html: bool = False):
        """
        Initialize JSONRenderer.

        Args:
            pretty: Indent the document with two spaces
            escape_html: Write <, > and & as unicode escapes
        """
        self.pretty = pretty
        self.escape_html = escape_html

    def render(self, result: Dict[str, Any]) -> str:
        text = json.dumps(result, indent=2 if self.pretty else None, ensure_ascii=False)
        if self.escape_html:
            # these characters can only occur inside JSON strings
            for char, escape in HTML_ESCAPES.items():
                text = text.replace(char, escape)
        return text + "\n"


class TemplateRenderer(Renderer):
    """Renders each result through a Jinja2 template."""

    def __init__(self, source: str):
        """
        Initialize TemplateRenderer.

        Args:
            source: Jinja2 template text; result keys are template variables

        Raises:
            TemplateError: If the template has a syntax error
        """
        self.environment = jinja2.Environment(keep_trailing_newline=True, autoescape=False)
        try:
            self.template = self.environment.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(f"line {e.lineno}: {e.message}") from e

    def render(self, result: Dict[str, Any]) -> str:
        try:
            return self.template.render(result)
        except jinja2.TemplateError as e:
            raise TemplateError(str(e)) from e
        except (TypeError, ValueError, AttributeError) as e:
            raise TemplateError(f"{type(e).__name__}: {e}") from e


class RawRenderer(Renderer):
    """Renders only the extracted strings, one per line."""

    def __init__(self, key: Optional[str] = None):
        """
        Initialize RawRenderer.

        Args:
            key: URL key to leave out of the output
        """
        self.key = key

    def _strings(self, value: Any) -> Iterator[str]:
        if value is None:
            return
        if isinstance(value, str):
            yield value
        elif isinstance(value, dict):
            for item in value.values():
                yield from self._strings(item)
        else:
            for item in value:
                yield from self._strings(item)

    def render(self, result: Dict[str, Any]) -> str:
        lines = []
        for name, value in result.items():
            if name == self.key:
                continue
            lines.extend(self._strings(value))
        return "".join(line + "\n" for line in lines)


def create_renderer(config: Config) -> Renderer:
    """
    Create the renderer selected by the configuration.

    A template wins over raw mode, raw mode over JSON.

    Args:
        config: Run configuration

    Returns:
        Renderer instance
    """
    if config.tmpl is not None:
        logger.debug("Using template output")
        return TemplateRenderer(config.tmpl)
    if config.raw:
        logger.debug("Using raw output")
        return RawRenderer(config.key)
    logger.debug("Using JSON output")
    return JSONRenderer(pretty=config.pretty, escape_html=config.escape_html)
