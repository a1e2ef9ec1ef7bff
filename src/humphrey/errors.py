"""
Errors module for humphrey.

Defines the error kinds raised by the rule parser, fetchers, result builder
and renderers. Only the CLI turns them into exit codes.
"""

from typing import Iterable


class HumphreyError(Exception):
    """Base class for all humphrey errors."""


class MalformedRule(HumphreyError):
    """A rule string could not be parsed."""

    def __init__(self, rule_text: str, reason: str = "expected name/selector[/attribute]"):
        self.rule_text = rule_text
        self.reason = reason
        super().__init__(f"can't parse rule {rule_text!r}: {reason}")


class FetchFailure(HumphreyError):
    """A page could not be downloaded or read."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"failed to fetch {url}: {reason}")


class ParseFailure(HumphreyError):
    """A downloaded page could not be parsed into a document."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"failed to parse {url}: {reason}")


class NameConflict(HumphreyError):
    """A rule name needs a result shape that another rule already claimed."""

    def __init__(self, rule_name: str, names: Iterable[str], reason: str = "incompatible with another rule"):
        self.rule_name = rule_name
        self.names = list(names)
        self.reason = reason
        super().__init__(
            f"rule name {rule_name!r} {reason} (rules: {', '.join(self.names)})"
        )


class TemplateError(HumphreyError):
    """The output template could not be compiled or rendered."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"template error: {reason}")
