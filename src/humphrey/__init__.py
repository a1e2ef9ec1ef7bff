"""
humphrey - extract data from web pages with named CSS selector rules

Rules are written as ``name/selector[/attribute]``. Each page is fetched,
every rule is applied to it and the matches are written as:
- JSON, one document per page
- a Jinja2 template rendering
- raw lines of matched text

Dotted rule names (``link.href``, ``link.text``) build nested output.
"""

__version__ = "1.0.0"

from .errors import HumphreyError, MalformedRule, FetchFailure, ParseFailure, NameConflict, TemplateError
from .config import load_config, merge_config, Config
from .rules import Rule, parse_rule, parse_rules
from .extraction import RuleExtractor, parse_document
from .builder import ResultBuilder, SlotKind
from .output import Renderer, JSONRenderer, TemplateRenderer, RawRenderer, create_renderer
from .fetcher import Fetcher, HttpFetcher, FileFetcher, create_fetcher
from .runner import ScrapeRunner, RunStats, read_targets
from .cli import main

__all__ = [
    "HumphreyError",
    "MalformedRule",
    "FetchFailure",
    "ParseFailure",
    "NameConflict",
    "TemplateError",
    "load_config",
    "merge_config",
    "Config",
    "Rule",
    "parse_rule",
    "parse_rules",
    "RuleExtractor",
    "parse_document",
    "ResultBuilder",
    "SlotKind",
    "Renderer",
    "JSONRenderer",
    "TemplateRenderer",
    "RawRenderer",
    "create_renderer",
    "Fetcher",
    "HttpFetcher",
    "FileFetcher",
    "create_fetcher",
    "ScrapeRunner",
    "RunStats",
    "read_targets",
    "main",
]
