"""
Extraction module for humphrey.

Parses HTML into a BeautifulSoup document and applies rules to it.
"""

import html
import logging
from typing import List, Sequence, Tuple

from bs4 import BeautifulSoup, FeatureNotFound, Tag

from .errors import ParseFailure
from .rules import Rule

logger = logging.getLogger(__name__)

DEFAULT_PARSER = "lxml"


def parse_document(markup: str, url: str = "", parser: str = DEFAULT_PARSER) -> BeautifulSoup:
    """
    Parse HTML markup into a traversable document.

    Args:
        markup: HTML content
        url: Source of the markup, used in error messages
        parser: BeautifulSoup tree builder name

    Returns:
        Parsed document

    Raises:
        ParseFailure: If the markup can't be parsed with the given parser
    """
    try:
        return BeautifulSoup(markup, parser)
    except FeatureNotFound as e:
        raise ParseFailure(url, f"parser {parser!r} is not available") from e
    except (ValueError, TypeError, AssertionError) as e:
        raise ParseFailure(url, str(e) or type(e).__name__) from e


class RuleExtractor:
    """Applies rules to a parsed document."""

    def element_value(self, element: Tag, rule: Rule) -> str:
        """
        Compute the value of one matched element.

        The attribute value when the rule names one (empty if the element
        lacks it), otherwise the element's text. Entities are unescaped and
        surrounding whitespace trimmed.
        """
        if rule.attribute:
            value = element.get(rule.attribute, "")
            # multi-valued attributes such as class come back as lists
            if isinstance(value, list):
                value = " ".join(value)
        else:
            value = element.get_text()
        return html.unescape(value).strip()

    def extract(self, document: BeautifulSoup, rule: Rule) -> List[str]:
        """
        Extract values for a rule.

        Args:
            document: Parsed document
            rule: Rule to apply

        Returns:
            One value per matched element, in document order
        """
        values = [self.element_value(element, rule) for element in document.select(rule.selector)]
        logger.debug(f"Rule {rule.name!r} matched {len(values)} elements")
        return values

    def extract_all(self, document: BeautifulSoup, rules: Sequence[Rule]) -> List[Tuple[Rule, List[str]]]:
        """Extract values for every rule, in rule order."""
        return [(rule, self.extract(document, rule)) for rule in rules]
