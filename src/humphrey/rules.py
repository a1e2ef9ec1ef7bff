"""
Rule parsing for humphrey.

A rule is written as ``name/selector[/attribute]``. The name may be dotted
(``link.href``) to produce nested output.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import soupsieve

from .errors import MalformedRule

logger = logging.getLogger(__name__)

RULE_DELIMITER = "/"
NAME_DELIMITER = "."


@dataclass(frozen=True)
class Rule:
    """A named extraction rule: CSS selector plus optional attribute."""
    name: str
    selector: str
    attribute: Optional[str] = None

    @property
    def path(self) -> Tuple[str, ...]:
        """Segments of the dotted name."""
        return tuple(self.name.split(NAME_DELIMITER))

    def __str__(self) -> str:
        parts = [self.name, self.selector]
        if self.attribute:
            parts.append(self.attribute)
        return RULE_DELIMITER.join(parts)


def parse_rule(text: str) -> Rule:
    """
    Build a rule from its textual form.

    Args:
        text: Rule text, ``name/selector`` or ``name/selector/attribute``

    Returns:
        Parsed rule

    Raises:
        MalformedRule: If the text does not have two or three non-empty parts,
            the name has an empty segment, or the selector is not valid CSS
    """
    toks = [tok.strip() for tok in text.split(RULE_DELIMITER, 2)]
    if len(toks) < 2:
        raise MalformedRule(text)

    name, selector = toks[0], toks[1]
    attribute = toks[2] if len(toks) == 3 else None

    if not name:
        raise MalformedRule(text, "empty name")
    if not selector:
        raise MalformedRule(text, "empty selector")
    if attribute is not None and RULE_DELIMITER in attribute:
        raise MalformedRule(text, f"too many {RULE_DELIMITER!r} separators")
    if any(not segment for segment in name.split(NAME_DELIMITER)):
        raise MalformedRule(text, f"empty segment in name {name!r}")

    try:
        soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise MalformedRule(text, f"invalid selector: {str(e).splitlines()[0]}") from e

    # a trailing separator ("a/b/") means no attribute
    rule = Rule(name=name, selector=selector, attribute=attribute or None)
    logger.debug(f"Parsed rule: {rule}")
    return rule


def parse_rules(texts: Iterable[str]) -> List[Rule]:
    """Parse every rule text, failing on the first malformed one."""
    return [parse_rule(text) for text in texts]
