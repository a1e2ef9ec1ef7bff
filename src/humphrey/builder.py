"""
Result builder module for humphrey.

Turns the values extracted by each rule into one nested mapping. Rule
names are dotted paths: every segment but the last two names a nested
object, and the last one or two segments decide the shape of the slot
the values land in.

- ``title`` stores a list of strings under ``title``.
- ``link.href`` and ``link.text`` store a list of records under ``link``,
  the i-th match of each rule filling field ``href``/``text`` of record i.
- ``page.link.href`` does the same inside the object ``page``.

The shape of a slot is fixed by the first rule reaching it. A later rule
needing another shape at the same path raises NameConflict.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import NameConflict
from .rules import Rule

logger = logging.getLogger(__name__)


class SlotKind(Enum):
    """Shapes a slot of the result tree can take."""
    OBJECT = "an object"
    VALUES = "a list of values"
    RECORDS = "a list of records"


class Slot(ABC):
    """A node of the result tree."""

    kind: SlotKind

    @abstractmethod
    def to_value(self, arrays: bool) -> Any:
        """
        Convert the slot to plain Python data.

        Args:
            arrays: Keep value lists as lists even with zero or one value
        """
        pass


class ObjectSlot(Slot):
    """Nested object keyed by name segment."""

    kind = SlotKind.OBJECT

    def __init__(self):
        self.children: Dict[str, Slot] = {}

    def to_value(self, arrays: bool) -> Dict[str, Any]:
        return {key: child.to_value(arrays) for key, child in self.children.items()}


class ValuesSlot(Slot):
    """Ordered list of extracted strings."""

    kind = SlotKind.VALUES

    def __init__(self):
        self.values: List[str] = []

    def write(self, values: Sequence[str]) -> None:
        """Overwrite existing positions and append the rest."""
        for i, value in enumerate(values):
            if i < len(self.values):
                self.values[i] = value
            else:
                self.values.append(value)

    def to_value(self, arrays: bool) -> Any:
        if arrays:
            return list(self.values)
        if not self.values:
            return None
        if len(self.values) == 1:
            return self.values[0]
        return list(self.values)


class RecordsSlot(Slot):
    """Ordered list of records whose fields are filled by separate rules."""

    kind = SlotKind.RECORDS

    def __init__(self):
        self.fields: List[str] = []
        self.records: List[Dict[str, str]] = []
        self.counts: Dict[str, int] = {}

    def declare(self, field: str) -> None:
        """Register a field so every record carries it."""
        if field not in self.fields:
            self.fields.append(field)

    def write(self, field: str, values: Sequence[str]) -> None:
        """Write the i-th value into field ``field`` of record i, creating records as needed."""
        self.declare(field)
        for i, value in enumerate(values):
            if i == len(self.records):
                self.records.append({})
            self.records[i][field] = value
        self.counts[field] = max(self.counts.get(field, 0), len(values))

    def to_value(self, arrays: bool) -> List[Dict[str, Optional[str]]]:
        if len(set(self.counts.values())) > 1:
            logger.warning(
                "Fields matched different numbers of elements, padding records with null: "
                + ", ".join(f"{field}={count}" for field, count in self.counts.items())
            )
        return [{field: record.get(field) for field in self.fields} for record in self.records]


class ResultBuilder:
    """
    Accumulates extracted values into a nested result mapping.

    All rules are located once at construction, so shape conflicts between
    rule names are reported before any page is fetched. Use a new builder
    per page.
    """

    def __init__(self, rules: Iterable[Rule], arrays: bool = False, reserved: Iterable[str] = ()):
        """
        Initialize ResultBuilder.

        Args:
            rules: Rules whose values will be added
            arrays: Keep every value slot a list regardless of match count
            reserved: Top level keys rules may not use (e.g. the URL key)

        Raises:
            NameConflict: If two rules need incompatible shapes at one path
                or a rule uses a reserved key
        """
        self.rules = list(rules)
        self.arrays = arrays
        self.reserved = set(reserved)
        self.root = ObjectSlot()
        for rule in self.rules:
            self._locate(rule)

    def _names(self, rule: Rule) -> List[str]:
        names = [r.name for r in self.rules]
        if rule.name not in names:
            names.append(rule.name)
        return names

    def _child(self, parent: ObjectSlot, key: str, kind: SlotKind, factory: Callable[[], Slot], rule: Rule) -> Slot:
        slot = parent.children.get(key)
        if slot is None:
            slot = factory()
            parent.children[key] = slot
        elif slot.kind is not kind:
            raise NameConflict(
                rule.name,
                self._names(rule),
                f"needs {kind.value} at {key!r}, which already holds {slot.kind.value}",
            )
        return slot

    def _locate(self, rule: Rule) -> Tuple[Slot, Optional[str]]:
        """
        Find or create the slot for a rule.

        Returns:
            The slot, and the record field name for records slots
        """
        path = rule.path
        if path[0] in self.reserved:
            raise NameConflict(rule.name, self._names(rule), f"uses reserved key {path[0]!r}")

        parents, terminals = path[:-2], path[-2:]
        node = self.root
        for segment in parents:
            node = self._child(node, segment, SlotKind.OBJECT, ObjectSlot, rule)

        if len(terminals) == 1:
            return self._child(node, terminals[0], SlotKind.VALUES, ValuesSlot, rule), None

        slot = self._child(node, terminals[0], SlotKind.RECORDS, RecordsSlot, rule)
        slot.declare(terminals[1])
        return slot, terminals[1]

    def add(self, rule: Rule, values: Sequence[str]) -> None:
        """
        Insert the values extracted for a rule.

        Args:
            rule: Rule the values were extracted with
            values: Extracted values in document order
        """
        slot, field = self._locate(rule)
        if field is None:
            slot.write(values)
        else:
            slot.write(field, values)

    def add_all(self, extracted: Iterable[Tuple[Rule, Sequence[str]]]) -> "ResultBuilder":
        """Insert several ``(rule, values)`` pairs."""
        for rule, values in extracted:
            self.add(rule, values)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Return the result as plain dicts, lists, strings and None."""
        return self.root.to_value(self.arrays)
