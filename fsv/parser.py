"""
YAML parser for predicate definitions.

Parses named predicate definitions into Predicate objects so views can be
filtered by name from the command line or from configuration.

Example YAML:

    hexdigits:
      description: Hexadecimal digits
      class: hex

    no_space:
      drop: " \\t"

    lower_vowel:
      all:
        - class: vowel
        - class: lower

    id_chars:
      any:
        - ref: letters
        - range: ["0", "9"]
        - keep: "_"
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import yaml

from fsv.predicates import (
    Predicate,
    TruePredicate,
    FalsePredicate,
    CharsPredicate,
    RangePredicate,
    ClassPredicate,
    CompoundPredicate,
)

if TYPE_CHECKING:
    from fsv.registry import PredicateRegistry

logger = logging.getLogger(__name__)

METADATA_KEYS = {"description"}
EXPRESSION_KEYS = {"keep", "drop", "class", "range", "all", "any", "not", "ref"}


class PredicateParseError(Exception):
    """Error parsing predicate definition."""
    pass


def parse_predicates_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a YAML file containing predicate definitions.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary mapping predicate names to raw definitions
    """
    path = Path(path)

    if not path.exists():
        raise PredicateParseError(f"Predicates file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PredicateParseError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise PredicateParseError(f"Predicates file must contain a dictionary, got {type(data).__name__}")

    logger.debug(f"Read {len(data)} predicate definitions from {path}")
    return data


def parse_predicate(definition: Any, registry: Optional["PredicateRegistry"] = None) -> Predicate:
    """
    Parse a single predicate definition into a Predicate object.

    Args:
        definition: Mapping, bool, or name of a registered predicate
        registry: Optional registry for resolving references

    Returns:
        Parsed Predicate object
    """
    parser = PredicateParser(registry)
    return parser.parse(definition)


class PredicateParser:
    """
    Parser for predicate definitions.

    Handles:
    - Leaves: keep, drop, class, range, true/false
    - Combinators: all, any, not
    - References: ref (or a bare string) to a named predicate
    """

    def __init__(self, registry: Optional["PredicateRegistry"] = None):
        self.registry = registry

    def parse(self, definition: Any) -> Predicate:
        """Parse a predicate definition into a Predicate object."""
        if isinstance(definition, bool):
            return TruePredicate() if definition else FalsePredicate()

        if isinstance(definition, str):
            return self._parse_ref(definition)

        if not isinstance(definition, dict):
            raise PredicateParseError(
                f"Predicate definition must be a dictionary, got {type(definition).__name__}"
            )

        keys = set(definition) - METADATA_KEYS
        unknown = keys - EXPRESSION_KEYS
        if unknown:
            raise PredicateParseError(f"Unknown predicate keys: {', '.join(sorted(unknown))}")

        if not keys:
            raise PredicateParseError("Predicate definition has no expression")

        # Several expression keys in one mapping are ANDed together
        parts = [self._parse_key(key, definition[key]) for key in sorted(keys)]
        if len(parts) == 1:
            return parts[0]
        return CompoundPredicate(operator="all", predicates=parts)

    def _parse_key(self, key: str, value: Any) -> Predicate:
        if key == "keep":
            return CharsPredicate(self._chars(key, value), "any")
        elif key == "drop":
            return CharsPredicate(self._chars(key, value), "none")
        elif key == "class":
            try:
                return ClassPredicate(str(value))
            except ValueError as e:
                raise PredicateParseError(str(e)) from e
        elif key == "range":
            return self._parse_range(value)
        elif key in ("all", "any"):
            return CompoundPredicate(operator=key, predicates=self._parse_list(key, value))
        elif key == "not":
            return CompoundPredicate(operator="not", predicates=[self.parse(value)])
        elif key == "ref":
            return self._parse_ref(str(value))
        raise PredicateParseError(f"Unknown predicate key: {key}")

    def _chars(self, key: str, value: Any) -> str:
        if isinstance(value, list):
            value = "".join(str(v) for v in value)
        if not isinstance(value, (str, int)):
            raise PredicateParseError(f"'{key}' expects a string of characters")
        return str(value)

    def _parse_range(self, value: Any) -> Predicate:
        # Shorthand: "a-z"
        if isinstance(value, str) and len(value) == 3 and value[1] == "-":
            value = [value[0], value[2]]
        if not isinstance(value, list) or len(value) != 2:
            raise PredicateParseError(f"'range' expects [low, high], got {value!r}")
        low, high = (str(v) for v in value)
        try:
            return RangePredicate(low, high)
        except ValueError as e:
            raise PredicateParseError(str(e)) from e

    def _parse_list(self, key: str, value: Any) -> List[Predicate]:
        if not isinstance(value, list):
            raise PredicateParseError(f"'{key}' expects a list of predicates")
        return [self.parse(item) for item in value]

    def _parse_ref(self, name: str) -> Predicate:
        if self.registry is None:
            raise PredicateParseError(f"Cannot resolve predicate reference without a registry: {name}")
        if not self.registry.has(name):
            raise PredicateParseError(f"Unknown predicate reference: {name}")
        return self.registry.get(name)
