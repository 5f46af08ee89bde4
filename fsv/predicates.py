"""
Character predicates for filtered views.

Predicates are composable boolean functions over single characters.
Every predicate is callable, so a View can take either a Predicate
instance or any plain function of one character.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List
import string


class Predicate(ABC):
    """
    Abstract base for character predicates.

    A predicate is a function: char → bool
    Predicates can be combined with &, |, ~ operators.
    """

    @abstractmethod
    def matches(self, char: str) -> bool:
        """Test if a character should be kept."""
        pass

    def describe(self) -> str:
        """Short human readable form, used by the CLI."""
        return self.__class__.__name__

    def __call__(self, char: str) -> bool:
        return self.matches(char)

    def __and__(self, other: "Predicate") -> "Predicate":
        """Logical AND: self & other"""
        return CompoundPredicate("all", [self, as_predicate(other)])

    def __or__(self, other: "Predicate") -> "Predicate":
        """Logical OR: self | other"""
        return CompoundPredicate("any", [self, as_predicate(other)])

    def __invert__(self) -> "Predicate":
        """Logical NOT: ~self"""
        return CompoundPredicate("not", [self])


@dataclass
class TruePredicate(Predicate):
    """Always matches."""

    def matches(self, char: str) -> bool:
        return True

    def describe(self) -> str:
        return "true"


@dataclass
class FalsePredicate(Predicate):
    """Never matches."""

    def matches(self, char: str) -> bool:
        return False

    def describe(self) -> str:
        return "false"


@dataclass
class CharsPredicate(Predicate):
    """
    Match characters by membership in a set.

    Modes:
    - 'any': keep characters found in `chars`
    - 'none': keep characters NOT found in `chars`
    """
    chars: str
    mode: str = "any"  # 'any', 'none'

    def __post_init__(self):
        if self.mode not in ("any", "none"):
            raise ValueError(f"Unknown chars mode: {self.mode}")
        self._members = frozenset(self.chars)

    def matches(self, char: str) -> bool:
        if self.mode == "any":
            return char in self._members
        return char not in self._members

    def describe(self) -> str:
        verb = "keep" if self.mode == "any" else "drop"
        return f"{verb}:{self.chars!r}"


@dataclass
class RangePredicate(Predicate):
    """Match characters whose code lies in [low, high], inclusive."""
    low: str
    high: str

    def __post_init__(self):
        if len(self.low) != 1 or len(self.high) != 1:
            raise ValueError("Range bounds must be single characters")

    def matches(self, char: str) -> bool:
        return self.low <= char <= self.high

    def describe(self) -> str:
        return f"range:{self.low!r}-{self.high!r}"


VOWELS = "aeiouAEIOU"

CHARACTER_CLASSES = {
    "alpha": lambda c: c in string.ascii_letters,
    "digit": lambda c: c in string.digits,
    "alnum": lambda c: c in string.ascii_letters or c in string.digits,
    "space": lambda c: c in string.whitespace,
    "upper": lambda c: c in string.ascii_uppercase,
    "lower": lambda c: c in string.ascii_lowercase,
    "punct": lambda c: c in string.punctuation,
    "vowel": lambda c: c in VOWELS,
    "consonant": lambda c: c in string.ascii_letters and c not in VOWELS,
    "hex": lambda c: c in string.hexdigits,
    "printable": lambda c: c in string.printable,
}


@dataclass
class ClassPredicate(Predicate):
    """
    Match characters by ASCII character class.

    Classes: alpha, digit, alnum, space, upper, lower, punct,
    vowel, consonant, hex, printable
    """
    kind: str

    def __post_init__(self):
        if self.kind not in CHARACTER_CLASSES:
            raise ValueError(f"Unknown character class: {self.kind}")

    def matches(self, char: str) -> bool:
        return CHARACTER_CLASSES[self.kind](char)

    def describe(self) -> str:
        return f"class:{self.kind}"


@dataclass
class CompoundPredicate(Predicate):
    """
    Logical combination of predicates.

    Operators:
    - 'all': AND (all must match, left to right, stops at first rejection)
    - 'any': OR (at least one must match, stops at first acceptance)
    - 'not': NOT (negate single predicate)
    """
    operator: str  # 'all', 'any', 'not'
    predicates: List[Callable[[str], bool]] = field(default_factory=list)

    def matches(self, char: str) -> bool:
        if self.operator == "all":
            return all(p(char) for p in self.predicates)
        elif self.operator == "any":
            return any(p(char) for p in self.predicates)
        elif self.operator == "not":
            if self.predicates:
                return not self.predicates[0](char)
            return True
        return False

    def describe(self) -> str:
        parts = [_describe(p) for p in self.predicates]
        if self.operator == "not":
            return f"not({parts[0] if parts else ''})"
        return f"{self.operator}({', '.join(parts)})"


@dataclass
class CustomPredicate(Predicate):
    """
    Custom predicate with user-defined function.

    Useful for conditions that can't be expressed declaratively.
    """
    func: Callable[[str], bool]
    description: str = "custom predicate"

    def matches(self, char: str) -> bool:
        return bool(self.func(char))

    def describe(self) -> str:
        return self.description


def _describe(predicate: Callable[[str], bool]) -> str:
    if isinstance(predicate, Predicate):
        return predicate.describe()
    return getattr(predicate, "__name__", "callable")


def as_predicate(func: Callable[[str], bool]) -> Predicate:
    """Wrap a plain callable so it supports the predicate operators."""
    if isinstance(func, Predicate):
        return func
    if not callable(func):
        raise TypeError(f"Predicate must be callable, got {type(func).__name__}")
    return CustomPredicate(func, _describe(func))


# Predicate builder helpers
def always() -> TruePredicate:
    """Create a predicate that keeps everything."""
    return TruePredicate()


def never() -> FalsePredicate:
    """Create a predicate that keeps nothing."""
    return FalsePredicate()


def keep(chars: str) -> CharsPredicate:
    """Create a predicate keeping only the given characters."""
    return CharsPredicate(chars, "any")


def drop(chars: str) -> CharsPredicate:
    """Create a predicate removing the given characters."""
    return CharsPredicate(chars, "none")


def between(low: str, high: str) -> RangePredicate:
    """Create an inclusive character range predicate."""
    return RangePredicate(low, high)


def char_class(kind: str) -> ClassPredicate:
    """Create a character class predicate."""
    return ClassPredicate(kind)


def vowels() -> ClassPredicate:
    return ClassPredicate("vowel")


def digits() -> ClassPredicate:
    return ClassPredicate("digit")


def letters() -> ClassPredicate:
    return ClassPredicate("alpha")


def whitespace() -> ClassPredicate:
    return ClassPredicate("space")
