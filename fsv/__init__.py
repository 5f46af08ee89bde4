"""
fsv - Filtered String Views

A View is a read-only, non-owning window over a character buffer that
presents only the characters a predicate keeps. Nothing is copied and the
predicate runs only when the view is read.

1. Views: View, with bidirectional iterators over kept characters
2. Predicates: composable with &, |, ~
3. Algorithms: compose, split, substr build new views from old ones
4. Registry: named predicates, loadable from YAML

Example:
    from fsv import View, split, vowels

    text = "Malamute"
    view = View(text, vowels())
    view.at(2)        # 'u'
    str(view)         # 'aaue'

    [str(s) for s in split(View("xax"), View("x"))]  # ['', 'a', '']
"""

__version__ = "1.0.0"

from fsv.core import (
    View,
    ViewIndexError,
)

from fsv.iterators import (
    FilteredIterator,
    ReverseIterator,
)

from fsv.predicates import (
    Predicate,
    TruePredicate,
    FalsePredicate,
    CharsPredicate,
    RangePredicate,
    ClassPredicate,
    CompoundPredicate,
    CustomPredicate,
    as_predicate,
    always,
    never,
    keep,
    drop,
    between,
    char_class,
    vowels,
    digits,
    letters,
    whitespace,
)

from fsv.algorithms import (
    compose,
    split,
    substr,
)

from fsv.registry import PredicateRegistry, PredicateNotFoundError
from fsv.parser import PredicateParseError, parse_predicate, parse_predicates_file

__all__ = [
    # Core
    "View",
    "ViewIndexError",
    "FilteredIterator",
    "ReverseIterator",
    # Predicates
    "Predicate",
    "TruePredicate",
    "FalsePredicate",
    "CharsPredicate",
    "RangePredicate",
    "ClassPredicate",
    "CompoundPredicate",
    "CustomPredicate",
    "as_predicate",
    "always",
    "never",
    "keep",
    "drop",
    "between",
    "char_class",
    "vowels",
    "digits",
    "letters",
    "whitespace",
    # Algorithms
    "compose",
    "split",
    "substr",
    # Registry
    "PredicateRegistry",
    "PredicateNotFoundError",
    # Parser
    "PredicateParseError",
    "parse_predicate",
    "parse_predicates_file",
]
