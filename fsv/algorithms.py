"""
View-building algorithms.

These derive new views from existing ones without mutating their inputs
and without copying the underlying buffer:
- compose: the same raw range under a conjunction of predicates
- split: segments of the filtered text between separator matches
- substr: a window of the filtered text by logical position
"""

import logging
from typing import Callable, Iterable, List

from fsv.core import View, ViewIndexError
from fsv.iterators import char_at
from fsv.predicates import CompoundPredicate

logger = logging.getLogger(__name__)


def compose(view: View, predicates: Iterable[Callable[[str], bool]]) -> View:
    """
    Re-filter a view's raw range with a list of predicates.

    A character is kept when every predicate accepts it, evaluated in order
    and stopping at the first rejection. The view's own predicate takes no
    part; an empty list therefore exposes the whole raw range.

    Example:
        view = View("c / c++")
        str(compose(view, [keep("c+/"), lambda c: c > " "]))  # 'c/c++'
    """
    predicates = list(predicates)
    logger.debug(f"Composing {len(predicates)} predicates over {view.raw_size()} raw characters")
    return View._over(
        view.data(),
        view.offset(),
        view.raw_size(),
        CompoundPredicate("all", predicates),
    )


def _segment(view: View, positions: List[int], first: int, last: int) -> View:
    """View over the raw span covering kept characters [first, last)."""
    if first == last:
        if first < len(positions):
            start = positions[first]
        else:
            start = view.offset() + view.raw_size()
        return View._over(view.data(), start, 0, view.predicate())

    start = positions[first]
    end = positions[last - 1] + 1
    return View._over(view.data(), start, end - start, view.predicate())


def split(view: View, token: View) -> List[View]:
    """
    Split a view's filtered text at every occurrence of a token's filtered text.

    Matches are found greedily from the left and never overlap. Matches at
    either end or next to each other produce empty segments. Each segment is
    a view over the original buffer carrying the original predicate.

    Returns:
        List of segments, never empty. When the separator or the view is
        empty the list holds a single copy of the view.

    Example:
        [str(s) for s in split(View("xax"), View("x"))]  # ['', 'a', '']
    """
    separator = str(token)
    if not separator:
        return [view.copy()]

    positions = list(view.kept_positions())
    if not positions:
        return [view.copy()]

    data = view.data()
    text = "".join(char_at(data, position) for position in positions)

    segments: List[View] = []
    width = len(separator)
    segment_start = 0
    cursor = 0
    while cursor + width <= len(text):
        if text.startswith(separator, cursor):
            segments.append(_segment(view, positions, segment_start, cursor))
            cursor += width
            segment_start = cursor
        else:
            cursor += 1
    segments.append(_segment(view, positions, segment_start, len(text)))

    logger.debug(f"Split {len(text)} filtered characters into {len(segments)} segments on {separator!r}")
    return segments


def substr(view: View, pos: int = 0, count: int = 0) -> View:
    """
    Window of `count` filtered characters starting at logical position `pos`.

    A `count` of zero or less takes every remaining character. The result
    keeps the view's predicate, so rejected characters that fall inside the
    returned raw span stay hidden.

    Raises:
        ViewIndexError: if pos is outside [0, size()]

    Example:
        view = View("c / c++", keep("c+/"))
        str(substr(view, 0, 3))  # 'c/c'
        str(substr(view, 2))     # 'c++'
    """
    positions = list(view.kept_positions())
    size = len(positions)
    if pos < 0 or pos > size:
        raise ViewIndexError(pos, f"substr position {pos} outside [0, {size}]")

    remaining = size - pos
    take = remaining if count <= 0 else min(count, remaining)
    return _segment(view, positions, pos, pos + take)
