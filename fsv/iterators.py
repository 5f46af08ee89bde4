"""
Bidirectional cursors over the kept characters of a view.

An iterator owns everything it needs to move: the borrowed buffer, the raw
bounds of the range and a copy of the predicate. It never refers back to the
View that created it.

The cursor API mirrors a bidirectional iterator (value, increment,
decrement, next, prev) and also speaks the Python iteration protocol, so
`for char in view` and `list(reversed(view))` work as expected.
"""

from typing import Any, Callable, Optional


def char_at(buffer: Any, index: int) -> str:
    """Read one character from a str or bytes-like buffer."""
    item = buffer[index]
    if isinstance(item, int):
        return chr(item)
    return item


class FilteredIterator:
    """
    Cursor over the raw range [start, end) that stops only on kept characters.

    `current` is always a position whose character satisfies the predicate,
    or `end`.
    """

    __slots__ = ("_buffer", "_start", "_end", "_current", "_predicate")

    def __init__(
        self,
        buffer: Any,
        start: int,
        end: int,
        current: int,
        predicate: Callable[[str], bool],
    ):
        self._buffer = buffer
        self._start = start
        self._end = end
        self._current = current
        self._predicate = predicate

    @classmethod
    def first(cls, buffer: Any, start: int, end: int, predicate) -> "FilteredIterator":
        """Iterator at the first kept position, or at end if there is none."""
        it = cls(buffer, start, end, start, predicate)
        it._skip_forward()
        return it

    @classmethod
    def past_end(cls, buffer: Any, start: int, end: int, predicate) -> "FilteredIterator":
        return cls(buffer, start, end, end, predicate)

    @property
    def position(self) -> int:
        """Raw position of the cursor within the buffer."""
        return self._current

    @property
    def at_end(self) -> bool:
        return self._current == self._end

    @property
    def value(self) -> str:
        """Dereference: the kept character under the cursor."""
        if self._current == self._end:
            raise ValueError("Cannot dereference an end iterator")
        return char_at(self._buffer, self._current)

    def _keeps(self, position: int) -> bool:
        return bool(self._predicate(char_at(self._buffer, position)))

    def _skip_forward(self) -> None:
        while self._current != self._end and not self._keeps(self._current):
            self._current += 1

    def increment(self) -> "FilteredIterator":
        """Prefix ++: move to the next kept character or to end."""
        if self._current != self._end:
            self._current += 1
            self._skip_forward()
        return self

    def decrement(self) -> "FilteredIterator":
        """Prefix --: move to the previous kept character.

        Decrementing the first kept position is not meaningful; the cursor
        then stops at the start of the raw range.
        """
        if self._current != self._start:
            self._current -= 1
            while self._current != self._start and not self._keeps(self._current):
                self._current -= 1
        return self

    def post_increment(self) -> "FilteredIterator":
        """Postfix ++: advance and return the prior position."""
        prior = self.copy()
        self.increment()
        return prior

    def post_decrement(self) -> "FilteredIterator":
        """Postfix --: step back and return the prior position."""
        prior = self.copy()
        self.decrement()
        return prior

    def next(self, n: int = 1) -> "FilteredIterator":
        """Return a new iterator n kept characters ahead (negative n goes back)."""
        if n < 0:
            return self.prev(-n)
        it = self.copy()
        for _ in range(n):
            it.increment()
        return it

    def prev(self, n: int = 1) -> "FilteredIterator":
        """Return a new iterator n kept characters back."""
        if n < 0:
            return self.next(-n)
        it = self.copy()
        for _ in range(n):
            it.decrement()
        return it

    def copy(self) -> "FilteredIterator":
        return FilteredIterator(
            self._buffer, self._start, self._end, self._current, self._predicate
        )

    def find_previous(self) -> Optional[int]:
        """Raw position of the kept character before the cursor, if any."""
        position = self._current
        while position != self._start:
            position -= 1
            if self._keeps(position):
                return position
        return None

    def _move_to(self, position: int) -> str:
        """Place the cursor on a kept raw position and return its character."""
        self._current = position
        return self.value

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FilteredIterator):
            return self._current == other._current
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __iter__(self) -> "FilteredIterator":
        return self

    def __next__(self) -> str:
        if self._current == self._end:
            raise StopIteration
        char = char_at(self._buffer, self._current)
        self.increment()
        return char

    def __repr__(self) -> str:
        return f"FilteredIterator(position={self._current}, start={self._start}, end={self._end})"


class ReverseIterator:
    """
    Reverse adapter over a FilteredIterator.

    Follows the usual reverse-iterator convention: the adapter built from
    `end()` is `rbegin()`, the one built from `begin()` is `rend()`, and the
    value of a reverse iterator is the character just before its base.
    """

    __slots__ = ("_base",)

    def __init__(self, base: FilteredIterator):
        self._base = base.copy()

    def base(self) -> FilteredIterator:
        """Copy of the underlying forward iterator."""
        return self._base.copy()

    @property
    def value(self) -> str:
        return self._base.prev().value

    def increment(self) -> "ReverseIterator":
        self._base.decrement()
        return self

    def decrement(self) -> "ReverseIterator":
        self._base.increment()
        return self

    def post_increment(self) -> "ReverseIterator":
        prior = self.copy()
        self.increment()
        return prior

    def post_decrement(self) -> "ReverseIterator":
        prior = self.copy()
        self.decrement()
        return prior

    def next(self, n: int = 1) -> "ReverseIterator":
        return ReverseIterator(self._base.prev(n))

    def prev(self, n: int = 1) -> "ReverseIterator":
        return ReverseIterator(self._base.next(n))

    def copy(self) -> "ReverseIterator":
        return ReverseIterator(self._base)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ReverseIterator):
            return self._base == other._base
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __iter__(self) -> "ReverseIterator":
        return self

    def __next__(self) -> str:
        # Stop once no kept character remains before the base.
        position = self._base.find_previous()
        if position is None:
            raise StopIteration
        return self._base._move_to(position)

    def __repr__(self) -> str:
        return f"ReverseIterator(base={self._base!r})"
