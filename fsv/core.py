"""
Core view abstraction.

This module defines the fundamental types of the library:
- View: a read-only, non-owning filtered view over a character buffer
- ViewIndexError: raised by bounds-checked access into the filtered text

A View borrows its buffer. It never copies characters and never calls its
predicate until a read needs it, so every read re-scans the raw range.
The caller keeps the buffer alive and unmodified for as long as views
built over it are in use.
"""

import copy
from typing import Any, Callable, Iterator, Optional, Tuple, Union

from fsv.iterators import FilteredIterator, ReverseIterator, char_at
from fsv.predicates import TruePredicate

Buffer = Union[str, bytes, bytearray, memoryview]
CharPredicate = Callable[[str], bool]


class ViewIndexError(IndexError):
    """Raised when a logical index falls outside the filtered text."""

    def __init__(self, index: int, message: Optional[str] = None):
        self.index = index
        super().__init__(message or f"View.at({index}): invalid index")


def _copy_predicate(predicate: Optional[CharPredicate]) -> CharPredicate:
    if predicate is None:
        return TruePredicate()
    if not callable(predicate):
        raise TypeError(f"Predicate must be callable, got {type(predicate).__name__}")
    return copy.deepcopy(predicate)


def _terminated_length(buffer: memoryview) -> int:
    """Length of a raw buffer up to its first NUL byte."""
    for index, byte in enumerate(buffer):
        if byte == 0:
            return index
    return len(buffer)


class View:
    """
    Filtered, non-owning view over a character buffer.

    Example:
        text = "Malamute"
        view = View(text, vowels())
        view.size()   # 4
        view.at(2)    # 'u'
        str(view)     # 'aaue'
        view.data() is text  # True

    Construction forms:
    - View(): empty, keeps everything
    - View(text, predicate=None): borrows a str
    - View(buffer, predicate=None): borrows a bytes-like buffer, up to its
      first NUL byte
    """

    __slots__ = ("_data", "_offset", "_length", "_predicate")

    def __init__(self, source: Optional[Buffer] = None, predicate: Optional[CharPredicate] = None):
        if source is None:
            self._data = None
            self._length = 0
        elif isinstance(source, str):
            self._data = source
            self._length = len(source)
        elif isinstance(source, (bytes, bytearray, memoryview)):
            self._data = source
            self._length = _terminated_length(memoryview(source).cast("B"))
        else:
            raise TypeError(f"Cannot build a View over {type(source).__name__}")
        self._offset = 0
        self._predicate = _copy_predicate(predicate)

    @classmethod
    def _over(
        cls,
        data: Optional[Buffer],
        offset: int,
        length: int,
        predicate: Optional[CharPredicate],
    ) -> "View":
        """Build a view over an explicit raw range of a borrowed buffer."""
        view = cls.__new__(cls)
        view._data = data
        view._offset = offset
        view._length = length
        view._predicate = _copy_predicate(predicate)
        return view

    # -- raw range -----------------------------------------------------

    @property
    def _bounds(self) -> Tuple[int, int]:
        return self._offset, self._offset + self._length

    def data(self) -> Optional[Buffer]:
        """The borrowed buffer, unfiltered, or None for an empty default view."""
        return self._data

    def offset(self) -> int:
        """Raw start of this view's range within data()."""
        return self._offset

    def raw_size(self) -> int:
        """Number of raw characters in the range, ignoring the predicate."""
        return self._length

    def raw(self) -> str:
        """The unfiltered text of the raw range."""
        start, end = self._bounds
        return "".join(char_at(self._data, i) for i in range(start, end))

    def predicate(self) -> CharPredicate:
        """The stored predicate. It is returned, never invoked."""
        return self._predicate

    def kept_positions(self) -> Iterator[int]:
        """Raw positions whose character satisfies the predicate, in order."""
        start, end = self._bounds
        predicate = self._predicate
        data = self._data
        for position in range(start, end):
            if predicate(char_at(data, position)):
                yield position

    # -- filtered reads ------------------------------------------------

    def size(self) -> int:
        """Number of kept characters. Recomputed on every call."""
        return sum(1 for _ in self.kept_positions())

    def empty(self) -> bool:
        return self.size() == 0

    def _lookup(self, index: int) -> Optional[str]:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"View indices must be integers, not {type(index).__name__}")
        if index < 0:
            return None
        for logical, position in enumerate(self.kept_positions()):
            if logical == index:
                return char_at(self._data, position)
        return None

    def at(self, index: int) -> str:
        """
        Bounds-checked access into the filtered text.

        Args:
            index: logical index; negative values are invalid

        Raises:
            ViewIndexError: if index < 0 or index >= size()
            TypeError: if index is not an int
        """
        char = self._lookup(index)
        if char is None:
            raise ViewIndexError(index)
        return char

    def __getitem__(self, index: int) -> str:
        char = self._lookup(index)
        if char is None:
            raise ViewIndexError(index, f"view index out of range: {index}")
        return char

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return not self.empty()

    def __str__(self) -> str:
        data = self._data
        return "".join(char_at(data, position) for position in self.kept_positions())

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)

    def __repr__(self) -> str:
        return f"View({str(self)!r})"

    # -- iteration -----------------------------------------------------

    def begin(self) -> FilteredIterator:
        start, end = self._bounds
        return FilteredIterator.first(self._data, start, end, copy.deepcopy(self._predicate))

    def end(self) -> FilteredIterator:
        start, end = self._bounds
        return FilteredIterator.past_end(self._data, start, end, copy.deepcopy(self._predicate))

    def rbegin(self) -> ReverseIterator:
        return ReverseIterator(self.end())

    def rend(self) -> ReverseIterator:
        return ReverseIterator(self.begin())

    # Views cannot be mutated through their iterators, so the read-only
    # entry points are the same cursors.
    cbegin = begin
    cend = end
    crbegin = rbegin
    crend = rend

    def __iter__(self) -> FilteredIterator:
        return self.begin()

    def __reversed__(self) -> ReverseIterator:
        return self.rbegin()

    # -- value semantics -----------------------------------------------

    def copy(self) -> "View":
        """Duplicate the buffer reference, range and predicate."""
        return View._over(self._data, self._offset, self._length, self._predicate)

    def __copy__(self) -> "View":
        return self.copy()

    def move(self) -> "View":
        """
        Transfer this view's state into a new View.

        Afterwards this view is indistinguishable from View(): no buffer,
        zero length and an always-true predicate.
        """
        moved = View.__new__(View)
        moved._data = self._data
        moved._offset = self._offset
        moved._length = self._length
        moved._predicate = self._predicate
        self._data = None
        self._offset = 0
        self._length = 0
        self._predicate = TruePredicate()
        return moved

    # -- comparison ----------------------------------------------------

    def compare(self, other: Union["View", str]) -> int:
        """
        Three-way comparison of filtered content by character code.

        Returns -1, 0 or 1. A str operand is compared as an unfiltered view.
        """
        other = _as_view(other)
        mine = iter(self)
        theirs = iter(other)
        while True:
            a = next(mine, None)
            b = next(theirs, None)
            if a is None and b is None:
                return 0
            if a is None:
                return -1
            if b is None:
                return 1
            if a != b:
                return -1 if ord(a) < ord(b) else 1

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) == 0

    def __ne__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) != 0

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) < 0

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) > 0

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) <= 0

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, (View, str)):
            return NotImplemented
        return self.compare(other) >= 0

    __hash__ = None


def _as_view(value: Union[View, str]) -> View:
    if isinstance(value, View):
        return value
    if isinstance(value, str):
        return View(value)
    raise TypeError(f"Cannot compare View with {type(value).__name__}")
