"""
Lazy sequences over lists, strings, mappings and generator functions.

Nothing is computed when a sequence is built or chained. Work happens only
when a pass is driven, either by Python iteration or by each(), and a pass
requests source elements one at a time. Stopping a pass (a visitor returning
False or Flow.STOP) closes the whole generator chain, so no further source
element is produced.
"""

import functools
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from collections.abc import Sequence as AbcSequence
from enum import Enum
from itertools import count, islice
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from models import GenerateArgs, LazySettings, RangeArgs

logger = logging.getLogger(__name__)

settings = LazySettings()

# Sentinel for "no argument given"
_MISSING = object()


class LazyError(Exception):
    """Base class for errors raised by this library."""
    pass


class ContractViolationError(LazyError, TypeError):
    """Raised when a caller passes arguments that break an operation's contract."""
    pass


class Flow(Enum):
    """Signal returned by a visitor to continue or stop a pass."""
    CONTINUE = "continue"
    STOP = "stop"

    @classmethod
    def of(cls, result) -> "Flow":
        # Only an explicit False (or STOP) stops; None and everything else continue.
        if result is False or result is cls.STOP:
            return cls.STOP
        return cls.CONTINUE


def _require_callable(value, name: str) -> None:
    if not callable(value):
        raise ContractViolationError(f"{name} must be callable, got {type(value).__name__}")


# ---------- small shared primitives ----------

def compare(x, y, fn: Optional[Callable] = None) -> int:
    """
    Compare two elements for sorting.

    With ``fn``, the extracted keys ``fn(x)`` and ``fn(y)`` are compared instead
    of the elements. Returns 1 if x > y, -1 if x < y, or 0 if they are equal.
    Every sorting operation goes through this function so ties break the same
    way everywhere.
    """
    if callable(fn):
        return compare(fn(x), fn(y))

    if x is y or x == y:
        return 0

    return 1 if x > y else -1


def contains(items, element) -> bool:
    """Linear scan for ``element`` by identity or equality."""
    for item in items:
        if item is element or item == element:
            return True
    return False


def contains_before(items, element, index: int) -> bool:
    """Like contains(), but only looks at the first ``index`` items."""
    return contains(islice(items, max(0, index)), element)


def swap(items: list, i: int, j: int) -> None:
    items[i], items[j] = items[j], items[i]


def get_first(sequence):
    """Return the first element of a sequence, or None if it is empty."""
    result = None

    def visit(element, index):
        nonlocal result
        result = element
        return Flow.STOP

    sequence.each(visit)
    return result


class UniqueSet:
    """
    Records which values have been seen during one pass.

    ``None``, booleans, numbers and strings go into a hash set under a
    (kind, value) key, so 1, True and "1" never collide with each other.
    Every other value is compared by identity against a list, since there
    is no general equality or hashing rule for arbitrary objects.
    """

    __slots__ = ("_keys", "_objects")

    def __init__(self):
        self._keys = set()
        self._objects = []

    @staticmethod
    def _key(value) -> Optional[Tuple[str, Any]]:
        if value is None:
            return ("absent", None)
        if isinstance(value, bool):
            return ("boolean", value)
        if isinstance(value, (int, float)):
            if value != value:
                # all NaNs count as one value
                return ("number", "NaN")
            return ("number", value)
        if isinstance(value, str):
            return ("string", value)
        return None

    def add(self, value) -> bool:
        """Add ``value``; True if it was not already present."""
        key = self._key(value)
        if key is not None:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

        if self._contains_object(value):
            return False
        self._objects.append(value)
        return True

    def contains(self, value) -> bool:
        key = self._key(value)
        if key is not None:
            return key in self._keys
        return self._contains_object(value)

    __contains__ = contains

    def _contains_object(self, value) -> bool:
        for obj in self._objects:
            if obj is value:
                return True
        return False

    def __len__(self):
        return len(self._keys) + len(self._objects)


def create_set(values=None) -> UniqueSet:
    """Build a UniqueSet from a value or a (possibly nested) list of values."""
    unique = UniqueSet()

    def visit(element, index):
        unique.add(element)

    Lazy(values or []).flatten().each(visit)
    return unique


# ---------- flattening ----------

def _is_nested(value) -> bool:
    if isinstance(value, StringLikeSequence):
        return False
    return isinstance(value, (list, tuple, ArrayLikeSequence))


def recursive_for_each(items, visit: Callable, counter: Optional[List[int]] = None) -> bool:
    """
    Call ``visit(element, index)`` for every leaf of a nested list structure.

    Lists, tuples and array-backed sequences nest; string sequences and
    anything else are leaves.
    ``counter`` is a one-element list shared by every level of the walk, so
    indices keep counting across nested lists instead of restarting. Returns
    True if every leaf was visited, or False as soon as ``visit`` stops the
    walk, in which case no later element at any depth is visited.
    """
    if counter is None:
        counter = [0]

    for element in items:
        if _is_nested(element):
            if not recursive_for_each(element, visit, counter):
                return False
        else:
            index = counter[0]
            counter[0] += 1
            if Flow.of(visit(element, index)) is Flow.STOP:
                return False
    return True


def _flatten_iter(items) -> Iterator:
    for element in items:
        if _is_nested(element):
            yield from _flatten_iter(element)
        else:
            yield element


# ---------- sequences ----------

class Sequence(ABC):
    """
    A chainable, lazy view over some source of elements.

    Subclasses implement ``__iter__`` as a generator; each call starts an
    independent pass, so a sequence can be consumed any number of times.
    Chaining methods return new sequences and never touch their parent.
    """

    @abstractmethod
    def __iter__(self) -> Iterator:
        ...

    def _visits(self) -> Iterator[Tuple[Any, Any]]:
        """Yield (element, index) pairs for each()."""
        for index, element in enumerate(self):
            yield element, index

    # --------- iteration protocol ----------
    def each(self, visitor: Callable) -> bool:
        """
        Call ``visitor(element, index)`` for each element in order.

        The pass ends early when the visitor returns False or Flow.STOP.
        Returns True if every element was visited, False if stopped early.
        """
        _require_callable(visitor, "visitor")
        visits = self._visits()
        try:
            for element, index in visits:
                if Flow.of(visitor(element, index)) is Flow.STOP:
                    return False
        finally:
            visits.close()
        return True

    def for_each(self, visitor: Callable) -> bool:
        """Alias for each()"""
        return self.each(visitor)

    def length(self) -> Optional[int]:
        """Number of elements, or None when it is not known without iterating."""
        return None

    # --------- chainable operators (lazy) ----------
    def map(self, fn: Callable) -> "Sequence":
        _require_callable(fn, "map function")
        return DerivedSequence(self, "map", lambda it: (fn(x) for x in it))

    def filter(self, pred: Callable) -> "Sequence":
        _require_callable(pred, "filter predicate")
        return DerivedSequence(self, "filter", lambda it: (x for x in it if pred(x)))

    def reject(self, pred: Callable) -> "Sequence":
        _require_callable(pred, "reject predicate")
        return DerivedSequence(self, "reject", lambda it: (x for x in it if not pred(x)))

    def take(self, n: int) -> "Sequence":
        n = int(n)
        return DerivedSequence(self, "take", lambda it: islice(it, max(0, n)))

    def first(self, n=_MISSING):
        """First element (or None); with ``n``, a sequence of the first n elements."""
        if n is _MISSING:
            for element in self:
                return element
            return None
        return self.take(n)

    def take_while(self, pred: Callable) -> "Sequence":
        _require_callable(pred, "take_while predicate")

        def _take_while(it):
            for x in it:
                if not pred(x):
                    return
                yield x
        return DerivedSequence(self, "take_while", _take_while)

    def drop(self, n: int = 1) -> "Sequence":
        n = int(n)
        return DerivedSequence(self, "drop", lambda it: islice(it, max(0, n), None))

    def skip(self, n: int) -> "Sequence":
        """Alias for drop()"""
        return self.drop(n)

    def rest(self, n: int = 1) -> "Sequence":
        """Alias for drop()"""
        return self.drop(n)

    def drop_while(self, pred: Callable) -> "Sequence":
        _require_callable(pred, "drop_while predicate")

        def _drop_while(it):
            dropping = True
            for x in it:
                if dropping and pred(x):
                    continue
                dropping = False
                yield x
        return DerivedSequence(self, "drop_while", _drop_while)

    def page(self, page_number: int, page_size: int) -> "Sequence":
        """Get a specific page of results (1-indexed)"""
        if page_number < 1:
            raise ValueError("Page number must be >= 1")
        return self.drop((page_number - 1) * page_size).take(page_size)

    def paginate(self, page_size: int) -> Iterator[list]:
        """Yield successive pages (lists) of up to page_size elements"""
        for page in self.chunk(page_size):
            yield list(page)

    def uniq(self, key: Optional[Callable] = None) -> "Sequence":
        """Drop repeated elements (or elements with a repeated key), keeping the first."""
        if key is not None:
            _require_callable(key, "uniq key")

        def _uniq(it):
            seen = UniqueSet()
            for x in it:
                if seen.add(key(x) if key else x):
                    yield x
        return DerivedSequence(self, "uniq", _uniq)

    def union(self, *others) -> "Sequence":
        return self.concat(*others).uniq()

    def without(self, *values) -> "Sequence":
        def _without(it):
            excluded = create_set(list(values))
            for x in it:
                if not excluded.contains(x):
                    yield x
        return DerivedSequence(self, "without", _without)

    def flatten(self) -> "Sequence":
        return FlattenedSequence(self)

    def compact(self) -> "Sequence":
        return DerivedSequence(self, "compact", lambda it: (x for x in it if x))

    def concat(self, *others) -> "Sequence":
        def _concat(it):
            yield from it
            for other in others:
                yield from Lazy(other)
        return DerivedSequence(self, "concat", _concat)

    def with_index(self) -> "Sequence":
        """Pair every element with its position: (index, element)."""
        return DerivedSequence(self, "with_index", lambda it: enumerate(it))

    def chunk(self, size: int) -> "Sequence":
        """Group elements into tuples of ``size``; the last one may be shorter."""
        size = int(size)
        if size < 1:
            raise ValueError("Chunk size must be >= 1")

        def _chunk(it):
            bucket = []
            for x in it:
                bucket.append(x)
                if len(bucket) == size:
                    yield tuple(bucket)
                    bucket = []
            if bucket:
                yield tuple(bucket)
        return DerivedSequence(self, "chunk", _chunk)

    def batch(self, size: int) -> "Sequence":
        """Alias for chunk()"""
        return self.chunk(size)

    def sort_by(self, key: Optional[Callable] = None, reverse: bool = False) -> "Sequence":
        """Stable sort using compare(); the source is read in full when iterated."""
        if key is not None:
            _require_callable(key, "sort key")
        order = functools.cmp_to_key(lambda x, y: compare(x, y, key))

        def _sort(it):
            yield from sorted(it, key=order, reverse=reverse)
        return DerivedSequence(self, "sort_by", _sort)

    def sort(self, reverse: bool = False) -> "Sequence":
        return self.sort_by(None, reverse=reverse)

    def reverse(self) -> "Sequence":
        return DerivedSequence(self, "reverse", lambda it: reversed(list(it)))

    def async_(self) -> "AsyncSequence":
        return AsyncSequence(self)

    # --------- terminal operations (force evaluation) ----------
    def to_list(self) -> list:
        return list(self)

    def to_array(self) -> list:
        """Alias for to_list()"""
        return self.to_list()

    def to_object(self) -> dict:
        """Build a dict from a sequence of (key, value) pairs."""
        return dict(self)

    def last(self, default=None):
        last_item = default
        for item in self:
            last_item = item
        return last_item

    def reduce(self, fn: Callable, initial=_MISSING):
        """Apply a function of two arguments cumulatively to items, from left to right"""
        _require_callable(fn, "reduce function")
        if initial is _MISSING:
            return functools.reduce(fn, self)
        return functools.reduce(fn, self, initial)

    def sum(self, start=0):
        total = start
        for item in self:
            total += item
        return total

    def count(self) -> int:
        known = self.length()
        if known is not None:
            return known
        total = 0
        for _ in self:
            total += 1
        return total

    def size(self) -> int:
        """Alias for count()"""
        return self.count()

    def find(self, pred: Callable):
        """Return the first element that satisfies the predicate, or None"""
        _require_callable(pred, "find predicate")
        for element in self:
            if pred(element):
                return element
        return None

    def index_of(self, value) -> int:
        """Position of the first element equal to ``value``, or -1."""
        for index, element in enumerate(self):
            if element is value or element == value:
                return index
        return -1

    def contains(self, value) -> bool:
        return self.index_of(value) != -1

    def some(self, pred: Optional[Callable] = None) -> bool:
        """True if any element is truthy (or satisfies the predicate)"""
        test = pred or bool
        for element in self:
            if test(element):
                return True
        return False

    def any(self, pred: Optional[Callable] = None) -> bool:
        """Alias for some()"""
        return self.some(pred)

    def every(self, pred: Optional[Callable] = None) -> bool:
        """True if all elements are truthy (or satisfy the predicate)"""
        test = pred or bool
        for element in self:
            if not test(element):
                return False
        return True

    def all(self, pred: Optional[Callable] = None) -> bool:
        """Alias for every()"""
        return self.every(pred)

    def is_empty(self) -> bool:
        for _ in self:
            return False
        return True

    def min(self, key: Optional[Callable] = None, default=None):
        """Smallest element per compare(), or ``default`` if empty"""
        return self._extreme(key, -1, default)

    def max(self, key: Optional[Callable] = None, default=None):
        """Largest element per compare(), or ``default`` if empty"""
        return self._extreme(key, 1, default)

    def _extreme(self, key, direction: int, default):
        best = _MISSING
        for item in self:
            if best is _MISSING or compare(item, best, key) == direction:
                best = item
        return default if best is _MISSING else best

    def group_by(self, key_fn: Callable) -> Dict[Any, list]:
        """Group elements by the result of key_fn"""
        _require_callable(key_fn, "group_by key")
        groups: Dict[Any, list] = {}
        for item in self:
            groups.setdefault(key_fn(item), []).append(item)
        return groups

    def count_by(self, key_fn: Callable) -> Dict[Any, int]:
        _require_callable(key_fn, "count_by key")
        counts: Dict[Any, int] = {}
        for item in self:
            k = key_fn(item)
            counts[k] = counts.get(k, 0) + 1
        return counts

    def join(self, delimiter: str = ",") -> str:
        return delimiter.join(str(x) for x in self)

    def __repr__(self):
        items = list(islice(iter(self), settings.repr_limit + 1))
        shown = ", ".join(repr(x) for x in items[:settings.repr_limit])
        if len(items) > settings.repr_limit:
            shown += ", ..."
        return f"{type(self).__name__}({shown})"


class DerivedSequence(Sequence):
    """A sequence produced by applying one operation to a parent sequence."""

    def __init__(self, parent: Sequence, op_name: str, transform: Callable[[Iterator], Iterator]):
        self.parent = parent
        self.op_name = op_name
        self._transform = transform
        logger.debug(f"Chained {op_name} onto {type(parent).__name__}")

    def __iter__(self):
        yield from self._transform(iter(self.parent))


class FlattenedSequence(Sequence):
    """Elements of nested lists, depth first, as one flat sequence."""

    def __init__(self, parent: Sequence):
        self.parent = parent

    def __iter__(self):
        yield from _flatten_iter(self.parent)

    def each(self, visitor: Callable) -> bool:
        _require_callable(visitor, "visitor")
        return recursive_for_each(self.parent, visitor)


class ArrayLikeSequence(Sequence):
    """A sequence with a known length and positional access."""

    @abstractmethod
    def get(self, index: int):
        ...

    @abstractmethod
    def length(self) -> int:
        ...

    def __iter__(self):
        for i in count():
            if i >= self.length():
                return
            yield self.get(i)

    def __getitem__(self, index: int):
        return self.get(index)


class ArrayWrapper(ArrayLikeSequence):
    """Wraps a list, tuple or other indexable sequence by reference."""

    def __init__(self, source):
        self.source = source

    def get(self, index: int):
        return self.source[index]

    def length(self) -> int:
        return len(self.source)

    def __iter__(self):
        yield from self.source


class StringLikeSequence(ArrayLikeSequence):
    """A sequence of characters."""

    def char_at(self, index: int) -> str:
        return self.get(index)

    def to_string(self) -> str:
        return "".join(self)


class StringWrapper(StringLikeSequence):
    """Wraps a str; elements are its characters."""

    def __init__(self, source: str):
        self.source = source

    def get(self, index: int) -> str:
        return self.source[index]

    def length(self) -> int:
        return len(self.source)

    def __iter__(self):
        yield from self.source


class ObjectLikeSequence(Sequence):
    """
    A sequence of key/value pairs.

    Iteration yields ``(key, value)`` tuples, and so do the element-returning
    terminals (first, find, last, min, ...). Only each() calls the visitor
    with ``(value, key)``.
    """

    @abstractmethod
    def get(self, key, default=None):
        ...

    def _visits(self):
        for key, value in self:
            yield value, key

    def keys(self) -> Sequence:
        return DerivedSequence(self, "keys", lambda it: (k for k, _ in it))

    def values(self) -> Sequence:
        return DerivedSequence(self, "values", lambda it: (v for _, v in it))

    def pairs(self) -> Sequence:
        return DerivedSequence(self, "pairs", lambda it: ([k, v] for k, v in it))


class ObjectWrapper(ObjectLikeSequence):
    """Wraps a mapping, an object's attributes, or None (no pairs)."""

    def __init__(self, source):
        self.source = source

    def _mapping(self) -> Mapping:
        if self.source is None:
            return {}
        if isinstance(self.source, Mapping):
            return self.source
        try:
            return vars(self.source)
        except TypeError:
            return {}

    def get(self, key, default=None):
        return self._mapping().get(key, default)

    def length(self) -> int:
        return len(self._mapping())

    def __iter__(self):
        yield from self._mapping().items()


class GeneratedSequence(Sequence):
    """
    Elements computed on demand by ``fn(index)``.

    With a length, indices ``0..length-1`` are produced. Without one the
    sequence is infinite and a pass ends only when its consumer stops it.
    Values are never cached, so an impure ``fn`` is called again on every pass.
    """

    def __init__(self, fn: Callable[[int], Any], length: Optional[int] = None):
        self.fn = fn
        self._length = length

    def length(self) -> Optional[int]:
        return self._length

    def is_infinite(self) -> bool:
        return self._length is None

    def get(self, index: int):
        if index < 0 or (self._length is not None and index >= self._length):
            raise IndexError(f"index {index} out of range")
        return self.fn(index)

    def __iter__(self):
        indices = count() if self._length is None else islice(count(), self._length)
        for i in indices:
            yield self.fn(i)

    def take(self, n: int) -> "GeneratedSequence":
        n = max(0, int(n))
        bound = n if self._length is None else min(n, self._length)
        return GeneratedSequence(self.fn, bound)

    def count(self) -> int:
        if self._length is None:
            raise LazyError("cannot count an infinite sequence")
        return self._length


class AsyncSequence(Sequence):
    """
    Wraps another sequence for ``async for`` consumption.

    Synchronous iteration and each() delegate to the wrapped sequence.
    """

    def __init__(self, parent: Sequence):
        self.parent = parent

    def __iter__(self):
        yield from self.parent

    async def __aiter__(self):
        for element in self.parent:
            yield element


# ---------- entry points ----------

def Lazy(source) -> Sequence:
    """
    Wrap ``source`` in the matching sequence type.

    - an existing Sequence is returned unchanged
    - a str becomes a StringWrapper over its characters
    - lists, tuples and other indexable sequences become an ArrayWrapper
    - anything else, including None and mappings, becomes an ObjectWrapper
      over key/value pairs

    Object wrapping reads a mapping's items or an object's instance
    attributes. Sets, generators and objects without a ``__dict__`` (slotted
    classes, ints) have neither, so they wrap as empty sequences. Pass
    ``list(source)`` to iterate their contents.
    """
    if isinstance(source, Sequence):
        return source
    if isinstance(source, str):
        logger.debug(f"Wrapping str of length {len(source)} as StringWrapper")
        return StringWrapper(source)
    if isinstance(source, AbcSequence):
        logger.debug(f"Wrapping {type(source).__name__} as ArrayWrapper")
        return ArrayWrapper(source)
    logger.debug(f"Wrapping {type(source).__name__} as ObjectWrapper")
    return ObjectWrapper(source)


def generate(fn: Callable[[int], Any], length: Optional[int] = None) -> GeneratedSequence:
    """
    Create a sequence whose element at index i is ``fn(i)``.

    Omitting ``length`` makes the sequence infinite.
    """
    try:
        args = GenerateArgs(fn=fn, length=length)
    except ValidationError as e:
        raise ContractViolationError(f"Invalid generate() arguments: {e}") from e
    logger.debug(f"Generated sequence with length={args.length}")
    return GeneratedSequence(args.fn, args.length)


def range(*args) -> GeneratedSequence:
    """
    Numbers from start up to (not including) stop, stepping by step.

    range(stop), range(start, stop) and range(start, stop, step) are accepted.
    A step that moves away from stop, or a zero step, gives an empty sequence.
    """
    try:
        bounds = RangeArgs.from_positional(*args)
    except (ValidationError, ValueError) as e:
        raise ContractViolationError(f"Invalid range() arguments {args!r}: {e}") from e
    start, step = bounds.start, bounds.step
    logger.debug(f"range start={start} stop={bounds.stop} step={step} length={bounds.length()}")
    return GeneratedSequence(lambda i: start + step * i, bounds.length())


def repeat(value, count: Optional[int] = None) -> GeneratedSequence:
    """``value`` repeated ``count`` times, or forever when count is omitted."""
    return generate(lambda i: value, count)


__all__ = [
    "Lazy",
    "generate",
    "range",
    "repeat",
    "compare",
    "contains",
    "contains_before",
    "swap",
    "get_first",
    "create_set",
    "recursive_for_each",
    "UniqueSet",
    "Flow",
    "LazyError",
    "ContractViolationError",
    "Sequence",
    "ArrayLikeSequence",
    "ObjectLikeSequence",
    "StringLikeSequence",
    "GeneratedSequence",
    "AsyncSequence",
]
