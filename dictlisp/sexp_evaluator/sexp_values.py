"""
Runtime value model for the S-expression evaluator.

Values are plain Python objects:

- numbers: `int` / `float` (a `bool` is never a number here)
- booleans: `bool`
- strings: `str`
- primitive procedures: `PrimOp` nodes (they evaluate to themselves)
- closures: `Closure`
- S-expression data: `EMPTY_SEXP`, `SymbolSExp`, `CompoundSExp`
- native dictionaries: `DictValue`

The S-expression family doubles as the substrate for the association-list
dictionary encoding: a proper list of `(symbol . value)` pairs.
"""
import logging
from typing import Any, Dict, Iterable, Iterator, Optional

from dictlisp.syntax.ast_nodes import PrimOp
from .sexp_closure import Closure

logger = logging.getLogger(__name__)

Value = Any  # General type hint for runtime values


class EmptySExp:
    """The empty list. Use the module-level `EMPTY_SEXP` singleton."""

    __slots__ = ()
    _instance: Optional["EmptySExp"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, EmptySExp)

    def __hash__(self) -> int:
        return hash("EmptySExp")

    def __repr__(self) -> str:
        return "EmptySExp()"


EMPTY_SEXP = EmptySExp()


class SymbolSExp:
    """A symbolic atom. Equality is by name."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, SymbolSExp) and self.name == other.name

    def __hash__(self) -> int:
        return hash(("SymbolSExp", self.name))

    def __repr__(self) -> str:
        return f"SymbolSExp({self.name!r})"


class CompoundSExp:
    """A pair cell (cons). Lists are right-nested chains ending in EMPTY_SEXP."""

    __slots__ = ("head", "tail")

    def __init__(self, head: Value, tail: Value):
        self.head = head
        self.tail = tail

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CompoundSExp):
            return False
        left, right = self, other
        # walk the spine iteratively so long lists do not exhaust the stack
        while isinstance(left, CompoundSExp) and isinstance(right, CompoundSExp):
            if not values_equal(left.head, right.head):
                return False
            left, right = left.tail, right.tail
        return values_equal(left, right)

    def __hash__(self) -> int:
        return hash(("CompoundSExp", repr(self)))

    def __repr__(self) -> str:
        return f"CompoundSExp({self.head!r}, {self.tail!r})"

    def __iter__(self) -> Iterator[Value]:
        """Iterate over the elements of the list headed by this cell (ignores an improper tail)."""
        cell: Value = self
        while isinstance(cell, CompoundSExp):
            yield cell.head
            cell = cell.tail


class DictValue:
    """
    Native dictionary value: an insertion-ordered mapping from string key to value.
    """

    __slots__ = ("entries",)

    def __init__(self, entries: Optional[Dict[str, Value]] = None):
        self.entries: Dict[str, Value] = dict(entries) if entries is not None else {}

    def lookup(self, key: str) -> Value:
        """Return the value bound to `key`; raises KeyError when absent."""
        return self.entries[key]

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DictValue) or list(self.entries) != list(other.entries):
            return False
        return all(values_equal(v, other.entries[k]) for k, v in self.entries.items())

    def __hash__(self) -> int:
        return hash(("DictValue", tuple(self.entries)))

    def __repr__(self) -> str:
        return f"DictValue({self.entries!r})"


def values_equal(left: Value, right: Value) -> bool:
    """Structural equality that never lets a boolean equal a number."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


# --- Predicates ---

def is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_boolean(value: Value) -> bool:
    return isinstance(value, bool)


def is_string(value: Value) -> bool:
    return isinstance(value, str)


def is_sexp(value: Value) -> bool:
    """True for every value that can appear inside quoted data."""
    return isinstance(value, (EmptySExp, SymbolSExp, CompoundSExp, bool, int, float, str, PrimOp, Closure))


def is_proper_list(value: Value) -> bool:
    while isinstance(value, CompoundSExp):
        value = value.tail
    return isinstance(value, EmptySExp)


def is_valid_dict_pair(value: Value) -> bool:
    return isinstance(value, CompoundSExp) and isinstance(value.head, SymbolSExp)


def is_valid_dict_format(value: Value) -> bool:
    """
    Check the association-list dictionary encoding.

    Valid when every element is a cons cell whose car is a symbol and the
    spine terminates in the empty list.
    """
    if isinstance(value, EmptySExp):
        return True
    if isinstance(value, CompoundSExp):
        return is_valid_dict_pair(value.head) and is_valid_dict_format(value.tail)
    return False


# --- Constructors and conversions ---

def make_list(values: Iterable[Value]) -> Value:
    """Right-fold `values` into a proper list terminated by EMPTY_SEXP."""
    result: Value = EMPTY_SEXP
    for value in reversed(list(values)):
        result = CompoundSExp(value, result)
    return result


def alist_to_dict_value(alist: Value) -> DictValue:
    """
    Normalize a well-formed association list into a DictValue.

    The first occurrence of a key wins, matching the search order of the
    'get' primitive. Raises ValueError if `alist` is not a valid dictionary encoding.
    """
    if not is_valid_dict_format(alist):
        raise ValueError(f"Not a valid association list: {alist!r}")
    entries: Dict[str, Value] = {}
    for pair in alist:
        entries.setdefault(pair.head.name, pair.tail)
    logger.debug(f"Normalized association list to DictValue with keys {list(entries)}")
    return DictValue(entries)
