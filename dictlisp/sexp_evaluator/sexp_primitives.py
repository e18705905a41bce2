"""
Processor for S-expression primitives.

Primitives are pure functions over already-evaluated argument values.
PrimitiveProcessor holds one applier per PrimitiveOperator member; the
dispatch table is checked at import time so a new operator cannot be added
to the enumeration without an applier.
"""
import logging
from functools import reduce
from typing import Callable, Dict, List, Union

from dictlisp.system.errors import FailureReason, SexpEvaluationError
from dictlisp.syntax.ast_nodes import PrimOp, PrimitiveOperator
from dictlisp.syntax.unparser import format_value
from .sexp_values import (
    CompoundSExp, DictValue, EmptySExp, SymbolSExp, Value,
    is_boolean, is_number, is_proper_list, is_sexp, is_string,
    is_valid_dict_format, is_valid_dict_pair, make_list,
)

logger = logging.getLogger(__name__)

Applier = Callable[['PrimitiveProcessor', List[Value]], Value]


def _format_args(args: List[Value]) -> str:
    return "[" + ", ".join(format_value(a) for a in args) + "]"


def _fail(message: str, reason: FailureReason, op: str, args: List[Value]) -> SexpEvaluationError:
    expression = "(" + " ".join([op] + [format_value(a) for a in args]) + ")"
    return SexpEvaluationError(message, reason, expression=expression)


class PrimitiveProcessor:
    """
    Applies primitives for the SexpEvaluator.
    Each method implements a specific primitive over evaluated arguments
    and raises SexpEvaluationError on failure.
    """

    # --- Helpers ---

    def _check_arity(self, op: str, args: List[Value], expected: int) -> None:
        if len(args) != expected:
            noun = "argument" if expected == 1 else "arguments"
            raise _fail(f"'{op}' expects exactly {expected} {noun}, got {len(args)}", 'arity_mismatch', op, args)

    def _check_numbers(self, op: str, args: List[Value]) -> None:
        if not all(is_number(a) for a in args):
            raise _fail(f"'{op}' expects numbers only: {_format_args(args)}", 'type_error', op, args)

    # --- Arithmetic ---

    def apply_add_primitive(self, args: List[Value]) -> Value:
        self._check_numbers("+", args)
        return reduce(lambda x, y: x + y, args, 0)

    def apply_multiply_primitive(self, args: List[Value]) -> Value:
        self._check_numbers("*", args)
        return reduce(lambda x, y: x * y, args, 1)

    def apply_subtract_primitive(self, args: List[Value]) -> Value:
        self._check_arity("-", args, 2)
        self._check_numbers("-", args)
        return args[0] - args[1]

    def apply_divide_primitive(self, args: List[Value]) -> Value:
        self._check_arity("/", args, 2)
        self._check_numbers("/", args)
        try:
            return args[0] / args[1]
        except ZeroDivisionError as e:
            raise _fail(f"'/' division by zero: {_format_args(args)}", 'division_by_zero', "/", args) from e

    # --- Comparison and logic ---

    def _compare(self, op: str, args: List[Value], compare: Callable[[Value, Value], bool]) -> bool:
        self._check_arity(op, args, 2)
        x, y = args
        if (is_number(x) and is_number(y)) or (is_string(x) and is_string(y)):
            return compare(x, y)
        raise _fail(f"'{op}' expects two numbers or two strings: {_format_args(args)}", 'type_error', op, args)

    def apply_less_than_primitive(self, args: List[Value]) -> bool:
        return self._compare("<", args, lambda x, y: x < y)

    def apply_greater_than_primitive(self, args: List[Value]) -> bool:
        return self._compare(">", args, lambda x, y: x > y)

    def _raw_equal(self, x: Value, y: Value) -> bool:
        """Equality without coercion: atoms by value, compound structure by identity."""
        if is_number(x) and is_number(y):
            return x == y
        if isinstance(x, (bool, str, SymbolSExp, EmptySExp)) or isinstance(y, (bool, str, SymbolSExp, EmptySExp)):
            return type(x) is type(y) and x == y
        return x is y

    def apply_num_equal_primitive(self, args: List[Value]) -> bool:
        self._check_arity("=", args, 2)
        return self._raw_equal(args[0], args[1])

    def apply_string_equal_primitive(self, args: List[Value]) -> bool:
        self._check_arity("string=?", args, 2)
        return self._raw_equal(args[0], args[1])

    def apply_not_primitive(self, args: List[Value]) -> bool:
        """Only the boolean #f is false, exactly as in 'if'."""
        self._check_arity("not", args, 1)
        return args[0] is False

    def _apply_boolean_op(self, op: str, args: List[Value], combine: Callable[[bool, bool], bool]) -> bool:
        self._check_arity(op, args, 2)
        if not (is_boolean(args[0]) and is_boolean(args[1])):
            raise _fail(f"Arguments to \"{op}\" not booleans: {_format_args(args)}", 'type_error', op, args)
        return combine(args[0], args[1])

    def apply_and_primitive(self, args: List[Value]) -> bool:
        return self._apply_boolean_op("and", args, lambda x, y: x and y)

    def apply_or_primitive(self, args: List[Value]) -> bool:
        return self._apply_boolean_op("or", args, lambda x, y: x or y)

    def apply_eq_primitive(self, args: List[Value]) -> bool:
        self._check_arity("eq?", args, 2)
        x, y = args
        if isinstance(x, SymbolSExp) and isinstance(y, SymbolSExp):
            return x.name == y.name
        if isinstance(x, EmptySExp) and isinstance(y, EmptySExp):
            return True
        if is_number(x) and is_number(y):
            return x == y
        if is_string(x) and is_string(y):
            return x == y
        if is_boolean(x) and is_boolean(y):
            return x == y
        return False

    # --- Pairs and lists ---

    def apply_cons_primitive(self, args: List[Value]) -> CompoundSExp:
        self._check_arity("cons", args, 2)
        return CompoundSExp(args[0], args[1])

    def apply_car_primitive(self, args: List[Value]) -> Value:
        self._check_arity("car", args, 1)
        if not isinstance(args[0], CompoundSExp):
            raise _fail(f"Car: param is not compound {format_value(args[0])}", 'not_compound', "car", args)
        return args[0].head

    def apply_cdr_primitive(self, args: List[Value]) -> Value:
        self._check_arity("cdr", args, 1)
        if not isinstance(args[0], CompoundSExp):
            raise _fail(f"Cdr: param is not compound {format_value(args[0])}", 'not_compound', "cdr", args)
        return args[0].tail

    def apply_list_primitive(self, args: List[Value]) -> Union[EmptySExp, CompoundSExp]:
        return make_list(args)

    # --- Type predicates ---

    def apply_is_pair_primitive(self, args: List[Value]) -> bool:
        self._check_arity("pair?", args, 1)
        return isinstance(args[0], CompoundSExp)

    def apply_is_number_primitive(self, args: List[Value]) -> bool:
        self._check_arity("number?", args, 1)
        return is_number(args[0])

    def apply_is_boolean_primitive(self, args: List[Value]) -> bool:
        self._check_arity("boolean?", args, 1)
        return is_boolean(args[0])

    def apply_is_symbol_primitive(self, args: List[Value]) -> bool:
        self._check_arity("symbol?", args, 1)
        return isinstance(args[0], SymbolSExp)

    def apply_is_string_primitive(self, args: List[Value]) -> bool:
        self._check_arity("string?", args, 1)
        return is_string(args[0])

    # --- Association-list dictionaries ---

    def apply_dict_primitive(self, args: List[Value]) -> Value:
        """(dict alist): validates the association list and returns it unchanged."""
        self._check_arity("dict", args, 1)
        alist = args[0]
        if not is_sexp(alist):
            raise _fail(f"dict expects an S-Expression value but received {format_value(alist)}", 'invalid_dict_format', "dict", args)
        if not is_valid_dict_format(alist):
            raise _fail(
                "Primitive 'dict' expects a list of symbol-value pairs (e.g., '((a . 1) (b . #t))), "
                f"but received invalid structure: {format_value(alist)}",
                'invalid_dict_format', "dict", args,
            )
        logger.debug(f"  'dict': validated association list {format_value(alist)}")
        return alist

    def apply_get_primitive(self, args: List[Value]) -> Value:
        """
        (get dict 'key): looks `key` up in a native dictionary, or returns the
        value of the first association-list pair whose key matches.
        """
        self._check_arity("get", args, 2)
        dict_val, key = args
        if not (isinstance(dict_val, DictValue) or is_sexp(dict_val)):
            raise _fail(f"Primitive 'get' expects its first argument to be a dictionary S-Expression, but received: {format_value(dict_val)}", 'invalid_dict_format', "get", args)
        if not isinstance(key, SymbolSExp):
            raise _fail(f"Primitive 'get' expects its second argument to be a symbol key, but received: {format_value(key)}", 'type_error', "get", args)
        if isinstance(dict_val, DictValue):
            if key.name not in dict_val:
                raise _fail(f"Key '{key.name}' not found in dictionary", 'key_not_found', "get", args)
            return dict_val.lookup(key.name)
        return self._find_key(dict_val, key, args)

    def _find_key(self, alist: Value, key: SymbolSExp, args: List[Value]) -> Value:
        current = alist
        while isinstance(current, CompoundSExp):
            pair = current.head
            if not is_valid_dict_pair(pair):
                raise _fail(
                    f"Invalid dictionary format: Expected a list of symbol-value pairs, but encountered an invalid element: {format_value(pair)}",
                    'invalid_dict_format', "get", args,
                )
            if pair.head.name == key.name:
                return pair.tail
            current = current.tail
        if isinstance(current, EmptySExp):
            raise _fail(f"Key '{key.name}' not found in dictionary", 'key_not_found', "get", args)
        raise _fail(
            f"Invalid dictionary format: Expected a list of pairs, but encountered invalid structure: {format_value(current)}",
            'invalid_dict_format', "get", args,
        )

    def apply_is_dict_primitive(self, args: List[Value]) -> bool:
        self._check_arity("dict?", args, 1)
        if isinstance(args[0], DictValue):
            return True
        return is_proper_list(args[0]) and is_valid_dict_format(args[0])

    # --- Dispatch ---

    def apply(self, op: Union[str, PrimOp, PrimitiveOperator], args: List[Value]) -> Value:
        """
        Apply the named primitive to evaluated arguments.

        Raises:
            SexpEvaluationError: ('unknown_primitive') for names outside PrimitiveOperator,
                                 or whatever failure the primitive itself reports.
        """
        name = op.op if isinstance(op, PrimOp) else op
        try:
            operator = PrimitiveOperator(name)
        except ValueError:
            raise _fail(f"Bad primitive op: {name}", 'unknown_primitive', str(name), args) from None
        result = PRIMITIVE_APPLIERS[operator](self, list(args))
        logger.debug(f"  Primitive '{operator.value}' {_format_args(args)} -> {format_value(result)}")
        return result


PRIMITIVE_APPLIERS: Dict[PrimitiveOperator, Applier] = {
    PrimitiveOperator.ADD: PrimitiveProcessor.apply_add_primitive,
    PrimitiveOperator.SUB: PrimitiveProcessor.apply_subtract_primitive,
    PrimitiveOperator.MUL: PrimitiveProcessor.apply_multiply_primitive,
    PrimitiveOperator.DIV: PrimitiveProcessor.apply_divide_primitive,
    PrimitiveOperator.LT: PrimitiveProcessor.apply_less_than_primitive,
    PrimitiveOperator.GT: PrimitiveProcessor.apply_greater_than_primitive,
    PrimitiveOperator.NUM_EQ: PrimitiveProcessor.apply_num_equal_primitive,
    PrimitiveOperator.NOT: PrimitiveProcessor.apply_not_primitive,
    PrimitiveOperator.AND: PrimitiveProcessor.apply_and_primitive,
    PrimitiveOperator.OR: PrimitiveProcessor.apply_or_primitive,
    PrimitiveOperator.EQ: PrimitiveProcessor.apply_eq_primitive,
    PrimitiveOperator.STRING_EQ: PrimitiveProcessor.apply_string_equal_primitive,
    PrimitiveOperator.CONS: PrimitiveProcessor.apply_cons_primitive,
    PrimitiveOperator.CAR: PrimitiveProcessor.apply_car_primitive,
    PrimitiveOperator.CDR: PrimitiveProcessor.apply_cdr_primitive,
    PrimitiveOperator.LIST: PrimitiveProcessor.apply_list_primitive,
    PrimitiveOperator.IS_PAIR: PrimitiveProcessor.apply_is_pair_primitive,
    PrimitiveOperator.IS_NUMBER: PrimitiveProcessor.apply_is_number_primitive,
    PrimitiveOperator.IS_BOOLEAN: PrimitiveProcessor.apply_is_boolean_primitive,
    PrimitiveOperator.IS_SYMBOL: PrimitiveProcessor.apply_is_symbol_primitive,
    PrimitiveOperator.IS_STRING: PrimitiveProcessor.apply_is_string_primitive,
    PrimitiveOperator.DICT: PrimitiveProcessor.apply_dict_primitive,
    PrimitiveOperator.GET: PrimitiveProcessor.apply_get_primitive,
    PrimitiveOperator.IS_DICT: PrimitiveProcessor.apply_is_dict_primitive,
}

_missing = set(PrimitiveOperator) - set(PRIMITIVE_APPLIERS)
if _missing:
    raise RuntimeError(f"Primitive operators without an applier: {sorted(op.value for op in _missing)}")

_default_processor = PrimitiveProcessor()


def apply_primitive(name: Union[str, PrimOp, PrimitiveOperator], args: List[Value]) -> Value:
    """Apply a primitive by name; see PrimitiveProcessor.apply."""
    return _default_processor.apply(name, args)
