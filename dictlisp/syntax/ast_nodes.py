"""AST node implementations for the dictlisp language.

Every node carries a `type` tag used by the evaluator, the substitution
engine and the desugaring pass to dispatch on node kind. Nodes compare
structurally and are treated as immutable once built.

Top-level forms are `DefineExp` or any of the expression ("CExp") kinds.
"""
from enum import Enum
from typing import Any, List, Tuple


class AstNode:
    """Base class providing structural equality over `__slots__`."""

    __slots__ = ()
    type = "node"

    def _fields(self) -> tuple:
        return tuple(getattr(self, name) for name in self.__slots__)

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and self._fields() == other._fields()

    def __hash__(self) -> int:
        return hash((self.type, repr(self._fields())))

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)
        return f"{type(self).__name__}({fields})"


class NumExp(AstNode):
    __slots__ = ("val",)
    type = "num"

    def __init__(self, val):
        self.val = val


class BoolExp(AstNode):
    __slots__ = ("val",)
    type = "bool"

    def __init__(self, val: bool):
        self.val = val


class StrExp(AstNode):
    __slots__ = ("val",)
    type = "str"

    def __init__(self, val: str):
        self.val = val


class PrimOp(AstNode):
    """
    Reference to a primitive operator.

    Evaluates to itself, so the same object also serves as the runtime
    value of a primitive procedure.
    """
    __slots__ = ("op",)
    type = "prim"

    def __init__(self, op: str):
        self.op = op


class VarRef(AstNode):
    __slots__ = ("var",)
    type = "var"

    def __init__(self, var: str):
        self.var = var


class VarDecl(AstNode):
    """A binding occurrence of a variable (lambda parameter or define target)."""
    __slots__ = ("var",)
    type = "var-decl"

    def __init__(self, var: str):
        self.var = var


class IfExp(AstNode):
    __slots__ = ("test", "then", "alt")
    type = "if"

    def __init__(self, test: AstNode, then: AstNode, alt: AstNode):
        self.test = test
        self.then = then
        self.alt = alt


class ProcExp(AstNode):
    __slots__ = ("args", "body")
    type = "proc"

    def __init__(self, args: List[VarDecl], body: List[AstNode]):
        self.args = list(args)
        self.body = list(body)


class AppExp(AstNode):
    __slots__ = ("rator", "rands")
    type = "app"

    def __init__(self, rator: AstNode, rands: List[AstNode]):
        self.rator = rator
        self.rands = list(rands)


class LitExp(AstNode):
    """A quoted datum; `val` is an S-expression value."""
    __slots__ = ("val",)
    type = "lit"

    def __init__(self, val: Any):
        self.val = val


class DictExp(AstNode):
    """
    Native dictionary literal: `(dict (k1 e1) (k2 e2) ...)`.

    Attributes:
        entries: Ordered (key, expression) pairs. Keys are plain strings and
                 may repeat; the evaluator keeps the last binding.
    """
    __slots__ = ("entries",)
    type = "dict"

    def __init__(self, entries: List[Tuple[str, AstNode]]):
        self.entries = [(key, val) for key, val in entries]

    def keys(self) -> List[str]:
        return [key for key, _ in self.entries]


class DefineExp(AstNode):
    __slots__ = ("var", "val")
    type = "define"

    def __init__(self, var: VarDecl, val: AstNode):
        self.var = var
        self.val = val


class Program(AstNode):
    __slots__ = ("exps",)
    type = "program"

    def __init__(self, exps: List[AstNode]):
        self.exps = list(exps)


ATOMIC_TYPES = frozenset({NumExp.type, BoolExp.type, StrExp.type, PrimOp.type, VarRef.type})


def is_atomic_exp(node: Any) -> bool:
    """Check whether `node` is a literal, primitive reference or variable reference."""
    return isinstance(node, AstNode) and node.type in ATOMIC_TYPES


def is_cexp(node: Any) -> bool:
    """Check whether `node` is an expression (anything but a define or a program)."""
    return isinstance(node, AstNode) and node.type not in (DefineExp.type, Program.type, VarDecl.type)


class PrimitiveOperator(str, Enum):
    """The closed set of primitive operators understood by the evaluator."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LT = "<"
    GT = ">"
    NUM_EQ = "="
    NOT = "not"
    AND = "and"
    OR = "or"
    EQ = "eq?"
    STRING_EQ = "string=?"
    CONS = "cons"
    CAR = "car"
    CDR = "cdr"
    LIST = "list"
    IS_PAIR = "pair?"
    IS_NUMBER = "number?"
    IS_BOOLEAN = "boolean?"
    IS_SYMBOL = "symbol?"
    IS_STRING = "string?"
    DICT = "dict"
    GET = "get"
    IS_DICT = "dict?"


PRIMITIVE_OP_NAMES = frozenset(op.value for op in PrimitiveOperator)


def is_primitive_op_name(name: str) -> bool:
    return name in PRIMITIVE_OP_NAMES
