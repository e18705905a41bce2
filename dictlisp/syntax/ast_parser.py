"""
Builds AST nodes from the raw trees produced by SexpParser.

Concrete syntax:

    <program> ::= <form>* | (L32 <form>*)
    <form>    ::= (define <var> <cexp>) | <cexp>
    <cexp>    ::= <number> | <boolean> | <string> | <var> | <prim-op>
               |  (if <cexp> <cexp> <cexp>)
               |  (lambda (<var>*) <cexp>+)
               |  (quote <datum>) | '<datum>
               |  (dict (<key> <cexp>)*)
               |  (<cexp> <cexp>*)

A `(dict ...)` form whose operands are all `(symbol expression)` pairs is a
native dictionary literal; any other `(dict ...)` form is an ordinary
application of the `dict` primitive, e.g. `(dict '((a . 1) (b . 2)))`.
"""
import logging
from typing import Any, List, Optional

from sexpdata import Symbol, Quoted

from dictlisp.system.errors import SexpSyntaxError
from dictlisp.sexp_evaluator.sexp_values import EMPTY_SEXP, CompoundSExp, SymbolSExp, Value
from dictlisp.sexp_parser.sexp_parser import SexpParser
from .ast_nodes import (
    AstNode, AppExp, BoolExp, DefineExp, DictExp, IfExp, LitExp, NumExp,
    PrimOp, ProcExp, Program, StrExp, VarDecl, VarRef, is_primitive_op_name,
)

logger = logging.getLogger(__name__)

SexpNode = Any  # Raw tree node as produced by sexpdata

SPECIAL_FORM_KEYWORDS = frozenset({"define", "if", "lambda", "quote"})
PROGRAM_TAGS = frozenset({"L32", "L3"})
DOT = "."
QUOTE = "quote"


def _symbol_name(node: Symbol) -> str:
    return node.value()


def _is_symbol(node: SexpNode, name: str) -> bool:
    return isinstance(node, Symbol) and _symbol_name(node) == name


def _render(node: SexpNode) -> str:
    return repr(node)


def _quoted_datum(node: Quoted) -> SexpNode:
    return node.x


# --- Data (quoted S-expressions) ---

def parse_sexp_value(node: SexpNode) -> Value:
    """
    Convert a raw tree into an S-expression runtime value.

    Lists become CompoundSExp chains, `(a . b)` becomes an improper pair,
    symbols become SymbolSExp and a nested quote becomes `(quote datum)`.
    """
    if isinstance(node, Quoted):
        return CompoundSExp(SymbolSExp(QUOTE), CompoundSExp(parse_sexp_value(_quoted_datum(node)), EMPTY_SEXP))
    if isinstance(node, Symbol):
        return SymbolSExp(_symbol_name(node))
    if isinstance(node, bool) or isinstance(node, (int, float)):
        return node
    if isinstance(node, str):
        return str(node)
    if isinstance(node, list):
        return _parse_sexp_list(node)
    raise SexpSyntaxError(f"Unsupported datum of type {type(node).__name__}", _render(node))


def _parse_sexp_list(items: List[SexpNode]) -> Value:
    tail: Value = EMPTY_SEXP
    elements = items
    dots = [i for i, item in enumerate(items) if _is_symbol(item, DOT)]
    if dots:
        if len(dots) != 1 or dots[0] != len(items) - 2 or dots[0] == 0:
            raise SexpSyntaxError("Malformed dotted pair", _render(items))
        tail = parse_sexp_value(items[-1])
        elements = items[:-2]
    result = tail
    for item in reversed(elements):
        result = CompoundSExp(parse_sexp_value(item), result)
    return result


# --- Expressions ---

def parse_exp(node: SexpNode) -> AstNode:
    """
    Convert a raw tree into an expression node.

    Raises:
        SexpSyntaxError: On malformed special forms, or on 'define' outside the top level.
    """
    if isinstance(node, Quoted):
        return LitExp(parse_sexp_value(_quoted_datum(node)))
    if isinstance(node, Symbol):
        return _parse_atomic_symbol(node)
    if isinstance(node, bool):
        return BoolExp(node)
    if isinstance(node, (int, float)):
        return NumExp(node)
    if isinstance(node, str):
        return StrExp(str(node))
    if isinstance(node, list):
        return _parse_compound(node)
    raise SexpSyntaxError(f"Unexpected expression of type {type(node).__name__}", _render(node))


def _parse_atomic_symbol(node: Symbol) -> AstNode:
    name = _symbol_name(node)
    if name in SPECIAL_FORM_KEYWORDS:
        raise SexpSyntaxError(f"Keyword '{name}' cannot be used as an expression", name)
    if is_primitive_op_name(name):
        return PrimOp(name)
    return VarRef(name)


def _parse_compound(node: List[SexpNode]) -> AstNode:
    if not node:
        raise SexpSyntaxError("Empty combination '()' is not an expression; quote it for the empty list", "()")
    op = node[0]
    if isinstance(op, Symbol):
        name = _symbol_name(op)
        if name == "define":
            raise SexpSyntaxError("'define' is only allowed at the top level of a program", _render(node))
        if name == "if":
            return _parse_if(node)
        if name == "lambda":
            return _parse_lambda(node)
        if name == QUOTE:
            if len(node) != 2:
                raise SexpSyntaxError("'quote' requires exactly one datum", _render(node))
            return LitExp(parse_sexp_value(node[1]))
        if name == "dict" and _is_dict_literal(node[1:]):
            return _parse_dict(node)
    return AppExp(parse_exp(op), [parse_exp(rand) for rand in node[1:]])


def _parse_if(node: List[SexpNode]) -> IfExp:
    if len(node) != 4:
        raise SexpSyntaxError("'if' requires 3 arguments: (if condition then_branch else_branch)", _render(node))
    return IfExp(parse_exp(node[1]), parse_exp(node[2]), parse_exp(node[3]))


def _parse_lambda(node: List[SexpNode]) -> ProcExp:
    if len(node) < 3:
        raise SexpSyntaxError("'lambda' requires a parameter list and at least one body expression.", _render(node))
    params_node = node[1]
    if not isinstance(params_node, list):
        raise SexpSyntaxError("Lambda parameter definition must be a list of symbols.", _render(params_node))
    params: List[VarDecl] = []
    for p_node in params_node:
        if not isinstance(p_node, Symbol):
            raise SexpSyntaxError(f"Lambda parameters must be symbols, got {type(p_node).__name__}: {p_node!r}", _render(params_node))
        params.append(VarDecl(_symbol_name(p_node)))
    names = [p.var for p in params]
    if len(set(names)) != len(names):
        raise SexpSyntaxError(f"Duplicate lambda parameters: {names}", _render(params_node))
    return ProcExp(params, [parse_exp(b) for b in node[2:]])


def _is_dict_literal(rands: List[SexpNode]) -> bool:
    return all(
        isinstance(r, list) and len(r) == 2 and isinstance(r[0], Symbol) and not _is_symbol(r[0], DOT)
        for r in rands
    )


def _parse_dict(node: List[SexpNode]) -> DictExp:
    return DictExp([(_symbol_name(key), parse_exp(val)) for key, val in node[1:]])


# --- Programs ---

def parse_form(node: SexpNode) -> AstNode:
    """Convert one top-level form: a definition or an expression."""
    if isinstance(node, list) and node and _is_symbol(node[0], "define"):
        if len(node) != 3 or not isinstance(node[1], Symbol):
            raise SexpSyntaxError("'define' requires a variable name and a value: (define name expr)", _render(node))
        var_name = _symbol_name(node[1])
        if var_name in SPECIAL_FORM_KEYWORDS or is_primitive_op_name(var_name):
            raise SexpSyntaxError(f"Cannot define reserved name '{var_name}'", _render(node))
        return DefineExp(VarDecl(var_name), parse_exp(node[2]))
    return parse_exp(node)


def parse_program(forms: List[SexpNode]) -> Program:
    """
    Convert a list of top-level raw trees into a Program.

    A single `(L32 form...)` wrapper is unwrapped.
    """
    if len(forms) == 1 and isinstance(forms[0], list) and forms[0] and \
            isinstance(forms[0][0], Symbol) and _symbol_name(forms[0][0]) in PROGRAM_TAGS:
        forms = forms[0][1:]
    program = Program([parse_form(f) for f in forms])
    logger.debug(f"Built program with {len(program.exps)} form(s)")
    return program


def parse_program_text(text: str, parser: Optional[SexpParser] = None) -> Program:
    """Read and build a Program from source text."""
    parser = parser or SexpParser()
    return parse_program(parser.parse_program(text))


def parse_exp_text(text: str, parser: Optional[SexpParser] = None) -> AstNode:
    """Read and build a single expression from source text."""
    parser = parser or SexpParser()
    return parse_exp(parser.parse_string(text))
