"""
Renders AST nodes and runtime values back into concrete syntax.

`unparse` produces text that ast_parser reads back into an equal AST;
`unparse_sexp` does the same for quoted S-expression data; `format_value`
is the printer used by the CLI and the REPL.
"""
import logging
from typing import Any

from sexpdata import dumps

from dictlisp.system.errors import SexpEvaluationError
from dictlisp.sexp_evaluator.sexp_closure import Closure
from dictlisp.sexp_evaluator.sexp_values import CompoundSExp, DictValue, EmptySExp, SymbolSExp, Value
from .ast_nodes import (
    AppExp, AstNode, BoolExp, DefineExp, DictExp, IfExp, LitExp, NumExp,
    PrimOp, ProcExp, Program, StrExp, VarDecl, VarRef,
)

logger = logging.getLogger(__name__)


def _format_bool(value: bool) -> str:
    return "#t" if value else "#f"


def _format_string(value: str) -> str:
    return dumps(value)


def unparse(exp: AstNode) -> str:
    """Render an AST node (or a whole Program) as source text."""
    if isinstance(exp, Program):
        return "\n".join(unparse(e) for e in exp.exps)
    if isinstance(exp, NumExp):
        return repr(exp.val)
    if isinstance(exp, BoolExp):
        return _format_bool(exp.val)
    if isinstance(exp, StrExp):
        return _format_string(exp.val)
    if isinstance(exp, PrimOp):
        return exp.op
    if isinstance(exp, (VarRef, VarDecl)):
        return exp.var
    if isinstance(exp, IfExp):
        return f"(if {unparse(exp.test)} {unparse(exp.then)} {unparse(exp.alt)})"
    if isinstance(exp, ProcExp):
        params = " ".join(p.var for p in exp.args)
        body = " ".join(unparse(b) for b in exp.body)
        return f"(lambda ({params}) {body})"
    if isinstance(exp, AppExp):
        return "(" + " ".join([unparse(exp.rator)] + [unparse(r) for r in exp.rands]) + ")"
    if isinstance(exp, LitExp):
        return "'" + unparse_sexp(exp.val)
    if isinstance(exp, DictExp):
        entries = "".join(f" ({key} {unparse(val)})" for key, val in exp.entries)
        return f"(dict{entries})"
    if isinstance(exp, DefineExp):
        return f"(define {exp.var.var} {unparse(exp.val)})"
    raise TypeError(f"Cannot unparse {type(exp).__name__}: {exp!r}")


def unparse_sexp(value: Value) -> str:
    """
    Render S-expression data as source text.

    Raises:
        SexpEvaluationError: ('unparsable_literal') for values with no datum syntax,
                             such as closures, primitives and native dictionaries.
    """
    if isinstance(value, EmptySExp):
        return "()"
    if isinstance(value, SymbolSExp):
        return value.name
    if isinstance(value, bool):
        return _format_bool(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _format_string(value)
    if isinstance(value, CompoundSExp):
        return _render_pair(value, unparse_sexp)
    raise SexpEvaluationError(
        f"Value has no literal S-expression syntax: {format_value(value)}",
        'unparsable_literal',
        error_details=type(value).__name__,
    )


def _render_pair(cell: CompoundSExp, render) -> str:
    parts = []
    current: Any = cell
    while isinstance(current, CompoundSExp):
        parts.append(render(current.head))
        current = current.tail
    if not isinstance(current, EmptySExp):
        parts.extend([".", render(current)])
    return "(" + " ".join(parts) + ")"


def format_value(value: Value) -> str:
    """Printable representation of any runtime value."""
    if isinstance(value, PrimOp):
        return f"#<primitive {value.op}>"
    if isinstance(value, Closure):
        params = " ".join(value.param_names)
        body = " ".join(unparse(b) for b in value.body)
        return f"#<closure ({params}) {body}>"
    if isinstance(value, DictValue):
        entries = ", ".join(f"{key}: {format_value(val)}" for key, val in value.entries.items())
        return "{" + entries + "}"
    if isinstance(value, CompoundSExp):
        return _render_pair(value, format_value)
    if isinstance(value, (EmptySExp, SymbolSExp, bool, int, float, str)):
        return unparse_sexp(value)
    return repr(value)
