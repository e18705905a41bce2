"""
Substitution engine for closure application.

Applying a closure never extends an environment. Instead the argument
values are turned back into literal syntax, the closure body is
alpha-renamed so every bound variable gets a fresh name, and the literal
arguments are substituted for the parameter references. The evaluator then
runs the resulting expressions as an ordinary sequence.
"""
import itertools
import logging
from typing import AbstractSet, Dict, List, Optional, Sequence, Set

from dictlisp.syntax.ast_nodes import (
    AppExp, AstNode, BoolExp, DefineExp, DictExp, IfExp, LitExp, NumExp,
    PrimOp, ProcExp, StrExp, VarDecl, VarRef,
)
from .sexp_closure import Closure
from .sexp_values import DictValue, Value, is_boolean, is_number, is_string

logger = logging.getLogger(__name__)


def value_to_lit_exp(value: Value) -> AstNode:
    """
    Convert an evaluated value back into an expression that evaluates to it.

    Numbers, booleans and strings become literal nodes, a primitive stays the
    PrimOp node it already is, a closure becomes the lambda it came from, a
    DictValue becomes a dictionary literal over its re-literalized entries, and
    anything else (S-expression data) is wrapped in a LitExp.
    """
    if is_boolean(value):
        return BoolExp(value)
    if is_number(value):
        return NumExp(value)
    if is_string(value):
        return StrExp(value)
    if isinstance(value, PrimOp):
        return value
    if isinstance(value, Closure):
        return ProcExp(value.params, value.body)
    if isinstance(value, DictValue):
        return DictExp([(key, value_to_lit_exp(val)) for key, val in value.entries.items()])
    return LitExp(value)


def substitute(exps: Sequence[AstNode], names: Sequence[str], replacements: Sequence[AstNode]) -> List[AstNode]:
    """
    Replace free references to `names` in `exps` with the matching `replacements`.

    A lambda whose parameters shadow a name stops substitution of that name
    inside its body.
    """
    mapping = dict(zip(names, replacements))
    return [_substitute_exp(e, mapping) for e in exps]


def _substitute_exp(exp: AstNode, mapping: Dict[str, AstNode]) -> AstNode:
    if not mapping:
        return exp
    if isinstance(exp, VarRef):
        return mapping.get(exp.var, exp)
    if isinstance(exp, IfExp):
        return IfExp(_substitute_exp(exp.test, mapping),
                     _substitute_exp(exp.then, mapping),
                     _substitute_exp(exp.alt, mapping))
    if isinstance(exp, ProcExp):
        bound = {p.var for p in exp.args}
        inner = {name: rep for name, rep in mapping.items() if name not in bound}
        return ProcExp(exp.args, [_substitute_exp(b, inner) for b in exp.body])
    if isinstance(exp, AppExp):
        return AppExp(_substitute_exp(exp.rator, mapping), [_substitute_exp(r, mapping) for r in exp.rands])
    if isinstance(exp, DictExp):
        return DictExp([(key, _substitute_exp(val, mapping)) for key, val in exp.entries])
    if isinstance(exp, DefineExp):
        return DefineExp(exp.var, _substitute_exp(exp.val, mapping))
    # literals, primitive references and quoted data have no variables
    return exp


def variable_names(exps: Sequence[AstNode]) -> Set[str]:
    """Every variable name that occurs in `exps`, bound or free."""
    names: Set[str] = set()
    stack = list(exps)
    while stack:
        exp = stack.pop()
        if isinstance(exp, (VarRef, VarDecl)):
            names.add(exp.var)
        elif isinstance(exp, ProcExp):
            stack.extend(exp.args)
            stack.extend(exp.body)
        elif isinstance(exp, IfExp):
            stack.extend([exp.test, exp.then, exp.alt])
        elif isinstance(exp, AppExp):
            stack.append(exp.rator)
            stack.extend(exp.rands)
        elif isinstance(exp, DictExp):
            stack.extend(val for _, val in exp.entries)
        elif isinstance(exp, DefineExp):
            stack.extend([exp.var, exp.val])
    return names


class SubstitutionEngine:
    """
    Renames and instantiates closure bodies.

    Holds the fresh-name counter, so names handed out by one engine never
    repeat. The evaluator owns one engine for its lifetime.
    """

    def __init__(self, separator: str = "__"):
        self.separator = separator
        self._counter = itertools.count(1)

    def fresh_name(self, var: str, avoid: AbstractSet[str] = frozenset()) -> str:
        """Next counter-suffixed name for `var` that is not in `avoid`."""
        while True:
            candidate = f"{var}{self.separator}{next(self._counter)}"
            if candidate not in avoid:
                return candidate

    def rename_exps(self, exps: Sequence[AstNode], avoid: Optional[AbstractSet[str]] = None) -> List[AstNode]:
        """
        Give every variable bound inside `exps` a fresh, globally unique name.

        Fresh names never coincide with a name in `avoid`, which defaults to
        every variable name occurring in `exps`.
        """
        if avoid is None:
            avoid = variable_names(exps)
        return [self._rename_exp(e, avoid) for e in exps]

    def _rename_exp(self, exp: AstNode, avoid: AbstractSet[str]) -> AstNode:
        if isinstance(exp, ProcExp):
            body = self.rename_exps(exp.body, avoid)
            old_names = [p.var for p in exp.args]
            new_names = [self.fresh_name(v, avoid) for v in old_names]
            return ProcExp([VarDecl(n) for n in new_names],
                           substitute(body, old_names, [VarRef(n) for n in new_names]))
        if isinstance(exp, IfExp):
            return IfExp(self._rename_exp(exp.test, avoid), self._rename_exp(exp.then, avoid), self._rename_exp(exp.alt, avoid))
        if isinstance(exp, AppExp):
            return AppExp(self._rename_exp(exp.rator, avoid), self.rename_exps(exp.rands, avoid))
        if isinstance(exp, DictExp):
            return DictExp([(key, self._rename_exp(val, avoid)) for key, val in exp.entries])
        if isinstance(exp, DefineExp):
            return DefineExp(exp.var, self._rename_exp(exp.val, avoid))
        return exp

    def instantiate(self, closure: Closure, args: Sequence[Value]) -> List[AstNode]:
        """
        Produce the body of `closure` with `args` substituted for its parameters.

        The caller is responsible for checking the argument count.
        """
        lit_args = [value_to_lit_exp(a) for a in args]
        avoid = variable_names(closure.body) | variable_names(lit_args) | set(closure.param_names)
        body = self.rename_exps(closure.body, avoid)
        result = substitute(body, closure.param_names, lit_args)
        logger.debug(f"Instantiated closure ({', '.join(closure.param_names)}) into {len(result)} body expression(s)")
        return result
