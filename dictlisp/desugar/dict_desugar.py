"""
Dictionary desugaring pass.

Rewrites every native dictionary literal `(dict (k1 e1) ... (kn en))` into
an application of the `dict` primitive to a quoted association list:

    (dict (a 1) (b "x"))   =>   (dict '((a . 1) (b . "x")))

Entry values become quoted data. A literal entry contributes its datum
directly; any other entry is unparsed to text and read back as a datum,
so `(dict (a (+ 1 2)))` stores the list `(+ 1 2)`, not the number 3.
"""
import logging

from dictlisp.sexp_evaluator.sexp_values import EMPTY_SEXP, CompoundSExp, SymbolSExp, Value
from dictlisp.sexp_parser.sexp_parser import SexpParser
from dictlisp.syntax.ast_nodes import (
    AppExp, AstNode, DefineExp, DictExp, IfExp, LitExp, PrimOp, PrimitiveOperator,
    ProcExp, Program,
)
from dictlisp.syntax.ast_parser import parse_program_text, parse_sexp_value
from dictlisp.syntax.unparser import unparse
from dictlisp.system.errors import SexpEvaluationError, SexpSyntaxError

logger = logging.getLogger(__name__)

_parser = SexpParser()


def desugar_dictionaries(program: Program) -> Program:
    """
    Rewrite all dictionary literals in `program` onto the `dict` primitive.

    Non-dictionary nodes keep their shape; only their children are rewritten.

    Raises:
        SexpEvaluationError: ('unparsable_literal') if an entry value cannot be
                             turned into quoted data. No partial result is returned.
    """
    rewritten = Program([rewrite_form(e) for e in program.exps])
    logger.debug(f"Desugared program: {unparse(rewritten)}")
    return rewritten


def rewrite_form(exp: AstNode) -> AstNode:
    if isinstance(exp, DefineExp):
        return DefineExp(exp.var, rewrite_exp(exp.val))
    return rewrite_exp(exp)


def rewrite_exp(exp: AstNode) -> AstNode:
    """Rewrite one expression and everything below it."""
    if isinstance(exp, DictExp):
        return rewrite_dict_exp(exp)
    if isinstance(exp, IfExp):
        return IfExp(rewrite_exp(exp.test), rewrite_exp(exp.then), rewrite_exp(exp.alt))
    if isinstance(exp, ProcExp):
        return ProcExp(exp.args, [rewrite_exp(b) for b in exp.body])
    if isinstance(exp, AppExp):
        return AppExp(rewrite_exp(exp.rator), [rewrite_exp(r) for r in exp.rands])
    return exp


def rewrite_dict_exp(exp: DictExp) -> AppExp:
    """Build `(dict '<alist>)` from a dictionary literal, keeping entry order."""
    alist: Value = EMPTY_SEXP
    for key, val in reversed(exp.entries):
        alist = CompoundSExp(CompoundSExp(SymbolSExp(key), entry_datum(val)), alist)
    return AppExp(PrimOp(PrimitiveOperator.DICT.value), [LitExp(alist)])


def entry_datum(exp: AstNode) -> Value:
    """The quoted-data form of a dictionary entry expression."""
    if isinstance(exp, LitExp):
        return exp.val
    try:
        text = unparse(exp)
        return parse_sexp_value(_parser.parse_string(text))
    except (SexpSyntaxError, TypeError) as e:
        logger.error(f"Cannot turn dictionary entry into quoted data: {exp!r}: {e}")
        raise SexpEvaluationError(
            "Failed to convert dictionary entry to an S-expression literal",
            'unparsable_literal',
            expression=repr(exp),
            error_details=str(e),
        ) from e


def desugar_text(source: str) -> str:
    """Parse, desugar and unparse a program given as text."""
    return unparse(desugar_dictionaries(parse_program_text(source, _parser)))
