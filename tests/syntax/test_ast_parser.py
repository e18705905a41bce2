"""
Unit tests for building AST nodes from source text.
"""
import pytest

from dictlisp.sexp_evaluator.sexp_values import EMPTY_SEXP
from dictlisp.syntax.ast_nodes import (
    AppExp, BoolExp, DefineExp, DictExp, IfExp, LitExp, NumExp, PrimOp,
    ProcExp, Program, StrExp, VarDecl, VarRef,
)
from dictlisp.syntax.ast_parser import parse_exp_text, parse_program_text
from dictlisp.system.errors import SexpSyntaxError

# --- Atoms ---

def test_parse_atoms():
    """Numbers, booleans, strings, variables and primitive names."""
    assert parse_exp_text("42") == NumExp(42)
    assert parse_exp_text("2.5") == NumExp(2.5)
    assert parse_exp_text("#t") == BoolExp(True)
    assert parse_exp_text("#f") == BoolExp(False)
    assert parse_exp_text('"hi"') == StrExp("hi")
    assert parse_exp_text("x") == VarRef("x")
    assert parse_exp_text("+") == PrimOp("+")
    assert parse_exp_text("dict?") == PrimOp("dict?")

@pytest.mark.parametrize("keyword", ["define", "if", "lambda", "quote"])
def test_keyword_is_not_an_expression(keyword):
    with pytest.raises(SexpSyntaxError):
        parse_exp_text(keyword)

# --- Special forms ---

def test_parse_if():
    exp = parse_exp_text("(if (< x 1) 'small \"big\")")
    assert isinstance(exp, IfExp)
    assert exp.test == AppExp(PrimOp("<"), [VarRef("x"), NumExp(1)])
    assert exp.then == LitExp(parse_exp_text("'small").val)
    assert exp.alt == StrExp("big")

@pytest.mark.parametrize("text", ["(if #t 1)", "(if #t 1 2 3)"])
def test_if_requires_three_parts(text):
    with pytest.raises(SexpSyntaxError):
        parse_exp_text(text)

def test_parse_lambda():
    exp = parse_exp_text("(lambda (x y) (+ x y))")
    assert exp == ProcExp([VarDecl("x"), VarDecl("y")], [AppExp(PrimOp("+"), [VarRef("x"), VarRef("y")])])

def test_parse_lambda_without_params():
    assert parse_exp_text("(lambda () 1 2)") == ProcExp([], [NumExp(1), NumExp(2)])

@pytest.mark.parametrize("text", [
    "(lambda (x))",
    "(lambda x x)",
    "(lambda (1) 1)",
    "(lambda (x x) x)",
])
def test_malformed_lambda(text):
    with pytest.raises(SexpSyntaxError):
        parse_exp_text(text)

def test_parse_quote_forms(build):
    """'datum and (quote datum) build the same literal."""
    expected = LitExp(build.list(build.sym("a"), 1, "s"))
    assert parse_exp_text("'(a 1 \"s\")") == expected
    assert parse_exp_text("(quote (a 1 \"s\"))") == expected

def test_parse_quoted_empty_list():
    assert parse_exp_text("'()") == LitExp(EMPTY_SEXP)

def test_parse_dotted_pairs(build):
    """(a . 1) inside quoted data is an improper pair."""
    exp = parse_exp_text("'((a . 1) (b . #t))")
    assert exp == LitExp(build.alist(("a", 1), ("b", True)))

def test_parse_nested_quote(build):
    """A quote inside quoted data stays as (quote datum)."""
    exp = parse_exp_text("'(a 'b)")
    assert exp == LitExp(build.list(build.sym("a"), build.list(build.sym("quote"), build.sym("b"))))

@pytest.mark.parametrize("text", ["'(. a)", "'(a . b c)", "'(a . b . c)"])
def test_malformed_dotted_pair(text):
    with pytest.raises(SexpSyntaxError):
        parse_exp_text(text)

# --- Dictionaries ---

def test_parse_dict_literal():
    exp = parse_exp_text("(dict (a 1) (b (+ 1 2)))")
    assert exp == DictExp([("a", NumExp(1)), ("b", AppExp(PrimOp("+"), [NumExp(1), NumExp(2)]))])

def test_parse_empty_dict_literal():
    assert parse_exp_text("(dict)") == DictExp([])

def test_dict_applied_to_alist_is_an_application(build):
    """(dict '<alist>) applies the primitive instead of building a literal."""
    exp = parse_exp_text("(dict '((a . 1)))")
    assert exp == AppExp(PrimOp("dict"), [LitExp(build.alist(("a", 1)))])

# --- Applications ---

def test_parse_application():
    assert parse_exp_text("(f 1 #f)") == AppExp(VarRef("f"), [NumExp(1), BoolExp(False)])

def test_empty_combination_rejected():
    with pytest.raises(SexpSyntaxError):
        parse_exp_text("()")

# --- Programs ---

def test_parse_program_with_define():
    program = parse_program_text("(define x 1) (+ x 2)")
    assert program == Program([
        DefineExp(VarDecl("x"), NumExp(1)),
        AppExp(PrimOp("+"), [VarRef("x"), NumExp(2)]),
    ])

def test_program_wrapper_is_unwrapped():
    assert parse_program_text("(L32 (define x 1) x)") == parse_program_text("(define x 1) x")

def test_define_only_at_top_level():
    with pytest.raises(SexpSyntaxError):
        parse_program_text("(lambda () (define x 1) x)")

@pytest.mark.parametrize("text", ["(define x)", "(define 1 2)", "(define + 1)", "(define if 1)"])
def test_malformed_define(text):
    with pytest.raises(SexpSyntaxError):
        parse_program_text(text)
