"""
Unit tests for the SexpParser class.
"""

import pytest
from sexpdata import Symbol

from dictlisp.sexp_parser.sexp_parser import SexpParser
from dictlisp.system.errors import SexpSyntaxError

# --- Test Valid S-expressions ---

def test_parse_simple_list(parser):
    """Test parsing a simple list with symbols and literals."""
    assert parser.parse_string("(add 1 2)") == [Symbol('add'), 1, 2]

def test_parse_nested_list(parser):
    """Test parsing nested lists."""
    expected = [Symbol('list'), 1, [Symbol('inner'), Symbol('a'), Symbol('b')], 3]
    assert parser.parse_string("(list 1 (inner a b) 3)") == expected

def test_parse_atom_types(parser):
    """Test parsing numbers, strings and symbols."""
    result = parser.parse_string('(data 123 4.5 "hello" symbol-name)')
    assert result == [Symbol('data'), 123, 4.5, "hello", Symbol('symbol-name')]

def test_parse_boolean_symbols(parser):
    """#t and #f become Python booleans."""
    result = parser.parse_string("(f #t #f)")
    assert result[1] is True
    assert result[2] is False

def test_true_and_nil_stay_symbols(parser):
    """Only #t/#f are booleans; 'true' and 'nil' are ordinary symbols."""
    result = parser.parse_string("(f true nil)")
    assert result == [Symbol('f'), Symbol('true'), Symbol('nil')]

def test_parse_integer_literal(parser):
    """Test parsing a simple integer literal."""
    assert parser.parse_string("42") == 42

def test_parse_float_literal(parser):
    """Test parsing a simple float literal."""
    assert parser.parse_string("3.14159") == 3.14159

def test_parse_string_literal(parser):
    """Test parsing a simple string literal."""
    assert parser.parse_string('"this is a string"') == "this is a string"

def test_parse_empty_list(parser):
    """Test parsing ()."""
    assert parser.parse_string("()") == []

def test_parse_surrounding_whitespace(parser):
    """Leading and trailing whitespace is ignored."""
    assert parser.parse_string("  \n (a b)\t ") == [Symbol('a'), Symbol('b')]

def test_parse_program_multiple_forms(parser):
    """parse_program returns every top-level form in order."""
    forms = parser.parse_program("(define x 1)\n(+ x 2)\nx")
    assert forms == [
        [Symbol('define'), Symbol('x'), 1],
        [Symbol('+'), Symbol('x'), 2],
        Symbol('x'),
    ]

def test_parse_program_single_form(parser):
    """A single form still comes back as a list of one."""
    assert parser.parse_program("42") == [42]

# --- Test Invalid S-expressions ---

@pytest.mark.parametrize("text", ["(a b", "(a (b c)", "(define x"])
def test_unbalanced_parentheses(parser, text):
    """Unclosed lists raise SexpSyntaxError."""
    with pytest.raises(SexpSyntaxError):
        parser.parse_string(text)

@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input(parser, text):
    """Empty or whitespace-only input is rejected."""
    with pytest.raises(SexpSyntaxError) as excinfo:
        parser.parse_string(text)
    assert "empty" in excinfo.value.message

def test_empty_program(parser):
    """parse_program rejects empty input as well."""
    with pytest.raises(SexpSyntaxError):
        parser.parse_program("  ")

def test_parse_string_rejects_multiple_expressions(parser):
    """parse_string accepts exactly one expression."""
    with pytest.raises(SexpSyntaxError):
        parser.parse_string("(a) (b)")

def test_parse_program_unbalanced(parser):
    """parse_program reports unbalanced parentheses."""
    with pytest.raises(SexpSyntaxError) as excinfo:
        parser.parse_program("(define x 1) (+ x")
    assert excinfo.value.sexp_string == "(define x 1) (+ x"

def test_non_string_input(parser):
    """Non-string input raises TypeError."""
    with pytest.raises(TypeError):
        parser.parse_string(123)

def test_syntax_error_carries_input():
    """The error keeps the offending text for reporting."""
    with pytest.raises(SexpSyntaxError) as excinfo:
        SexpParser().parse_string("(a b")
    assert excinfo.value.sexp_string == "(a b"
    assert "Input: '(a b'" in str(excinfo.value)
