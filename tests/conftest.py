"""
Shared pytest fixtures for the dictlisp test suite.
"""
import pytest

from dictlisp.config.settings import InterpreterSettings
from dictlisp.sexp_evaluator.sexp_environment import SexpEnvironment
from dictlisp.sexp_evaluator.sexp_evaluator import SexpEvaluator
from dictlisp.sexp_evaluator.sexp_values import EMPTY_SEXP, CompoundSExp, SymbolSExp, make_list
from dictlisp.sexp_parser.sexp_parser import SexpParser


@pytest.fixture
def parser():
    """Provides a SexpParser instance for tests."""
    return SexpParser()


@pytest.fixture
def settings():
    """Default interpreter settings."""
    return InterpreterSettings()


@pytest.fixture
def evaluator(settings):
    """Provides a SexpEvaluator with default settings."""
    return SexpEvaluator(settings)


@pytest.fixture
def desugaring_evaluator():
    """Provides a SexpEvaluator that desugars dictionary literals first."""
    return SexpEvaluator(InterpreterSettings(desugar_dictionaries=True))


@pytest.fixture
def env():
    """An empty top-level environment."""
    return SexpEnvironment.empty()


def sym(name):
    return SymbolSExp(name)


def pair(head, tail):
    return CompoundSExp(head, tail)


def alist(*items):
    """Build an association list from (key, value) tuples."""
    return make_list([CompoundSExp(SymbolSExp(k), v) for k, v in items])


@pytest.fixture
def build():
    """Helpers for building S-expression values by hand."""
    class Builder:
        pass
    builder = Builder()
    builder.sym = sym
    builder.pair = pair
    builder.alist = alist
    builder.list = lambda *items: make_list(items)
    builder.empty = EMPTY_SEXP
    return builder
