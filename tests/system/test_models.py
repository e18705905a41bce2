"""
Unit tests for the error types and the evaluation result models.
"""
import pytest
from pydantic import ValidationError

from dictlisp.system.errors import SexpEvaluationError, SexpSyntaxError
from dictlisp.system.models import EvaluationFailure, EvaluationResult


def test_evaluation_error_message():
    error = SexpEvaluationError("Bad thing", 'type_error', expression="(+ 1 'a)", error_details="more")
    assert error.reason == 'type_error'
    assert "Expression: '(+ 1 'a)'" in str(error)
    assert "Details: more" in str(error)

def test_syntax_error_is_value_error():
    error = SexpSyntaxError("Broken", "(a")
    assert isinstance(error, ValueError)
    assert error.sexp_string == "(a"

def test_failure_from_evaluation_error():
    error = SexpEvaluationError("Key 'z' not found", 'key_not_found', expression="(get d 'z)")
    failure = EvaluationFailure.from_exception(error)
    assert failure.reason == 'key_not_found'
    assert failure.message == "Key 'z' not found"
    assert failure.expression == "(get d 'z)"
    assert failure.details is None

def test_failure_from_syntax_error():
    failure = EvaluationFailure.from_exception(SexpSyntaxError("Broken", "(a", error_details="eof"))
    assert failure.reason == 'syntax_error'
    assert failure.details == "eof"

def test_failure_from_other_exception():
    with pytest.raises(TypeError):
        EvaluationFailure.from_exception(RuntimeError("x"))

def test_failure_rejects_unknown_reason():
    with pytest.raises(ValidationError):
        EvaluationFailure(reason="exploded", message="m")

def test_result_ok():
    result = EvaluationResult(status="OK", value=3, output="3")
    assert result.ok
    assert result.error is None
    assert set(EvaluationResult.model_fields) == {"status", "value", "output", "error"}

def test_result_failed():
    failure = EvaluationFailure(reason='empty_sequence', message="Empty sequence")
    result = EvaluationResult(status="FAILED", error=failure)
    assert not result.ok
    assert result.value is None

def test_result_rejects_unknown_status():
    with pytest.raises(ValidationError):
        EvaluationResult(status="MAYBE")
