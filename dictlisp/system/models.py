"""
Pydantic models describing the outcome of running a program.

The evaluator core signals failure by raising SexpEvaluationError; these
models are the success/failure result shape handed to callers that prefer
a value over an exception (the Interpreter facade, the CLI and the REPL).
"""

import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict

from dictlisp.system.errors import FailureReason, SexpEvaluationError, SexpSyntaxError

logger = logging.getLogger(__name__)

ResultStatus = Literal["OK", "FAILED"]
"""
Evaluation status
"""

FailureKind = Literal[FailureReason, 'syntax_error']


class EvaluationFailure(BaseModel):
    """Error describing why a program could not be evaluated."""
    reason: FailureKind
    message: str
    expression: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def from_exception(cls, error: Exception) -> "EvaluationFailure":
        if isinstance(error, SexpEvaluationError):
            return cls(
                reason=error.reason,
                message=error.message,
                expression=error.expression or None,
                details=error.error_details or None,
            )
        if isinstance(error, SexpSyntaxError):
            return cls(
                reason='syntax_error',
                message=error.message,
                expression=error.sexp_string or None,
                details=error.error_details or None,
            )
        raise TypeError(f"Cannot describe {type(error).__name__} as an evaluation failure")


class EvaluationResult(BaseModel):
    """
    Result of evaluating a program.

    `value` holds the raw runtime value (numbers, strings, S-expressions,
    closures, dictionaries), `output` its printed form.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: ResultStatus
    value: Optional[Any] = None
    output: str = ""
    error: Optional[EvaluationFailure] = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"
