"""
Main application entry point.

Wires settings, logging and the evaluator together behind the Interpreter
facade, and provides the `dictlisp` command line.
"""

import argparse
import logging
import sys
from typing import List, Optional

from dictlisp.config.logging_config import setup_logging
from dictlisp.config.settings import InterpreterSettings
from dictlisp.desugar.dict_desugar import desugar_text
from dictlisp.repl.repl import Repl
from dictlisp.sexp_evaluator.sexp_evaluator import SexpEvaluator
from dictlisp.sexp_evaluator.sexp_values import Value
from dictlisp.syntax.unparser import format_value
from dictlisp.system.errors import SexpEvaluationError, SexpSyntaxError
from dictlisp.system.models import EvaluationFailure, EvaluationResult

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Front door to the evaluator.

    `evaluate_text` raises on failure; `run` reports failure in an
    EvaluationResult instead, for callers that print rather than propagate.
    """

    def __init__(self, settings: Optional[InterpreterSettings] = None):
        self.settings = settings or InterpreterSettings()
        self.evaluator = SexpEvaluator(self.settings)

    def evaluate_text(self, source: str) -> Value:
        return self.evaluator.evaluate_string(source)

    def run(self, source: str) -> EvaluationResult:
        try:
            value = self.evaluate_text(source)
        except (SexpEvaluationError, SexpSyntaxError) as e:
            failure = EvaluationFailure.from_exception(e)
            logger.info(f"Program failed ({failure.reason}): {failure.message}")
            return EvaluationResult(status="FAILED", error=failure)
        return EvaluationResult(status="OK", value=value, output=format_value(value))

    def desugar_text(self, source: str) -> str:
        return desugar_text(source)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(prog="dictlisp", description="Evaluate dictlisp programs.")
    parser.add_argument("--desugar", action="store_true", default=None,
                        help="Rewrite dictionary literals onto the 'dict' primitive before evaluating.")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Write logs to this file instead of stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Evaluate a program file.")
    run_parser.add_argument("file", type=str)

    eval_parser = subparsers.add_parser("eval", help="Evaluate program text given on the command line.")
    eval_parser.add_argument("source", type=str)

    desugar_parser = subparsers.add_parser("desugar", help="Print a program file with dictionary literals desugared.")
    desugar_parser.add_argument("file", type=str)

    subparsers.add_parser("repl", help="Start an interactive session.")
    return parser.parse_args(argv)


def _read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    settings = InterpreterSettings.from_env(
        log_level=args.log_level,
        log_file=args.log_file,
        desugar_dictionaries=args.desugar,
    )
    setup_logging(settings.log_level, settings.log_file)
    interpreter = Interpreter(settings)

    if args.command == "repl":
        Repl(interpreter).start()
        return 0

    try:
        if args.command == "desugar":
            print(interpreter.desugar_text(_read_file(args.file)))
            return 0
        source = _read_file(args.file) if args.command == "run" else args.source
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1
    except (SexpSyntaxError, SexpEvaluationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = interpreter.run(source)
    if result.ok:
        print(result.output)
        return 0
    print(f"Error ({result.error.reason}): {result.error.message}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
