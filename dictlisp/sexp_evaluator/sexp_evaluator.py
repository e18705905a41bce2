"""
S-expression evaluator implementation.

Applicative-order evaluation of dictlisp programs under the substitution
model: closure application substitutes literalized argument values into a
freshly renamed copy of the closure body, so closures never capture an
environment. The environment only ever grows by top-level definitions.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from dictlisp.config.settings import InterpreterSettings
from dictlisp.desugar.dict_desugar import desugar_dictionaries
from dictlisp.sexp_parser.sexp_parser import SexpParser
from dictlisp.syntax.ast_nodes import (
    AppExp, AstNode, BoolExp, DefineExp, DictExp, IfExp, LitExp, NumExp,
    PrimOp, ProcExp, Program, StrExp, VarRef,
)
from dictlisp.syntax.ast_parser import parse_program
from dictlisp.syntax.unparser import format_value, unparse
from dictlisp.system.errors import SexpEvaluationError
from .sexp_closure import Closure
from .sexp_environment import SexpEnvironment
from .sexp_primitives import PrimitiveProcessor
from .sexp_substitution import SubstitutionEngine
from .sexp_values import (
    CompoundSExp, DictValue, EmptySExp, SymbolSExp, Value,
    alist_to_dict_value, is_valid_dict_format,
)

logger = logging.getLogger(__name__)


def is_true_value(value: Value) -> bool:
    """Only the boolean #f is false; 0, "" and '() are all true."""
    return value is not False


class SexpEvaluator:
    """
    Evaluates dictlisp expression trees and programs.

    Each node kind has one handler, looked up through EXP_HANDLERS by the
    node's `type` tag. Failures raise SexpEvaluationError and abort the whole
    evaluation; nothing is retried or recovered locally.
    """

    def __init__(self, settings: Optional[InterpreterSettings] = None):
        """
        Initializes the evaluator.

        Args:
            settings: Interpreter settings; defaults are used when omitted.
        """
        self.settings = settings or InterpreterSettings()
        self.parser = SexpParser()
        self.primitive_processor = PrimitiveProcessor()
        self.substitution_engine = SubstitutionEngine(separator=self.settings.fresh_name_separator)

        self.EXP_HANDLERS: Dict[str, Callable[[AstNode, SexpEnvironment], Value]] = {
            NumExp.type: self._eval_literal,
            BoolExp.type: self._eval_literal,
            StrExp.type: self._eval_literal,
            PrimOp.type: self._eval_prim_op,
            VarRef.type: self._eval_var_ref,
            LitExp.type: self._eval_literal,
            IfExp.type: self._eval_if,
            ProcExp.type: self._eval_proc,
            AppExp.type: self._eval_app,
            DictExp.type: self._eval_dict,
        }
        logger.debug(f"SexpEvaluator initialized. EXP_HANDLERS keys: {list(self.EXP_HANDLERS.keys())}")

    # --- Entry points ---

    def evaluate_string(self, source: str, initial_env: Optional[SexpEnvironment] = None) -> Value:
        """
        Parses and evaluates a whole program given as source text.

        Runs the dictionary desugaring pass first when the settings ask for it.

        Raises:
            SexpSyntaxError: If the text cannot be parsed.
            SexpEvaluationError: If evaluation fails.
        """
        logger.info(f"Evaluating program text: {source[:100]}...")
        program = parse_program(self.parser.parse_program(source))
        if self.settings.desugar_dictionaries:
            program = desugar_dictionaries(program)
        env = initial_env if initial_env is not None else SexpEnvironment.empty()
        try:
            result = self.evaluate_sequence(program.exps, env)
        except SexpEvaluationError as e:
            logger.error(f"S-expression evaluation error: {e}")
            if not e.expression:
                e.expression = source
            raise
        logger.info(f"Finished evaluating program. Result type: {type(result).__name__}")
        return result

    def evaluate_program(self, program: Program) -> Value:
        """Evaluates a program's forms as one top-level sequence in the empty environment."""
        return self.evaluate_sequence(program.exps, SexpEnvironment.empty())

    def evaluate(self, exp: AstNode, env: SexpEnvironment) -> Value:
        """
        Evaluates a single expression node in `env`.

        Raises:
            SexpEvaluationError: On any evaluation failure.
        """
        handler = self.EXP_HANDLERS.get(getattr(exp, "type", None))
        if handler is None:
            raise SexpEvaluationError(f"Cannot evaluate node of type {type(exp).__name__}", 'type_error', expression=repr(exp))
        return handler(exp, env)

    def evaluate_sequence(self, exps: Sequence[AstNode], env: SexpEnvironment) -> Value:
        """
        Evaluates a top-level sequence.

        A definition evaluates its value and extends the environment for the
        forms after it. The value of the last expression is the value of the
        sequence; earlier expression values are discarded.

        Raises:
            SexpEvaluationError: ('empty_sequence') if there is nothing to evaluate,
                                 including a sequence that ends in a definition.
        """
        if not exps:
            raise SexpEvaluationError("Empty sequence", 'empty_sequence')
        result: Value = None
        last_index = len(exps) - 1
        for i, exp in enumerate(exps):
            if isinstance(exp, DefineExp):
                value = self.evaluate(exp.val, env)
                logger.debug(f"  define '{exp.var.var}' = {format_value(value)}")
                env = env.extend_one(exp.var.var, value)
                if i == last_index:
                    raise SexpEvaluationError("Empty sequence after definition", 'empty_sequence', expression=unparse(exp))
            else:
                result = self.evaluate(exp, env)
        return result

    # --- Expression handlers ---

    def _eval_literal(self, exp: AstNode, env: SexpEnvironment) -> Value:
        return exp.val

    def _eval_prim_op(self, exp: PrimOp, env: SexpEnvironment) -> Value:
        return exp

    def _eval_var_ref(self, exp: VarRef, env: SexpEnvironment) -> Value:
        return env.lookup(exp.var)

    def _eval_if(self, exp: IfExp, env: SexpEnvironment) -> Value:
        test = self.evaluate(exp.test, env)
        branch = exp.then if is_true_value(test) else exp.alt
        logger.debug(f"  'if' test {format_value(test)} chose branch: {unparse(branch)}")
        return self.evaluate(branch, env)

    def _eval_proc(self, exp: ProcExp, env: SexpEnvironment) -> Closure:
        return Closure(exp.args, exp.body)

    def _eval_app(self, exp: AppExp, env: SexpEnvironment) -> Value:
        rator = self.evaluate(exp.rator, env)
        rands = [self.evaluate(r, env) for r in exp.rands]
        return self.apply_procedure(rator, rands, env)

    def _eval_dict(self, exp: DictExp, env: SexpEnvironment) -> DictValue:
        entries: Dict[str, Value] = {}
        for key, val_exp in exp.entries:
            entries[key] = self.evaluate(val_exp, env)
        return DictValue(entries)

    # --- Application ---

    def apply_procedure(self, proc: Value, args: List[Value], env: SexpEnvironment) -> Value:
        """
        Applies an evaluated operator to evaluated arguments.

        Primitives go to the PrimitiveProcessor, closures to the substitution
        engine, and dictionaries (native or association-list) are looked up by
        their single symbol argument.

        Raises:
            SexpEvaluationError: ('not_applicable') for any other operator value.
        """
        if isinstance(proc, PrimOp):
            return self.primitive_processor.apply(proc, args)
        if isinstance(proc, Closure):
            return self._apply_closure(proc, args, env)
        if isinstance(proc, DictValue):
            return self._apply_dict(proc, args)
        if isinstance(proc, (EmptySExp, CompoundSExp)) and is_valid_dict_format(proc):
            return self._apply_dict(alist_to_dict_value(proc), args)
        raise SexpEvaluationError(f"Bad procedure {format_value(proc)}", 'not_applicable', expression=format_value(proc))

    def _apply_closure(self, closure: Closure, args: List[Value], env: SexpEnvironment) -> Value:
        if len(closure.params) != len(args):
            raise SexpEvaluationError(
                f"Arity mismatch: Closure expects {len(closure.params)} arguments, got {len(args)}",
                'arity_mismatch',
                expression=format_value(closure),
            )
        body = self.substitution_engine.instantiate(closure, args)
        logger.debug(f"  Applying closure, substituted body: {' '.join(unparse(b) for b in body)}")
        return self.evaluate_sequence(body, env)

    def _apply_dict(self, dictionary: DictValue, args: List[Value]) -> Value:
        if len(args) != 1:
            raise SexpEvaluationError(
                f"Dictionary application expects exactly one argument (the key), but got {len(args)}.",
                'invalid_dict_application',
            )
        key = args[0]
        if not isinstance(key, SymbolSExp):
            raise SexpEvaluationError(
                f"Dictionary key must be a symbol literal, but got {format_value(key)}",
                'invalid_dict_application',
            )
        if key.name not in dictionary:
            raise SexpEvaluationError(f"Key '{key.name}' not found in dictionary.", 'key_not_found', expression=format_value(dictionary))
        return dictionary.lookup(key.name)
