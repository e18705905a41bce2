"""
Defines the Closure class for representing procedures created by the
'lambda' special form in the S-expression evaluator.

Under the substitution model a closure captures no environment: applying it
substitutes the argument values straight into a renamed copy of the body.
"""
import logging
from typing import List

from dictlisp.syntax.ast_nodes import AstNode, VarDecl

logger = logging.getLogger(__name__)

class Closure:
    def __init__(self, params: List[VarDecl], body: List[AstNode]):
        """
        Represents a procedure value created by 'lambda'.

        Args:
            params: The VarDecl nodes naming the formal parameters, in order.
            body: A list of AST nodes representing the procedure's body expressions.
        """
        self.params: List[VarDecl] = list(params)
        self.body: List[AstNode] = list(body)
        logger.debug(f"Closure created: params=({', '.join(self.param_names)}), num_body_exprs={len(self.body)}")

    @property
    def param_names(self) -> List[str]:
        return [p.var for p in self.params]

    def __eq__(self, other) -> bool:
        return isinstance(other, Closure) and self.params == other.params and self.body == other.body

    def __hash__(self) -> int:
        return hash(tuple(self.param_names))

    def __repr__(self):
        return f"<Closure params=({', '.join(self.param_names)}) body_exprs#={len(self.body)}>"
