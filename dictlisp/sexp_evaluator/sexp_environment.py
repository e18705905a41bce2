"""
Implementation of the SexpEnvironment.
Provides the top-level binding frames for S-expression evaluation.
"""

import logging
from typing import Any, Dict, Optional

from dictlisp.system.errors import SexpEvaluationError

logger = logging.getLogger(__name__)

class SexpEnvironment:
    """
    A chain of binding frames for S-expression evaluation.

    Frames are never mutated once created: `extend` returns a new child
    frame that links to its parent, so any number of environments may share
    the same ancestors. The root frame returned by `empty()` has no bindings.
    """

    def __init__(
        self,
        bindings: Optional[Dict[str, Any]] = None,
        parent: Optional['SexpEnvironment'] = None
    ):
        """
        Initializes a new SexpEnvironment.

        Args:
            bindings: An optional dictionary of variable bindings for this frame.
                      The dictionary is copied.
            parent: An optional parent environment.
                    Defaults to None, indicating the root frame.
        """
        self._bindings: Dict[str, Any] = dict(bindings) if bindings is not None else {}
        self._parent: Optional['SexpEnvironment'] = parent
        logger.debug(f"Initialized SexpEnvironment (Parent: {parent is not None}, Bindings: {list(self._bindings.keys())})")

    @classmethod
    def empty(cls) -> 'SexpEnvironment':
        """Creates the empty root frame."""
        return cls()

    def lookup(self, name: str) -> Any:
        """
        Looks up a variable name in this frame and its ancestors.

        Args:
            name: The name of the variable to look up.

        Returns:
            The value associated with the name.

        Raises:
            SexpEvaluationError: ('unbound_variable') if the name is not bound
                                 anywhere in the chain.
        """
        env: Optional[SexpEnvironment] = self
        while env is not None:
            if name in env._bindings:
                logger.debug(f"  Found '{name}' in env id={id(env)}")
                return env._bindings[name]
            env = env._parent
        logger.debug(f"  '{name}' not found in chain starting from env id={id(self)}.")
        raise SexpEvaluationError(f"Unbound variable: '{name}' is not defined.", 'unbound_variable', expression=name)

    def extend(self, bindings: Dict[str, Any]) -> 'SexpEnvironment':
        """
        Creates a new child environment that extends the current environment.

        Args:
            bindings: A dictionary of new variable names and their evaluated values
                      to add to the child frame.

        Returns:
            A new SexpEnvironment instance whose parent is this one.
        """
        logger.debug(f"Extending env {id(self)} with bindings: {list(bindings.keys())}")
        return SexpEnvironment(bindings=bindings, parent=self)

    def extend_one(self, name: str, value: Any) -> 'SexpEnvironment':
        """Creates a child frame holding a single binding."""
        return self.extend({name: value})

    def __repr__(self) -> str:
        parent_id = id(self._parent) if self._parent else None
        return f"<SexpEnvironment id={id(self)} parent={parent_id} bindings={list(self._bindings.keys())}>"
