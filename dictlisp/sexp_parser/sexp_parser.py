"""
Implementation of the SexpParser using the 'sexpdata' library.
Parses S-expression strings into raw trees (nested lists/atoms) that the
AST builder in dictlisp.syntax.ast_parser turns into expression nodes.
"""

import logging
from typing import Any, List
from io import StringIO
from sexpdata import load, parse, ExpectNothing, ExpectClosingBracket

from dictlisp.system.errors import SexpSyntaxError

logger = logging.getLogger(__name__)

# Symbol names the reader turns into Python booleans.
TRUE_SYMBOL = "#t"
FALSE_SYMBOL = "#f"

# 'nil' stays an ordinary symbol; the empty list is written ().
_READER_OPTIONS = dict(nil=None, true=TRUE_SYMBOL, false=FALSE_SYMBOL)


class SexpParser:
    """
    Parses S-expression strings into raw trees (nested lists/atoms).

    Uses the 'sexpdata' library for the underlying parsing mechanism.
    Converts the symbols '#t' and '#f' to Python booleans; quoted data
    arrives as sexpdata.Quoted and dotted pairs keep their '.' symbol.
    """

    def parse_string(self, sexp_string: str) -> Any:
        """
        Parses a single S-expression from a string.

        Args:
            sexp_string: The string containing the S-expression.

        Returns:
            The parsed S-expression as a raw tree (nested lists/atoms).

        Raises:
            SexpSyntaxError: If the input string has syntax errors, is empty,
                             or contains unexpected content after the main expression.
            TypeError: If the input is not a string.
        """
        stripped_string = self._check_input(sexp_string)
        sio = StringIO(stripped_string)

        try:
            parsed_expression = load(sio, **_READER_OPTIONS)

            remainder = sio.read().strip()
            if remainder:
                logger.error(f"Unexpected content after main expression: '{remainder}'")
                raise SexpSyntaxError("Unexpected content after the main expression.", sexp_string, error_details=f"Trailing content: '{remainder}'")

            logger.debug(f"Successfully parsed tree: {parsed_expression!r}")
            return parsed_expression

        except SexpSyntaxError:
            raise
        except AssertionError as e:
            # sexpdata.load asserts on more than one top-level expression
            logger.error(f"S-expression syntax error (Multiple Expressions): {e}")
            raise SexpSyntaxError("Multiple top-level S-expressions found. Use parse_program for whole programs.", sexp_string, error_details=str(e)) from e
        except Exception as e:
            raise self._syntax_error(e, sexp_string) from e

    def parse_program(self, program_string: str) -> List[Any]:
        """
        Parses every top-level S-expression in a string.

        Args:
            program_string: Source text of a whole program.

        Returns:
            The list of raw trees, one per top-level form, in source order.

        Raises:
            SexpSyntaxError: If the text is empty or malformed.
        """
        stripped_string = self._check_input(program_string)
        try:
            forms = parse(stripped_string, **_READER_OPTIONS)
        except Exception as e:
            raise self._syntax_error(e, program_string) from e
        logger.debug(f"Parsed {len(forms)} top-level form(s)")
        return forms

    def _check_input(self, text: str) -> str:
        if not isinstance(text, str):
            raise TypeError("Input must be a string.")

        logger.debug(f"Attempting to parse S-expression string: '{text}'")
        stripped_string = text.strip()
        if not stripped_string:
            logger.error("S-expression parsing failed: Input string is empty or contains only whitespace.")
            raise SexpSyntaxError(
                "Input string is empty or contains only whitespace.",
                text
            )
        return stripped_string

    def _syntax_error(self, error: Exception, text: str) -> SexpSyntaxError:
        if isinstance(error, ExpectClosingBracket):
            logger.error(f"S-expression syntax error (Unbalanced Parentheses): {error}")
            return SexpSyntaxError("S-expression syntax error: Unbalanced parentheses or brackets.", text, error_details=str(error))
        if isinstance(error, ExpectNothing):
            logger.error(f"S-expression parsing failed: Unexpected content after main expression. Details: {error}")
            return SexpSyntaxError("Unexpected content after the main expression.", text, error_details=str(error))
        if isinstance(error, ValueError):
            logger.error(f"S-expression syntax error (ValueError): {error}")
            return SexpSyntaxError(f"S-expression syntax error: {error}", text, error_details=str(error))
        logger.exception(f"Unexpected error during S-expression parsing: {error}")
        return SexpSyntaxError(f"An unexpected error occurred during S-expression parsing: {error}", text, error_details=str(error))
