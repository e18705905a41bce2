"""
dictlisp: an applicative-order, substitution-model evaluator for a small
Scheme-style language with a dictionary data type.
"""

__version__ = "0.1.0"
