# Keyword utilities and host collaborators used by the interpreter.
from .numeric import populate_math_functions
from .text import populate_string_functions

__all__ = ['populate_math_functions', 'populate_string_functions']
