# KorvaqScrip language package
# This package provides a tokenizer, parser and interpreter for KorvaqScrip.
from .errors import KorvaqError
from .interpreter import Interpreter, RunResult, run_file, run_program
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'RunResult',
    'KorvaqError',
]
