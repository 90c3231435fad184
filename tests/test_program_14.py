from pathlib import Path
from korvaq.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_14(capsys):
    with open(EXAMPLES / 'program_14.kq', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['false', 'true', 'true', 'true', 'true', 'true']
