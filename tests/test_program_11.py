from pathlib import Path
from korvaq.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_11(capsys):
    with open(EXAMPLES / 'program_11.kq', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['2', 'hi', '5']
    assert 'greet' not in interp.env.functions
    assert not interp.env.is_defined('b')
