from pathlib import Path
import pytest
from korvaq.interpreter import parse_program, Interpreter, KorvaqError

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_10(capsys):
    with open(EXAMPLES / 'program_10.kq', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    with pytest.raises(KorvaqError) as excinfo:
        interp.run(ast)
    assert excinfo.value.kind == 'NameError'
    out = capsys.readouterr().out.strip()
    # execution stops at the failed reassignment
    assert out == '10'
    assert interp.env.get('limit') == 10
