from pathlib import Path
from korvaq.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_9(capsys):
    with open(EXAMPLES / 'program_9.kq', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == [
        '3', '3', '2', '4', '0', '1',
        'KORVAQ', 'korvaq', 'cba', '321',
        '["Hello","world","How","are","you"]',
        '3',
    ]
