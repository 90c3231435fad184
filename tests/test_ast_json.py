import json

import pytest
from korvaq.ast import FunctionDeclaration, Program
from korvaq.ast_json import ast_from_obj, ast_to_obj
from korvaq.interpreter import Interpreter
from korvaq.parser import parse_program
from korvaq.std.io import RecordingOutput

SOURCE = '''
make limit = 3
let items = []
func fill(n) {
    loop (i, 1, n) {
        arradd items (i * 2)
    }
    return arrsize items
}
if (fill(limit) >= 3 && !false) {
    show tojson items
} else {
    alert "short"
}
async { show uppercase "done" }
'''


def test_round_trip_preserves_tree():
    program = parse_program(SOURCE)
    obj = json.loads(json.dumps(ast_to_obj(program)))
    restored = ast_from_obj(obj)
    assert restored == program


def test_node_objects_are_tagged():
    obj = ast_to_obj(parse_program('func f(a) { return a }'))
    func = obj['body'][0]
    assert func['type'] == 'FunctionDeclaration'
    assert func['params'] == ['a']
    assert func['body']['type'] == 'Block'
    restored = ast_from_obj(obj)
    assert isinstance(restored, Program)
    assert isinstance(restored.body[0], FunctionDeclaration)
    assert restored.body[0].params == ('a',)


def test_restored_tree_runs():
    restored = ast_from_obj(ast_to_obj(parse_program(SOURCE)))
    interp = Interpreter(output=RecordingOutput())
    interp.run(restored)
    assert interp.output.lines() == ['[2,4,6]', 'DONE']


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Mystery'})


def test_malformed_node():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Identifier'})
