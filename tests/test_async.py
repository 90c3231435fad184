import pytest
from korvaq.errors import KorvaqError
from korvaq.interpreter import Interpreter, run_program
from korvaq.std.io import RecordingOutput


def test_async_block_joins_before_continuing():
    source = '''
    let results = []
    async {
        arradd results 1
        arradd results 2
        arradd results 3
    }
    show arrsize results
    '''
    result = run_program(source)
    assert result.error is None
    assert result.lines() == ['3']


def test_async_children_share_environment():
    source = '''
    let total = 0
    func bump(n) { total = total + n }
    async {
        bump(1)
        bump(10)
        let created = "yes"
    }
    show total
    show created
    '''
    assert run_program(source).lines() == ['11', 'yes']


def test_every_child_runs_even_when_one_fails():
    source = '''
    let done = []
    async {
        show missing
        arradd done "second"
    }
    '''
    interp = Interpreter(output=RecordingOutput())
    with pytest.raises(KorvaqError) as excinfo:
        interp.run_source(source)
    assert excinfo.value.kind == 'NameError'
    # the join waits for the remaining child before reporting the failure
    assert interp.env.get('done') == ['second']


def test_first_error_in_statement_order_is_reported():
    source = '''
    async {
        show [1] - 1
        show missing
    }
    '''
    assert run_program(source).error.name == 'TypeError'


def test_nested_async_blocks():
    source = '''
    let log = []
    async {
        arradd log "outer"
        async {
            arradd log "inner"
        }
    }
    show arrsize log
    '''
    assert run_program(source).lines() == ['2']


def test_return_from_async_block_inside_function():
    source = '''
    func pick() {
        async {
            return "from async"
        }
        return "after"
    }
    show pick()
    '''
    assert run_program(source).lines() == ['from async']
