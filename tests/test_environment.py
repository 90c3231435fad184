import pytest
from korvaq.ast import Block
from korvaq.environment import Environment
from korvaq.errors import KorvaqError


def test_declare_and_get():
    env = Environment()
    env.declare('x', 1.0)
    assert env.get('x') == 1.0
    env.declare('x', 2.0)
    assert env.get('x') == 2.0


def test_undefined_variable():
    env = Environment()
    with pytest.raises(KorvaqError) as excinfo:
        env.get('missing')
    assert excinfo.value.kind == 'NameError'


def test_immutable_binding_is_protected():
    env = Environment()
    env.declare('x', 1.0, immutable=True)
    for action in (
        lambda: env.declare('x', 2.0, immutable=True),
        lambda: env.declare('x', 2.0),
        lambda: env.assign('x', 2.0),
        lambda: env.delete('x'),
    ):
        with pytest.raises(KorvaqError) as excinfo:
            action()
        assert excinfo.value.kind == 'NameError'
    assert env.get('x') == 1.0


def test_make_cannot_replace_existing_binding():
    env = Environment()
    env.declare('x', 1.0)
    with pytest.raises(KorvaqError):
        env.declare('x', 2.0, immutable=True)
    assert env.get('x') == 1.0


def test_all_is_reserved():
    env = Environment()
    with pytest.raises(KorvaqError):
        env.declare('all', 1.0)
    with pytest.raises(KorvaqError):
        env.define_function('all', (), Block(()))
    with pytest.raises(KorvaqError):
        env.define_function('f', ('all',), Block(()))


def test_assign_requires_existing_binding():
    env = Environment()
    with pytest.raises(KorvaqError) as excinfo:
        env.assign('x', 1.0)
    assert excinfo.value.kind == 'NameError'


def test_call_frames_are_isolated():
    env = Environment()
    env.declare('g', 'global')
    with env.call_frame():
        env.declare('local', 1.0)
        assert env.get('g') == 'global'
        with env.call_frame():
            # a nested call does not see the caller's locals
            assert not env.is_defined('local')
            assert env.get('g') == 'global'
        assert env.get('local') == 1.0
    assert not env.is_defined('local')


def test_call_frame_pops_on_error():
    env = Environment()
    with pytest.raises(RuntimeError):
        with env.call_frame():
            raise RuntimeError('boom')
    assert env.frames == []


def test_assign_rebinds_innermost_holder():
    env = Environment()
    env.declare('counter', 0.0)
    with env.call_frame():
        env.assign('counter', 5.0)
    assert env.get('counter') == 5.0


def test_delete_all_is_atomic():
    env = Environment()
    env.declare('a', 1.0)
    env.declare('b', 2.0, immutable=True)
    env.declare('c', 3.0)
    with pytest.raises(KorvaqError):
        env.delete_all()
    assert env.get('a') == 1.0
    assert env.get('c') == 3.0


def test_delete_all_clears_current_scope():
    env = Environment()
    env.declare('a', 1.0)
    env.declare('b', 2.0)
    env.delete_all()
    assert env.globals.values == {}


def test_functions():
    env = Environment()
    body = Block(())
    env.define_function('f', ('a', 'b'), body)
    definition = env.get_function('f')
    assert definition.params == ('a', 'b')
    assert definition.body is body
    env.delete_function('f')
    with pytest.raises(KorvaqError):
        env.get_function('f')
    with pytest.raises(KorvaqError):
        env.delete_function('f')
    env.define_function('g', (), body)
    env.define_function('h', (), body)
    env.delete_all_functions()
    assert env.functions == {}


def test_loop_variable_binding():
    env = Environment()
    env.declare('fixed', 1.0, immutable=True)
    with pytest.raises(KorvaqError):
        env.bind_global('fixed', 2.0)
    with env.call_frame():
        env.bind_global('i', 1.0)
    assert env.globals.values['i'] == 1.0
    env.unbind_global('i')
    assert not env.is_defined('i')


def test_loop_variable_hidden_by_local():
    env = Environment()
    with env.call_frame() as frame:
        frame.values['i'] = 0.0
        with pytest.raises(KorvaqError) as excinfo:
            env.bind_global('i', 1.0)
    assert excinfo.value.kind == 'NameError'
    assert not env.is_defined('i')
