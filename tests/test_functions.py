import pytest

from lingua.lingua_runtime import ScriptRunner
from lingua.lingua_ast import (
    LiteralPattern, NamePattern, TypedPattern, ListPattern, WildcardPattern,
)
from lingua.lingua_datatypes import (
    Obj, ClassObj, NumberObj, StringObj, ListObj, FunctionObj, GenericFunctionObj, NULL,
)
from lingua.lingua_errors import CallError, LinguaNameError
from ast_builders import (
    num, s, null, name, lst, op, call, fn, block, assign, if_, while_, cls, run,
)


@pytest.fixture
def interp():
    return ScriptRunner().interpreter


def define_inc(interp):
    """f(x) = x + 1, bound in the global frame."""
    return run(interp, fn('f', ['x'], op('+', name('x'), num(1))))


# --- Call protocol ---

def test_call_binds_parameters_and_evaluates_body(interp):
    define_inc(interp)
    assert interp.evaluate(call('f', num(5))) == NumberObj(6)


def test_wrong_argument_count_raises_call_exception(interp):
    define_inc(interp)
    with pytest.raises(CallError) as excinfo:
        interp.evaluate(call('f', num(5), num(6)))
    assert excinfo.value.kind == "CallException"
    assert excinfo.value.message == "invalid number of arguments for function f"


def test_pattern_mismatch_raises_call_exception(interp):
    run(interp, fn('f', [LiteralPattern(num(0))], s("zero")))
    with pytest.raises(CallError) as excinfo:
        interp.evaluate(call('f', num(1)))
    assert excinfo.value.message == "invalid argument for function f"


def test_parameters_do_not_leak_into_caller(interp):
    define_inc(interp)
    interp.evaluate(call('f', num(5)))
    assert 'x' not in interp.globals


def test_calling_a_non_function_raises(interp):
    with pytest.raises(CallError):
        interp.evaluate(call(num(3)))


def test_scope_stack_restored_after_pattern_failure(interp):
    run(interp, fn('f', [LiteralPattern(num(0))], s("zero")))
    before = interp.env.get_stack()
    with pytest.raises(CallError):
        interp.evaluate(call('f', num(1)))
    assert interp.env.get_stack() is before


def test_scope_stack_restored_after_body_failure(interp):
    run(interp, fn('f', ['x'], block(assign('y', num(1)), name('missing'))))
    interp.env.push_frame("caller")
    before = interp.env.get_stack()
    with pytest.raises(LinguaNameError):
        interp.evaluate(call('f', num(1)))
    assert interp.env.get_stack() is before
    assert interp.env.frame_names() == ["caller", "<globals>"]


def test_failed_call_keeps_its_trace(interp):
    run(interp,
        fn('boom', [], name('missing')),
        fn('outer', [], call('boom')))
    with pytest.raises(LinguaNameError) as excinfo:
        interp.evaluate(call('outer'))
    assert excinfo.value.trace == ['outer', 'boom']


# --- Closures ---

def test_closure_resolves_against_defining_frame(interp):
    run(interp,
        assign('n', num(100)),
        fn('make_adder', ['n'], fn(None, ['x'], op('+', name('x'), name('n')))),
        assign('add5', call('make_adder', num(5))))
    assert interp.evaluate(call('add5', num(1))) == NumberObj(6)


def test_no_dynamic_scoping(interp):
    run(interp,
        fn('g', [], name('y')),
        fn('h', [], block(assign('y', num(5)), call('g'))))
    with pytest.raises(LinguaNameError) as excinfo:
        interp.evaluate(call('h'))
    assert "undefined variable y" in str(excinfo.value)


def test_counter_closure_mutates_shared_frame(interp):
    run(interp,
        fn('make_counter', [], block(
            assign('count', num(0)),
            fn(None, [], block(
                assign('count', op('+', name('count'), num(1))),
                name('count'))))),
        assign('c1', call('make_counter')),
        assign('c2', call('make_counter')))
    assert interp.evaluate(call('c1')) == NumberObj(1)
    assert interp.evaluate(call('c1')) == NumberObj(2)
    assert interp.evaluate(call('c2')) == NumberObj(1)
    assert 'count' not in interp.globals


def test_paired_closures_share_one_frame(interp):
    # get/set both close over the same call frame of make_cell
    run(interp,
        fn('make_cell', ['v'], lst(
            fn(None, [], name('v')),
            fn(None, ['nv'], assign('v', name('nv'))))),
        assign('cell', call('make_cell', num(1))))
    cell = interp.env.lookup('cell')
    getter, setter = cell.items
    assert getter.captured is setter.captured
    interp.call(setter, [NumberObj(42)])
    assert interp.call(getter, []) == NumberObj(42)


def test_closure_over_loop_variable_keeps_its_own_copy(interp):
    run(interp,
        fn('make', ['v'], fn(None, [], name('v'))),
        assign('i', num(0)),
        assign('first', null()),
        while_(op('<', name('i'), num(3)), block(
            assign('c', call('make', name('i'))),
            if_(op('==', name('first'), null()), assign('first', name('c'))),
            assign('i', op('+', name('i'), num(1))))))
    assert interp.evaluate(call('first')) == NumberObj(0)
    assert 'c' not in interp.globals


def test_anonymous_function_is_named_lambda(interp):
    value = interp.evaluate(fn(None, [], num(1)))
    assert isinstance(value, FunctionObj)
    assert value.name == "lambda"
    assert 'lambda' not in interp.globals


def test_recursion(interp):
    run(interp, fn('fib', ['n'], if_(
        op('<', name('n'), num(2)),
        name('n'),
        op('+',
           call('fib', op('-', name('n'), num(1))),
           call('fib', op('-', name('n'), num(2)))))))
    assert interp.evaluate(call('fib', num(10))) == NumberObj(55)


# --- Binding self ---

def test_with_self_returns_an_independent_copy(interp):
    thing = Obj(ClassObj("Thing"))
    original = run(interp, fn('who', [], name('self')))
    bound = original.with_self(thing)
    assert bound is not original
    assert original.self_obj is None
    assert interp.call(bound, []) is thing
    with pytest.raises(LinguaNameError):
        interp.call(original, [])


def test_bound_function_frame_is_named_after_class(interp):
    thing = Obj(ClassObj("Thing"))
    original = run(interp, fn('who', [], name('self')))
    assert original.with_self(thing).frame_name() == "Thing.who"
    assert original.frame_name() == "who"


def test_equality_ignores_capture_and_bindings(interp):
    original = run(interp, fn('who', [], name('self')))
    other = FunctionObj('who', original.params, original.body, captured=None)
    assert original == other
    assert original.with_self(Obj()) == original
    assert original != FunctionObj('whom', original.params, original.body)
    assert original != FunctionObj('who', original.params, num(1))


# --- Dispatch probing ---

def test_is_applicable_leaves_no_trace(interp):
    f = run(interp, fn('f', ['x'], name('x')))
    top = interp.env.get_stack()
    assert f.is_applicable(interp, [NumberObj(1)]) is True
    assert f.is_applicable(interp, []) is False
    assert interp.env.get_stack() is top
    assert 'x' not in top


# --- Overloading ---

def test_overloads_dispatch_on_first_applicable(interp):
    run(interp,
        fn('fact', [LiteralPattern(num(0))], num(1)),
        fn('fact', ['n'], op('*', name('n'), call('fact', op('-', name('n'), num(1))))))
    assert isinstance(interp.env.lookup('fact'), GenericFunctionObj)
    assert interp.evaluate(call('fact', num(5))) == NumberObj(120)


def test_redefinition_with_same_parameters_replaces(interp):
    run(interp,
        fn('f', ['x'], num(1)),
        fn('f', ['x'], num(2)))
    assert isinstance(interp.env.lookup('f'), FunctionObj)
    assert interp.evaluate(call('f', num(0))) == NumberObj(2)


def test_redefinition_inside_overload_set_replaces(interp):
    run(interp,
        fn('g', [LiteralPattern(num(0))], s("zero")),
        fn('g', ['x'], s("old")),
        fn('g', ['x'], s("new")))
    g = interp.env.lookup('g')
    assert len(g.methods) == 2
    assert interp.evaluate(call('g', num(3))) == StringObj("new")


def test_overload_set_with_no_applicable_method(interp):
    run(interp,
        fn('g', [LiteralPattern(num(0))], s("zero")),
        fn('g', [ListPattern((WildcardPattern(), WildcardPattern()))], s("pair")))
    assert interp.evaluate(call('g', lst(num(1), num(2)))) == StringObj("pair")
    with pytest.raises(CallError) as excinfo:
        interp.evaluate(call('g', num(5)))
    assert excinfo.value.message == "invalid arguments for function g"


def test_typed_pattern_dispatch(interp):
    run(interp,
        fn('describe', [TypedPattern('n', name('Number'))], s("number")),
        fn('describe', [TypedPattern('t', name('String'))], op('+', s("string "), name('t'))))
    assert interp.evaluate(call('describe', num(1))) == StringObj("number")
    assert interp.evaluate(call('describe', s("x"))) == StringObj("string x")
    with pytest.raises(CallError):
        interp.evaluate(call('describe', null()))


def test_typed_pattern_with_non_class_never_matches(interp):
    run(interp, fn('f', [TypedPattern('x', num(1))], name('x')))
    with pytest.raises(CallError):
        interp.evaluate(call('f', num(1)))


def test_list_pattern_destructures(interp):
    run(interp, fn('swap', [ListPattern((NamePattern('a'), NamePattern('b')))],
                   lst(name('b'), name('a'))))
    result = interp.evaluate(call('swap', lst(num(1), s("two"))))
    assert result == ListObj([StringObj("two"), NumberObj(1)])
    with pytest.raises(CallError):
        interp.evaluate(call('swap', lst(num(1))))


def test_block_value_is_last_expression(interp):
    assert interp.evaluate(block()) is NULL
    assert interp.evaluate(block(num(1), num(2))) == NumberObj(2)


def test_overload_patterns_resolve_in_defining_scope(interp):
    # Secret is only bound inside make's block frame
    run(interp,
        fn('make', [], block(
            cls('Secret'),
            fn('g', [TypedPattern('x', name('Secret'))], s("secret")),
            fn('g', ['x'], s("other")),
            lst(name('g'), call('Secret')))),
        assign('pair', call('make')))
    g, secret = interp.env.lookup('pair').items
    assert 'Secret' not in interp.globals
    assert isinstance(g, GenericFunctionObj)
    assert interp.call(g, [secret]) == StringObj("secret")
    assert interp.call(g, [NumberObj(1)]) == StringObj("other")


def test_overload_patterns_are_matched_once(interp):
    run(interp,
        fn('g', [LiteralPattern(call('print', s("checked")))], s("null")),
        fn('g', ['x'], s("other")))
    assert interp.evaluate(call('g', null())) == StringObj("null")
    stdout = [e['message'] for e in interp.side_effects if e['topics'] == ['stdout']]
    assert stdout == ["checked"]


def test_leftover_call_entries_are_dropped_on_next_entry(interp):
    run(interp,
        fn('boom', [], name('missing')),
        fn('ok', [], num(1)))
    with pytest.raises(LinguaNameError):
        interp.evaluate(call('boom'))
    assert interp.trace() == ['boom']
    with pytest.raises(LinguaNameError) as excinfo:
        interp.evaluate(name('nope'))
    assert excinfo.value.trace == []
    assert interp.evaluate(call('ok')) == NumberObj(1)
    assert interp.call_stack == []
