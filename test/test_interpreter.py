"""
Evaluation tests for TinyFn
Environments, closures, primitive operations and evaluation errors
"""

import pytest
from interpreter import (
  EMPTY_ENV,
  empty_env,
  env_extend,
  env_lookup_value,
  env_names,
  evaluate,
  apply_function,
  run
)
from parsing import (
  make_number,
  make_boolean,
  make_reference,
  make_addition,
  make_conditional,
  make_call
)
from stdlib import make_number_value, make_boolean_value, show_value, add_values
from error_handling import (
  ParseError,
  EvalError,
  UnboundVariableError,
  TypeMismatchError,
  NotAFunctionError
)


def num(n):
  return make_number_value(n)


def boolean(b):
  return make_boolean_value(b)


class TestEndToEnd:
  """Concrete programs run from structured terms"""

  def test_zero(self):
    assert run(0) == num(0)

  def test_nested_addition(self):
    assert run(["+", 1, ["+", 2, 3]]) == num(6)

  def test_conditional_true(self):
    assert run(["if", True, 1, 2]) == num(1)

  def test_conditional_false(self):
    assert run(["if", False, 1, 2]) == num(2)

  def test_let(self):
    assert run(["let1", ["x", 123], "x"]) == num(123)

  def test_immediate_application(self):
    assert run([["fn", ["x"], ["+", "x", 1]], 123]) == num(124)

  def test_infix_is_parse_error(self):
    with pytest.raises(ParseError):
      run([1, "+", 2])

  def test_two_formals_is_parse_error(self):
    with pytest.raises(ParseError):
      run(["fn", ["x", "y"], "x"])

  def test_adding_boolean_is_type_mismatch(self):
    with pytest.raises(TypeMismatchError) as exc_info:
      run(["+", 1, True])
    assert exc_info.value.kind == "TypeMismatch"
    assert isinstance(exc_info.value, EvalError)

  def test_boolean_result(self):
    assert run(["if", True, False, True]) == boolean(False)

  def test_float_addition(self):
    assert run(["+", 1.5, 2]) == num(3.5)

  def test_curried_function(self):
    term = [[["fn", ["x"], ["fn", ["y"], ["+", "x", "y"]]], 3], 4]
    assert run(term) == num(7)

  def test_self_application(self):
    term = [["fn", ["f"], ["f", "f"]], ["fn", ["g"], 7]]
    assert run(term) == num(7)


class TestTextPrograms:
  """Programs read from text through the interpreter facade"""

  def test_run_string(self, interpreter):
    results = interpreter.run_string("(+ 1 2) (if #f 1 2) ((fn (x) (+ x 1)) 123)")
    assert results == [num(3), num(2), num(124)]

  def test_terms_are_independent_programs(self, interpreter):
    with pytest.raises(UnboundVariableError):
      interpreter.run_string("(let1 (x 1) x) x")

  def test_run_file(self, interpreter, tmp_path):
    script = tmp_path / "closure.tfn"
    script.write_text("; closures keep their defining scope\n"
                      "(let1 (add1 (let1 (x 1) (fn (y) (+ x y))))\n"
                      "  (let1 (x 100) (add1 5)))\n")
    assert interpreter.run_file(str(script)) == [num(6)]

  def test_parse_then_evaluate(self, interpreter):
    ast = interpreter.parse(["+", "x", 1])
    assert ast == make_addition(make_reference("x"), make_number(1))
    env = env_extend(empty_env(), "x", num(2))
    assert interpreter.evaluate(ast, env) == num(3)

  def test_evaluate_defaults_to_empty_env(self, interpreter):
    with pytest.raises(UnboundVariableError):
      interpreter.evaluate(make_reference("x"))

  def test_run_term(self, interpreter):
    assert interpreter.run([["fn", ["x"], ["+", "x", 1]], 123]) == num(124)


class TestEnvironment:
  """Environment chain operations"""

  def test_empty_env_is_shared(self):
    assert empty_env() is EMPTY_ENV
    assert env_names(empty_env()) == []

  def test_extend_does_not_mutate(self):
    env = env_extend(empty_env(), "x", num(1))
    env2 = env_extend(env, "y", num(2))
    assert env_names(env) == ["x"]
    assert env_names(env2) == ["y", "x"]
    assert EMPTY_ENV['bindings'] == {}

  def test_nearest_binding_wins(self):
    env = env_extend(env_extend(empty_env(), "x", num(1)), "x", num(2))
    assert env_lookup_value(env, "x") == num(2)
    assert env_names(env) == ["x"]

  def test_lookup_walks_chain(self):
    env = env_extend(env_extend(empty_env(), "x", num(1)), "y", num(2))
    assert env_lookup_value(env, "x") == num(1)

  def test_unbound_lookup(self):
    env = env_extend(empty_env(), "x", num(1))
    with pytest.raises(UnboundVariableError) as exc_info:
      env_lookup_value(env, "z")
    assert exc_info.value.name == "z"
    assert "Unbound variable: z" in str(exc_info.value)
    assert "in scope: x" in str(exc_info.value)


class TestScoping:
  """Let-binding scope and shadowing"""

  def test_shadowing(self):
    term = ["let1", ["x", 1], ["let1", ["x", 2], "x"]]
    assert run(term) == num(2)

  def test_outer_binding_unaffected(self):
    term = ["let1", ["x", 1], ["+", ["let1", ["x", 2], "x"], "x"]]
    assert run(term) == num(3)

  def test_binding_not_visible_outside_body(self):
    with pytest.raises(UnboundVariableError) as exc_info:
      run(["+", ["let1", ["x", 1], "x"], "x"])
    assert exc_info.value.name == "x"

  def test_init_evaluated_in_outer_scope(self):
    term = ["let1", ["x", 1], ["let1", ["x", ["+", "x", 10]], "x"]]
    assert run(term) == num(11)

  def test_evaluate_under_given_env(self):
    env = env_extend(empty_env(), "x", num(41))
    assert evaluate(make_addition(make_reference("x"), make_number(1)), env) == num(42)


class TestClosures:
  """Functions capture the defining environment"""

  def test_function_value_shape(self):
    value = run(["fn", ["x"], "x"])
    assert value['type'] == "Function"
    assert value['formal'] == "x"
    assert value['body'] == make_reference("x")
    assert value['closure_env'] is EMPTY_ENV

  def test_closure_outlives_let(self):
    func = run(["let1", ["x", 1], ["fn", ["y"], ["+", "x", "y"]]])
    assert apply_function(func, num(5)) == num(6)

  def test_call_site_rebinding_ignored(self):
    func = run(["let1", ["x", 1], ["fn", ["y"], ["+", "x", "y"]]])
    env = env_extend(env_extend(empty_env(), "x", num(100)), "f", func)
    assert evaluate(make_call(make_reference("f"), make_number(5)), env) == num(6)

  def test_body_cannot_see_call_site(self):
    term = ["let1", ["f", ["fn", ["y"], "z"]], ["let1", ["z", 1], ["f", 0]]]
    with pytest.raises(UnboundVariableError) as exc_info:
      run(term)
    assert exc_info.value.name == "z"

  def test_formal_shadows_closure(self):
    term = ["let1", ["x", 1], [["fn", ["x"], "x"], 2]]
    assert run(term) == num(2)


class TestEvaluationOrder:
  """Short-circuiting and left-to-right evaluation"""

  def test_untaken_else_not_evaluated(self):
    expr = make_conditional(make_boolean(True), make_number(1), make_reference("undefined"))
    assert evaluate(expr, empty_env()) == num(1)

  def test_untaken_then_not_evaluated(self):
    assert run(["if", False, "undefined", 2]) == num(2)

  def test_addition_left_first(self):
    with pytest.raises(UnboundVariableError) as exc_info:
      run(["+", "a", "b"])
    assert exc_info.value.name == "a"

  def test_operands_evaluated_before_type_check(self):
    with pytest.raises(UnboundVariableError):
      run(["+", True, "b"])

  def test_callee_checked_before_argument(self):
    with pytest.raises(NotAFunctionError):
      run([1, "undefined"])

  def test_callee_evaluated_first(self):
    with pytest.raises(UnboundVariableError) as exc_info:
      run(["f", "a"])
    assert exc_info.value.name == "f"


class TestEvaluationErrors:
  """Type mismatches and bad applications"""

  def test_left_operand_mismatch(self):
    with pytest.raises(TypeMismatchError) as exc_info:
      run(["+", True, 1])
    error = exc_info.value
    assert error.expected == "Num"
    assert error.actual == boolean(True)
    assert "left operand" in error.message

  def test_right_operand_mismatch_message(self):
    with pytest.raises(TypeMismatchError) as exc_info:
      run(["+", 1, True])
    assert str(exc_info.value) == "TypeMismatch: + requires Num for right operand, got Bool #t"

  def test_function_operand_mismatch(self):
    with pytest.raises(TypeMismatchError):
      run(["+", ["fn", ["x"], "x"], 1])

  def test_number_test_is_not_truthy(self):
    with pytest.raises(TypeMismatchError) as exc_info:
      run(["if", 1, 2, 3])
    assert exc_info.value.expected == "Bool"
    assert "if requires Bool for test" in exc_info.value.message

  def test_apply_number(self):
    with pytest.raises(NotAFunctionError) as exc_info:
      run([1, 2])
    assert exc_info.value.kind == "NotAFunction"
    assert exc_info.value.actual == num(1)

  def test_apply_boolean(self):
    with pytest.raises(NotAFunctionError):
      run([True, 2])

  def test_apply_function_rejects_non_function(self):
    with pytest.raises(NotAFunctionError):
      apply_function(num(1), num(2))

  def test_short_keyword_form_applies_unbound_name(self):
    with pytest.raises(UnboundVariableError) as exc_info:
      run(["+", 1])
    assert exc_info.value.name == "+"

  def test_deep_nesting_bounded_by_host_stack(self):
    term = 0
    for _ in range(100000):
      term = ["+", 1, term]
    with pytest.raises(RecursionError):
      run(term)


class TestPrimitives:
  """Value display and arithmetic"""

  def test_show_values(self):
    assert show_value(num(6)) == "6"
    assert show_value(num(1.5)) == "1.5"
    assert show_value(boolean(True)) == "#t"
    assert show_value(boolean(False)) == "#f"

  def test_show_function(self):
    func = run(["fn", ["x"], ["+", "x", 1]])
    assert show_value(func) == "<function (fn (x) (+ x 1))>"

  def test_add_values(self):
    assert add_values(num(2), num(3)) == num(5)


class TestDebugOutput:
  """Tracing with the debug flag"""

  def test_trace(self, capsys):
    assert run(["let1", ["x", 1], [["fn", ["y"], "y"], "x"]], debug=True) == num(1)
    out = capsys.readouterr().out
    assert "Evaluating: LET" in out
    assert "Binding x = 1" in out
    assert "Applying <function (fn (y) y)> to 1" in out

  def test_quiet_by_default(self, capsys):
    run(["+", 1, 2])
    assert capsys.readouterr().out == ""
