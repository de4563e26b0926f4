"""
TinyFn Standard Library
Runtime values and the primitive operations the evaluator relies on
Pure functional style using immutable dictionaries
"""

from typing import Any, Dict
import operator

from parsing import show_ast
from utilities import (
  binary_arithmetic_op,
  expect_type,
  not_a_function_error
)


# ============================================================================
# VALUE CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str = "Unknown") -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_number_value(value) -> Dict:
  return make_value(value, "Num")


def make_boolean_value(value: bool) -> Dict:
  return make_value(value, "Bool")


def make_function(formal: str, body: Dict, closure_env: Dict) -> Dict:
  """Create a function value closing over its defining environment"""
  return {
      'type': 'Function',
      'formal': formal,
      'body': body,
      'closure_env': closure_env
  }


# ============================================================================
# DISPLAY
# ============================================================================

def show_value(value: Dict) -> str:
  """Convert value to its printed representation"""
  if value['type'] == "Num":
    return str(value['value'])
  elif value['type'] == "Bool":
    return "#t" if value['value'] else "#f"
  elif value['type'] == "Function":
    return f"<function (fn ({value['formal']}) {show_ast(value['body'])})>"
  return f"<{value['type']}>"


# ============================================================================
# ARITHMETIC
# ============================================================================

_add = binary_arithmetic_op(operator.add, "+", show_value)


def add_values(x: Dict, y: Dict) -> Dict:
  """Sum of two Num values; TypeMismatchError otherwise"""
  return _add(x, y, make_value)


# ============================================================================
# COERCIONS
# ============================================================================

def truthiness(value: Dict) -> bool:
  """
  Branch selector for conditionals.

  Only Bool values qualify; a Num test is a type mismatch, never
  truthy or falsy.
  """
  return expect_type(value, "Bool", "if", "test", show_value)['value']


def as_function(value: Dict) -> Dict:
  """Return value if it is a function; NotAFunctionError otherwise"""
  if value.get('type') != "Function":
    raise not_a_function_error(value, show_value)
  return value
