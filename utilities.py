"""
Utilities module for the TinyFn interpreter
Structured-term predicates, rendering, and shared error builders
"""

from typing import Any, Callable, Dict, List, Optional

from error_handling import (
  ParseError,
  TypeMismatchError,
  UnboundVariableError,
  NotAFunctionError
)


# ==================== TERM PREDICATES ====================

def is_boolean_atom(term: Any) -> bool:
  """True for #t / #f atoms"""
  return isinstance(term, bool)


def is_number_atom(term: Any) -> bool:
  """
  True for numeric atoms

  bool is an int subtype, so it is excluded explicitly.
  """
  return isinstance(term, (int, float)) and not isinstance(term, bool)


def is_symbol_atom(term: Any) -> bool:
  """True for identifier atoms (plain str or reader Symbol)"""
  return isinstance(term, str)


def is_compound(term: Any) -> bool:
  """True for compound terms (ordered sequences of terms)"""
  return isinstance(term, (list, tuple))


def is_form(term: Any, keyword: str, length: Optional[int] = None) -> bool:
  """
  Check if term is a compound headed by keyword

  Args:
    term: Candidate term
    keyword: Expected head symbol
    length: Required number of elements, head included (any if None)

  Examples:
    is_form(['+', 1, 2], '+', 3) -> True
    is_form(['+', 1], '+', 3) -> False
  """
  if not is_compound(term) or len(term) == 0:
    return False
  if length is not None and len(term) != length:
    return False
  head = term[0]
  return is_symbol_atom(head) and head == keyword


# ==================== TERM RENDERING ====================

def show_term(term: Any) -> str:
  """
  Render a structured term back to surface notation

  Examples:
    show_term(['+', 1, True]) -> "(+ 1 #t)"
    show_term([]) -> "()"
  """
  if is_compound(term):
    return "(" + " ".join(show_term(item) for item in term) + ")"
  if is_boolean_atom(term):
    return "#t" if term else "#f"
  if is_number_atom(term) or is_symbol_atom(term):
    return str(term)
  return repr(term)


# ==================== ERROR MESSAGE BUILDERS ====================

def malformed_form_error(term: Any, usage: Optional[str] = None) -> ParseError:
  """
  Generate parse error for a term matching no expression form

  Args:
    term: Offending term
    usage: Expected shape of the special form, when the head is a keyword

  Returns:
    ParseError carrying the term
  """
  message = f"Malformed expression: {show_term(term)}"
  if usage:
    message += f" (expected {usage})"
  return ParseError(message, term)


def unbound_variable_error(name: str, visible: List[str]) -> UnboundVariableError:
  """
  Generate unbound variable error

  Args:
    name: Name that failed to resolve
    visible: Names bound at the failure point, newest first
  """
  message = f"Unbound variable: {name}"
  if visible:
    message += f" (in scope: {', '.join(visible)})"
  return UnboundVariableError(message, name)


def type_mismatch_error(
  operation: str,
  operand: str,
  expected: str,
  actual: Dict,
  show: Callable[[Dict], str]
) -> TypeMismatchError:
  """
  Generate type mismatch error

  Args:
    operation: Operation name (e.g. '+', 'if')
    operand: Which operand failed (e.g. 'left operand')
    expected: Expected type
    actual: Actual value dict
    show: Value renderer for the message
  """
  actual_type = actual.get('type', 'Unknown')
  return TypeMismatchError(
    f"{operation} requires {expected} for {operand}, got {actual_type} {show(actual)}",
    expected,
    actual
  )


def not_a_function_error(actual: Dict, show: Callable[[Dict], str]) -> NotAFunctionError:
  """Generate error for applying a non-function value"""
  actual_type = actual.get('type', 'Unknown')
  return NotAFunctionError(
    f"Cannot apply {actual_type} {show(actual)}: not a function",
    actual
  )


# ==================== VALIDATION UTILITIES ====================

def expect_type(
  value: Dict,
  expected: str,
  operation: str,
  operand: str,
  show: Callable[[Dict], str]
) -> Dict:
  """
  Validate that a value carries the expected type tag

  Raises:
    TypeMismatchError if the tags differ
  """
  if value.get('type') != expected:
    raise type_mismatch_error(operation, operand, expected, value, show)
  return value


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(
  op: Callable[[Any, Any], Any],
  op_name: str,
  show: Callable[[Dict], str],
  allowed_type: str = "Num"
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary arithmetic operations

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name for error messages
    show: Value renderer for error messages
    allowed_type: Type both operands must carry

  Returns:
    Function that performs the arithmetic operation

  Examples:
    add = binary_arithmetic_op(operator.add, "+", show_value)
    add({"type": "Num", "value": 1}, {"type": "Num", "value": 2}, make_value)
  """
  def arithmetic(x: Dict, y: Dict, make_value: Callable) -> Dict:
    expect_type(x, allowed_type, op_name, "left operand", show)
    expect_type(y, allowed_type, op_name, "right operand", show)
    return make_value(op(x['value'], y['value']), allowed_type)

  return arithmetic
