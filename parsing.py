"""
TinyFn Parser - structured terms to abstract syntax tree
Pure functions over immutable dictionaries; rules are tried in a fixed order
"""

from typing import Any, Dict

from utilities import (
  is_boolean_atom,
  is_number_atom,
  is_symbol_atom,
  is_compound,
  is_form,
  show_term,
  malformed_form_error
)


# Usage strings for malformed special forms
FORM_USAGE = {
    '+': "(+ left right)",
    'if': "(if test then else)",
    'let1': "(let1 (name init) body)",
    'fn': "(fn (formal) body)",
}


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_ast_node(node_type: str, value: Any) -> Dict:
  """Create an immutable AST node dictionary"""
  return {
      'type': node_type,
      'value': value
  }


def make_number(value) -> Dict:
  return make_ast_node("NUMBER", value)


def make_boolean(value: bool) -> Dict:
  return make_ast_node("BOOLEAN", value)


def make_reference(name: str) -> Dict:
  return make_ast_node("IDENTIFIER", str(name))


def make_addition(left: Dict, right: Dict) -> Dict:
  return make_ast_node("ADDITION", {'left': left, 'right': right})


def make_conditional(test: Dict, then: Dict, otherwise: Dict) -> Dict:
  return make_ast_node("CONDITIONAL", {'test': test, 'then': then, 'else': otherwise})


def make_let(name: str, init: Dict, body: Dict) -> Dict:
  """Let-binding: name is visible in body only"""
  return make_ast_node("LET", {'name': str(name), 'init': init, 'body': body})


def make_lambda(formal: str, body: Dict) -> Dict:
  """Single-parameter function literal"""
  return make_ast_node("LAMBDA", {'formal': str(formal), 'body': body})


def make_call(callee: Dict, argument: Dict) -> Dict:
  return make_ast_node("FUNCTION_CALL", {'callee': callee, 'argument': argument})


# ============================================================================
# FORM PARSERS
# ============================================================================

def parse_addition(term: Any, debug: bool = False) -> Dict:
  """(+ left right)"""
  return make_addition(parse(term[1], debug), parse(term[2], debug))


def parse_conditional(term: Any, debug: bool = False) -> Dict:
  """(if test then else)"""
  return make_conditional(parse(term[1], debug), parse(term[2], debug), parse(term[3], debug))


def parse_let(term: Any, debug: bool = False) -> Dict:
  """(let1 (name init) body)"""
  name, init = term[1]
  if not is_symbol_atom(name):
    raise malformed_form_error(term, FORM_USAGE['let1'])
  return make_let(name, parse(init, debug), parse(term[2], debug))


def parse_lambda(term: Any, debug: bool = False) -> Dict:
  """(fn (formal) body)"""
  formal = term[1][0]
  if not is_symbol_atom(formal):
    raise malformed_form_error(term, FORM_USAGE['fn'])
  return make_lambda(formal, parse(term[2], debug))


def parse_call(term: Any, debug: bool = False) -> Dict:
  """(callee argument)"""
  return make_call(parse(term[0], debug), parse(term[1], debug))


def parse_atom(term: Any) -> Dict:
  """Literals and references"""
  # bool before number: True is an int
  if is_boolean_atom(term):
    return make_boolean(term)
  elif is_number_atom(term):
    return make_number(term)
  elif is_symbol_atom(term):
    return make_reference(term)
  raise malformed_form_error(term)


def _has_binder(term: Any, width: int) -> bool:
  return is_compound(term[1]) and len(term[1]) == width


# ============================================================================
# ENTRY POINT
# ============================================================================

def parse(term: Any, debug: bool = False) -> Dict:
  """
  Parse a structured term into an AST node.

  Rules are tried in order and the first match wins. Any two-element
  compound not claimed by an earlier rule is an application, so
  '(+ 1)' applies a variable named '+'.

  Raises:
    ParseError: term matches no form
  """
  if debug:
    print(f"Parsing: {show_term(term)}")

  if not is_compound(term):
    return parse_atom(term)

  if is_form(term, '+', 3):
    return parse_addition(term, debug)
  elif is_form(term, 'if', 4):
    return parse_conditional(term, debug)
  elif is_form(term, 'let1', 3) and _has_binder(term, 2):
    return parse_let(term, debug)
  elif is_form(term, 'fn', 3) and _has_binder(term, 1):
    return parse_lambda(term, debug)
  elif len(term) == 2:
    return parse_call(term, debug)

  head = term[0] if len(term) > 0 else None
  usage = FORM_USAGE.get(head) if is_symbol_atom(head) else None
  raise malformed_form_error(term, usage)


# ============================================================================
# RENDERING
# ============================================================================

def unparse(ast_node: Dict) -> Any:
  """Render an AST node back to the surface term it was parsed from"""
  node_type = ast_node['type']
  value = ast_node['value']

  if node_type in ("NUMBER", "BOOLEAN", "IDENTIFIER"):
    return value
  elif node_type == "ADDITION":
    return ['+', unparse(value['left']), unparse(value['right'])]
  elif node_type == "CONDITIONAL":
    return ['if', unparse(value['test']), unparse(value['then']), unparse(value['else'])]
  elif node_type == "LET":
    return ['let1', [value['name'], unparse(value['init'])], unparse(value['body'])]
  elif node_type == "LAMBDA":
    return ['fn', [value['formal']], unparse(value['body'])]
  elif node_type == "FUNCTION_CALL":
    return [unparse(value['callee']), unparse(value['argument'])]
  raise ValueError(f"Unknown AST node type: {node_type}")


def show_ast(ast_node: Dict) -> str:
  """Surface notation of an AST node"""
  return show_term(unparse(ast_node))


def pretty_print_ast(ast_node: Dict, indent: int = 0) -> str:
  """Pretty print an AST node for debugging"""
  node_type = ast_node['type']
  value = ast_node['value']
  pad = "  " * indent

  if not isinstance(value, dict):
    return f"{pad}{node_type}({show_term(value)})\n"

  result = f"{pad}{node_type}"
  if node_type == "LET":
    result += f"({value['name']})"
  elif node_type == "LAMBDA":
    result += f"({value['formal']})"
  result += "\n"

  for key, child in value.items():
    if isinstance(child, dict):
      result += f"{pad}  {key}:\n"
      result += pretty_print_ast(child, indent + 2)
  return result
