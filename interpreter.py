"""
TinyFn Interpreter - Pure Functional Style
Tree-walking evaluation over immutable dictionaries.
Evaluation depth equals AST nesting depth and is bounded by the host stack.
"""

from typing import Any, Dict, List, Optional

from parsing import parse
from reader import create_reader
from stdlib import (
  make_number_value,
  make_boolean_value,
  make_function,
  add_values,
  truthiness,
  as_function,
  show_value
)
from utilities import unbound_variable_error


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create an immutable runtime environment frame"""
  return {
      'parent': parent,
      'bindings': bindings or {}
  }


EMPTY_ENV = make_runtime_env()


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def empty_env() -> Dict:
  """The environment with no bindings"""
  return EMPTY_ENV


def env_extend(env: Dict, name: str, value: Dict) -> Dict:
  """Return new environment with name bound to value; env is untouched"""
  return make_runtime_env(env, {name: value})


def env_names(env: Dict) -> List[str]:
  """Visible names, newest binding first, shadowed names listed once"""
  names = []
  frame = env
  while frame is not None:
    for name in frame['bindings']:
      if name not in names:
        names.append(name)
    frame = frame['parent']
  return names


def env_lookup_value(env: Dict, name: str) -> Dict:
  """Look up a value in the environment chain; nearest binding wins"""
  frame = env
  while frame is not None:
    if name in frame['bindings']:
      return frame['bindings'][name]
    frame = frame['parent']
  raise unbound_variable_error(name, env_names(env))


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate an AST node under env and return its value"""
  node_type = ast_node['type']

  if debug:
    print(f"Evaluating: {node_type}")

  if node_type == "NUMBER":
    return eval_number(ast_node, env, debug)
  elif node_type == "BOOLEAN":
    return eval_boolean(ast_node, env, debug)
  elif node_type == "IDENTIFIER":
    return eval_identifier(ast_node, env, debug)
  elif node_type == "ADDITION":
    return eval_addition(ast_node, env, debug)
  elif node_type == "CONDITIONAL":
    return eval_conditional(ast_node, env, debug)
  elif node_type == "LET":
    return eval_let(ast_node, env, debug)
  elif node_type == "LAMBDA":
    return eval_lambda(ast_node, env, debug)
  elif node_type == "FUNCTION_CALL":
    return eval_function_call(ast_node, env, debug)
  raise ValueError(f"Unknown AST node type: {node_type}")


def eval_number(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate number literal"""
  return make_number_value(ast_node['value'])


def eval_boolean(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate boolean literal"""
  return make_boolean_value(ast_node['value'])


def eval_identifier(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate identifier by looking up in environment"""
  return env_lookup_value(env, ast_node['value'])


def eval_addition(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate (+ left right), left operand first"""
  value_dict = ast_node['value']
  left_val = eval_ast(value_dict['left'], env, debug)
  right_val = eval_ast(value_dict['right'], env, debug)
  return add_values(left_val, right_val)


def eval_conditional(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate the test, then only the selected branch"""
  value_dict = ast_node['value']
  test_val = eval_ast(value_dict['test'], env, debug)

  if truthiness(test_val):
    return eval_ast(value_dict['then'], env, debug)
  return eval_ast(value_dict['else'], env, debug)


def eval_let(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate init, then body with the new binding in scope"""
  value_dict = ast_node['value']
  name = value_dict['name']

  init_val = eval_ast(value_dict['init'], env, debug)
  if debug:
    print(f"Binding {name} = {show_value(init_val)}")

  return eval_ast(value_dict['body'], env_extend(env, name, init_val), debug)


def eval_lambda(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate function literal into a closure over the defining env"""
  value_dict = ast_node['value']
  return make_function(value_dict['formal'], value_dict['body'], env)


def eval_function_call(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate callee, then argument, then the body in the callee's closure"""
  value_dict = ast_node['value']

  func_val = as_function(eval_ast(value_dict['callee'], env, debug))
  arg_val = eval_ast(value_dict['argument'], env, debug)

  return apply_function(func_val, arg_val, debug)


def apply_function(func_val: Dict, arg_val: Dict, debug: bool = False) -> Dict:
  """
  Apply a function value to an argument value.

  The body sees the closure environment plus the formal; nothing
  from the call site.
  """
  func_val = as_function(func_val)
  if debug:
    print(f"Applying {show_value(func_val)} to {show_value(arg_val)}")

  call_env = env_extend(func_val['closure_env'], func_val['formal'], arg_val)
  return eval_ast(func_val['body'], call_env, debug)


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def evaluate(ast_node: Dict, env: Optional[Dict] = None, debug: bool = False) -> Dict:
  """Evaluate an AST node; env defaults to the empty environment"""
  if env is None:
    env = empty_env()
  return eval_ast(ast_node, env, debug)


def run(term: Any, debug: bool = False) -> Dict:
  """Parse a structured term and evaluate it in the empty environment"""
  return evaluate(parse(term, debug), empty_env(), debug)


class Interpreter:
  """Reader, parser and evaluator wired together"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.reader = create_reader(debug)

  def parse(self, term: Any) -> Dict:
    return parse(term, self.debug)

  def evaluate(self, ast_node: Dict, env: Optional[Dict] = None) -> Dict:
    return evaluate(ast_node, env, self.debug)

  def run(self, term: Any) -> Dict:
    return run(term, self.debug)

  def run_string(self, text: str, filename: str = "<input>") -> List[Dict]:
    """Run each top-level term as an independent program"""
    return [self.run(term) for term in self.reader.read_string(text, filename)]

  def run_file(self, filepath: str) -> List[Dict]:
    return [self.run(term) for term in self.reader.read_file(filepath)]


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(debug=debug)


def create_debug_interpreter() -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
