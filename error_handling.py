"""
Error families for the TinyFn reader, parser and evaluator
Reader errors carry source context; parse and evaluation errors carry the offending term
"""

from typing import Any, List, Optional, Dict
from pyparsing import ParseException


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_read_error(
    message: str,
    location: int,
    line: int,
    column: int,
    filename: str = "<input>",
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable read error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'filename': filename,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_read_error(error: Dict) -> str:
    """Format read error as string"""
    error_msg = f"Read error at {error['filename']}:{error['line']}:{error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    msg = exc.msg or ""
    if msg.startswith("Expected "):
        return [msg[len("Expected "):]]
    return ["a term"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
            return "end of line"
    return "end of input"


def generate_suggestions(source_text: str, got: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    opened = source_text.count("(")
    closed = source_text.count(")")
    if opened > closed:
        suggestions.append(f"{opened - closed} unclosed '(' - add the missing ')'")
    elif closed > opened:
        suggestions.append(f"{closed - opened} stray ')' - remove it or add the matching '('")

    if got.startswith("'#"):
        suggestions.append("Booleans are written #t or #f")

    if "[" in got or "{" in got:
        suggestions.append("Only parentheses () group terms")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str, filename: str = "<input>") -> Dict:
    """Convert pyparsing exception to a read error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got)

    return make_read_error(
        message="Malformed term notation",
        location=exc.loc,
        line=line_num,
        column=col_num,
        filename=filename,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ReadError(Exception):
    """Text that is not well-formed term notation"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 filename: str = "<input>", expected: Optional[List[str]] = None,
                 got: Optional[str] = None, context: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.filename = filename
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        if not self.line:
            return f"Read error: {self.message}"
        error_dict = make_read_error(
            self.message, self.location, self.line, self.column, self.filename,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_read_error(error_dict)

    @classmethod
    def from_parse_exception(cls, exc: ParseException, source_text: str,
                             filename: str = "<input>") -> 'ReadError':
        """Build a ReadError from a pyparsing failure"""
        error_dict = enhance_parse_exception_dict(exc, source_text, filename)
        return cls(**error_dict)


class ParseError(Exception):
    """A structured term that matches no expression form"""
    def __init__(self, message: str, term: Any = None):
        self.message = message
        self.term = term
        super().__init__(message)

    def __str__(self) -> str:
        return f"Parse error: {self.message}"


class EvalError(Exception):
    """Evaluation failure; subclasses name the kind"""
    kind = "EvalError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class UnboundVariableError(EvalError):
    """Reference to a name with no binding in the environment chain"""
    kind = "UnboundVariable"

    def __init__(self, message: str, name: str):
        self.name = name
        super().__init__(message)


class TypeMismatchError(EvalError):
    """Operand or test of the wrong value type"""
    kind = "TypeMismatch"

    def __init__(self, message: str, expected: str, actual: Dict):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class NotAFunctionError(EvalError):
    """Application whose callee is not a function value"""
    kind = "NotAFunction"

    def __init__(self, message: str, actual: Dict):
        self.actual = actual
        super().__init__(message)
