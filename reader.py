"""
TinyFn Term Reader
Generic s-expression reader: text in, structured terms out.
Knows nothing about the language's keywords; that is the parser's job.
"""

from typing import Any, List

try:
    from pyparsing import (
        Forward, Group, ParseException, ParserElement, Regex, StringEnd,
        Suppress, ZeroOrMore
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import ReadError
from utilities import is_compound, show_term


class Symbol(str):
    """Identifier atom produced by the reader"""

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


# Atoms end at whitespace, a parenthesis, a comment or end of text
_DELIMITER = r'(?=[\s();]|$)'

BOOLEAN_SPELLINGS = {
    '#t': True,
    '#true': True,
    '#f': False,
    '#false': False,
}


def _number_action(tokens):
    text = tokens[0]
    if any(marker in text for marker in '.eE'):
        return [float(text)]
    return [int(text)]


def _boolean_action(tokens):
    return [BOOLEAN_SPELLINGS[tokens[0]]]


def _symbol_action(tokens):
    return [Symbol(tokens[0])]


class TermGrammar:
    """Term notation grammar using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup atoms, compound terms and whole-text rules"""
        term = Forward()

        lpar = Suppress("(")
        rpar = Suppress(")")

        boolean = Regex(r'#(?:true|false|t|f)' + _DELIMITER).set_parse_action(_boolean_action)
        number = Regex(
            r'[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?' + _DELIMITER
        ).set_parse_action(_number_action)
        symbol = Regex(r'[^\s()#;"][^\s();"]*').set_parse_action(_symbol_action)

        boolean.set_name("boolean")
        number.set_name("number")
        symbol.set_name("symbol")

        compound = Group(lpar + ZeroOrMore(term) + rpar).set_name("compound term")

        # Order matters: '-5' is a number, '-' alone is a symbol
        term <<= boolean | number | symbol | compound
        term.set_name("term")

        comment = Suppress(Regex(r';[^\n]*'))

        self.term = term
        self.single = term + StringEnd()
        self.program = ZeroOrMore(term) + StringEnd()

        self.single.ignore(comment)
        self.program.ignore(comment)


class TermReader:
    """Reads term notation from strings and files"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = TermGrammar(debug)

    def read_string(self, text: str, filename: str = "<input>") -> List[Any]:
        """Read every top-level term in text"""
        if self.debug:
            print(f"Reading {filename}...")
        try:
            result = self.grammar.program.parse_string(text, parse_all=True)
        except ParseException as e:
            raise ReadError.from_parse_exception(e, text, filename) from e

        terms = result.as_list()
        if self.debug:
            print(f"Read {len(terms)} terms")
        return terms

    def read_term(self, text: str, filename: str = "<input>") -> Any:
        """Read exactly one term"""
        if self.debug:
            print(f"Reading term from {filename}...")
        try:
            result = self.grammar.single.parse_string(text, parse_all=True)
        except ParseException as e:
            raise ReadError.from_parse_exception(e, text, filename) from e
        return result.as_list()[0]

    def read_file(self, filepath: str) -> List[Any]:
        """Read every top-level term in a file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ReadError(f"File not found: {filepath}", filename=filepath)
        except UnicodeDecodeError as e:
            raise ReadError(f"Cannot decode file {filepath}: {e}", filename=filepath)
        except OSError as e:
            raise ReadError(f"Cannot read file {filepath}: {e}", filename=filepath)
        return self.read_string(content, filepath)


# Factory functions for creating readers
def create_reader(debug: bool = False) -> TermReader:
    """Create a term reader"""
    return TermReader(debug=debug)


def create_debug_reader() -> TermReader:
    """Create a term reader with debug enabled"""
    return TermReader(debug=True)


def pretty_print_term(term: Any, indent: int = 0) -> str:
    """Pretty print a term, one atom or compound per line"""
    if not is_compound(term) or all(not is_compound(item) for item in term):
        return "  " * indent + show_term(term) + "\n"

    result = "  " * indent + "(\n"
    for item in term:
        result += pretty_print_term(item, indent + 1)
    result += "  " * indent + ")\n"
    return result
