"""
Predicate parser (text → Expression AST).

Lets schema files spell predicates as short strings instead of
nested AST dicts:

    framework == "nextjs" | framework == "react"
    frameworkUi == true AND NOT (framework == "remix")

Syntax Notes:
    - & / AND, | / OR, ! / NOT are interchangeable
    - Precedence (loosest first): OR, AND, NOT, comparison
    - Strings are single- or double-quoted
    - true/false are booleans; bare numbers become int or float
    - Any other bare word is a field reference
"""

import re
from typing import List, Tuple

from wizlogic.errors import SchemaError
from wizlogic.expressions import (
    BinaryExpression,
    BinaryOperator,
    Expression,
    FieldReference,
    Literal,
    UnaryExpression,
    UnaryOperator,
)


class PredicateParseError(SchemaError):
    """Raised when a predicate string cannot be parsed."""
    pass


_TOKEN_RE = re.compile(
    r"""
    \s*(
        "(?:[^"\\]|\\.)*"          # double-quoted string
      | '(?:[^'\\]|\\.)*'          # single-quoted string
      | ==|!=|<=|>=|<|>
      | &&?|\|\|?|!
      | \(|\)
      | -?(?:\d+(?:\.\d*)?|\.\d+)  # number
      | [A-Za-z_][A-Za-z0-9_]*     # identifier / keyword
    )
    """,
    re.VERBOSE,
)

_COMPARISON_OPS = {
    '==': BinaryOperator.EQUALS,
    '!=': BinaryOperator.NOT_EQUALS,
    '<': BinaryOperator.LESS_THAN,
    '>': BinaryOperator.GREATER_THAN,
    '<=': BinaryOperator.LESS_EQUAL,
    '>=': BinaryOperator.GREATER_EQUAL,
}


def parse_predicate(text: str) -> Expression:
    """
    Parse a predicate string into an Expression.

    Args:
        text: predicate source

    Returns:
        Expression AST

    Raises:
        PredicateParseError: If syntax is invalid
    """
    if not text or not text.strip():
        raise PredicateParseError("Empty predicate")

    tokens = _tokenize(text)
    expr, pos = _parse_or_expression(tokens, 0)
    if pos < len(tokens):
        raise PredicateParseError(
            f"Unexpected tokens after parsing '{text}': {tokens[pos:]}"
        )
    return expr


def _tokenize(text: str) -> List[str]:
    """Split predicate text into tokens, normalising operator spellings."""
    tokens: List[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise PredicateParseError(f"Invalid character at {pos} in '{text}'")
        token = m.group(1)
        pos = m.end()
        if token in ('&', '&&') or token.upper() == 'AND':
            token = 'AND'
        elif token in ('|', '||') or token.upper() == 'OR':
            token = 'OR'
        elif token == '!' or token.upper() == 'NOT':
            token = 'NOT'
        tokens.append(token)
    if not tokens:
        raise PredicateParseError(f"No valid tokens in predicate: {text}")
    return tokens


def _parse_or_expression(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse OR expression (lowest precedence)."""
    left, pos = _parse_and_expression(tokens, pos)

    while pos < len(tokens) and tokens[pos] == 'OR':
        pos += 1
        right, pos = _parse_and_expression(tokens, pos)
        left = BinaryExpression(BinaryOperator.OR, left, right)

    return left, pos


def _parse_and_expression(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse AND expression."""
    left, pos = _parse_unary_expression(tokens, pos)

    while pos < len(tokens) and tokens[pos] == 'AND':
        pos += 1
        right, pos = _parse_unary_expression(tokens, pos)
        left = BinaryExpression(BinaryOperator.AND, left, right)

    return left, pos


def _parse_unary_expression(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse unary expression (NOT)."""
    if pos < len(tokens) and tokens[pos] == 'NOT':
        expr, pos = _parse_unary_expression(tokens, pos + 1)
        return UnaryExpression(UnaryOperator.NOT, expr), pos

    return _parse_comparison_expression(tokens, pos)


def _parse_comparison_expression(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse comparison expression (==, !=, <, >, <=, >=)."""
    left, pos = _parse_primary_expression(tokens, pos)

    if pos < len(tokens) and tokens[pos] in _COMPARISON_OPS:
        op = _COMPARISON_OPS[tokens[pos]]
        right, pos = _parse_primary_expression(tokens, pos + 1)
        left = BinaryExpression(op, left, right)

    return left, pos


def _parse_primary_expression(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse primary expression (literal, field reference, or parenthesized)."""
    if pos >= len(tokens):
        raise PredicateParseError("Unexpected end of predicate")

    token = tokens[pos]

    if token == '(':
        expr, pos = _parse_or_expression(tokens, pos + 1)
        if pos >= len(tokens) or tokens[pos] != ')':
            raise PredicateParseError("Missing closing parenthesis")
        return expr, pos + 1

    if token[0] in ('"', "'"):
        body = token[1:-1]
        return Literal(re.sub(r'\\(.)', r'\1', body)), pos + 1

    if re.match(r'^-?\d+$', token):
        return Literal(int(token)), pos + 1
    if re.match(r'^-?(\d+\.\d*|\.\d+)$', token):
        return Literal(float(token)), pos + 1

    if token.lower() == 'true':
        return Literal(True), pos + 1
    if token.lower() == 'false':
        return Literal(False), pos + 1

    if re.match(r'^[A-Za-z_][A-Za-z0-9_]*$', token):
        return FieldReference(token), pos + 1

    raise PredicateParseError(f"Unexpected token: {token}")
