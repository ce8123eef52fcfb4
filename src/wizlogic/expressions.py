"""
Expression System for wizard predicates

Every condition in a wizard schema (field visibility, step inclusion)
is represented as an Abstract Syntax Tree (AST), never as a string
and never as an opaque code fragment.

This ensures:
    - Schemas stay serializable (YAML/JSON)
    - Predicates can be inspected (which fields does a step read?)
    - Evaluation is total and side-effect free

ARCHITECTURAL RULE:
    The classes in this module are structure only.
    Evaluation lives in `wizlogic.evaluator`.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union


class Expression(ABC):
    """
    Base class for all AST expressions.

    Intentionally minimal. It exists to give the expression
    hierarchy a common type.

    DO NOT:
        - Add evaluation logic here (belongs in evaluator)
        - Add string representations (belongs in backends)
    """
    pass


class BinaryOperator(Enum):
    """
    Binary operators supported in predicates.

    Every operator here must be meaningful when comparing
    field values (strings, booleans, numbers).
    """

    # Logical operators
    AND = "AND"
    OR = "OR"

    # Comparison operators
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Represents a binary logical or comparison expression.

    Example:
        (framework == "nextjs" OR framework == "react")

    Becomes:
        BinaryExpression(
            operator=BinaryOperator.OR,
            left=BinaryExpression(
                operator=BinaryOperator.EQUALS,
                left=FieldReference("framework"),
                right=Literal("nextjs")
            ),
            right=BinaryExpression(
                operator=BinaryOperator.EQUALS,
                left=FieldReference("framework"),
                right=Literal("react")
            )
        )

    IMPORTANT:
        This object is immutable (frozen=True).
        It does NOT evaluate itself.
    """

    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class FieldReference(Expression):
    """
    References the current value of a wizard field.

    Examples:
        - framework
        - frameworkUi

    IMPORTANT:
        This object does NOT validate that the field exists.
        The schema store does that when the schema is loaded.
    """

    name: str


@dataclass(frozen=True)
class Literal(Expression):
    """
    Represents a literal constant value.

    Examples:
        - "nextjs"
        - True
        - 3
    """

    value: Union[int, float, str, bool]


class UnaryOperator(Enum):
    """Unary operators."""
    NOT = "NOT"


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Represents a unary operation (e.g., NOT).

    Example:
        NOT (frameworkUi == true)
    """

    operator: UnaryOperator
    operand: Expression


def field_equals(name: str, value: Union[int, float, str, bool]) -> BinaryExpression:
    """Shorthand for `name == value`."""
    return BinaryExpression(
        operator=BinaryOperator.EQUALS,
        left=FieldReference(name),
        right=Literal(value),
    )


def one_of(name: str, values: Iterable[Union[int, float, str, bool]]) -> Expression:
    """
    Build `name == v1 OR name == v2 ...` for a non-empty list of values.

    The chain is left-associative, which is also what the predicate
    parser produces for the same text.
    """
    values = list(values)
    if not values:
        raise ValueError(f"one_of({name!r}) needs at least one value")
    expr: Expression = field_equals(name, values[0])
    for value in values[1:]:
        expr = BinaryExpression(
            operator=BinaryOperator.OR,
            left=expr,
            right=field_equals(name, value),
        )
    return expr


def negate(expr: Expression) -> UnaryExpression:
    return UnaryExpression(operator=UnaryOperator.NOT, operand=expr)


def all_of(*exprs: Expression) -> Expression:
    """AND together one or more expressions."""
    if not exprs:
        raise ValueError("all_of() needs at least one expression")
    result = exprs[0]
    for expr in exprs[1:]:
        result = BinaryExpression(operator=BinaryOperator.AND, left=result, right=expr)
    return result
