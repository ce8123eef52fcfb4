"""
Predicate evaluation over field values.

The expression classes are structure only; this module gives them
meaning. Evaluation is total: a predicate that cannot be evaluated
(missing field, incomparable types, a callable that raises) is
reported as False and logged, never raised to the caller.

A predicate is either an `Expression` or a plain callable taking the
values mapping and returning a truthy value.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Set, Union

from wizlogic.expressions import (
    BinaryExpression,
    BinaryOperator,
    Expression,
    FieldReference,
    Literal,
    UnaryExpression,
    UnaryOperator,
)

logger = logging.getLogger(__name__)

Predicate = Union[Expression, Callable[[Mapping[str, Any]], Any]]


def evaluate(expr: Expression, values: Mapping[str, Any]) -> Any:
    """
    Evaluate an expression tree against a mapping of field values.

    Missing fields evaluate to None. Comparison operators may raise
    TypeError for incomparable operands; callers that need totality
    should use `evaluate_predicate`.
    """
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, FieldReference):
        return values.get(expr.name)

    if isinstance(expr, UnaryExpression):
        if expr.operator == UnaryOperator.NOT:
            return not evaluate(expr.operand, values)
        raise ValueError(f"Unsupported unary operator: {expr.operator}")

    if isinstance(expr, BinaryExpression):
        op = expr.operator
        # Short-circuit logical operators
        if op == BinaryOperator.AND:
            return bool(evaluate(expr.left, values)) and bool(evaluate(expr.right, values))
        if op == BinaryOperator.OR:
            return bool(evaluate(expr.left, values)) or bool(evaluate(expr.right, values))

        left = evaluate(expr.left, values)
        right = evaluate(expr.right, values)
        if op == BinaryOperator.EQUALS:
            return left == right
        if op == BinaryOperator.NOT_EQUALS:
            return left != right
        if left is None or right is None:
            # Ordering against an unset field is never satisfied
            return False
        if op == BinaryOperator.GREATER_THAN:
            return left > right
        if op == BinaryOperator.GREATER_EQUAL:
            return left >= right
        if op == BinaryOperator.LESS_THAN:
            return left < right
        if op == BinaryOperator.LESS_EQUAL:
            return left <= right
        raise ValueError(f"Unsupported binary operator: {op}")

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def evaluate_predicate(predicate: Predicate | None, values: Mapping[str, Any],
                       default: bool = True) -> bool:
    """
    Evaluate a predicate to a bool without ever raising.

    Args:
        predicate: Expression, callable, or None
        values: current field values
        default: result when predicate is None

    Returns:
        True/False. Evaluation failures yield False.
    """
    if predicate is None:
        return default
    try:
        if isinstance(predicate, Expression):
            return bool(evaluate(predicate, values))
        return bool(predicate(values))
    except Exception:
        logger.warning("Predicate evaluation failed; treating as false", exc_info=True)
        return False


def referenced_fields(expr: Expression | None) -> Set[str]:
    """Collect the names of all fields an expression reads."""
    found: Set[str] = set()
    if expr is None:
        return found
    if isinstance(expr, FieldReference):
        found.add(expr.name)
    elif isinstance(expr, BinaryExpression):
        found.update(referenced_fields(expr.left))
        found.update(referenced_fields(expr.right))
    elif isinstance(expr, UnaryExpression):
        found.update(referenced_fields(expr.operand))
    return found
