"""
Schema Analyzer: diagnostics and inventory of wizard schemas.

This module provides lightweight analysis of a validated schema:
    - Field usage inventory (who reads which field)
    - Fields no mode declares
    - Implicit dependencies (read but not listed in depends_on)
    - Predicate complexity metrics
    - Warning flags for authoring mistakes

IMPORTANT: This is read-only. Hard errors (cycles, dangling
references) are SchemaStore's job; the analyzer only reports things
that are legal but probably unintended.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Set

from wizlogic.expressions import BinaryExpression, Expression, FieldReference, Literal, UnaryExpression
from wizlogic.model import FieldKind, StaticOptions
from wizlogic.schema import SchemaStore
from wizlogic.templates import placeholders


@dataclass
class ExpressionMetrics:
    """Metrics about a single expression tree."""
    depth: int = 0
    node_count: int = 0
    field_references: Set[str] = field(default_factory=set)


def _analyze_expression(expr: Expression | None) -> ExpressionMetrics:
    """Recursively analyze an expression tree."""
    if expr is None:
        return ExpressionMetrics(depth=0, node_count=0)

    metrics = ExpressionMetrics(node_count=1)

    if isinstance(expr, BinaryExpression):
        left = _analyze_expression(expr.left)
        right = _analyze_expression(expr.right)
        metrics.depth = 1 + max(left.depth, right.depth)
        metrics.node_count += left.node_count + right.node_count
        metrics.field_references.update(left.field_references)
        metrics.field_references.update(right.field_references)

    elif isinstance(expr, UnaryExpression):
        operand = _analyze_expression(expr.operand)
        metrics.depth = 1 + operand.depth
        metrics.node_count += operand.node_count
        metrics.field_references.update(operand.field_references)

    elif isinstance(expr, FieldReference):
        metrics.field_references.add(expr.name)

    elif isinstance(expr, Literal):
        pass

    return metrics


@dataclass
class SchemaReport:
    """Analysis report for a schema."""

    schema_name: str
    total_modes: int = 0
    total_fields: int = 0
    total_steps: int = 0

    # Field usage
    field_usage: Dict[str, int] = field(default_factory=dict)
    undeclared_fields: Set[str] = field(default_factory=set)   # in no mode
    implicit_dependencies: Dict[str, Set[str]] = field(default_factory=dict)
    opaque_predicates: List[str] = field(default_factory=list)  # callables

    # Steps
    unconditional_steps: List[str] = field(default_factory=list)
    conditional_steps: List[str] = field(default_factory=list)

    # Predicate complexity
    max_predicate_depth: int = 0
    total_predicate_nodes: int = 0

    # Cascade shape
    max_cascade_size: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_schema(store: SchemaStore) -> SchemaReport:
    """
    Analyze a validated schema.

    Returns a SchemaReport with metrics and warnings.
    """
    report = SchemaReport(schema_name=store.name)
    report.total_modes = len(store.modes)
    report.total_fields = len(store.fields)
    report.total_steps = len(store.steps)

    usage: Dict[str, int] = defaultdict(int)
    for f in store.fields:
        usage[f.id] += 0

    def _visit_predicate(owner: str, predicate) -> Set[str]:
        if predicate is None:
            return set()
        if not isinstance(predicate, Expression):
            report.opaque_predicates.append(owner)
            return set()
        metrics = _analyze_expression(predicate)
        report.max_predicate_depth = max(report.max_predicate_depth, metrics.depth)
        report.total_predicate_nodes += metrics.node_count
        for ref in metrics.field_references:
            usage[ref] += 1
        return metrics.field_references

    # =========================================================================
    # 1. FIELDS
    # =========================================================================

    declared_in_modes: Set[str] = set()
    for mode in store.modes:
        declared_in_modes.update(mode.fields)

    for f in store.fields:
        refs = _visit_predicate(f"field:{f.id}", f.visible_when)
        if f.options is not None:
            refs = refs | set(f.options.source_fields())
            for source in f.options.source_fields():
                usage[source] += 1
        implicit = refs - set(f.depends_on)
        if implicit:
            report.implicit_dependencies[f.id] = implicit

        if f.kind == FieldKind.SELECT and isinstance(f.options, StaticOptions):
            if f.default_value is not None and f.default_value not in [o.value for o in f.options.options]:
                report.add_warning(f"Default of field '{f.id}' is not one of its options: {f.default_value!r}")

        if f.visible_when is not None and not isinstance(f.visible_when, Expression) and not f.depends_on:
            report.add_warning(
                f"Field '{f.id}' has a callable visible_when but no depends_on; "
                "it is never re-checked when other fields change"
            )

        report.max_cascade_size = max(report.max_cascade_size, len(store.dependents(f.id)))

    report.undeclared_fields = {f.id for f in store.fields} - declared_in_modes

    # =========================================================================
    # 2. STEPS
    # =========================================================================

    for step in store.steps:
        _visit_predicate(f"step:{step.id}", step.include_when)
        for template in (step.content, step.command):
            for field_id, _table in placeholders(template):
                usage[field_id] += 1
        if step.include_when is None:
            report.unconditional_steps.append(step.id)
        else:
            report.conditional_steps.append(step.id)

    report.field_usage = dict(usage)

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if report.undeclared_fields:
        report.add_warning(
            f"Fields not declared by any mode: {', '.join(sorted(report.undeclared_fields))}"
        )

    for field_id, implicit in sorted(report.implicit_dependencies.items()):
        report.add_warning(
            f"Field '{field_id}' reads {', '.join(sorted(implicit))} without listing it in depends_on"
        )

    if report.opaque_predicates:
        report.add_warning(
            f"Callable predicates cannot be inspected: {', '.join(report.opaque_predicates)}"
        )

    if report.total_steps > 0 and not report.unconditional_steps:
        report.add_warning("Every step is conditional; some states may resolve to no steps")

    if report.max_predicate_depth > 5:
        report.add_warning(
            f"High predicate complexity: max depth {report.max_predicate_depth}"
        )

    return report
