"""
Graphviz DOT diagram generator for wizard schemas.

Draws the field dependency graph (upstream → downstream) and the
step sequence, so schema authors can see what a change cascades to.

Supports multiple modes:
    - SIMPLE: fields, dependency edges, step order
    - DETAILED: adds kinds, defaults, visibility and step conditions
    - MANAGEMENT: groups fields into one cluster per wizard mode
"""

from enum import Enum
from typing import List

from wizlogic.evaluator import referenced_fields
from wizlogic.expressions import (
    BinaryExpression,
    Expression,
    FieldReference,
    Literal,
    UnaryExpression,
)
from wizlogic.schema import SchemaStore


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"          # Just fields and step order
    DETAILED = "detailed"      # Include kinds, defaults, conditions
    MANAGEMENT = "management"  # Fields clustered by mode


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Escape/quote an identifier for DOT."""
    if identifier[0].isdigit() or not identifier.replace('_', '').isalnum():
        return f'"{identifier}"'
    return identifier


def _step_node_id(step_id: str) -> str:
    return _escape_dot_id(f"step:{step_id}")


def _expr_to_dot_label(expr: Expression | None) -> str:
    """Convert an expression to a readable DOT label."""
    if expr is None:
        return ""

    if isinstance(expr, BinaryExpression):
        left = _expr_to_dot_label(expr.left)
        right = _expr_to_dot_label(expr.right)
        return f"({left} {expr.operator.value} {right})"

    elif isinstance(expr, UnaryExpression):
        return f"{expr.operator.value} {_expr_to_dot_label(expr.operand)}"

    elif isinstance(expr, FieldReference):
        return expr.name

    elif isinstance(expr, Literal):
        return repr(expr.value) if isinstance(expr.value, str) else str(expr.value)

    return "?"


def _shorten(label: str, limit: int = 40) -> str:
    if len(label) > limit:
        return label[:limit - 3] + "..."
    return label


def generate_dot(store: SchemaStore, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a schema.

    Args:
        store: validated schema
        mode: Visualization mode (SIMPLE, DETAILED, MANAGEMENT)

    Returns:
        String containing DOT graph definition
    """
    lines: List[str] = []

    lines.append("digraph wizard {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # FIELD NODES
    # =========================================================================

    for f in store.fields:
        label = f.label or f.id
        if mode == DotMode.DETAILED:
            info = [f"Kind: {f.kind.value}"]
            if f.default_value is not None:
                info.append(f"Default: {f.default_value}")
            if isinstance(f.visible_when, Expression):
                info.append(f"Visible: {_shorten(_expr_to_dot_label(f.visible_when))}")
            label = label + "\n(" + "\n".join(info) + ")"
        lines.append(f"  {_escape_dot_id(f.id)} [label={_escape_dot_string(label)}];")

    # =========================================================================
    # DEPENDENCY EDGES
    # =========================================================================

    for f in store.fields:
        for dep in store.upstream(f.id):
            edge_attr = ""
            if dep not in f.depends_on:
                edge_attr = " [style=dashed]"
            lines.append(f"  {_escape_dot_id(dep)} -> {_escape_dot_id(f.id)}{edge_attr};")

    # =========================================================================
    # STEPS
    # =========================================================================

    previous = None
    for step in store.steps:
        node_id = _step_node_id(step.id)
        label = step.title or step.id
        if mode == DotMode.DETAILED and isinstance(step.include_when, Expression):
            label = label + "\n(When: " + _shorten(_expr_to_dot_label(step.include_when)) + ")"
        lines.append(
            f"  {node_id} [shape=ellipse, fillcolor=lightyellow, label={_escape_dot_string(label)}];"
        )
        if previous is not None:
            lines.append(f"  {previous} -> {node_id} [style=dotted];")
        previous = node_id

        if mode == DotMode.DETAILED and isinstance(step.include_when, Expression):
            for ref in sorted(referenced_fields(step.include_when)):
                lines.append(f"  {_escape_dot_id(ref)} -> {node_id} [style=dashed, color=grey];")

    # =========================================================================
    # MODE CLUSTERS (MANAGEMENT MODE)
    # =========================================================================

    if mode == DotMode.MANAGEMENT:
        for wizard_mode in store.modes:
            lines.append(f'  subgraph "cluster_{wizard_mode.id}" {{')
            lines.append(f'    label={_escape_dot_string(wizard_mode.label or wizard_mode.id)};')
            lines.append('    style=filled;')
            lines.append('    color=lightgrey;')
            for field_id in store.mode_field_ids(wizard_mode.id):
                lines.append(f"    {_escape_dot_id(field_id)};")
            lines.append("  }")

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(store: SchemaStore, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        store: schema to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(store, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
