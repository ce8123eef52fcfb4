"""
Serialization helpers for wizard schemas.

Provides JSON/YAML round-trip via an intermediate dict representation,
plus `load_schema` for reading schema files. Schema files are the
engine's configuration surface.

Predicates are written either as AST dicts
    {"type": "binary", "operator": "==", "left": {...}, "right": {...}}
or as predicate strings, parsed with `wizlogic.predicate_parser`
    visible_when: 'framework == "nextjs" | framework == "react"'

Callable predicates, option functions and step render callables have
no data form; serializing them raises TypeError. Keyed option tables
must use string keys, in schema files and in code.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

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
from wizlogic.model import (
    Field,
    FieldKind,
    KeyedOptions,
    Mode,
    Option,
    OptionSet,
    StaticOptions,
    Step,
    WizardSchema,
)
from wizlogic.predicate_parser import parse_predicate


def expr_to_dict(expr: Any) -> Any:
    if expr is None:
        return None
    if isinstance(expr, BinaryExpression):
        return {
            "type": "binary",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, FieldReference):
        return {"type": "field", "name": expr.name}
    if isinstance(expr, Literal):
        return {"type": "lit", "value": expr.value}
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Any) -> Expression | None:
    if d is None:
        return None
    if isinstance(d, str):
        return parse_predicate(d)
    if not isinstance(d, dict):
        raise TypeError(f"Predicate must be a string or mapping, got {type(d).__name__}")
    t = d.get("type")
    if t == "binary":
        op = BinaryOperator(d["operator"])
        left = expr_from_dict(d["left"])
        right = expr_from_dict(d["right"])
        return BinaryExpression(operator=op, left=left, right=right)
    if t == "field":
        return FieldReference(d["name"])
    if t == "lit":
        return Literal(d["value"])
    if t == "unary":
        op = UnaryOperator(d["operator"])
        operand = expr_from_dict(d["operand"])
        return UnaryExpression(operator=op, operand=operand)
    raise TypeError(f"Unsupported expression dict type: {t}")


def option_to_dict(o: Option) -> Dict[str, Any]:
    return {"value": o.value, "label": o.label}


def option_from_dict(d: Any) -> Option:
    if not isinstance(d, dict):
        # Shorthand: a bare value is its own label
        return Option(value=d, label=str(d))
    return Option(value=d["value"], label=d.get("label", str(d["value"])))


def _options_from_list(items: List[Any] | None) -> List[Option]:
    return [option_from_dict(o) for o in (items or [])]


def option_set_to_dict(s: OptionSet | None) -> Dict[str, Any] | None:
    if s is None:
        return None
    if isinstance(s, StaticOptions):
        return {"type": "static", "options": [option_to_dict(o) for o in s.options]}
    if isinstance(s, KeyedOptions):
        # Keys must be strings to survive JSON
        for key in s.by_value:
            if not isinstance(key, str):
                raise TypeError(f"Keyed options on '{s.field}' need string keys, got {key!r}")
        return {
            "type": "keyed",
            "field": s.field,
            "by_value": {k: [option_to_dict(o) for o in v] for k, v in s.by_value.items()},
            "fallback": [option_to_dict(o) for o in s.fallback],
        }
    raise TypeError(f"Unsupported OptionSet type: {type(s)}")


def option_set_from_dict(d: Any) -> OptionSet | None:
    if d is None:
        return None
    if isinstance(d, list):
        return StaticOptions(_options_from_list(d))
    if not isinstance(d, dict):
        raise TypeError(f"Options must be a list or mapping, got {type(d).__name__}")
    t = d.get("type", "static")
    if t == "static":
        return StaticOptions(_options_from_list(d.get("options")))
    if t == "keyed":
        by_value = d.get("by_value") or {}
        if not isinstance(by_value, dict):
            raise TypeError(f"by_value must be a mapping, got {type(by_value).__name__}")
        for key in by_value:
            if not isinstance(key, str):
                raise TypeError(f"Keyed options on '{d['field']}' need string keys, got {key!r}")
        return KeyedOptions(
            field=d["field"],
            by_value={k: _options_from_list(v) for k, v in by_value.items()},
            fallback=_options_from_list(d.get("fallback")),
        )
    raise TypeError(f"Unsupported option set dict type: {t}")


def _predicate_to_dict(p: Any) -> Any:
    if p is None or isinstance(p, Expression):
        return expr_to_dict(p)
    raise TypeError(f"Callable predicate cannot be serialized: {p!r}")


def mode_to_dict(m: Mode) -> Dict[str, Any]:
    return {"id": m.id, "label": m.label, "description": m.description, "fields": list(m.fields)}


def mode_from_dict(d: Dict[str, Any]) -> Mode:
    return Mode(
        id=d["id"],
        label=d.get("label", d["id"]),
        description=d.get("description"),
        fields=d.get("fields", []),
    )


def field_to_dict(f: Field) -> Dict[str, Any]:
    return {
        "id": f.id,
        "kind": f.kind.value,
        "label": f.label,
        "description": f.description,
        "default_value": f.default_value,
        "depends_on": list(f.depends_on),
        "visible_when": _predicate_to_dict(f.visible_when),
        "options": option_set_to_dict(f.options),
        "widget": f.widget,
    }


def field_from_dict(d: Dict[str, Any]) -> Field:
    return Field(
        id=d["id"],
        kind=FieldKind(d.get("kind", "select")),
        label=d.get("label", d["id"]),
        description=d.get("description"),
        default_value=d.get("default_value"),
        depends_on=d.get("depends_on", []),
        visible_when=expr_from_dict(d.get("visible_when")),
        options=option_set_from_dict(d.get("options")),
        widget=d.get("widget"),
    )


def step_to_dict(s: Step) -> Dict[str, Any]:
    if s.render is not None:
        raise TypeError(f"Step '{s.id}' has a render callable and cannot be serialized")
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "content": s.content,
        "command": s.command,
        "include_when": _predicate_to_dict(s.include_when),
        "modes": list(s.modes),
    }


def step_from_dict(d: Dict[str, Any]) -> Step:
    return Step(
        id=d["id"],
        title=d.get("title", ""),
        description=d.get("description", ""),
        content=d.get("content", ""),
        command=d.get("command"),
        include_when=expr_from_dict(d.get("include_when")),
        modes=d.get("modes", []),
    )


def schema_to_dict(s: WizardSchema) -> Dict[str, Any]:
    return {
        "name": s.name,
        "modes": [mode_to_dict(m) for m in s.modes],
        "fields": [field_to_dict(f) for f in s.fields],
        "steps": [step_to_dict(st) for st in s.steps],
        "tables": {name: dict(table) for name, table in s.tables.items()},
        "metadata": dict(s.metadata),
    }


def schema_from_dict(d: Dict[str, Any]) -> WizardSchema:
    """
    Build a WizardSchema from its dict form.

    Raises:
        SchemaError: the document is structurally malformed
    """
    if not isinstance(d, dict):
        raise SchemaError(f"Schema document must be a mapping, got {type(d).__name__}")
    try:
        return WizardSchema(
            name=d.get("name", ""),
            modes=[mode_from_dict(m) for m in d.get("modes", [])],
            fields=[field_from_dict(f) for f in d.get("fields", [])],
            steps=[step_from_dict(st) for st in d.get("steps", [])],
            tables=d.get("tables") or {},
            metadata=d.get("metadata") or {},
        )
    except SchemaError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SchemaError(f"Malformed schema document: {e}") from e


def schema_to_json(s: WizardSchema) -> str:
    return json.dumps(schema_to_dict(s), sort_keys=True)


def schema_from_json(s: str) -> WizardSchema:
    d = json.loads(s)
    return schema_from_dict(d)


def schema_to_yaml(s: WizardSchema) -> str:
    return yaml.safe_dump(schema_to_dict(s), sort_keys=False)


def schema_from_yaml(s: str) -> WizardSchema:
    d = yaml.safe_load(s)
    return schema_from_dict(d)


def load_schema(path: str) -> WizardSchema:
    """Read a schema file (.yaml, .yml or .json)."""
    with open(path) as fh:
        text = fh.read()
    if path.endswith(".json"):
        return schema_from_json(text)
    return schema_from_yaml(text)
