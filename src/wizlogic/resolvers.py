"""
Derived views over (SchemaStore, mode, values).

    active_fields   which fields the current mode shows
    options_for     valid choices for one field
    resolve_steps   the ordered, rendered steps

All three are pure and deterministic. None of them raises for a
per-item failure: an unknown id yields [], a broken option set
yields [], a broken step is left out and reported through
`on_error`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Tuple

from wizlogic.errors import StepRenderError
from wizlogic.evaluator import evaluate_predicate
from wizlogic.model import Field, FieldKind, Option, ResolvedStep, Step
from wizlogic.schema import SchemaStore
from wizlogic.templates import render_template

logger = logging.getLogger(__name__)


def is_active(store: SchemaStore, mode_id: str, field_id: str,
              values: Mapping[str, Any]) -> bool:
    """True if the field is declared by the mode and its visibility predicate holds."""
    mode = store.get_mode(mode_id)
    f = store.get_field(field_id)
    if mode is None or f is None or field_id not in mode.fields:
        return False
    return evaluate_predicate(f.visible_when, values)


def active_fields(store: SchemaStore, mode_id: str,
                  values: Mapping[str, Any]) -> List[Field]:
    """
    Fields active under `mode_id` for the given values.

    Order follows schema declaration, not the order of `values`.
    An unknown mode has no active fields.
    """
    return [
        store.get_field(field_id)
        for field_id in store.mode_field_ids(mode_id)
        if evaluate_predicate(store.get_field(field_id).visible_when, values)
    ]


def options_for(store: SchemaStore, field_id: str,
                values: Mapping[str, Any]) -> Tuple[Option, ...]:
    """
    Valid options for a select field.

    Unknown and non-select fields have no options. An option set that
    raises is logged and treated as empty.
    """
    f = store.get_field(field_id)
    if f is None:
        logger.debug("Options requested for unknown field '%s'", field_id)
        return ()
    if f.kind != FieldKind.SELECT or f.options is None:
        return ()
    try:
        return tuple(f.options.resolve(values))
    except Exception:
        logger.warning("Option set for field '%s' failed; no options", field_id, exc_info=True)
        return ()


def option_values(store: SchemaStore, field_id: str,
                  values: Mapping[str, Any]) -> List[Any]:
    return [opt.value for opt in options_for(store, field_id, values)]


def render_step(store: SchemaStore, step: Step, values: Mapping[str, Any]) -> ResolvedStep:
    """Materialize one step. May raise; `resolve_steps` isolates failures."""
    if step.render is not None:
        content = step.render(values)
    else:
        content = render_template(step.content, values, store.tables)
    command = render_template(step.command, values, store.tables) if step.command else None
    return ResolvedStep(
        id=step.id,
        title=step.title,
        description=step.description,
        content=content,
        command=command,
    )


def resolve_steps(store: SchemaStore, mode_id: str, values: Mapping[str, Any],
                  on_error: Optional[Callable[[StepRenderError], None]] = None) -> List[ResolvedStep]:
    """
    Steps to show for `mode_id`, in declaration order.

    A step is included when it belongs to the mode (or to every mode)
    and its `include_when` holds. A step whose render raises is left
    out; the error is logged and passed to `on_error`.
    """
    if store.get_mode(mode_id) is None:
        return []

    resolved: List[ResolvedStep] = []
    for step in store.steps:
        if step.modes and mode_id not in step.modes:
            continue
        if not evaluate_predicate(step.include_when, values):
            continue
        try:
            resolved.append(render_step(store, step, values))
        except Exception as exc:
            error = StepRenderError(step.id, exc)
            logger.warning("%s", error)
            if on_error is not None:
                on_error(error)
    return resolved
