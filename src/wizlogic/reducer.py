"""
Cascade Reducer

Pure function: (store, state, intent) → UpdateResult
No side effects. No IO. Deterministic.

Intents:
    SetField(field_id, value)   change one field, then re-validate every
                                field that depends on it
    SetMode(mode_id)            switch mode, keeping values that remain
                                valid and defaulting newly active fields

Reconcile rules, applied to each visited field in topological order:
    - inactive (not in mode, or visible_when false)   → value removed
    - select, no options                              → value removed
    - select, stored value not an option              → first option
    - select, no stored value                         → stashed value or
                                                        default if valid,
                                                        else first option
    - boolean/text, no stored value                   → stashed value or default

"First option" is the only tie-break: an invalid value is never kept
or coerced.

Rejected intents (unknown id, invalid value, inactive field) return
the input state unchanged with applied=False and a ConfigError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from wizlogic.errors import ConfigError
from wizlogic.model import Field, FieldKind, StateModel
from wizlogic.resolvers import is_active, option_values
from wizlogic.schema import SchemaStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Intents and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetMode:
    mode_id: str


@dataclass(frozen=True)
class SetField:
    field_id: str
    value: Any


Intent = Union[SetMode, SetField]


@dataclass
class UpdateResult:
    """
    Outcome of one intent.

    Properties:
        state: the new state (the input state when not applied)
        applied: False when the intent was rejected
        error: ConfigError describing the rejection
        changes: field ids whose stored value changed or was removed
                 as a consequence of the intent (excluding the field set)
    """

    state: StateModel
    applied: bool
    error: Optional[ConfigError] = None
    changes: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def initial_state(store: SchemaStore, overrides: Optional[Mapping[str, Any]] = None,
                  mode: Optional[str] = None) -> StateModel:
    """
    Build the first StateModel of a session.

    Schema defaults of the mode's fields are merged with `overrides`,
    then one full reconcile pass corrects anything inconsistent (for
    example a variant default that is not valid for an overridden
    framework). Unknown override keys and values of the wrong type are
    dropped with a warning.
    """
    mode_id = mode if mode is not None else store.default_mode
    if store.get_mode(mode_id) is None:
        logger.warning("Unknown initial mode '%s'; using '%s'", mode_id, store.default_mode)
        mode_id = store.default_mode

    values: Dict[str, Any] = {}
    for field_id in store.mode_field_ids(mode_id):
        default = store.get_field(field_id).default_value
        if default is not None:
            values[field_id] = default

    for field_id, value in (overrides or {}).items():
        f = store.get_field(field_id)
        if f is None:
            logger.warning("Ignoring initial value for unknown field '%s'", field_id)
            continue
        if not _value_type_ok(f, value):
            logger.warning("Ignoring initial value %r for field '%s': wrong type", value, field_id)
            continue
        values[field_id] = value

    _reconcile(store, mode_id, values, {}, store.topological_order)
    return StateModel(mode=mode_id, values=values)


def apply_update(store: SchemaStore, state: StateModel, intent: Intent) -> UpdateResult:
    """Apply one intent. Never raises for caller errors."""
    if isinstance(intent, SetField):
        return _set_field(store, state, intent.field_id, intent.value)
    if isinstance(intent, SetMode):
        return _set_mode(store, state, intent.mode_id)
    return _reject(state, ConfigError(f"Unsupported intent: {intent!r}"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _set_field(store: SchemaStore, state: StateModel, field_id: str, value: Any) -> UpdateResult:
    f = store.get_field(field_id)
    if f is None:
        return _reject(state, ConfigError(
            f"Unknown field '{field_id}'", mode_id=state.mode, field_id=field_id, value=value))

    if not is_active(store, state.mode, field_id, state.values):
        return _reject(state, ConfigError(
            f"Field '{field_id}' is not active in mode '{state.mode}'",
            mode_id=state.mode, field_id=field_id, value=value))

    if not _value_type_ok(f, value):
        return _reject(state, ConfigError(
            f"Value {value!r} has the wrong type for {f.kind.value} field '{field_id}'",
            mode_id=state.mode, field_id=field_id, value=value))

    if f.kind == FieldKind.SELECT:
        allowed = option_values(store, field_id, state.values)
        if value not in allowed:
            return _reject(state, ConfigError(
                f"Value {value!r} is not an option of field '{field_id}'",
                mode_id=state.mode, field_id=field_id, value=value))

    values = dict(state.values)
    values[field_id] = value
    stash = dict(state.stash)
    changes = _reconcile(store, state.mode, values, stash, store.dependents(field_id))
    return UpdateResult(
        state=StateModel(mode=state.mode, values=values, stash=stash),
        applied=True,
        changes=changes,
    )


def _set_mode(store: SchemaStore, state: StateModel, mode_id: str) -> UpdateResult:
    mode = store.get_mode(mode_id)
    if mode is None:
        return _reject(state, ConfigError(f"Unknown mode '{mode_id}'", mode_id=mode_id))

    values = dict(state.values)
    stash = dict(state.stash)
    for field_id in list(values):
        if field_id not in mode.fields:
            stash[field_id] = values.pop(field_id)

    changes = _reconcile(store, mode_id, values, stash, store.topological_order)
    return UpdateResult(
        state=StateModel(mode=mode_id, values=values, stash=stash),
        applied=True,
        changes=changes,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(state: StateModel, error: ConfigError) -> UpdateResult:
    return UpdateResult(state=state, applied=False, error=error)


def _value_type_ok(f: Field, value: Any) -> bool:
    if f.kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if f.kind == FieldKind.TEXT:
        return isinstance(value, str)
    return True


def _reconcile(store: SchemaStore, mode_id: str, values: Dict[str, Any],
               stash: Dict[str, Any], field_ids: Iterable[str]) -> List[str]:
    """
    Bring `field_ids` (in the given order) in line with the rules above.

    Mutates `values` and `stash` in place; returns the ids whose value
    changed.
    """
    changes: List[str] = []
    for field_id in field_ids:
        f = store.get_field(field_id)
        before = values.get(field_id, _MISSING)

        if not is_active(store, mode_id, field_id, values):
            values.pop(field_id, None)
        elif f.kind == FieldKind.SELECT:
            allowed = option_values(store, field_id, values)
            if not allowed:
                values.pop(field_id, None)
            elif field_id in values:
                if values[field_id] not in allowed:
                    values[field_id] = allowed[0]
            elif field_id in stash and stash[field_id] in allowed:
                values[field_id] = stash.pop(field_id)
            elif f.default_value in allowed:
                values[field_id] = f.default_value
            else:
                values[field_id] = allowed[0]
        elif field_id not in values:
            if field_id in stash:
                values[field_id] = stash.pop(field_id)
            elif f.default_value is not None:
                values[field_id] = f.default_value

        if field_id in values:
            # Active again; a stale stashed copy must not resurface later
            stash.pop(field_id, None)

        after = values.get(field_id, _MISSING)
        if before is not after and before != after:
            logger.debug("Cascade %s: %r -> %r", field_id,
                         None if before is _MISSING else before,
                         None if after is _MISSING else after)
            changes.append(field_id)
    return changes


_MISSING = object()
