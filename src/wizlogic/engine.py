"""
WizardEngine: one wizard session.

Owns a single StateModel and exposes the caller-facing surface:

    set_mode(mode_id)                 -> UpdateResult
    update_field(field_id, value)     -> UpdateResult
    active_fields()                   -> [Field]
    get_field_options(field_id)       -> [Option]
    resolved_steps()                  -> [ResolvedStep]
    schema                            -> SchemaStore (read-only)

The schema store is shared, immutable data; create one engine per
session and discard it when the wizard closes.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union

from wizlogic.errors import ConfigError, StepRenderError
from wizlogic.model import Field, Option, ResolvedStep, StateModel, WizardSchema
from wizlogic.reducer import SetField, SetMode, UpdateResult, apply_update, initial_state
from wizlogic.resolvers import active_fields, options_for, resolve_steps
from wizlogic.schema import SchemaStore

logger = logging.getLogger(__name__)


class WizardEngine:
    """
    Stateful wrapper around the pure reducer and resolvers.

    Args:
        schema: a SchemaStore, or a WizardSchema to validate (may raise SchemaError)
        initial_values: optional overrides merged over schema defaults
        mode: initial mode id; defaults to the schema's first mode
    """

    def __init__(self, schema: Union[SchemaStore, WizardSchema],
                 initial_values: Optional[Mapping[str, Any]] = None,
                 mode: Optional[str] = None):
        self._store = schema if isinstance(schema, SchemaStore) else SchemaStore(schema)
        self._state = initial_state(self._store, initial_values, mode)
        self.last_error: Optional[ConfigError] = None
        self.step_errors: List[StepRenderError] = []

    @property
    def schema(self) -> SchemaStore:
        return self._store

    @property
    def state(self) -> StateModel:
        return self._state

    @property
    def mode(self) -> str:
        return self._state.mode

    @property
    def values(self) -> dict:
        """A copy of the current field values."""
        return dict(self._state.values)

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def set_mode(self, mode_id: str) -> UpdateResult:
        return self._apply(SetMode(mode_id))

    def update_field(self, field_id: str, value: Any) -> UpdateResult:
        return self._apply(SetField(field_id, value))

    def _apply(self, intent) -> UpdateResult:
        result = apply_update(self._store, self._state, intent)
        if result.applied:
            self._state = result.state
            self.last_error = None
        else:
            self.last_error = result.error
            logger.warning("Rejected %r: %s", intent, result.error)
        return result

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def active_fields(self) -> List[Field]:
        return active_fields(self._store, self._state.mode, self._state.values)

    def get_field_options(self, field_id: str) -> List[Option]:
        return list(options_for(self._store, field_id, self._state.values))

    def resolved_steps(self) -> List[ResolvedStep]:
        """
        Steps for the current state. Steps that failed to render are
        omitted and listed in `step_errors` until the next call.
        """
        errors: List[StepRenderError] = []
        steps = resolve_steps(self._store, self._state.mode, self._state.values,
                              on_error=errors.append)
        self.step_errors = errors
        return steps
