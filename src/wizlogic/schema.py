"""
Schema Store: validated, read-only access to a WizardSchema.

Construction validates the schema and fails fast with SchemaError:
    - at least one mode
    - unique mode, field and step ids
    - every id referenced by a mode, field, step or template exists
    - select fields declare an option set; other kinds do not
    - the field dependency graph is acyclic

The dependency graph is immutable for the life of the store, so its
topological order and every field's transitive dependents are
computed once here and cached. The reducer only reads these indexes.

Dependency edges of a field are the union of:
    - its explicit `depends_on`
    - fields referenced by its `visible_when` expression
    - fields read by its option set
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from wizlogic.errors import SchemaError
from wizlogic.evaluator import referenced_fields
from wizlogic.expressions import Expression
from wizlogic.model import Field, FieldKind, Mode, Step, WizardSchema
from wizlogic.templates import placeholders

logger = logging.getLogger(__name__)


def _find_cycle_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                    rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycle_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


def _check_unique(kind: str, ids: Iterable[str]) -> None:
    seen: Set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise SchemaError(f"Duplicate {kind} id: '{item_id}'")
        seen.add(item_id)


def field_upstream(f: Field) -> Tuple[str, ...]:
    """All fields `f` depends on, explicit and implicit, without duplicates."""
    upstream: List[str] = list(f.depends_on)
    if isinstance(f.visible_when, Expression):
        upstream.extend(sorted(referenced_fields(f.visible_when)))
    if f.options is not None:
        upstream.extend(f.options.source_fields())
    return tuple(dict.fromkeys(upstream))


class SchemaStore:
    """
    Immutable, validated view of a WizardSchema.

    Shared by every wizard session built on the same schema; holds no
    per-session state.
    """

    def __init__(self, schema: WizardSchema):
        self._schema = schema
        self._modes: Dict[str, Mode] = {}
        self._fields: Dict[str, Field] = {}
        self._steps: Dict[str, Step] = {}
        self._upstream: Dict[str, Tuple[str, ...]] = {}
        self._topo_index: Dict[str, int] = {}
        self._topo_order: Tuple[str, ...] = ()
        self._dependents: Dict[str, Tuple[str, ...]] = {}

        self._validate()
        self._build_indexes()
        logger.debug(
            "Loaded schema '%s': %d modes, %d fields, %d steps",
            schema.name, len(schema.modes), len(schema.fields), len(schema.steps),
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def schema(self) -> WizardSchema:
        return self._schema

    @property
    def name(self) -> str:
        return self._schema.name

    @property
    def modes(self) -> Tuple[Mode, ...]:
        return self._schema.modes

    @property
    def fields(self) -> Tuple[Field, ...]:
        return self._schema.fields

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._schema.steps

    @property
    def tables(self):
        return self._schema.tables

    @property
    def default_mode(self) -> str:
        return self._schema.modes[0].id

    def get_mode(self, mode_id: str) -> Optional[Mode]:
        return self._modes.get(mode_id)

    def get_field(self, field_id: str) -> Optional[Field]:
        return self._fields.get(field_id)

    def get_step(self, step_id: str) -> Optional[Step]:
        return self._steps.get(step_id)

    # ------------------------------------------------------------------
    # Dependency indexes
    # ------------------------------------------------------------------

    @property
    def topological_order(self) -> Tuple[str, ...]:
        """Field ids, upstream before downstream, ties in declaration order."""
        return self._topo_order

    def upstream(self, field_id: str) -> Tuple[str, ...]:
        return self._upstream.get(field_id, ())

    def dependents(self, field_id: str) -> Tuple[str, ...]:
        """Transitive dependents of `field_id` in topological order."""
        return self._dependents.get(field_id, ())

    def mode_field_ids(self, mode_id: str) -> Tuple[str, ...]:
        """Fields declared by a mode, in schema declaration order."""
        mode = self._modes.get(mode_id)
        if mode is None:
            return ()
        declared = set(mode.fields)
        return tuple(f.id for f in self._schema.fields if f.id in declared)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        schema = self._schema
        if not schema.modes:
            raise SchemaError(f"Schema '{schema.name}' declares no modes")

        _check_unique("mode", (m.id for m in schema.modes))
        _check_unique("field", (f.id for f in schema.fields))
        _check_unique("step", (s.id for s in schema.steps))

        self._modes = {m.id: m for m in schema.modes}
        self._fields = {f.id: f for f in schema.fields}
        self._steps = {s.id: s for s in schema.steps}

        for mode in schema.modes:
            for field_id in mode.fields:
                if field_id not in self._fields:
                    raise SchemaError(f"Mode '{mode.id}' references unknown field '{field_id}'")

        for f in schema.fields:
            if f.kind == FieldKind.SELECT and f.options is None:
                raise SchemaError(f"Select field '{f.id}' declares no options")
            if f.kind != FieldKind.SELECT and f.options is not None:
                raise SchemaError(f"Field '{f.id}' of kind '{f.kind.value}' cannot declare options")
            upstream = field_upstream(f)
            for dep in upstream:
                if dep not in self._fields:
                    raise SchemaError(f"Field '{f.id}' depends on unknown field '{dep}'")
            self._upstream[f.id] = upstream

        for step in schema.steps:
            for mode_id in step.modes:
                if mode_id not in self._modes:
                    raise SchemaError(f"Step '{step.id}' references unknown mode '{mode_id}'")
            if isinstance(step.include_when, Expression):
                for ref in referenced_fields(step.include_when):
                    if ref not in self._fields:
                        raise SchemaError(f"Step '{step.id}' condition references unknown field '{ref}'")
            for template in (step.content, step.command):
                for field_id, table in placeholders(template):
                    if field_id not in self._fields:
                        raise SchemaError(f"Step '{step.id}' template references unknown field '{field_id}'")
                    if table is not None and table not in schema.tables:
                        raise SchemaError(f"Step '{step.id}' template references unknown table '{table}'")

        # Cycle detection over downstream edges
        downstream: Dict[str, List[str]] = {f.id: [] for f in schema.fields}
        for field_id, upstream in self._upstream.items():
            for dep in upstream:
                downstream[dep].append(field_id)

        visited: Set[str] = set()
        for f in schema.fields:
            if f.id not in visited:
                cycle = _find_cycle_dfs(downstream, f.id, visited, set(), [])
                if cycle:
                    raise SchemaError(f"Field dependency cycle: {' -> '.join(cycle)}")

    def _build_indexes(self) -> None:
        declaration = [f.id for f in self._schema.fields]
        position = {field_id: i for i, field_id in enumerate(declaration)}

        # Kahn's algorithm; always pick the earliest-declared ready field
        remaining = {field_id: len(self._upstream[field_id]) for field_id in declaration}
        downstream: Dict[str, List[str]] = {field_id: [] for field_id in declaration}
        for field_id in declaration:
            for dep in self._upstream[field_id]:
                downstream[dep].append(field_id)

        order: List[str] = []
        ready = [field_id for field_id in declaration if remaining[field_id] == 0]
        while ready:
            ready.sort(key=position.__getitem__)
            current = ready.pop(0)
            order.append(current)
            for child in downstream[current]:
                remaining[child] -= 1
                if remaining[child] == 0:
                    ready.append(child)

        self._topo_order = tuple(order)
        self._topo_index = {field_id: i for i, field_id in enumerate(order)}

        for field_id in declaration:
            closure: Set[str] = set()
            stack = list(downstream[field_id])
            while stack:
                node = stack.pop()
                if node in closure:
                    continue
                closure.add(node)
                stack.extend(downstream[node])
            self._dependents[field_id] = tuple(sorted(closure, key=self._topo_index.__getitem__))
