"""
Core Wizard Model Objects

Defines the fundamental data structures of a wizard schema:
    - Modes (top-level wizard variants)
    - Fields (configurable inputs, possibly dependent on other fields)
    - Option sets (valid choices for select fields)
    - Steps (units of rendered content, conditionally included)
    - WizardSchema (root container)

And the per-session state:
    - StateModel (active mode + chosen values)
    - ResolvedStep (a step materialized against a StateModel)

ARCHITECTURAL RULE:
    Schema objects are immutable once built.
    They describe structure; behavior lives in the resolvers and reducer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .evaluator import Predicate


def _freeze(obj: Any, name: str, value: Any) -> None:
    """Store `value` as a tuple on a frozen dataclass."""
    object.__setattr__(obj, name, tuple(value) if value is not None else ())


@dataclass(frozen=True)
class Option:
    """
    A single selectable value for a select field.

    Properties:
        value: what gets stored in StateModel.values
        label: what the user sees
    """

    value: Any
    label: str = ""


class OptionSet(ABC):
    """
    Computes the ordered list of valid options for a select field.

    Implementations must be pure and total: given incomplete values
    they return [] instead of raising.
    """

    @abstractmethod
    def resolve(self, values: Mapping[str, Any]) -> Tuple[Option, ...]:
        ...

    def source_fields(self) -> Tuple[str, ...]:
        """Fields this option set reads. Used for cascade ordering."""
        return ()


@dataclass(frozen=True)
class StaticOptions(OptionSet):
    """A fixed option list, independent of other fields."""

    options: Tuple[Option, ...] = ()

    def __post_init__(self):
        _freeze(self, "options", self.options)

    def resolve(self, values: Mapping[str, Any]) -> Tuple[Option, ...]:
        return self.options


@dataclass(frozen=True)
class KeyedOptions(OptionSet):
    """
    Options selected by the current value of an upstream field.

    Example:
        frameworkVariant options keyed by framework:
            KeyedOptions(
                field="framework",
                by_value={"nextjs": (Option("app"), Option("pages"))},
            )

        For framework == "remix" there is no entry, so the fallback
        (empty by default) is returned.
    """

    field: str
    by_value: Mapping[Any, Sequence[Option]] = field(default_factory=dict)
    fallback: Tuple[Option, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "by_value", {k: tuple(v) for k, v in dict(self.by_value).items()}
        )
        _freeze(self, "fallback", self.fallback)

    def resolve(self, values: Mapping[str, Any]) -> Tuple[Option, ...]:
        key = values.get(self.field)
        try:
            return self.by_value.get(key, self.fallback)
        except TypeError:
            # Unhashable value stored upstream
            return self.fallback

    def source_fields(self) -> Tuple[str, ...]:
        return (self.field,)


@dataclass(frozen=True)
class OptionFunction(OptionSet):
    """
    Wraps an arbitrary pure function `values -> [Option]`.

    Not serializable. `depends_on` must name every field the function
    reads so the cascade visits this field in the right order.
    """

    fn: Callable[[Mapping[str, Any]], Sequence[Option]]
    depends_on: Tuple[str, ...] = ()

    def __post_init__(self):
        _freeze(self, "depends_on", self.depends_on)

    def resolve(self, values: Mapping[str, Any]) -> Tuple[Option, ...]:
        return tuple(self.fn(values) or ())

    def source_fields(self) -> Tuple[str, ...]:
        return self.depends_on


class FieldKind(Enum):
    """
    Closed set of field kinds.

    SELECT fields carry an option set; BOOLEAN and TEXT fields do not
    enumerate their values.
    """

    SELECT = "select"
    BOOLEAN = "boolean"
    TEXT = "text"


@dataclass(frozen=True)
class Mode:
    """
    A top-level wizard variant.

    Properties:
        id: unique mode identifier (e.g. "framework")
        label: human-readable name
        description: optional one-liner
        fields: ids of the fields this mode declares, in any order
                (display order follows the schema's field order)
    """

    id: str
    label: str = ""
    description: Optional[str] = None
    fields: Tuple[str, ...] = ()

    def __post_init__(self):
        _freeze(self, "fields", self.fields)


@dataclass(frozen=True)
class Field:
    """
    A single configurable input in the wizard.

    Properties:
        id:
            Unique identifier, also the key in StateModel.values

        kind:
            FieldKind (select, boolean, text)

        default_value:
            Value assigned when the field becomes active without one.
            For select fields it is only used if it is a current option;
            otherwise the first option wins.

        depends_on:
            Upstream field ids. A change to any of them re-validates
            this field. Fields read by `visible_when` or by the option
            set are added implicitly by the schema store. A callable
            `visible_when` cannot be inspected: list every field it
            reads here, or it is not re-checked when they change.

        visible_when:
            Optional predicate (Expression or callable). When false,
            the field is inactive and holds no value.

        options:
            OptionSet for select fields; ignored for other kinds.

        widget:
            Presentation hint ("radio-grid", "select", "switch").
            The engine attaches no meaning to it.
    """

    id: str
    kind: FieldKind = FieldKind.SELECT
    label: str = ""
    description: Optional[str] = None
    default_value: Any = None
    depends_on: Tuple[str, ...] = ()
    visible_when: Optional[Predicate] = None
    options: Optional[OptionSet] = None
    widget: Optional[str] = None

    def __post_init__(self):
        _freeze(self, "depends_on", self.depends_on)
        if not isinstance(self.kind, FieldKind):
            object.__setattr__(self, "kind", FieldKind(self.kind))


@dataclass(frozen=True)
class Step:
    """
    A unit of wizard content.

    Steps are shown in declaration order. `include_when` and `modes`
    filter steps but never reorder them.

    Properties:
        id: unique step identifier (e.g. "install")
        title, description: static text
        content:
            Template for the step body. `{{field}}` is replaced with the
            field's value; `{{field:table}}` looks the value up in one
            of the schema's tables.
        command:
            Optional template for a shell command shown with the step.
        include_when:
            Optional predicate; absent means always included.
        modes:
            Modes the step belongs to; empty means every mode.
        render:
            Optional callable `values -> content` replacing the
            template. Must be pure.
    """

    id: str
    title: str = ""
    description: str = ""
    content: str = ""
    command: Optional[str] = None
    include_when: Optional[Predicate] = None
    modes: Tuple[str, ...] = ()
    render: Optional[Callable[[Mapping[str, Any]], str]] = None

    def __post_init__(self):
        _freeze(self, "modes", self.modes)


@dataclass(frozen=True)
class WizardSchema:
    """
    Root container for a wizard definition.

    Everything the engine does must be derivable from this object and
    a StateModel alone.

    Properties:
        name: schema identifier
        modes, fields, steps: declaration-ordered sequences
        tables: named lookup tables used by step templates
                (e.g. {"install_commands": {"supabasejs": "npm install ..."}})
        metadata: arbitrary key-value pairs

    INVARIANTS (checked by SchemaStore, not here):
        - ids are unique per kind
        - every referenced field/mode exists
        - the field dependency graph is acyclic
    """

    name: str
    modes: Tuple[Mode, ...] = ()
    fields: Tuple[Field, ...] = ()
    steps: Tuple[Step, ...] = ()
    tables: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        _freeze(self, "modes", self.modes)
        _freeze(self, "fields", self.fields)
        _freeze(self, "steps", self.steps)

    def get_mode(self, mode_id: str) -> Optional[Mode]:
        for mode in self.modes:
            if mode.id == mode_id:
                return mode
        return None

    def get_field(self, field_id: str) -> Optional[Field]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def get_step(self, step_id: str) -> Optional[Step]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


@dataclass(frozen=True)
class StateModel:
    """
    The partial configuration of one wizard session.

    Properties:
        mode: active mode id
        values: field id -> chosen value
        stash:
            Values of fields that left the active set because of a mode
            switch. They are restored (if still valid) when the field
            becomes active again. Never read by resolvers.

    A StateModel is replaced, not mutated: the reducer always returns
    a new instance.
    """

    mode: str
    values: Dict[str, Any] = field(default_factory=dict)
    stash: Dict[str, Any] = field(default_factory=dict)

    def get(self, field_id: str, default: Any = None) -> Any:
        return self.values.get(field_id, default)


@dataclass(frozen=True)
class ResolvedStep:
    """A step materialized against the current state."""

    id: str
    title: str
    description: str
    content: str
    command: Optional[str] = None


