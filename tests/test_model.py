"""
Tests for the wizard model objects.

These tests verify:
    - Basic model creation and defaults
    - Immutability of schema objects
    - Option sets resolve totally
    - Retrieval methods on WizardSchema
"""

import pytest
from wizlogic.model import (
    Field,
    FieldKind,
    KeyedOptions,
    Mode,
    Option,
    OptionFunction,
    ResolvedStep,
    StateModel,
    StaticOptions,
    Step,
    WizardSchema,
)


class TestMode:

    def test_create_mode(self):
        mode = Mode(id="framework", label="Framework", fields=["framework", "library"])
        assert mode.id == "framework"
        assert mode.fields == ("framework", "library")
        assert mode.description is None

    def test_mode_immutable(self):
        mode = Mode(id="framework")
        with pytest.raises(AttributeError):
            mode.id = "other"


class TestField:

    def test_defaults(self):
        f = Field(id="framework", options=StaticOptions([Option("nextjs")]))
        assert f.kind == FieldKind.SELECT
        assert f.depends_on == ()
        assert f.visible_when is None
        assert f.default_value is None

    def test_kind_from_string(self):
        f = Field(id="frameworkUi", kind="boolean")
        assert f.kind == FieldKind.BOOLEAN

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Field(id="x", kind="slider")

    def test_depends_on_is_tuple(self):
        f = Field(id="frameworkVariant", depends_on=["framework"],
                  options=StaticOptions([Option("app")]))
        assert f.depends_on == ("framework",)


class TestOptionSets:

    def test_static_options(self):
        opts = StaticOptions([Option("a", "A"), Option("b", "B")])
        assert [o.value for o in opts.resolve({})] == ["a", "b"]
        assert opts.source_fields() == ()

    def test_keyed_options(self):
        opts = KeyedOptions(
            field="framework",
            by_value={"nextjs": [Option("app"), Option("pages")]},
        )
        assert [o.value for o in opts.resolve({"framework": "nextjs"})] == ["app", "pages"]
        assert opts.resolve({"framework": "remix"}) == ()
        assert opts.resolve({}) == ()
        assert opts.source_fields() == ("framework",)

    def test_keyed_options_fallback(self):
        opts = KeyedOptions(
            field="framework",
            by_value={"flutter": [Option("supabaseflutter")]},
            fallback=[Option("supabasejs")],
        )
        assert [o.value for o in opts.resolve({"framework": "react"})] == ["supabasejs"]
        assert [o.value for o in opts.resolve({"framework": "flutter"})] == ["supabaseflutter"]

    def test_keyed_options_unhashable_upstream_value(self):
        """An unhashable upstream value falls back instead of raising."""
        opts = KeyedOptions(field="framework", by_value={"a": [Option("x")]},
                            fallback=[Option("y")])
        assert [o.value for o in opts.resolve({"framework": ["a"]})] == ["y"]

    def test_option_function(self):
        opts = OptionFunction(
            fn=lambda v: [Option(v["n"])] if "n" in v else [],
            depends_on=["n"],
        )
        assert opts.resolve({}) == ()
        assert opts.resolve({"n": 3}) == (Option(3),)
        assert opts.source_fields() == ("n",)


class TestStep:

    def test_minimal_step(self):
        step = Step(id="install")
        assert step.include_when is None
        assert step.modes == ()
        assert step.render is None
        assert step.command is None


class TestWizardSchema:

    def build(self):
        return WizardSchema(
            name="test",
            modes=[Mode(id="m", fields=["a"])],
            fields=[Field(id="a", kind=FieldKind.TEXT)],
            steps=[Step(id="s1"), Step(id="s2")],
        )

    def test_sequences_are_tuples(self):
        schema = self.build()
        assert isinstance(schema.modes, tuple)
        assert isinstance(schema.fields, tuple)
        assert isinstance(schema.steps, tuple)

    def test_lookups(self):
        schema = self.build()
        assert schema.get_mode("m").id == "m"
        assert schema.get_field("a").kind == FieldKind.TEXT
        assert schema.get_step("s2").id == "s2"

    def test_lookup_missing(self):
        schema = self.build()
        assert schema.get_mode("zzz") is None
        assert schema.get_field("zzz") is None
        assert schema.get_step("zzz") is None


class TestStateModel:

    def test_get(self):
        state = StateModel(mode="m", values={"a": 1})
        assert state.get("a") == 1
        assert state.get("b") is None
        assert state.get("b", 5) == 5
        assert state.stash == {}

    def test_resolved_step(self):
        step = ResolvedStep(id="install", title="T", description="D", content="steps/install")
        assert step.command is None
