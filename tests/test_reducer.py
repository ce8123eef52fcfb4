"""
Tests for the cascade reducer.

The reducer is pure: every test checks the returned state and, where
relevant, that the input state was left untouched.
"""

import pytest
from wizlogic.errors import ConfigError
from wizlogic.model import StateModel
from wizlogic.reducer import SetField, SetMode, apply_update, initial_state
from wizlogic.resolvers import active_fields, option_values


class TestInitialState:

    def test_defaults(self, connect_store):
        state = initial_state(connect_store)
        assert state.mode == "framework"
        assert state.values == {
            "framework": "nextjs",
            "frameworkVariant": "app",
            "library": "supabasejs",
            "frameworkUi": False,
        }

    def test_override_is_corrected_by_cascade(self, connect_store):
        """The nextjs-only default variant is replaced for react."""
        state = initial_state(connect_store, {"framework": "react"})
        assert state.values["framework"] == "react"
        assert state.values["frameworkVariant"] == "vite"

    def test_consistent_override_kept(self, connect_store):
        state = initial_state(connect_store, {"framework": "react", "frameworkVariant": "cra"})
        assert state.values["frameworkVariant"] == "cra"

    def test_override_removes_inapplicable_fields(self, connect_store):
        state = initial_state(connect_store, {"framework": "remix"})
        assert "frameworkVariant" not in state.values
        assert "frameworkUi" not in state.values

    def test_invalid_select_override_snaps_to_first_option(self, connect_store):
        state = initial_state(connect_store, {"frameworkVariant": "nonsense"})
        assert state.values["frameworkVariant"] == "app"

    def test_unknown_override_dropped(self, connect_store):
        state = initial_state(connect_store, {"mystery": 1})
        assert "mystery" not in state.values

    def test_wrong_type_override_dropped(self, connect_store):
        state = initial_state(connect_store, {"frameworkUi": "yes"})
        assert state.values["frameworkUi"] is False

    def test_unknown_initial_mode_falls_back(self, connect_store):
        state = initial_state(connect_store, mode="nope")
        assert state.mode == "framework"

    def test_idempotent_defaults(self, connect_store):
        defaults = {f.id: f.default_value for f in connect_store.fields}
        assert initial_state(connect_store, {}) == initial_state(connect_store)
        assert initial_state(connect_store, defaults) == initial_state(connect_store)

    def test_explicit_mode(self, two_mode_store):
        state = initial_state(two_mode_store, mode="direct")
        assert state.values == {"region": "eu", "pooler": "transaction"}


class TestSetField:

    def test_cascade_to_first_option(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetField("framework", "react"))
        assert result.applied
        assert result.error is None
        assert result.state.values["frameworkVariant"] == "vite"
        assert result.changes == ["frameworkVariant"]

    def test_cascade_removes_field_without_options(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetField("framework", "remix"))
        assert "frameworkVariant" not in result.state.values
        assert "frameworkUi" not in result.state.values
        assert result.state.values["library"] == "supabasejs"

    def test_field_returns_with_default(self, connect_store):
        state = initial_state(connect_store, {"framework": "remix"})
        result = apply_update(connect_store, state, SetField("framework", "nextjs"))
        assert result.state.values["frameworkVariant"] == "app"
        assert result.state.values["frameworkUi"] is False

    def test_field_returns_with_first_option_when_default_invalid(self, connect_store):
        state = initial_state(connect_store, {"framework": "remix"})
        result = apply_update(connect_store, state, SetField("framework", "react"))
        assert result.state.values["frameworkVariant"] == "vite"

    def test_library_follows_language(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetField("framework", "flutter"))
        assert result.state.values["library"] == "supabaseflutter"
        result = apply_update(connect_store, result.state, SetField("framework", "react"))
        assert result.state.values["library"] == "supabasejs"

    def test_unrelated_field_untouched(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetField("frameworkVariant", "pages"))
        assert result.state.values["library"] == "supabasejs"
        assert result.state.values["frameworkVariant"] == "pages"
        assert result.changes == []

    def test_input_state_not_mutated(self, connect_store):
        state = initial_state(connect_store)
        before = dict(state.values)
        apply_update(connect_store, state, SetField("framework", "remix"))
        assert state.values == before

    def test_boolean_field(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetField("frameworkUi", True))
        assert result.state.values["frameworkUi"] is True

    def test_transitive_cascade(self, connect_store):
        """Every dependent ends up holding a current option."""
        state = initial_state(connect_store)
        for framework in ["react", "remix", "nextjs", "swift", "react"]:
            state = apply_update(connect_store, state, SetField("framework", framework)).state
            for dep in connect_store.dependents("framework"):
                if dep in state.values and connect_store.get_field(dep).options is not None:
                    assert state.values[dep] in option_values(connect_store, dep, state.values)

    def test_no_dangling_values(self, connect_store):
        state = initial_state(connect_store)
        for framework in ["remix", "react", "flutter"]:
            state = apply_update(connect_store, state, SetField("framework", framework)).state
            active = {f.id for f in active_fields(connect_store, state.mode, state.values)}
            assert set(state.values) <= active


class TestSetFieldRejections:
    """Rejected intents leave the state unchanged and report a ConfigError."""

    def check_rejected(self, connect_store, intent):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, intent)
        assert not result.applied
        assert isinstance(result.error, ConfigError)
        assert result.state is state
        return result.error

    def test_unknown_field(self, connect_store):
        error = self.check_rejected(connect_store, SetField("doesNotExist", 1))
        assert error.field_id == "doesNotExist"

    def test_value_not_an_option(self, connect_store):
        error = self.check_rejected(connect_store, SetField("frameworkVariant", "vite"))
        assert "not an option" in str(error)

    def test_wrong_type_for_boolean(self, connect_store):
        self.check_rejected(connect_store, SetField("frameworkUi", "true"))

    def test_inactive_field(self, connect_store):
        state = initial_state(connect_store, {"framework": "remix"})
        result = apply_update(connect_store, state, SetField("frameworkUi", True))
        assert not result.applied
        assert "not active" in str(result.error)
        assert "frameworkUi" not in result.state.values

    def test_unsupported_intent(self, connect_store):
        self.check_rejected(connect_store, object())


class TestSetMode:

    def test_unknown_mode(self, connect_store):
        state = initial_state(connect_store)
        result = apply_update(connect_store, state, SetMode("direct"))
        assert not result.applied
        assert result.error.mode_id == "direct"
        assert result.state is state

    def test_same_mode_preserves_values(self, connect_store):
        state = initial_state(connect_store)
        state = apply_update(connect_store, state, SetField("framework", "react")).state
        result = apply_update(connect_store, state, SetMode("framework"))
        assert result.applied
        assert result.state.values == state.values

    def test_switch_defaults_new_fields(self, two_mode_store):
        state = initial_state(two_mode_store, mode="client")
        result = apply_update(two_mode_store, state, SetMode("direct"))
        assert result.state.mode == "direct"
        assert result.state.values == {"region": "eu", "pooler": "transaction"}

    def test_shared_field_preserved(self, two_mode_store):
        state = initial_state(two_mode_store, {"region": "ap"}, mode="client")
        state = apply_update(two_mode_store, state, SetMode("direct")).state
        assert state.values["region"] == "ap"

    def test_round_trip_restores_values(self, two_mode_store):
        state = initial_state(two_mode_store, mode="client")
        state = apply_update(two_mode_store, state, SetField("sdk", "py")).state
        state = apply_update(two_mode_store, state, SetField("telemetry", False)).state
        client_values = dict(state.values)

        state = apply_update(two_mode_store, state, SetMode("direct")).state
        assert "sdk" not in state.values
        assert "telemetry" not in state.values

        state = apply_update(two_mode_store, state, SetMode("client")).state
        assert state.values == client_values
        assert state.stash == {"pooler": "transaction"}

    def test_stale_stash_not_restored(self, two_mode_store):
        """A stashed select value that is no longer an option is replaced."""
        state = StateModel(mode="direct", values={"region": "eu", "pooler": "transaction"},
                           stash={"sdk": "ruby"})
        state = apply_update(two_mode_store, state, SetMode("client")).state
        assert state.values["sdk"] == "js"
        assert "sdk" not in state.stash

    def test_dependent_visibility_on_switch(self, two_mode_store):
        state = initial_state(two_mode_store, mode="direct")
        state = apply_update(two_mode_store, state, SetField("pooler", "session")).state
        assert state.values["port"] == "5432"
        state = apply_update(two_mode_store, state, SetField("port", "6543")).state
        state = apply_update(two_mode_store, state, SetMode("client")).state
        state = apply_update(two_mode_store, state, SetMode("direct")).state
        assert state.values["port"] == "6543"
