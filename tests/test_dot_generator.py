"""
Tests for DOT diagram generator.

These tests verify that wizard schemas are correctly converted to Graphviz DOT format.
We test extensively because visual output is easy to get wrong and hard to debug.

Tests cover:
    - Field nodes and dependency edges
    - Step nodes and their ordering
    - Condition labels
    - Special character escaping
    - DOT syntax validity
    - Simple vs. detailed vs. management modes
"""

import pytest
from wizlogic.backends.dot_generator import (
    _escape_dot_id,
    _escape_dot_string,
    _expr_to_dot_label,
    generate_dot,
    save_dot_file,
    DotMode,
)
from wizlogic.expressions import field_equals, negate
from wizlogic.model import Field, FieldKind, Mode, Option, StaticOptions, Step, WizardSchema
from wizlogic.schema import SchemaStore


@pytest.fixture
def implicit_store():
    """'b' reads 'a' through visible_when without listing it in depends_on."""
    return SchemaStore(WizardSchema(
        name="Implicit",
        modes=[Mode(id="m", label="Main", fields=["a", "b"])],
        fields=[
            Field(id="a", options=StaticOptions([Option("x"), Option("y")])),
            Field(id="b", kind=FieldKind.TEXT, visible_when=field_equals("a", "y")),
        ],
        steps=[Step(id="only", title="Only step")],
    ))


class TestDotBasicStructure:
    """Test basic DOT graph structure."""

    def test_generates_valid_dot(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.SIMPLE)

        # Must have digraph header and closing brace
        assert dot.startswith("digraph wizard {")
        assert dot.rstrip().endswith("}")

    def test_balanced_braces(self, connect_store):
        for mode in DotMode:
            dot = generate_dot(connect_store, mode=mode)
            assert dot.count("{") == dot.count("}")

    def test_field_nodes(self, connect_store):
        dot = generate_dot(connect_store)
        for field_id in ("framework", "frameworkVariant", "library", "frameworkUi"):
            assert f"  {field_id} [label=" in dot

    def test_field_label_used(self, connect_store):
        dot = generate_dot(connect_store)
        assert 'framework [label="Framework"]' in dot


class TestDotEdges:
    """Test dependency and step edges."""

    def test_dependency_edges(self, connect_store):
        dot = generate_dot(connect_store)
        assert "framework -> frameworkVariant;" in dot
        assert "framework -> library;" in dot
        assert "framework -> frameworkUi;" in dot

    def test_implicit_dependency_dashed(self, implicit_store):
        dot = generate_dot(implicit_store)
        assert "a -> b [style=dashed];" in dot

    def test_steps_chained_in_order(self, connect_store):
        dot = generate_dot(connect_store)
        assert '"step:install" -> "step:configure" [style=dotted];' in dot
        assert '"step:shadcn-explore" -> "step:install-skills" [style=dotted];' in dot

    def test_step_nodes_styled(self, connect_store):
        dot = generate_dot(connect_store)
        assert '"step:install" [shape=ellipse, fillcolor=lightyellow, label="Install package"];' in dot

    def test_no_condition_edges_in_simple_mode(self, connect_store):
        dot = generate_dot(connect_store)
        assert "color=grey" not in dot


class TestDotDetailedMode:

    def test_field_details(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.DETAILED)
        assert "Kind: boolean" in dot
        assert "Default: nextjs" in dot
        assert "Visible: " in dot

    def test_step_conditions(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.DETAILED)
        assert "When: (frameworkUi == True)" in dot

    def test_condition_edges(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.DETAILED)
        assert 'frameworkUi -> "step:shadcn-add" [style=dashed, color=grey];' in dot

    def test_long_conditions_shortened(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.DETAILED)
        assert "..." in dot


class TestDotManagementMode:

    def test_mode_cluster(self, connect_store):
        dot = generate_dot(connect_store, mode=DotMode.MANAGEMENT)
        assert 'subgraph "cluster_framework" {' in dot
        assert 'label="Framework";' in dot

    def test_cluster_per_mode(self, two_mode_store):
        dot = generate_dot(two_mode_store, mode=DotMode.MANAGEMENT)
        assert 'subgraph "cluster_client" {' in dot
        assert 'subgraph "cluster_direct" {' in dot


class TestEscaping:

    def test_escape_quotes_and_newlines(self):
        assert _escape_dot_string('say "hi"\nnow') == '"say \\"hi\\"\\nnow"'

    def test_escape_backslash_first(self):
        assert _escape_dot_string('a\\"b') == '"a\\\\\\"b"'

    def test_empty_string(self):
        assert _escape_dot_string("") == '""'

    def test_plain_id_unquoted(self):
        assert _escape_dot_id("frameworkUi") == "frameworkUi"
        assert _escape_dot_id("field_1") == "field_1"

    def test_special_id_quoted(self):
        assert _escape_dot_id("install-skills") == '"install-skills"'
        assert _escape_dot_id("1st") == '"1st"'

    def test_expression_label(self):
        assert _expr_to_dot_label(negate(field_equals("a", "x"))) == "NOT (a == 'x')"
        assert _expr_to_dot_label(None) == ""


def test_save_dot_file(connect_store, tmp_path):
    path = tmp_path / "connect.dot"
    save_dot_file(connect_store, str(path), mode=DotMode.DETAILED)
    assert path.read_text() == generate_dot(connect_store, mode=DotMode.DETAILED)
