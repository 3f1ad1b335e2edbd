"""Tests for CLI formatting utilities."""

from archgraph.cli._format import format_number, json_envelope, print_lines, print_table, tree_lines
from archgraph.tree import build_tree, search
from archgraph.tree.visibility import VisibilityController


class TestFormatNumber:
    def test_integral(self):
        assert format_number(3.0) == "3"
        assert format_number(0) == "0"

    def test_fraction(self):
        assert format_number(2.34) == "2.3"
        assert format_number(-7.96) == "-8.0"


class TestPrintTable:
    def test_empty(self):
        assert print_table(["A"], []) == []

    def test_numeric_columns_right_aligned(self):
        lines = print_table(["System", "X"], [["alpha", "5"], ["b", "120"]])

        assert lines[0] == "  System  X  "
        assert lines[2] == "  alpha     5"
        assert lines[3] == "  b       120"


class TestTreeLines:
    def test_outline_marks(self, capability_records):
        tree = build_tree(capability_records)
        result = search(tree, "verification")
        controller = VisibilityController(tree)
        controller.apply_expansion(result.expansion)
        lines = tree_lines(tree, controller.visible_tree(), result)

        assert lines[0] == "Business Capabilities (root)"
        assert "  ~Customer Management (L1)" in lines
        assert "      *Identity Verification (L3) [+]" in lines
        assert "  Finance (L1) [+]" in lines


class TestJsonEnvelope:
    def test_structure(self):
        env = json_envelope("flow", {"key": "value"})
        assert env["schema_version"] == 1
        assert env["command"] == "flow"
        assert "generated_at" in env
        assert env["data"] == {"key": "value"}


def test_print_lines_truncates(capsys):
    print_lines([f"line {i}" for i in range(5)], max_lines=2)
    out = capsys.readouterr().out
    assert "line 1" in out
    assert "line 2" not in out
    assert "3 more lines" in out
