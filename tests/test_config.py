"""Tests for engine settings and [tool.archgraph] loading."""

from __future__ import annotations

import pytest

from archgraph.cli._config import ArchgraphConfig, find_pyproject, load_config
from archgraph.config import (
    ColumnMode,
    FlowLayoutConfig,
    ForceConfig,
    Margin,
    TieBreak,
    TreeLayoutConfig,
)


class TestMargin:
    def test_single_number(self):
        assert Margin.coerce(10) == Margin(10, 10, 10, 10)

    def test_pair(self):
        assert Margin.coerce((20, 120)) == Margin(20, 120, 20, 120)

    def test_mapping(self):
        assert Margin.coerce({"top": 5, "left": 7}) == Margin(top=5, left=7)

    def test_four_values(self):
        assert Margin.coerce([1, 2, 3, 4]) == Margin(1, 2, 3, 4)


class TestLayoutConfigs:
    def test_tree_inner_size(self):
        config = TreeLayoutConfig()
        assert config.inner_width == 960
        assert config.inner_height == 760

    def test_tree_margin_coerced(self):
        assert TreeLayoutConfig(margin=0).margin == Margin()

    def test_with_size(self):
        config = TreeLayoutConfig(depth_step=100).with_size(400, 300)
        assert (config.width, config.height, config.depth_step) == (400, 300, 100)

    def test_unknown_option(self):
        with pytest.raises(ValueError, match="Unknown TreeLayoutConfig option"):
            TreeLayoutConfig.from_mapping({"bogus": 1})

    def test_flow_enums_from_strings(self):
        config = FlowLayoutConfig.from_mapping({"tie_break": "stable", "column_mode": "justify"})
        assert config.tie_break is TieBreak.STABLE
        assert config.column_mode is ColumnMode.JUSTIFY

    def test_flow_rejects_bad_enum(self):
        with pytest.raises(ValueError):
            FlowLayoutConfig(tie_break="random")

    def test_flow_rejects_negative_iterations(self):
        with pytest.raises(ValueError, match="iterations"):
            FlowLayoutConfig(iterations=-1)

    def test_bordered_preset_overrides(self):
        config = FlowLayoutConfig.bordered(iterations=5)
        assert config.iterations == 5
        assert config.node_padding == 50
        assert config.margin == Margin(30, 20, 30, 20)


class TestForceConfig:
    def test_defaults(self):
        config = ForceConfig()
        assert config.center == (480, 300)
        assert config.alpha_decay == pytest.approx(0.0228, abs=1e-4)

    @pytest.mark.parametrize("values", [{"velocity_decay": 1.5}, {"settle_after": -1}])
    def test_invalid(self, values):
        with pytest.raises(ValueError):
            ForceConfig(**values)


# ============================================================
# pyproject.toml
# ============================================================

PYPROJECT = """
[project]
name = "demo"

[tool.archgraph.tree]
max_visible_depth = 2

[tool.archgraph.flow]
node_padding = 10.0
tie_break = "stable"

[tool.archgraph.force]
settle_after = 5.0

[tool.archgraph.gestures]
time_threshold_ms = 150
"""


class TestLoadConfig:
    def test_reads_sections(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        config = load_config(tmp_path)

        assert config.tree_config().max_visible_depth == 2
        assert config.flow_config().tie_break is TieBreak.STABLE
        assert config.force_config().settle_after == 5.0
        assert config.click_policy().time_threshold_ms == 150

    def test_walks_up(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_pyproject(nested) == (tmp_path / "pyproject.toml").resolve()

    def test_cwd_default(self, tmp_path, monkeypatch):
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        monkeypatch.chdir(tmp_path)
        assert load_config().tree == {"max_visible_depth": 2}

    def test_missing_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
        assert load_config(tmp_path) == ArchgraphConfig()

    def test_overrides_win(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        config = load_config(tmp_path)
        assert config.tree_config(max_visible_depth=0).max_visible_depth == 0

    def test_bordered_keeps_project_values(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        flow = load_config(tmp_path).flow_config(bordered=True)

        assert flow.node_padding == 10.0
        assert flow.iterations == 1000

    def test_unknown_key_rejected_for_bordered(self):
        config = ArchgraphConfig(flow={"bogus": 1})
        with pytest.raises(ValueError, match="bogus"):
            config.flow_config(bordered=True)
