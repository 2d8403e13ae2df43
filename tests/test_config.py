"""Tests for configuration loading and priority."""

import pytest

from patch_reconciler.config import ReconcileConfig, _find_config_file, _load_yaml
from patch_reconciler.matching.tokenizer import C_LIKE


class TestDefaults:
    def test_defaults(self):
        config = ReconcileConfig()
        assert config.FUZZ_LADDER == (1, 3, 10, 50, 100)
        assert config.SIMILARITY_THRESHOLD == 0.7
        assert config.MIN_ALIGNMENT_SCORE == 10
        assert config.REFORMAT_REPLACEMENT is True
        assert config.METRICS_ENABLED is False

    def test_sub_configs(self):
        config = ReconcileConfig(min_chunk_size=8, gap_penalty=-2, case_sensitive=False)
        assert config.chunk_config().min_chunk_size == 8
        assert config.alignment_config().gap_penalty == -2
        token = config.token_config(C_LIKE)
        assert token.profile is C_LIKE
        assert token.filter.case_sensitive is False


class TestPriority:
    def test_yaml_over_default(self):
        config = ReconcileConfig({"similarity_threshold": 0.9})
        assert config.SIMILARITY_THRESHOLD == 0.9

    def test_env_over_yaml(self, monkeypatch):
        monkeypatch.setenv("PATCH_RECONCILER_SIMILARITY_THRESHOLD", "0.5")
        config = ReconcileConfig({"similarity_threshold": 0.9})
        assert config.SIMILARITY_THRESHOLD == 0.5

    def test_override_over_env(self, monkeypatch):
        monkeypatch.setenv("PATCH_RECONCILER_SIMILARITY_THRESHOLD", "0.5")
        config = ReconcileConfig({"similarity_threshold": 0.9}, similarity_threshold=0.8)
        assert config.SIMILARITY_THRESHOLD == 0.8

    def test_env_booleans_and_ladder(self, monkeypatch):
        monkeypatch.setenv("PATCH_RECONCILER_METRICS_ENABLED", "yes")
        monkeypatch.setenv("PATCH_RECONCILER_FUZZ_LADDER", "2, 4")
        config = ReconcileConfig()
        assert config.METRICS_ENABLED is True
        assert config.FUZZ_LADDER == (2, 4)

    def test_unknown_key(self):
        with pytest.raises(TypeError):
            ReconcileConfig(fuzziness=3)

    def test_negative_ladder_step(self):
        with pytest.raises(ValueError):
            ReconcileConfig(fuzz_ladder=[1, -1])


class TestConfigFile:
    def test_load_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("indent_width: 2\nuse_tabs: true\n")
        config = ReconcileConfig.load(str(path))
        assert config.INDENT_WIDTH == 2
        assert config.USE_TABS is True

    def test_missing_explicit_path(self, tmp_path):
        assert _find_config_file(str(tmp_path / "nope.yaml")) is None

    def test_found_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".patch_reconciler.yml").write_text("tab_width: 8\n")
        assert ReconcileConfig.load().TAB_WIDTH == 8

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("tab_width: 8\n")
        assert ReconcileConfig.load(str(path), tab_width=2).TAB_WIDTH == 2

    def test_unreadable_yaml_ignored(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n")
        assert _load_yaml(str(path)) == {}

    def test_non_mapping_yaml_ignored(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml(str(path)) == {}
