"""Tests for config.yaml loading and CLI overrides."""

import pytest
import yaml

from decoplan.config import DEFAULTS, build_parameters, load_effective_config
from decoplan.planner import InvalidDiveParametersError


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


class TestLoadEffectiveConfig:
    """Defaults, then config file, then CLI overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_effective_config(config_path=str(tmp_path / "missing.yaml"))
        assert config["source"] == "default"
        for key, value in DEFAULTS.items():
            assert config[key] == value

    def test_dive_section_read(self, tmp_path):
        path = write_config(
            tmp_path,
            "dive:\n  depth_m: 30\n  bottom_time_min: 20\n  f_o2: 0.32\n  p_factor: 1\n",
        )
        config = load_effective_config(config_path=path)

        assert config["source"] == "config"
        assert config["depth_m"] == 30.0
        assert config["bottom_time_min"] == 20.0
        assert config["f_o2"] == 0.32
        assert config["p_factor"] == 1
        assert config["config_path"] == path

    def test_partial_section_keeps_defaults(self, tmp_path):
        path = write_config(tmp_path, "dive:\n  depth_m: 25\n")
        config = load_effective_config(config_path=path)
        assert config["depth_m"] == 25.0
        assert config["f_o2"] == DEFAULTS["f_o2"]

    def test_empty_file_uses_defaults(self, tmp_path):
        path = write_config(tmp_path, "")
        config = load_effective_config(config_path=path)
        assert config["source"] == "default"
        assert config["depth_m"] == DEFAULTS["depth_m"]

    def test_cli_overrides_win(self, tmp_path):
        path = write_config(tmp_path, "dive:\n  depth_m: 30\n  f_o2: 0.32\n")
        config = load_effective_config(
            overrides={"depth_m": 12.0, "f_o2": None}, config_path=path
        )
        assert config["source"] == "cli"
        assert config["depth_m"] == 12.0
        assert config["f_o2"] == 0.32

    def test_all_none_overrides_ignored(self, tmp_path):
        config = load_effective_config(
            overrides={"depth_m": None, "bottom_time_min": None},
            config_path=str(tmp_path / "missing.yaml"),
        )
        assert config["source"] == "default"

    def test_unknown_override_rejected(self, tmp_path):
        with pytest.raises(KeyError, match="gf_low"):
            load_effective_config(
                overrides={"gf_low": 0.3}, config_path=str(tmp_path / "missing.yaml")
            )

    def test_malformed_yaml_propagates(self, tmp_path):
        path = write_config(tmp_path, "dive: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_effective_config(config_path=path)


class TestBuildParameters:

    def test_defaults_build(self, tmp_path):
        config = load_effective_config(config_path=str(tmp_path / "missing.yaml"))
        params = build_parameters(config)
        assert params.depth_m == 18.0
        assert params.bottom_time_min == 10.0
        assert params.f_o2 == 0.21

    def test_invalid_values_rejected(self, tmp_path):
        path = write_config(tmp_path, "dive:\n  f_o2: 0\n")
        config = load_effective_config(config_path=path)
        with pytest.raises(InvalidDiveParametersError):
            build_parameters(config)
