"""Tests for config module"""

import tempfile
from pathlib import Path

import pytest
import yaml

from lhm_osc_bridge.config import (
    Config,
    ConfigError,
    OscConfig,
    PollConfig,
    SensorNamesConfig,
    SourceConfig,
    config_from_dict,
    find_config_file,
    load_config,
    save_config,
    validate_port,
)
from lhm_osc_bridge.poll import PollCycle
from tests.fakes import FIXED_NOW, FakeClock, FakeSource, RecordingEmitter, node, tree


def write_yaml(data) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return f.name


class TestConfigDataclasses:
    """Test configuration dataclasses"""

    def test_osc_config_defaults(self):
        config = OscConfig()
        assert config.ip == "127.0.0.1"
        assert config.port == 9000

    def test_source_config_defaults(self):
        config = SourceConfig()
        assert config.json_port == 8085
        assert config.timeout == 0.3

    def test_sensor_names_defaults(self):
        names = SensorNamesConfig()
        assert names.cpu_temp == "Core (Tctl/Tdie)"
        assert names.cpu_usage == "CPU Total"
        assert names.gpu_mem_total == "GPU Memory_Total-1  ( ! )"
        assert names.wifi_up == "Upload Speed"
        assert names.wifi_down == "Download Speed"

    def test_poll_config_defaults(self):
        config = PollConfig()
        assert config.retry_interval == 5.0
        assert config.tick_interval == 1.0


class TestValidatePort:
    @pytest.mark.parametrize("value,expected", [(9000, 9000), ("9001", 9001), (" 80 ", 80)])
    def test_valid(self, value, expected):
        assert validate_port(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", 0, 70000, -1, True, "90.5"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            validate_port(value)


class TestConfigLoading:
    """Test configuration loading"""

    def test_load_config_with_defaults(self):
        config = load_config("/nonexistent/config.yaml")
        assert isinstance(config, Config)
        assert config.osc.port == 9000
        assert config.source.json_port == 8085

    def test_load_config_from_yaml(self):
        config_path = write_yaml(
            {
                "osc": {"ip": "192.168.1.20", "port": 9010},
                "source": {"json_port": 8086},
                "sensors": {"cpu_usage": "CPU Load", "wifi_up": "Data Uploaded"},
                "poll": {"retry_interval": 10},
                "logging": {"level": "DEBUG"},
            }
        )
        try:
            config = load_config(config_path)

            assert config.osc.ip == "192.168.1.20"
            assert config.osc.port == 9010
            assert config.source.json_port == 8086
            assert config.sensors.cpu_usage == "CPU Load"
            assert config.sensors.wifi_up == "Data Uploaded"
            assert config.sensors.cpu_temp == "Core (Tctl/Tdie)"  # Default
            assert config.poll.retry_interval == 10
            assert config.logging.level == "DEBUG"
        finally:
            Path(config_path).unlink()

    def test_load_config_ignores_unknown_keys(self):
        config_path = write_yaml({"osc": {"port": 9001, "bogus": 1}, "extra": {}})
        try:
            config = load_config(config_path)
            assert config.osc.port == 9001
        finally:
            Path(config_path).unlink()

    def test_invalid_port_falls_back_to_defaults(self):
        config_path = write_yaml({"osc": {"port": "not-a-port"}})
        try:
            config = load_config(config_path)
            assert config.osc.port == 9000
        finally:
            Path(config_path).unlink()

    @pytest.mark.parametrize(
        "text",
        [
            "sensors:\n  cpu_usage: 1234\n",
            "sensors:\n  cpu_usage:\n",
            "poll:\n  retry_interval: '5'\n",
            "poll:\n  tick_interval: 0\n",
            "source:\n  timeout: -0.3\n",
            "source:\n  host: ''\n",
            "source:\n  host: 8085\n",
            "logging:\n  level: 10\n",
        ],
    )
    def test_wrongly_typed_values_fall_back_to_defaults(self, tmp_path, text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        assert load_config(str(path)) == Config()

    @pytest.mark.asyncio
    async def test_bad_sensor_label_file_still_polls(self, tmp_path):
        """A bad sensor label must not stop the cycle from emitting"""
        path = tmp_path / "config.yaml"
        path.write_text("sensors:\n  cpu_usage: 1234\n")
        config = load_config(str(path))
        emitter = RecordingEmitter()
        cycle = PollCycle(
            FakeSource(tree(node("CPU Total", "23.5 %"))),
            emitter,
            config.sensors,
            retry_interval=config.poll.retry_interval,
            monotonic=FakeClock(),
            wall_clock=lambda: FIXED_NOW,
        )

        assert await cycle.tick() is True
        assert len(emitter.sent) == 10
        assert cycle.snapshot().readings.cpu_usage == 23.5

    def test_integer_intervals_become_floats(self):
        config = config_from_dict({"poll": {"retry_interval": 10, "tick_interval": 2}})
        assert config.poll.retry_interval == 10.0
        assert isinstance(config.poll.retry_interval, float)
        assert config.poll.tick_interval == 2.0

    def test_broken_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("osc: [unclosed")
        assert load_config(str(path)) == Config()

    def test_non_mapping_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(str(path)) == Config()

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()

    def test_find_config_file_not_found(self):
        found = find_config_file()
        assert found is None or isinstance(found, Path)


class TestConfigSaving:
    def test_save_and_reload(self, tmp_path):
        config = Config()
        config.osc.ip = "10.0.0.5"
        config.sensors.gpu_temp = "GPU Hot Spot"
        path = tmp_path / "nested" / "config.yaml"

        save_config(config, path)
        reloaded = load_config(str(path))

        assert reloaded == config
        assert yaml.safe_load(path.read_text())["osc"]["ip"] == "10.0.0.5"

    def test_config_from_dict_rejects_empty_ip(self):
        with pytest.raises(ConfigError):
            config_from_dict({"osc": {"ip": "  "}})
