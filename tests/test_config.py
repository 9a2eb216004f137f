"""Tests for configuration loading."""
import pytest
import yaml

from tradejournal.core.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG,
    get_param,
    load_config,
    merge_config,
    validate_config,
)


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config to a temp file and return its path."""
    def _write(data):
        path = tmp_path / 'config.yaml'
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)
        return str(path)
    return _write


class TestLoadConfig:
    """Tests for load_config."""

    def test_default_config(self, monkeypatch):
        """The bundled config has every section and validates."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        cfg = load_config()

        assert set(DEFAULT_CONFIG) <= set(cfg)
        validate_config(cfg)

    def test_partial_override(self, write_config):
        """Missing keys fall back to defaults."""
        cfg = load_config(write_config({'analytics': {'initial_capital': 5000}}))

        assert cfg['analytics']['initial_capital'] == 5000
        assert cfg['projection']['monthly_contribution'] == DEFAULT_CONFIG['projection']['monthly_contribution']
        assert cfg['api']['port'] == DEFAULT_CONFIG['api']['port']

    def test_env_var(self, write_config, monkeypatch):
        """TRADEJOURNAL_CONFIG points at the config to load."""
        monkeypatch.setenv(CONFIG_ENV_VAR, write_config({'api': {'port': 9000}}))
        assert load_config()['api']['port'] == 9000

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('')
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / 'nope.yaml'))

    @pytest.mark.parametrize('override', [
        {'analytics': {'initial_capital': -1}},
        {'projection': {'monthly_contribution': -10}},
        {'projection': {'conservative': 'yes'}},
        {'cache': {'max_entries': 0}},
        {'goals': {'daily': 0}},
        {'goals': {'quarterly': 1000}},
        {'logging': {'level': 'LOUD'}},
        {'journal': {'store_path': ''}},
    ])
    def test_invalid_values(self, write_config, override):
        with pytest.raises(ValueError):
            load_config(write_config(override))


def test_merge_config_is_deep():
    """Nested sections are merged, not replaced, and the base is untouched."""
    base = {'a': {'x': 1, 'y': 2}, 'b': 3}
    merged = merge_config(base, {'a': {'y': 20}})

    assert merged == {'a': {'x': 1, 'y': 20}, 'b': 3}
    assert base['a']['y'] == 2


def test_missing_section():
    cfg = {key: value for key, value in DEFAULT_CONFIG.items() if key != 'cache'}
    with pytest.raises(ValueError, match='cache'):
        validate_config(cfg)


def test_get_param():
    assert get_param(DEFAULT_CONFIG, 'api', 'host') == '127.0.0.1'
    assert get_param(DEFAULT_CONFIG, 'api', 'missing', default=7) == 7
    assert get_param(DEFAULT_CONFIG, 'api', 'host', 'deeper', default='x') == 'x'
