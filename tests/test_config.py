from eventlog.config import load_config, ConfigException, ConfigModel, DEFAULTS
from pydantic import ValidationError
import pytest


def test_defaults():
    assert load_config() == DEFAULTS


def test_load_from_file(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('db_url: sqlite:///events.db\nasync_workers: 8\n')

    config = load_config(str(config_file))

    assert config['db_url'] == 'sqlite:///events.db'
    assert config['async_workers'] == 8
    assert config['echo'] is False


def test_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv('EVENTLOG_TEST_PASSWORD', 's3cret')
    monkeypatch.delenv('EVENTLOG_TEST_MISSING', raising=False)
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('db_url: postgresql://events:${EVENTLOG_TEST_PASSWORD}@db${EVENTLOG_TEST_MISSING}/events\n')

    config = load_config(str(config_file))

    assert config['db_url'] == 'postgresql://events:s3cret@db/events'


def test_overrides(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('db_url: sqlite:///file.db\necho: true\n')

    config = load_config(str(config_file), overrides={'db_url': 'sqlite://', 'echo': None})

    assert config['db_url'] == 'sqlite://'
    assert config['echo'] is True


def test_empty_file(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('')
    assert load_config(str(config_file)) == DEFAULTS


def test_missing_file(tmp_path):
    with pytest.raises(ConfigException):
        load_config(str(tmp_path / 'missing.yaml'))


def test_invalid_yaml(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('db_url: [unclosed\n')
    with pytest.raises(ConfigException):
        load_config(str(config_file))


def test_not_a_mapping(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('- one\n- two\n')
    with pytest.raises(ConfigException):
        load_config(str(config_file))


def test_invalid_values():
    with pytest.raises(ConfigException):
        load_config(overrides={'async_workers': 'many'})
    with pytest.raises(ConfigException):
        load_config(overrides={'async_workers': 0})
    with pytest.raises(ConfigException):
        load_config(overrides={'async_workers': True})
    with pytest.raises(ConfigException):
        load_config(overrides={'unknown': 1})


def test_validation_error_is_translated():
    with pytest.raises(ConfigException) as e:
        load_config(overrides={'echo': 1})
    assert 'echo' in str(e.value)
    assert isinstance(e.value.__cause__, ValidationError)


def test_unknown_key_in_file(tmp_path):
    config_file = tmp_path / 'eventlog.yaml'
    config_file.write_text('db_url: sqlite://\nworkers: 8\n')
    with pytest.raises(ConfigException) as e:
        load_config(str(config_file))
    assert 'workers' in str(e.value)


def test_config_model_defaults():
    assert ConfigModel().model_dump() == {'db_url': 'sqlite://', 'echo': False, 'async_workers': 4}
