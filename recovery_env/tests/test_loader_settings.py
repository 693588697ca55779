import pytest
from pydantic import ValidationError

from recovery_env.app.config import LoaderSettings
from recovery_env.app.loader import ConfigLoader


def test_defaults():
    settings = LoaderSettings(_env_file=None)

    assert settings.strict is False
    assert settings.read_environment is False
    assert settings.tf_var_prefix == "TF_VAR_"
    assert settings.max_signers == 16


def test_settings_are_read_from_prefixed_environment(monkeypatch):
    monkeypatch.setenv("RECOVERY_ENV_STRICT", "true")
    monkeypatch.setenv("RECOVERY_ENV_MAX_SIGNERS", "5")

    settings = LoaderSettings(_env_file=None)

    assert settings.strict is True
    assert settings.max_signers == 5


def test_settings_are_read_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("RECOVERY_ENV_READ_ENVIRONMENT=1\n", encoding="utf-8")

    settings = LoaderSettings(_env_file=env_file)

    assert settings.read_environment is True


def test_invalid_settings_fail_fast():
    with pytest.raises(ValidationError):
        LoaderSettings(_env_file=None, max_signers=0)


def test_settings_are_frozen():
    settings = LoaderSettings(_env_file=None)

    with pytest.raises(ValidationError):
        settings.strict = True


def test_loader_reads_settings_when_none_given(monkeypatch):
    monkeypatch.setenv("RECOVERY_ENV_STRICT", "true")

    loader = ConfigLoader()

    assert loader.settings.strict is True
