import pytest

from backend.core.config import Settings, load_settings, validate_runtime_config


def test_load_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///./other.db')
    monkeypatch.setenv('STATIC_TOKENS', ' one, two ,,')
    monkeypatch.setenv('REJECT_DUPLICATE_RULE_DAYS', 'yes')
    monkeypatch.setenv('BOOKING_LOOKUP_PAD_MINUTES', '15')

    settings = load_settings()

    assert settings.database_url == 'sqlite:///./other.db'
    assert settings.static_tokens == ['one', 'two']
    assert settings.reject_duplicate_rule_days is True
    assert settings.booking_lookup_pad_minutes == 15


def test_duplicate_day_rejection_is_off_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('REJECT_DUPLICATE_RULE_DAYS', raising=False)

    assert load_settings().reject_duplicate_rule_days is False


def test_production_requires_an_auth_credential() -> None:
    with pytest.raises(RuntimeError):
        validate_runtime_config(Settings(app_env='production'))

    validate_runtime_config(Settings(app_env='production', static_tokens=['token']))
    validate_runtime_config(Settings(app_env='development'))
