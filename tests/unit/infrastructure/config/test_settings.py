import pytest

from stripetools.infrastructure.config import settings
from stripetools.infrastructure.config.settings import (
    clear_test_config,
    get_api_base_url,
    get_config,
    get_default_retry_after,
    get_rate_limit_policy,
    get_request_timeout,
    get_stripe_secret_key,
    load_configuration,
    reset_configuration,
    set_config_for_testing,
)


@pytest.fixture
def yaml_config(tmp_path):
    """Loads a throwaway YAML file, restoring the regular configuration afterwards."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "stripe:\n"
        "  secret_key: sk_test_yaml\n"
        "  timeout_seconds: 12\n"
        "  rate_limit:\n"
        "    max_requests: 10\n"
        "logging:\n"
        "  level: DEBUG\n"
    )
    reset_configuration()
    load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")
    yield config_file
    reset_configuration()
    load_configuration()


def test_default_values(monkeypatch):
    for name in ("STRIPE_API_BASE", "STRIPE_TIMEOUT_SECONDS", "STRIPE_DEFAULT_RETRY_AFTER"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "_config", {})

    assert get_api_base_url() == "https://api.stripe.com/v1"
    assert get_request_timeout() == 30.0
    assert get_default_retry_after() == 2.0
    assert get_config("missing.key", "fallback") == "fallback"


def test_rate_limit_policy_defaults(monkeypatch):
    monkeypatch.setattr(settings, "_config", {})
    for name in ("STRIPE_RATE_LIMIT_MAX_REQUESTS", "STRIPE_RATE_LIMIT_TIME_WINDOW", "STRIPE_RATE_LIMIT_SAFETY_MARGIN"):
        monkeypatch.delenv(name, raising=False)

    assert get_rate_limit_policy() == {"max_requests": 25, "time_window": 1.0, "safety_margin": 0.05}


def test_environment_values_are_converted(monkeypatch):
    monkeypatch.setenv("STRIPE_TIMEOUT_SECONDS", "7.5")
    monkeypatch.setenv("STRIPE_RATE_LIMIT_MAX_REQUESTS", "10")
    monkeypatch.setenv("FEATURE_FLAG", "TRUE")
    monkeypatch.setenv("PLAIN_VALUE", "hello")

    assert get_config("stripe.timeout_seconds") == 7.5
    assert get_config("stripe.rate_limit.max_requests") == 10
    assert get_config("feature.flag") is True
    assert get_config("plain.value") == "hello"
    assert get_request_timeout() == 7.5
    assert get_rate_limit_policy()["max_requests"] == 10


def test_test_config_overrides_environment(monkeypatch):
    monkeypatch.setenv("STRIPE_API_BASE", "https://env.example/v1")
    set_config_for_testing({"stripe.api_base": "https://override.example/v1/"})

    assert get_api_base_url() == "https://override.example/v1"

    clear_test_config()
    assert get_api_base_url() == "https://env.example/v1"


def test_secret_key_from_environment(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_env")

    assert get_stripe_secret_key() == "sk_test_env"


@pytest.mark.parametrize("raw_key", ["0123", "true", "1.5"])
def test_secret_key_is_not_type_converted(monkeypatch, raw_key):
    monkeypatch.setenv("STRIPE_SECRET_KEY", raw_key)

    assert get_stripe_secret_key() == raw_key


def test_secret_key_override_masks_other_sources(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_env")
    monkeypatch.setattr(settings, "_config", {"stripe.secret_key": "sk_test_yaml"})
    set_config_for_testing({"STRIPE_SECRET_KEY": None, "stripe.secret_key": None})

    assert get_stripe_secret_key() is None


def test_yaml_values_are_flattened(monkeypatch, yaml_config):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("STRIPE_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("STRIPE_RATE_LIMIT_MAX_REQUESTS", raising=False)
    monkeypatch.delenv("LOGGING_LEVEL", raising=False)

    assert get_stripe_secret_key() == "sk_test_yaml"
    assert get_request_timeout() == 12.0
    assert get_rate_limit_policy()["max_requests"] == 10
    assert get_config("logging.level") == "DEBUG"


def test_environment_beats_yaml(monkeypatch, yaml_config):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_env")

    assert get_stripe_secret_key() == "sk_test_env"


def test_dotenv_does_not_override_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("STRIPETOOLS_TEST_ONLY=from_dotenv\nSTRIPETOOLS_TEST_OTHER=dotenv_only\n")
    monkeypatch.setenv("STRIPETOOLS_TEST_ONLY", "from_environment")
    monkeypatch.delenv("STRIPETOOLS_TEST_OTHER", raising=False)

    reset_configuration()
    try:
        load_configuration(config_file=tmp_path / "absent.yaml", env_file=env_file)

        assert get_config("stripetools.test.only") == "from_environment"
        assert get_config("stripetools.test.other") == "dotenv_only"
    finally:
        monkeypatch.delenv("STRIPETOOLS_TEST_OTHER", raising=False)
        reset_configuration()
        load_configuration()


def test_non_mapping_yaml_is_ignored(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n")

    reset_configuration()
    try:
        load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")
        assert settings._config == {}
    finally:
        reset_configuration()
        load_configuration()
