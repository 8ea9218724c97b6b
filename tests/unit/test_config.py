"""Unit tests for configuration."""

import tempfile
from pathlib import Path

import pytest

from paydemo.models.config import DEFAULT_TOLERANCE_SECONDS, Settings
from paydemo.utils.config_loader import ConfigLoaderError, load_settings

SECRET = "whsec_config_test_secret"


class TestSettings:
    """Tests for Settings model."""

    def test_defaults(self) -> None:
        """Test default settings."""
        settings = Settings(webhook_secret=SECRET)

        assert settings.tolerance_seconds == DEFAULT_TOLERANCE_SECONDS == 300
        assert settings.signature_header == "Stripe-Signature"
        assert settings.allowed_origins == ("*",)
        assert settings.currency == "usd"
        assert not settings.payments_enabled

    def test_secrets_not_in_repr(self) -> None:
        """Test that repr never exposes secrets."""
        settings = Settings(webhook_secret=SECRET, stripe_api_key="sk_test_hidden")

        text = repr(settings)

        assert SECRET not in text
        assert "sk_test_hidden" not in text

    def test_secret_hint_is_truncated(self) -> None:
        """Test that the diagnostic hint is only a prefix."""
        settings = Settings(webhook_secret=SECRET)

        assert settings.secret_hint == "whsec_co..."
        assert SECRET not in settings.secret_hint

    def test_empty_secret_rejected(self) -> None:
        """Test that an empty secret is invalid."""
        with pytest.raises(ValueError, match="webhook_secret"):
            Settings(webhook_secret="")

    def test_tolerance_validation(self) -> None:
        """Test that tolerance must be positive."""
        with pytest.raises(ValueError, match="tolerance"):
            Settings(webhook_secret=SECRET, tolerance_seconds=0)

    def test_currency_validation(self) -> None:
        """Test unsupported currencies are rejected."""
        with pytest.raises(ValueError, match="Unsupported currency"):
            Settings(webhook_secret=SECRET, currency="doge")

    def test_settings_are_frozen(self) -> None:
        """Test that settings cannot change after load."""
        settings = Settings(webhook_secret=SECRET)

        with pytest.raises(AttributeError):
            settings.webhook_secret = "other"  # type: ignore[misc]


class TestLoadSettings:
    """Tests for the settings loader."""

    def test_missing_secret_is_fatal(self) -> None:
        """Test that absence of the webhook secret aborts loading."""
        with pytest.raises(ConfigLoaderError, match="STRIPE_WEBHOOK_SECRET"):
            load_settings(environ={})

    def test_environment_only(self) -> None:
        """Test loading from environment without a config file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("")
            environ = {
                "STRIPE_WEBHOOK_SECRET": SECRET,
                "STRIPE_SECRET_KEY": "sk_test_env",
                "WEBHOOK_TOLERANCE_SECONDS": "120",
                "ALLOWED_ORIGINS": "http://localhost:5173, https://shop.example",
            }
            settings = load_settings(config_path=config_file, environ=environ)

        assert settings.webhook_secret == SECRET
        assert settings.stripe_api_key == "sk_test_env"
        assert settings.tolerance_seconds == 120
        assert settings.allowed_origins == ("http://localhost:5173", "https://shop.example")

    def test_yaml_file(self) -> None:
        """Test loading options from a YAML file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text(
                """
tolerance_seconds: 60
signature_header: Signature
allowed_origins:
  - http://localhost:5173
currency: EUR
port: 8080
"""
            )

            settings = load_settings(
                config_path=config_file, environ={"STRIPE_WEBHOOK_SECRET": SECRET}
            )

        assert settings.tolerance_seconds == 60
        assert settings.signature_header == "Signature"
        assert settings.allowed_origins == ("http://localhost:5173",)
        assert settings.currency == "eur"
        assert settings.port == 8080

    def test_environment_overrides_file(self) -> None:
        """Test that environment values win over the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("tolerance_seconds: 60\n")

            settings = load_settings(
                config_path=config_file,
                environ={"STRIPE_WEBHOOK_SECRET": SECRET, "WEBHOOK_TOLERANCE_SECONDS": "30"},
            )

        assert settings.tolerance_seconds == 30

    def test_config_path_from_environment(self) -> None:
        """Test that PAYDEMO_CONFIG selects the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "custom.yaml"
            config_file.write_text("currency: gbp\n")

            settings = load_settings(
                environ={"STRIPE_WEBHOOK_SECRET": SECRET, "PAYDEMO_CONFIG": str(config_file)}
            )

        assert settings.currency == "gbp"

    def test_secret_in_file_rejected(self) -> None:
        """Test that secrets may not live in the config file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("stripe_api_key: sk_live_oops\n")

            with pytest.raises(ConfigLoaderError, match="environment"):
                load_settings(config_path=config_file, environ={"STRIPE_WEBHOOK_SECRET": SECRET})

    def test_invalid_yaml(self) -> None:
        """Test that unparsable YAML raises ConfigLoaderError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("tolerance_seconds: [unclosed\n")

            with pytest.raises(ConfigLoaderError, match="parse"):
                load_settings(config_path=config_file, environ={"STRIPE_WEBHOOK_SECRET": SECRET})

    def test_invalid_value(self) -> None:
        """Test that a non-numeric tolerance raises ConfigLoaderError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("")

            with pytest.raises(ConfigLoaderError, match="Invalid configuration"):
                load_settings(
                    config_path=config_file,
                    environ={
                        "STRIPE_WEBHOOK_SECRET": SECRET,
                        "WEBHOOK_TOLERANCE_SECONDS": "soon",
                    },
                )

    def test_non_mapping_file(self) -> None:
        """Test that a YAML list is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("- a\n- b\n")

            with pytest.raises(ConfigLoaderError, match="mapping"):
                load_settings(config_path=config_file, environ={"STRIPE_WEBHOOK_SECRET": SECRET})

    def test_reads_process_environment(self, set_mock_env: None, webhook_secret: str) -> None:
        """Test that os.environ is used by default."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / ".paydemo.yml"
            config_file.write_text("")

            settings = load_settings(config_path=config_file)

        assert settings.webhook_secret == webhook_secret
        assert settings.payments_enabled
