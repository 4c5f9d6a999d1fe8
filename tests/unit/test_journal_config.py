"""Unit tests for configuration loading."""

import pytest

from rentledger.services.config import JournalConfig, load_config

ENV_VARS = ("DATABASE_URL", "LOG_FILE", "LOG_LEVEL")


@pytest.fixture
def clean_env(monkeypatch):
    """Unset config variables; anything load_dotenv sets is removed afterwards."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self, clean_env, tmp_path):
        """Test defaults apply when nothing is configured."""
        config = load_config(str(tmp_path / "missing.env"))

        assert config == JournalConfig()
        assert config.database_url == "sqlite:///./rentledger.db"
        assert config.log_file == "logs/journal.log"
        assert config.log_level == "INFO"

    def test_environment_overrides(self, clean_env, tmp_path):
        """Test environment variables take effect and the level is upper-cased."""
        clean_env.setenv("DATABASE_URL", "postgresql://user@localhost/ledger")
        clean_env.setenv("LOG_FILE", str(tmp_path / "run.log"))
        clean_env.setenv("LOG_LEVEL", "debug")

        config = load_config(str(tmp_path / "missing.env"))

        assert config.database_url == "postgresql://user@localhost/ledger"
        assert config.log_file == str(tmp_path / "run.log")
        assert config.log_level == "DEBUG"

    def test_dotenv_file(self, clean_env, tmp_path):
        """Test values are read from the dotenv file."""
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=sqlite:///ledger.db\nLOG_LEVEL=WARNING\n")

        config = load_config(str(env_file))

        assert config.database_url == "sqlite:///ledger.db"
        assert config.log_level == "WARNING"

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        """Test an exported variable is not overridden by the dotenv file."""
        env_file = tmp_path / ".env"
        env_file.write_text("LOG_LEVEL=WARNING\n")
        clean_env.setenv("LOG_LEVEL", "ERROR")

        assert load_config(str(env_file)).log_level == "ERROR"

    def test_empty_database_url(self, clean_env, tmp_path):
        clean_env.setenv("DATABASE_URL", "   ")

        with pytest.raises(ValueError, match="DATABASE_URL is empty"):
            load_config(str(tmp_path / "missing.env"))

    def test_invalid_database_url(self, clean_env, tmp_path):
        """Test a plain path is rejected with a clear message."""
        clean_env.setenv("DATABASE_URL", "./rentledger.db")

        with pytest.raises(ValueError, match="not a valid SQLAlchemy URL"):
            load_config(str(tmp_path / "missing.env"))

    def test_invalid_log_level(self, clean_env, tmp_path):
        clean_env.setenv("LOG_LEVEL", "VERBOSE")

        with pytest.raises(ValueError, match="LOG_LEVEL must be one of"):
            load_config(str(tmp_path / "missing.env"))
