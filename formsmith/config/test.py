"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_db_path,
    get_default_template,
    get_environment,
    get_environment_info,
    get_submit_timeout,
    get_submit_url,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("MCP_PORT", raising=False)
        assert get_environment(EnvVar.MCP_PORT) == 18090

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("MCP_PORT", "9999")
        assert get_environment(EnvVar.MCP_PORT, override=5000) == 5000

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("MCP_PORT", "12345")
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 12345
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float variables convert from their string form."""
        monkeypatch.setenv("FORMSMITH_SUBMIT_TIMEOUT", "2.5")
        assert get_environment(EnvVar.FORMSMITH_SUBMIT_TIMEOUT) == 2.5

    @pytest.mark.unit
    def test_invalid_number_falls_back_to_default(self, monkeypatch):
        """Unparseable numbers yield the declared default."""
        monkeypatch.setenv("FORMSMITH_SUBMIT_TIMEOUT", "soon")
        assert get_environment(EnvVar.FORMSMITH_SUBMIT_TIMEOUT) == 10.0

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables come back as Path objects."""
        monkeypatch.setenv("FORMSMITH_DB_PATH", str(tmp_path / "x.db"))
        result = get_environment(EnvVar.FORMSMITH_DB_PATH)
        assert isinstance(result, Path)
        assert result.name == "x.db"


class TestEnvironmentInfo:
    """Introspection helpers."""

    @pytest.mark.unit
    def test_info_is_env_config(self):
        """Each member exposes its EnvConfig."""
        info = get_environment_info(EnvVar.FORMSMITH_SUBMIT_URL)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMSMITH_SUBMIT_URL"
        assert info.category == "submit"

    @pytest.mark.unit
    def test_member_names_match_variable_names(self):
        """Enum member names mirror the environment variable names."""
        for var in EnvVar:
            assert var.name == var.value.name

    @pytest.mark.unit
    def test_list_by_category(self):
        """Category filter narrows the list."""
        service = list_environment_variables("service")
        assert set(service) == {EnvVar.MCP_HOST, EnvVar.MCP_PORT}
        assert len(list_environment_variables()) == len(EnvVar)


class TestConvenienceFunctions:
    """Shortcuts used by the CLI and server."""

    @pytest.mark.unit
    def test_db_path_default_under_cwd(self, monkeypatch, tmp_path):
        """Without configuration the database lives under ./.formsmith."""
        monkeypatch.delenv("FORMSMITH_DB_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        assert get_db_path() == tmp_path / ".formsmith" / "forms.db"

    @pytest.mark.unit
    def test_db_path_override(self, tmp_path):
        """Explicit path wins."""
        assert get_db_path(tmp_path / "a.db") == tmp_path / "a.db"

    @pytest.mark.unit
    def test_submit_settings(self, monkeypatch):
        """Submit URL is optional and timeout has a default."""
        monkeypatch.delenv("FORMSMITH_SUBMIT_URL", raising=False)
        monkeypatch.delenv("FORMSMITH_SUBMIT_TIMEOUT", raising=False)
        assert get_submit_url() is None
        assert get_submit_timeout() == 10.0
        assert get_submit_url("http://hook") == "http://hook"

    @pytest.mark.unit
    def test_default_template(self, monkeypatch):
        """Default row template is the single column layout."""
        monkeypatch.delenv("FORMSMITH_DEFAULT_TEMPLATE", raising=False)
        assert get_default_template() == "1-column"
