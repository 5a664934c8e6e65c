"""
Tests for settings loading.
"""

import pytest

from treelox.config import TREELOX_CONFIG, Settings, find_config_file, load_settings


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the user config directory at an empty temp home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(TREELOX_CONFIG, raising=False)
    return home


def write_config(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLookupOrder:
    """Explicit path, then environment, then user config, then defaults."""

    def test_defaults(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.prompt == "> "
        assert settings.show_source is True
        assert settings.max_errors == 20
        assert settings.dump_ast is False
        assert settings.source_path is None

    def test_user_config(self, isolated_home):
        path = write_config(isolated_home / ".config" / "treelox" / "config.yaml",
                            'prompt: "lox> "\n')
        settings = load_settings()
        assert settings.prompt == "lox> "
        assert settings.source_path == str(path)

    def test_environment_beats_user_config(self, tmp_path, isolated_home, monkeypatch):
        write_config(isolated_home / ".config" / "treelox" / "config.yaml", "max_errors: 3\n")
        env_file = write_config(tmp_path / "env.yaml", "max_errors: 7\n")
        monkeypatch.setenv(TREELOX_CONFIG, str(env_file))
        assert load_settings().max_errors == 7

    def test_explicit_beats_environment(self, tmp_path, monkeypatch):
        env_file = write_config(tmp_path / "env.yaml", "max_errors: 7\n")
        explicit = write_config(tmp_path / "explicit.yaml", "max_errors: 2\n")
        monkeypatch.setenv(TREELOX_CONFIG, str(env_file))
        assert load_settings(explicit).max_errors == 2
        assert find_config_file(explicit) == explicit

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml")

    def test_missing_environment_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv(TREELOX_CONFIG, str(tmp_path / "absent.yaml"))
        with pytest.raises(FileNotFoundError):
            load_settings()


class TestValidation:
    """Malformed files are rejected with the file named."""

    def test_full_file(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", (
            'schema_version: "1.2"\n'
            'prompt: ">> "\n'
            "show_source: false\n"
            "max_errors: 5\n"
            "dump_ast: true\n"
        ))
        settings = load_settings(path)
        assert settings.schema_version == "1.2"
        assert settings.prompt == ">> "
        assert settings.show_source is False
        assert settings.max_errors == 5
        assert settings.dump_ast is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = write_config(tmp_path / "empty.yaml", "")
        settings = load_settings(path)
        assert settings.max_errors == 20
        assert settings.source_path == str(path)

    def test_unknown_key(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", "colour: blue\n")
        with pytest.raises(ValueError, match="Unknown config key"):
            load_settings(path)

    def test_wrong_type(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", 'show_source: "yes"\n')
        with pytest.raises(ValueError, match="show_source"):
            load_settings(path)

    def test_bool_is_not_int(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", "max_errors: true\n")
        with pytest.raises(ValueError, match="max_errors"):
            load_settings(path)

    def test_max_errors_positive(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", "max_errors: 0\n")
        with pytest.raises(ValueError, match="positive"):
            load_settings(path)

    def test_unsupported_schema_version(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", 'schema_version: "2.0"\n')
        with pytest.raises(ValueError, match="schema version"):
            load_settings(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", "- a\n- b\n")
        with pytest.raises(ValueError, match="expected mapping"):
            load_settings(path)

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", "prompt: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_settings(path)

    def test_error_names_file(self, tmp_path):
        path = write_config(tmp_path / "named.yaml", "bogus: 1\n")
        with pytest.raises(ValueError, match="named.yaml"):
            load_settings(path)
