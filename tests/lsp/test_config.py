"""Tests for server configuration loading."""

import pytest

from quill.lsp.config import ServerConfig, load_server_config


def write_config(path, content: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.language == "python"
        assert config.strict_requests is False
        assert config.diagnostic_source == "quill"

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"language": ""}, "language"),
            ({"exit_timeout": 0}, "exit_timeout"),
            ({"language": 5}, "language"),
            ({"strict_requests": "yes"}, "strict_requests"),
            ({"exit_timeout": "30"}, "exit_timeout"),
            ({"exit_timeout": True}, "exit_timeout"),
            ({"diagnostic_source": 7}, "diagnostic_source"),
        ],
    )
    def test_validation(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            ServerConfig(**kwargs)

    def test_from_dict_camel_case(self):
        config = ServerConfig.from_dict(
            {"language": "json", "strictRequests": True, "exitTimeout": 5, "unknown": 1}
        )
        assert config.language == "json"
        assert config.strict_requests is True
        assert config.exit_timeout == 5

    def test_merged_keeps_other_fields(self):
        base = ServerConfig(language="json", exit_timeout=3)
        merged = base.merged({"strictRequests": True})
        assert merged.language == "json"
        assert merged.exit_timeout == 3
        assert merged.strict_requests is True
        assert base.strict_requests is False

    def test_merged_validates(self):
        with pytest.raises(ValueError):
            ServerConfig().merged({"exitTimeout": -1})


class TestLoadServerConfig:
    """Tests for global and local config files."""

    def test_no_files(self, tmp_path):
        config = load_server_config(tmp_path, global_config=tmp_path / "missing.json")
        assert config == ServerConfig()

    def test_local_overrides_global(self, tmp_path):
        global_path = write_config(
            tmp_path / "home" / "lsp.json",
            '{"server": {"language": "json", "strictRequests": true}}',
        )
        workspace = tmp_path / "project"
        write_config(workspace / ".quill" / "lsp.json", '{"server": {"language": "python"}}')

        config = load_server_config(workspace, global_config=global_path)

        assert config.language == "python"
        assert config.strict_requests is True

    def test_malformed_file_ignored(self, tmp_path):
        global_path = write_config(tmp_path / "lsp.json", "{not json")
        config = load_server_config(None, global_config=global_path)
        assert config == ServerConfig()

    def test_non_object_server_section_ignored(self, tmp_path):
        global_path = write_config(tmp_path / "lsp.json", '{"server": [1, 2]}')
        config = load_server_config(None, global_config=global_path)
        assert config == ServerConfig()

    def test_invalid_values_ignored(self, tmp_path):
        global_path = write_config(tmp_path / "lsp.json", '{"server": {"language": "json"}}')
        workspace = tmp_path / "project"
        write_config(workspace / ".quill" / "lsp.json", '{"server": {"exitTimeout": 0}}')

        config = load_server_config(workspace, global_config=global_path)

        assert config.language == "json"
        assert config.exit_timeout == ServerConfig().exit_timeout

    def test_wrong_types_ignored(self, tmp_path):
        global_path = write_config(
            tmp_path / "lsp.json", '{"server": {"language": 5, "strictRequests": true}}'
        )

        config = load_server_config(None, global_config=global_path)

        assert config == ServerConfig()
