"""Language server configuration loading."""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from quill.lib import oj

logger = logging.getLogger(__name__)

# Config file locations
LSP_CONFIG_FILENAME = "lsp.json"
GLOBAL_LSP_CONFIG = Path.home() / ".quill" / LSP_CONFIG_FILENAME
LOCAL_LSP_CONFIG_DIR = ".quill"


@dataclass
class ServerConfig:
    """Settings for one language server process."""

    language: str = "python"
    """Name of the validator documents are checked with."""

    strict_requests: bool = False
    """Answer unhandled requests with an error instead of dropping them."""

    exit_timeout: float = 30.0
    """Seconds to wait for the exit notification after shutdown."""

    diagnostic_source: str | None = "quill"
    """Value of the ``source`` field of published diagnostics."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not isinstance(self.language, str) or not self.language:
            raise ValueError("language must be a non-empty string")
        if not isinstance(self.strict_requests, bool):
            raise ValueError("strict_requests must be true or false")
        if isinstance(self.exit_timeout, bool) or not isinstance(self.exit_timeout, (int, float)):
            raise ValueError("exit_timeout must be a number")
        if self.exit_timeout <= 0:
            raise ValueError("exit_timeout must be positive")
        if self.diagnostic_source is not None and not isinstance(self.diagnostic_source, str):
            raise ValueError("diagnostic_source must be a string or null")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        """Create from config dict (camelCase keys, unknown keys ignored)."""
        return cls().merged(data)

    def merged(self, data: dict[str, Any]) -> "ServerConfig":
        """Return a copy with the keys present in ``data`` overriding."""
        known = {_camel(f.name): f.name for f in fields(self)}
        overrides = {known[key]: value for key, value in data.items() if key in known}
        return replace(self, **overrides)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = oj.loads(path.read_bytes())
    except (OSError, oj.JSONDecodeError) as e:
        logger.warning(f"ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"ignoring config {path}: top level is not an object")
        return {}
    server = data.get("server", {})
    if not isinstance(server, dict):
        logger.warning(f"ignoring config {path}: 'server' is not an object")
        return {}
    return server


def load_server_config(
    working_dir: Path | None = None,
    global_config: Path = GLOBAL_LSP_CONFIG,
) -> ServerConfig:
    """Load server settings from global and local config files.

    Global config (~/.quill/lsp.json) is loaded first.
    Local config ({working_dir}/.quill/lsp.json) overrides global.
    Settings live under a top-level "server" object.

    Returns:
        The merged ServerConfig; defaults when no file exists.
    """
    config = ServerConfig()
    paths = [global_config]
    if working_dir:
        paths.append(working_dir / LOCAL_LSP_CONFIG_DIR / LSP_CONFIG_FILENAME)

    for path in paths:
        if not path.exists():
            continue
        try:
            config = config.merged(_read_config_file(path))
        except (TypeError, ValueError) as e:
            logger.warning(f"ignoring invalid config {path}: {e}")
    return config
