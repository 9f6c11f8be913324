# config.py

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

DEFAULT_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "openai/gpt-3.5-turbo"
PLACEHOLDER_API_KEY = "your-api-key-here"
CONFIG_SECTION = "openrouter"


@dataclass
class ClientConfig:
    """Configuration for the chat client."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout: float = 30
    max_tokens: int = 512
    endpoint: str = DEFAULT_ENDPOINT
    referer: str = "github.com/routerline/routerline"
    title: str = "Routerline Terminal Client"
    system_prompt: Optional[str] = None

    def __post_init__(self):
        """Normalize configuration values."""
        self.api_key = self._as_str('api_key', self.api_key).strip()
        self.model = self._as_str('model', self.model)
        self.endpoint = self._as_str('endpoint', self.endpoint).rstrip('/')
        self.referer = self._as_str('referer', self.referer)
        self.title = self._as_str('title', self.title)
        if self.system_prompt is not None:
            self.system_prompt = self._as_str('system_prompt', self.system_prompt)
        self.timeout = self._as_float('timeout', self.timeout)
        self.max_tokens = self._as_int('max_tokens', self.max_tokens)

    @staticmethod
    def _as_str(name: str, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            raise ConfigError(f"{name} must be a string, got {type(value).__name__}")
        return str(value)

    @staticmethod
    def _as_float(name: str, value: Any) -> float:
        if isinstance(value, bool):
            raise ConfigError(f"{name} must be a number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be a number, got {value!r}") from None

    @staticmethod
    def _as_int(name: str, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be an integer, got {value!r}") from None

    def validate(self) -> "ClientConfig":
        """Raise ConfigError if the configuration cannot be used for requests."""
        if not self.api_key or self.api_key == PLACEHOLDER_API_KEY:
            raise ConfigError("API key is not configured. Please update config.yaml")
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        if self.max_tokens < 0:
            raise ConfigError(f"max_tokens must not be negative, got {self.max_tokens}")
        return self

    def masked_api_key(self) -> str:
        """Return the API key with everything but its ends hidden."""
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"

    def merged(self, **overrides) -> "ClientConfig":
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ClientConfig(**values)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ClientConfig":
        """Build a config from the `openrouter` section of a parsed file."""
        section = data.get(CONFIG_SECTION, data) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known and v is not None})

    @classmethod
    def from_args(cls, args, base: Optional["ClientConfig"] = None) -> "ClientConfig":
        """Overlay parsed command line arguments on a base config."""
        base = base or cls()
        return base.merged(
            model=getattr(args, 'model', None),
            endpoint=getattr(args, 'endpoint', None),
            max_tokens=getattr(args, 'max_tokens', None),
            timeout=getattr(args, 'timeout', None),
            system_prompt=getattr(args, 'system', None),
        )


def config_search_paths(explicit: Optional[str] = None) -> List[Path]:
    """Return candidate config file locations in priority order."""
    candidates = []
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path.home() / ".openrouter" / "config.yaml",
    ])
    return candidates


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Return the first existing config file, or None."""
    for path in config_search_paths(explicit):
        if path.exists():
            return path
    return None


def load_config(path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> ClientConfig:
    """
    Load configuration from a YAML file and the environment.

    Args:
        path: Config file to read. If None, only defaults and environment apply.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        ClientConfig (not yet validated)

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    environ = os.environ if environ is None else environ
    config = ClientConfig()

    if path is not None:
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"failed to read config: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} is not a mapping")
        config = ClientConfig.from_mapping(data)

    return config.merged(
        api_key=environ.get("OPENROUTER_API_KEY"),
        model=environ.get("OPENROUTER_MODEL"),
    )


def write_default_config(path: Path) -> Path:
    """Write a template config file containing the placeholder API key."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    defaults = ClientConfig()
    template = {
        CONFIG_SECTION: {
            "api_key": PLACEHOLDER_API_KEY,
            "model": defaults.model,
            "timeout": defaults.timeout,
            "max_tokens": defaults.max_tokens,
        }
    }
    path.write_text(yaml.safe_dump(template, sort_keys=False), encoding="utf-8")
    return path
