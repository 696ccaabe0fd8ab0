import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_ENV_VAR = "LINKSHELF_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.linkshelf/config.yaml")


class ClientSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    api_base_url: str = "https://app.link2letter.com"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    page_size: int = Field(default=5, ge=1)
    fetch_page_size: int = Field(default=500, ge=1)
    data_dir: Path = Path("~/.linkshelf")
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value


def default_config_path() -> Path:
    return Path(os.environ.get(CONFIG_ENV_VAR, str(DEFAULT_CONFIG_PATH))).expanduser()


def load_settings(path: Path | None = None) -> ClientSettings:
    """
    Load and validate the client settings file.

    With no explicit path the default location is used, and a missing
    default file just means "use defaults".
    Raises FileNotFoundError if an explicit file is missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    explicit = path is not None
    path = (path or default_config_path()).expanduser()

    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found at: {path}")
        return ClientSettings()

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping")

    try:
        return ClientSettings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Config validation failed:\n{e}") from e
