import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "localhost:3000/sensor/config"
DEFAULT_STATUS_ENDPOINT = "localhost:3000/sensor/status"
DEFAULT_TIMEOUT = 30
DEFAULT_CONFIG_PATH = Path("~/.sensorcfg.toml")

# Wire key for the squelch threshold, spelled as the sensor server expects it.
SQUELCH_KEY = "squelti"


class ConfigError(Exception):
    """Raised when the TOML config file cannot be read or has bad values."""


# ========== Config & Models ==========
@dataclass
class Config:
    endpoint: str = DEFAULT_ENDPOINT
    status_endpoint: str = DEFAULT_STATUS_ENDPOINT
    timeout: int = DEFAULT_TIMEOUT
    verify_tls: bool = True
    debug: bool = False

    @property
    def request_timeout(self) -> Optional[int]:
        # 0 means wait forever
        return self.timeout or None

    @classmethod
    def init_from_args(cls, args) -> "Config":
        """
        Build a config from parsed CLI options.

        Options left unset on the command line fall back to the TOML file,
        then to the built-in defaults.
        """
        explicit = getattr(args, "config", None) is not None
        path = Path(args.config) if explicit else DEFAULT_CONFIG_PATH
        file_values = load_config_file(path, required=explicit)

        cfg = cls()
        for key in ("endpoint", "status_endpoint", "timeout"):
            if key in file_values:
                setattr(cfg, key, file_values[key])
        if "insecure" in file_values:
            cfg.verify_tls = not file_values["insecure"]

        if getattr(args, "timeout", None) is not None:
            cfg.timeout = args.timeout
        if getattr(args, "insecure", False):
            cfg.verify_tls = False
        cfg.debug = bool(getattr(args, "debug", False))
        return cfg


class FileSettings(BaseModel):
    """Keys accepted in the TOML config file."""

    model_config = ConfigDict(extra="ignore")

    endpoint: Optional[StrictStr] = None
    status_endpoint: Optional[StrictStr] = None
    timeout: Optional[Annotated[StrictInt, Field(ge=0)]] = None
    insecure: Optional[StrictBool] = None


def load_config_file(path: Path, required: bool = False) -> Dict[str, Any]:
    path = path.expanduser()
    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return {}

    try:
        with path.open("rb") as fp:
            data = tomllib.load(fp)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    for key in data.keys() - FileSettings.model_fields.keys():
        logger.warning("Ignoring unknown key %r in %s", key, path)
    try:
        settings = FileSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e

    values = settings.model_dump(exclude_unset=True)
    logger.debug("Loaded config file %s: %s", path, values)
    return values


class SensorConfig(BaseModel):
    # Python code builds it by field name, the wire only knows the alias.
    model_config = ConfigDict(extra="forbid", validate_by_name=True, validate_by_alias=True)

    sensor_type: StrictStr = "radio"
    frequency: StrictInt = 2100000
    power: StrictInt = 300
    squelch: StrictInt = Field(200, alias=SQUELCH_KEY)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SensorConfig":
        return cls.model_validate(data, by_alias=True, by_name=False)

    @classmethod
    def from_json(cls, text: str) -> "SensorConfig":
        return cls.model_validate_json(text, by_alias=True, by_name=False)


@dataclass
class SubmitResult:
    method: str
    url: str
    status_code: int
    text: str
    content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
