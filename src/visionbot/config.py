"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from visionbot.utils.errors import ConfigurationError
from visionbot.vision.schemas import SafeSearchPolicy

# Find the project root (where .env and api.key live)
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"


class IrcSettings(BaseModel):
    """Chat server connection details for one deployment."""

    model_config = ConfigDict(frozen=True)

    server: str
    nick: str = "VisionBot"
    channels: tuple[str, ...] = ("#visionbot",)
    port: int = 6667


class Deployment(BaseModel):
    """A named deployment: where the bot connects and how strict it is."""

    model_config = ConfigDict(frozen=True)

    irc: IrcSettings
    safe_search_tolerance: SafeSearchPolicy = Field(default_factory=SafeSearchPolicy)


_DEFAULT_TOLERANCE = {
    "adult": "POSSIBLE",
    "spoof": "",
    "medical": "POSSIBLE",
    "violence": "VERY_LIKELY",
}

DEPLOYMENTS: dict[str, Deployment] = {
    "development": Deployment(
        irc=IrcSettings(server="irc.elisa.fi"),
        safe_search_tolerance=SafeSearchPolicy(**_DEFAULT_TOLERANCE),
    ),
    "prod_ircnet": Deployment(
        irc=IrcSettings(server="irc.inet.fi"),
        safe_search_tolerance=SafeSearchPolicy(**_DEFAULT_TOLERANCE),
    ),
    "prod_ihmenet": Deployment(
        irc=IrcSettings(server="irc.ihme.org", channels=("#ihme",)),
        safe_search_tolerance=SafeSearchPolicy(**_DEFAULT_TOLERANCE),
    ),
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_env: str = Field(
        default="development", description="Deployment profile to run (a DEPLOYMENTS key)"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_json: bool = Field(default=False, description="Emit logs as JSON")

    # Vision API Configuration
    vision_api_url: str = Field(
        default="https://vision.googleapis.com/v1/images:annotate",
        description="Vision API annotate endpoint",
    )
    vision_api_key_file: Path = Field(
        default=PROJECT_ROOT / "api.key",
        description="File holding the Vision API key",
    )

    # HTTP / Image Resolution
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    probe_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Budget for sizing one candidate image"
    )
    min_image_area: int = Field(
        default=90000, ge=0, description="Minimum candidate area (300x300)"
    )
    max_image_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    max_page_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    user_agent: str = Field(default="visionbot (+https://github.com/visionbot)")


class BotConfig(BaseModel):
    """Everything the bot needs at runtime, built once at startup."""

    model_config = ConfigDict(frozen=True)

    settings: Settings
    deployment: Deployment
    api_key: SecretStr

    @property
    def safe_search_policy(self) -> SafeSearchPolicy:
        return self.deployment.safe_search_tolerance


def load_api_key(path: Path) -> SecretStr:
    """Read the Vision API key from disk.

    Raises:
        ConfigurationError: If the file is unreadable or empty.
    """
    try:
        key = Path(path).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read Vision API key file: {e.strerror or e}",
            details={"path": str(path)},
        ) from e

    if not key:
        raise ConfigurationError(
            "Vision API key file is empty",
            details={"path": str(path)},
        )

    return SecretStr(key)


def load_config(settings: Settings | None = None) -> BotConfig:
    """Build the immutable runtime configuration.

    Raises:
        ConfigurationError: If the deployment is unknown or the key is missing.
    """
    if settings is None:
        settings = load_settings()

    deployment = DEPLOYMENTS.get(settings.app_env)
    if deployment is None:
        raise ConfigurationError(
            f"Unknown deployment: {settings.app_env}",
            details={"app_env": settings.app_env},
        )

    return BotConfig(
        settings=settings,
        deployment=deployment,
        api_key=load_api_key(settings.vision_api_key_file),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_settings() -> Settings:
    """Get settings, reporting invalid values as a configuration error.

    Raises:
        ConfigurationError: If an environment value fails validation.
    """
    try:
        return get_settings()
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid settings: {', '.join(fields)}",
            details={"fields": fields},
        ) from e
