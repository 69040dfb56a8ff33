"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

DEFAULT_PROFILE_URL = "https://api2.cursor.sh/auth/full_stripe_profile"


class IdeConfig(BaseModel):
    """Locations of the target IDE's identity stores. Empty means platform default."""
    product_dir: str = "Cursor"  # Directory name under the platform's app-data root
    storage_path: str = ""  # JSON key-value store (storage.json)
    sqlite_path: str = ""  # Embedded table store (state.vscdb)
    machine_id_path: str = ""  # Plain machine-id file
    wipe_targets: list[str] = Field(default_factory=list)  # Overrides the full-wipe location list


class AccountsConfig(BaseModel):
    """Saved-account list configuration."""
    file: str = ""  # Defaults to <Documents>/CursorFreeVIP/accounts.json
    sign_up_type: str = "Auth_0"  # Marker written on activate / auth update


class LoggingConfig(BaseModel):
    """Loguru sink configuration used by the CLI."""
    level: str = "INFO"
    file: str = ""  # Optional rotating log file


class SubscriptionConfig(BaseModel):
    """Remote account profile lookup."""
    profile_url: str = DEFAULT_PROFILE_URL
    timeout_seconds: float = 10.0


class Config(BaseSettings):
    """Root configuration for idekit."""
    ide: IdeConfig = Field(default_factory=IdeConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    subscription: SubscriptionConfig = Field(default_factory=SubscriptionConfig)

    model_config = ConfigDict(
        env_prefix="IDEKIT_",
        env_nested_delimiter="__"
    )
