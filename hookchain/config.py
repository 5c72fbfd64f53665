"""Engine configuration loaded from the environment or a .env file."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Default settings for ``Hooks`` instances.

    Priority (highest to lowest):
    1. Constructor arguments on ``Hooks``
    2. Environment variables
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOKCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Infer calling conventions from hook signatures when none is declared
    ARITY_INFERENCE: bool = True

    # Post-hook arguments with this attribute set to True are internal
    IGNORE_ATTRIBUTE: str = "_hookchain_ignore"

    @field_validator("IGNORE_ATTRIBUTE")
    @classmethod
    def validate_identifier(cls, v: str, info) -> str:
        """Ensure the ignore marker is a usable attribute name."""
        if not v.isidentifier():
            raise ValueError(f"{info.field_name} must be a valid identifier, got {v!r}")
        return v


config = Config()
