from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsFlowBaseSettings(BaseSettings):
    """Base class for the library's own configuration.

    Values are read from the process environment and, when present, from a
    ``.env`` file in the working directory. Nested models use ``__`` as the
    environment variable delimiter.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )
