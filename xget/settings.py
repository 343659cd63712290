from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from xget.utils.settings_utils import DockerSecretsSettingsSource


class GeneralConfig(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = ""


class UpstreamConfig(BaseSettings):
    USER_AGENT: str = "xget-registry-proxy"

    UPSTREAM_CONNECT_TIMEOUT: float = 30.0
    UPSTREAM_READ_TIMEOUT: float = 1800.0  # 30 minutes for large image downloads
    UPSTREAM_WRITE_TIMEOUT: float = 1800.0  # 30 minutes for large image uploads
    UPSTREAM_POOL_TIMEOUT: float = 10.0

    FALLBACK_UPSTREAM: str = ""
    """Origin used for host-routed requests whose host matches no route.
    Leave empty in production; useful when running against a single registry
    """

    TRANSPARENT_TOKEN_AUTH: bool = True


class Settings(
    GeneralConfig,
    UpstreamConfig,
    BaseSettings,
):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.prod", ".env.test"),
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Define the priority order for settings sources.

        Priority (highest to lowest):
        1. Docker secrets from files (reads *_FILE env vars)
        2. Environment variables
        3. .env files
        4. Default values
        """
        return (
            init_settings,
            DockerSecretsSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


settings = Settings()
