import os
from pathlib import Path
from typing import Any

import structlog
from pydantic_settings import (
    PydanticBaseSettingsSource,
)

logger = structlog.stdlib.get_logger(__name__)


class DockerSecretsSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source that reads values from mounted secret files.

    For a setting NAME, the environment variable NAME_FILE may hold a path;
    the stripped file contents become the value.

    Example:
        SENTRY_DSN_FILE=/run/secrets/xget_sentry_dsn
    """

    def get_field_value(
        self, field_name: str, field_info: Any
    ) -> tuple[Any, str, bool]:
        secret_path = os.getenv(f"{field_name}_FILE")
        if not secret_path:
            return None, field_name, False

        path = Path(secret_path)
        if not path.is_file():
            logger.warning("Secret file not found", setting=field_name, path=secret_path)
            return None, field_name, False

        try:
            return path.read_text().strip(), field_name, False
        except OSError as e:
            logger.warning(
                "Could not read secret file",
                setting=field_name,
                path=secret_path,
                error=str(e),
            )
            return None, field_name, False

    def prepare_field_value(
        self, field_name: str, field: Any, value: Any, value_is_complex: bool
    ) -> Any:
        return value

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field_name, field_info)
            if value is not None:
                values[key] = value
        return values
