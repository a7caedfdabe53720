"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El cliente de la API no lee el entorno: la CLI y los tests live sí, y le
  pasan la API key explícitamente.
"""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import set_key
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "urlscan-client"


def get_user_env_file() -> Path:
    """`.env` por usuario, en el directorio de configuración de la plataforma.

    Se lee después del `.env` del proyecto, así la CLI instalada funciona sin
    editar ficheros en el repo.
    """

    return Path(typer.get_app_dir(APP_NAME)) / ".env"


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves existentes se conservan; los valores `None` se ignoran.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)

    for key, value in values.items():
        if value is None:
            continue
        set_key(env_path, key, value, quote_mode="never")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el cliente.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="URLSCAN_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("URLSCAN_API_KEY", "URLSCAN_KEY"),
        description="API key de urlscan.io (header `API-Key`).",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="urlscan-client/0.1",
        min_length=1,
        description="User-Agent para las peticiones a la API.",
    )
