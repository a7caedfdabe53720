"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Documenta las formas de la API de urlscan.io (Field) sin acoplar el Core a
  librerías de I/O.
- La CLI arma el cuerpo de `POST scan` con `ScanRequest`; el cliente lo envía
  sin validarlo. Las respuestas se devuelven tal cual y estos modelos solo
  sirven para presentarlas (CLI) o tiparlas.

Nota:
- Estos modelos describen *qué* viaja por la red, no *cómo* se envía.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

DEFAULT_BASE_URL = "https://urlscan.io/api/v1/"


class Visibility(str, Enum):
    """Visibilidad de un scan en urlscan.io."""

    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


class ClientConfig(BaseModel):
    """Estado inmutable de una instancia de `UrlscanClient`."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(
        ...,
        min_length=1,
        description="API key enviada en el header `API-Key`.",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="URL base fija de la API v1.",
    )


class ScanRequest(BaseModel):
    """Cuerpo JSON de `POST scan`.

    Sin restricciones locales: las claves desconocidas y los valores fuera de
    rango se envían tal cual y quien valida es el servicio remoto.
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    url: str = Field(
        ...,
        description="URL a escanear (no se valida localmente).",
    )
    visibility: Visibility | str | None = Field(
        default=None,
        description="'public', 'unlisted' o 'private'.",
    )
    tags: list[str] | None = Field(
        default=None,
        description="Tags asociados al scan.",
    )
    customagent: str | None = Field(
        default=None,
        description="User-Agent personalizado para el scan.",
    )
    referer: str | None = Field(
        default=None,
        description="Referer HTTP a incluir en el scan.",
    )
    overrideSafety: bool | str | None = Field(
        default=None,
        description="Flag de override de seguridad (bool o 'true'/'false').",
    )
    country: str | None = Field(
        default=None,
        description="Código ISO-3166-1 alpha-2 desde donde escanear.",
    )

    def to_payload(self) -> dict[str, Any]:
        """Diccionario listo para `json=`, sin campos vacíos."""

        return self.model_dump(mode="json", exclude_none=True)


class ScanResultOptions(BaseModel):
    model_config = ConfigDict(extra="allow")

    useragent: str | None = None


class ScanResponse(BaseModel):
    """Respuesta de `POST scan`."""

    model_config = ConfigDict(extra="allow")

    message: str | None = Field(default=None, description="Estado del envío.")
    uuid: str | None = Field(default=None, description="Identificador del scan.")
    result: str | None = Field(default=None, description="Informe legible en urlscan.io.")
    api: str | None = Field(default=None, description="Informe en formato API.")
    visibility: str | None = None
    options: ScanResultOptions | None = None
    url: str | None = None
    country: str | None = None


class ResultResponse(BaseModel):
    """Respuesta de `GET result/{uuid}`.

    Cada sección es un objeto opaco definido por urlscan.io (task, page, lists,
    data, meta, stats, verdicts).
    """

    model_config = ConfigDict(extra="allow")

    task: dict[str, Any] = Field(default_factory=dict)
    page: dict[str, Any] = Field(default_factory=dict)
    lists: dict[str, Any] = Field(default_factory=dict)
    data: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    stats: dict[str, Any] = Field(default_factory=dict)
    verdicts: dict[str, Any] = Field(default_factory=dict)


class SearchOptions(BaseModel):
    size: int | None = Field(default=None, ge=1, description="Número de resultados.")
    search_after: str | None = Field(
        default=None,
        description="Cursor opaco para continuar la búsqueda.",
    )


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    results: list[dict[str, Any]] = Field(default_factory=list)
    total: int | None = None
    took: int | None = None
    has_more: bool | None = None
