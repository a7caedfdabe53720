"""Cliente de la API de urlscan.io (v1).

Tres operaciones, una petición HTTP cada una:
- `submit_scan`        -> POST   scan
- `fetch_scan_result`  -> GET    result/{uuid}
- `search`             -> GET    search?q=...

Política de errores:
- Precondiciones (API key vacía, término de búsqueda vacío) lanzan una
  excepción tipada de `core.errors`.
- Cualquier otro fallo (status no-2xx, red, URL inválida, JSON inválido) se reporta como
  `Error: <mensaje>` en stderr y la operación devuelve `None`. El llamador no
  puede distinguir un cuerpo vacío de un fallo por el valor devuelto.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from rich.console import Console

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import ClientConfig, SearchOptions
from core.errors import ConfigurationError, HttpStatusError, UrlscanError, ValidationError

logger = logging.getLogger(__name__)

_stderr = Console(stderr=True, highlight=False, markup=False, emoji=False, soft_wrap=True)

# httpx.InvalidURL y httpx.StreamError no heredan de httpx.HTTPError.
_REQUEST_FAILURES = (
    httpx.HTTPError,
    httpx.InvalidURL,
    httpx.StreamError,
    UrlscanError,
    ValueError,
    TypeError,
)


@dataclass(frozen=True)
class ApiResult:
    """Resultado explícito de una petición: payload o marcador de ausencia."""

    data: Any | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _describe_error(error: object) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException):
        return str(error) or repr(error)
    return str(error)


def _build_scan_payload(url: str, options: Mapping[str, Any] | None) -> dict[str, Any]:
    # Las opciones se aplican después de `url`, igual que un spread de objeto.
    # Sin validación local: el servicio remoto decide qué acepta.
    payload: dict[str, Any] = {"url": url}
    if options:
        payload.update({k: v for k, v in options.items() if v is not None})
    return payload


def _build_search_params(
    term: str,
    options: SearchOptions | Mapping[str, Any] | None,
) -> list[tuple[str, Any]]:
    params: list[tuple[str, Any]] = [("q", term)]
    if options is None:
        return params
    items = options.model_dump() if isinstance(options, SearchOptions) else dict(options)
    for key, value in items.items():
        if value is not None:
            params.append((key, value))
    return params


class UrlscanClient:
    """Cliente asíncrono para urlscan.io.

    Por qué un transporte inyectable:
    - El ciclo de vida de la conexión pertenece al llamador cuando pasa su
      propio `httpx.AsyncClient`; en ese caso nunca lo cerramos.
    - Sin cliente inyectado, cada operación abre uno efímero con
      `build_async_client` (o reutiliza el de `async with UrlscanClient(...)`).
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        http_client: httpx.AsyncClient | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        if not isinstance(api_key, str) or not api_key:
            raise ConfigurationError("API key is required.")
        self._config = ClientConfig(api_key=api_key)
        self._http_client = http_client
        self._settings = settings
        self._owned_client: httpx.AsyncClient | None = None

    @property
    def api_key(self) -> str:
        return self._config.api_key

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def open(self) -> "UrlscanClient":
        """Abre un `httpx.AsyncClient` propio, reutilizado hasta `aclose()`."""

        if self._http_client is None and self._owned_client is None:
            self._owned_client = build_async_client(self._settings)
        return self

    async def aclose(self) -> None:
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None

    async def __aenter__(self) -> "UrlscanClient":
        return await self.open()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def submit_scan(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Envía `url` a escanear y devuelve el JSON de `ScanResponse` (o `None`)."""

        result = await self._request(
            "POST",
            "scan",
            json=_build_scan_payload(url, options),
            headers={"Content-Type": "application/json"},
        )
        return result.data

    async def fetch_scan_result(self, scan_id: str) -> dict[str, Any] | None:
        """Devuelve el JSON de `ResultResponse` para `scan_id` (o `None`)."""

        result = await self._request("GET", f"result/{scan_id}")
        return result.data

    async def search(
        self,
        term: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Busca scans previos. `term` usa la sintaxis de consulta de urlscan.io."""

        if not term:
            raise ValidationError("Search term is required.")

        result = await self._request("GET", "search", params=_build_search_params(term, options))
        return result.data

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        client = self._http_client or self._owned_client
        if client is not None:
            yield client
            return
        async with build_async_client(self._settings) as ephemeral:
            yield ephemeral

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, Any]] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResult:
        url = f"{self._config.base_url}{path}"
        request_headers = {"API-Key": self._config.api_key}
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s", method, url)
        try:
            async with self._session() as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=request_headers,
                )
                if not response.is_success:
                    raise HttpStatusError(response.status_code)
                return ApiResult(data=response.json())
        except _REQUEST_FAILURES as exc:
            return self._fail(exc)

    def _fail(self, error: object) -> ApiResult:
        message = self._handle_error(error)
        return ApiResult(error=message)

    def _handle_error(self, error: object) -> str:
        message = _describe_error(error)
        logger.debug("urlscan request failed (%s): %s", type(error).__name__, message)
        _stderr.print("Error:", message)
        return message
