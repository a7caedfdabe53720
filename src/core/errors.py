"""Errores tipados del cliente.

Dos familias:
- Precondiciones (`ConfigurationError`, `ValidationError`): se lanzan de forma
  síncrona y llegan al llamador.
- Fallos de transporte (`HttpStatusError` y errores de httpx): el cliente los
  captura, los reporta por stderr y la operación devuelve `None`.
"""

from __future__ import annotations


class UrlscanError(Exception):
    """Base de todos los errores propios del cliente."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(UrlscanError):
    """Configuración inválida (p.ej. API key vacía)."""


class ValidationError(UrlscanError, ValueError):
    """Argumento inválido detectado antes de hacer I/O."""


class HttpStatusError(UrlscanError):
    """Respuesta HTTP fuera del rango 2xx."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error! status: {status_code}")
        self.status_code = status_code
