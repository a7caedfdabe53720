"""Exportación JSON de respuestas de la API.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines (jq, SIEM, etc.).
- Guarda la respuesta tal cual la devuelve urlscan.io, sin re-modelarla.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def export_json(*, payload: Any, output_path: Path) -> Path:
    """Exporta `payload` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
