from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the metrics service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def evaluate(self, path: Path, stage: Optional[str] = None) -> Dict[str, Any]:
        try:
            payload = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(f"Could not read JSON payload from {path}: {exc}") from exc
        if not isinstance(payload, dict) or "current" not in payload:
            raise typer.BadParameter("Payload must be a JSON object with a 'current' snapshot.")
        if stage is not None:
            payload["stage"] = stage
        return self._request("POST", "/metrics", json=payload)

    def stage(self, gdd: float, avg_daily: Optional[float] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"gdd": gdd}
        if avg_daily is not None:
            params["avg_daily"] = avg_daily
        return self._request("GET", "/gdd/stage", params=params)

    def weather(self, moisture: Optional[float] = None) -> Dict[str, Any]:
        params = {"moisture": moisture} if moisture is not None else {}
        return self._request("GET", "/weather/recommendation", params=params)

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
