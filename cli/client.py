from __future__ import annotations

import time
from typing import Any, Dict, Iterator, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor monitor service."""

    def __init__(
        self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=30.0, transport=transport)

    def close(self) -> None:
        self._client.close()

    def get_snapshot(self) -> Dict[str, Any]:
        return self._request("GET", "/snapshot")

    def toggle(self) -> Dict[str, Any]:
        return self._request("POST", "/toggle")

    def set_run_state(self, state: str) -> Dict[str, Any]:
        return self._request("PUT", "/run-state", json={"state": state})

    def iter_snapshots(
        self, interval: float, count: int, timeout: float
    ) -> Iterator[Dict[str, Any]]:
        """Poll the service, yielding only snapshots newer than the last one seen.

        Stops early once the service reports a paused simulation, and exits
        with code 1 if ``timeout`` seconds pass before ``count`` snapshots.
        """
        deadline = time.monotonic() + timeout
        last_sequence: int | None = None
        seen = 0
        while time.monotonic() <= deadline:
            payload = self.get_snapshot()
            sequence = payload.get("sequence")
            if sequence != last_sequence:
                last_sequence = sequence
                seen += 1
                yield payload
                if seen >= count:
                    return
            if payload.get("run_state") == "paused":
                typer.secho(
                    f"Simulation is paused; stopped watching after {seen} snapshot(s).",
                    fg=typer.colors.RED,
                    err=True,
                )
                return
            time.sleep(interval)
        typer.secho(
            f"Timed out after {timeout}s waiting for new snapshots ({seen}/{count} shown).",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        payload = response.json()
        if not isinstance(payload, dict):
            raise typer.BadParameter(f"Unexpected response payload from {path}.")
        return payload

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
