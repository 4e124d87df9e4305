"""Tests for the HTTP client used by the CLI, against an in-memory transport."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
import typer

from cli.client import ApiClient
from cli.config import CLIConfig


def _snapshot(sequence: int, run_state: str = "running") -> Dict[str, Any]:
    return {
        "readings": [],
        "current_value": None,
        "min_value": None,
        "max_value": None,
        "average_value": None,
        "run_state": run_state,
        "sequence": sequence,
    }


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> ApiClient:
    return ApiClient(CLIConfig(base_url="http://monitor.test"), transport=httpx.MockTransport(handler))


def test_iter_snapshots_yields_only_new_sequences() -> None:
    sequences = iter([1, 1, 2, 2, 2, 3])
    requests: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        return httpx.Response(200, json=_snapshot(next(sequences)))

    client = _client(handler)

    payloads = list(client.iter_snapshots(interval=0.0, count=3, timeout=5.0))

    assert [payload["sequence"] for payload in payloads] == [1, 2, 3]
    assert requests == ["/snapshot"] * 6


def test_iter_snapshots_stops_when_service_is_paused(capsys) -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_snapshot(4, run_state="paused"))

    client = _client(handler)

    payloads = list(client.iter_snapshots(interval=0.01, count=2, timeout=5.0))

    assert [payload["sequence"] for payload in payloads] == [4]
    assert len(requests) == 1
    assert "paused" in capsys.readouterr().err


def test_iter_snapshots_times_out_when_nothing_changes(capsys) -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_snapshot(7))

    client = _client(handler)
    payloads: List[Dict[str, Any]] = []

    with pytest.raises(typer.Exit) as excinfo:
        for payload in client.iter_snapshots(interval=0.01, count=2, timeout=0.1):
            payloads.append(payload)

    assert excinfo.value.exit_code == 1
    assert len(payloads) == 1
    assert requests
    assert "Timed out" in capsys.readouterr().err


def test_set_run_state_sends_json_body() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_snapshot(2, run_state="paused"))

    client = _client(handler)

    payload = client.set_run_state("paused")

    assert payload["run_state"] == "paused"
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/run-state"
    assert json.loads(seen[0].content) == {"state": "paused"}


def test_http_error_exits_with_detail(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "bad state"})

    client = _client(handler)

    with pytest.raises(typer.Exit) as excinfo:
        client.set_run_state("sleeping")

    assert excinfo.value.exit_code == 1
    assert "bad state" in capsys.readouterr().err
