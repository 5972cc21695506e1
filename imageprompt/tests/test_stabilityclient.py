"""Tests for :mod:`imageprompt.aiservices.stabilityimagegenerationclient`."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from imageprompt.aiservices.stabilityimagegenerationclient import StabilityImageGenerationClient
from imageprompt.config import Settings


class _Recorder:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _make_client(response: httpx.Response) -> tuple[StabilityImageGenerationClient, _Recorder]:
    recorder = _Recorder(response)
    settings = Settings(stability_api_key="sk-abc")
    http_client = httpx.Client(transport=httpx.MockTransport(recorder))
    return StabilityImageGenerationClient(settings, http_client=http_client), recorder


def test_generate_sends_fixed_parameters_with_bearer_key() -> None:
    client, recorder = _make_client(
        httpx.Response(200, json={"artifacts": [{"base64": "QUJD", "finishReason": "SUCCESS", "seed": 1}]})
    )

    images = client.generate("a red cube")

    assert images == ["QUJD"]
    (request,) = recorder.requests
    assert request.method == "POST"
    assert str(request.url) == (
        "https://api.stability.ai/v1/generation/stable-diffusion-xl-1024-v1-0/text-to-image"
    )
    assert request.headers["authorization"] == "Bearer sk-abc"
    assert request.headers["accept"] == "application/json"
    assert json.loads(request.content) == {
        "text_prompts": [{"text": "a red cube"}],
        "cfg_scale": 7,
        "width": 1024,
        "height": 1024,
        "steps": 30,
        "samples": 1,
    }


def test_generate_returns_every_artifact_in_order() -> None:
    client, _ = _make_client(
        httpx.Response(200, json={"artifacts": [{"base64": "AAA"}, {"base64": "BBB"}]})
    )

    assert client.generate("two") == ["AAA", "BBB"]


def test_generate_raises_on_error_status(caplog) -> None:
    client, _ = _make_client(httpx.Response(401, json={"message": "Missing API key"}))

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        client.generate("a red cube")

    assert excinfo.value.response.json() == {"message": "Missing API key"}
    assert not [record for record in caplog.records if record.levelno >= logging.ERROR]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"artifacts": None},
        {"artifacts": [{"seed": 3}]},
        {"artifacts": [{"base64": None}]},
        {"artifacts": [{"base64": ""}]},
        {"artifacts": [{"base64": "QUJD"}, {"base64": 42}]},
        {"artifacts": ["QUJD"]},
        ["not", "a", "mapping"],
    ],
)
def test_generate_rejects_payloads_without_artifacts(payload) -> None:
    client, _ = _make_client(httpx.Response(200, json=payload))

    with pytest.raises(ValueError):
        client.generate("a red cube")


def test_engine_and_host_come_from_settings() -> None:
    settings = Settings(
        stability_api_host="https://stability.example/",
        stability_engine_id="sdxl-beta",
    )

    assert settings.stability_url == "https://stability.example/v1/generation/sdxl-beta/text-to-image"
