"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from macro_tracker.adapters.fatsecret_client import HttpxFatSecretClient
from macro_tracker.adapters.google_image_search_client import (
    HttpxGoogleImageSearchClient,
)
from macro_tracker.adapters.httpx_image_prefetcher import HttpxImagePrefetcher
from macro_tracker.adapters.openai_image_selector import OpenAIImageSelector
from macro_tracker.services.signing import RequestSigner, sign_request

FATSECRET_URL = "https://platform.fatsecret.com/rest/server.api"


class _FakeCompletions:
    def __init__(self, content: str | None, choices: bool = True) -> None:
        self.content = content
        self.choices = choices
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        message = type("Message", (), {"content": self.content})()
        choice = type("Choice", (), {"message": message})()
        return type("Completion", (), {"choices": [choice] if self.choices else []})()


class _FakeOpenAI:
    def __init__(self, content: str | None = "BEST_IMAGE_URL: https://a.test/x.jpg"):
        self.completions = _FakeCompletions(content)
        self.chat = type("Chat", (), {"completions": self.completions})()


def test_fatsecret_client_sends_signed_search() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        assert request.method == "GET"
        return httpx.Response(200, json={"foods": {"food": []}})

    client = HttpxFatSecretClient(
        base_url=FATSECRET_URL,
        signer=RequestSigner(
            "demo-key",
            "demo-secret",
            clock=lambda: 1700000000,
            nonce_factory=lambda: "abc123",
        ),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    result = asyncio.run(client.search_foods("mac & cheese", max_results=10))

    assert result == {"foods": {"food": []}}
    assert seen["method"] == "foods.search"
    assert seen["search_expression"] == "mac & cheese"
    assert seen["format"] == "json"
    assert seen["max_results"] == "10"
    assert seen["page_number"] == "0"
    assert seen["oauth_consumer_key"] == "demo-key"
    assert seen["oauth_signature_method"] == "HMAC-SHA1"
    request_params = {
        key: value for key, value in seen.items() if not key.startswith("oauth_")
    }
    expected = sign_request(
        "GET",
        FATSECRET_URL,
        request_params,
        consumer_key="demo-key",
        consumer_secret="demo-secret",
        nonce="abc123",
        timestamp=1700000000,
    )
    assert seen["oauth_signature"] == expected["oauth_signature"]


def test_fatsecret_client_raises_on_http_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={}))
    client = HttpxFatSecretClient(
        base_url=FATSECRET_URL,
        signer=RequestSigner("demo-key", "demo-secret"),
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("banana"))


def test_google_image_search_maps_items() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        assert params["key"] == "google-key"
        assert params["cx"] == "engine-id"
        assert params["q"] == "Banana food photo"
        assert params["searchType"] == "image"
        assert params["num"] == "3"
        assert params["safe"] == "active"
        return httpx.Response(
            200,
            json={
                "items": [
                    {
                        "link": "https://img.test/a.jpg",
                        "title": "Banana",
                        "snippet": "ripe",
                        "image": {"contextLink": "https://site.test/banana"},
                    },
                    {"title": "no link"},
                ]
            },
        )

    client = HttpxGoogleImageSearchClient(
        api_key="google-key",
        engine_id="engine-id",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    candidates = asyncio.run(client.search_images("Banana food photo", num=3))

    assert len(candidates) == 1
    assert candidates[0].url == "https://img.test/a.jpg"
    assert candidates[0].context_link == "https://site.test/banana"


def test_google_image_search_without_items() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    client = HttpxGoogleImageSearchClient(
        api_key="google-key",
        engine_id="engine-id",
        http_client=httpx.AsyncClient(transport=transport),
    )

    assert asyncio.run(client.search_images("nothing")) == []


def test_image_prefetcher_checks_content_type() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(".jpg"):
            return httpx.Response(200, headers={"content-type": "image/jpeg"})
        return httpx.Response(200, headers={"content-type": "text/html"})

    prefetcher = HttpxImagePrefetcher(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    assert asyncio.run(prefetcher.prefetch("https://img.test/a.jpg")) is True
    assert asyncio.run(prefetcher.prefetch("https://img.test/page")) is False
    assert asyncio.run(prefetcher.prefetch("")) is False


def test_openai_image_selector_sends_both_messages() -> None:
    fake = _FakeOpenAI()
    selector = OpenAIImageSelector(client=fake, model="gpt-4-turbo")

    reply = asyncio.run(selector.complete("system", "pick one"))

    assert reply == "BEST_IMAGE_URL: https://a.test/x.jpg"
    payload = fake.completions.last_payload
    assert payload is not None
    assert payload["model"] == "gpt-4-turbo"
    assert payload["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "pick one"},
    ]


def test_openai_image_selector_handles_empty_reply() -> None:
    fake = _FakeOpenAI(content=None)
    selector = OpenAIImageSelector(client=fake, model="gpt-4-turbo")

    assert asyncio.run(selector.complete("system", "pick one")) == ""

    fake.completions.choices = False
    with pytest.raises(RuntimeError):
        asyncio.run(selector.complete("system", "pick one"))
