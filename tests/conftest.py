import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

API = "https://api.test/v1"
TOKEN_URL = "https://accounts.test/api/token"


class FakeSpotify:
    """
    In-memory stand-in for the Spotify token endpoint and Web API.

    `resources` maps a request path (e.g. "/v1/tracks/abc") to either a JSON
    payload or a (status, payload) tuple. Token responses are consumed from
    `token_responses` in order; the last one repeats.
    """

    def __init__(self):
        self.resources = {}
        self.token_responses = [(200, {"access_token": "tok-1", "expires_in": 3600})]
        self.token_calls = 0
        self.requests: list[httpx.Request] = []

    def set_token_responses(self, *responses):
        self.token_responses = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == TOKEN_URL:
            idx = min(self.token_calls, len(self.token_responses) - 1)
            self.token_calls += 1
            status, body = self.token_responses[idx]
            if isinstance(body, Exception):
                raise body
            return httpx.Response(status, json=body)

        entry = self.resources.get(request.url.path)
        if entry is None:
            return httpx.Response(404, json={"error": {"status": 404}})
        status, body = entry if isinstance(entry, tuple) else (200, entry)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, content=json.dumps(body).encode())

    def client_factory(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def api_requests(self):
        return [r for r in self.requests if str(r.url) != TOKEN_URL]


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


async def block_forever(_delay):
    """Sleep replacement that parks the renewal loop after its first renewal."""
    await asyncio.Event().wait()


def make_credentials(fake, **kwargs):
    from spotibridge.core.credentials import CredentialManager

    kwargs.setdefault("sleep", block_forever)
    return CredentialManager(
        "client-id",
        "client-secret",
        token_url=TOKEN_URL,
        client_factory=fake.client_factory,
        **kwargs,
    )


def track_json(track_id, name, artist="Artist", duration=1000, images=None):
    data = {
        "id": track_id,
        "name": name,
        "artists": [{"name": artist}] if artist else [],
        "duration_ms": duration,
    }
    if images is not None:
        data["album"] = {"images": [{"url": url} for url in images]}
    return data
