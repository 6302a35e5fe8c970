"""Test helpers and shared constants."""

import json

import httpx

SERVER_URL = "http://localhost:1337/parse"
APP_ID = "test-app"
MASTER_KEY = "test-master-key"
REST_API_KEY = "test-rest-key"


def json_response(status_code: int, payload) -> httpx.Response:
    """Build a JSON response with the given status."""
    return httpx.Response(status_code, json=payload)


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays queued responses.

    Queue either httpx.Response objects or exceptions (raised instead of
    answering). With an empty queue every request gets 200 {}.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list = []

    def queue(self, *responses) -> "RecordingHandler":
        self._responses.extend(responses)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return json_response(200, {})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


def params_of(request: httpx.Request) -> list[tuple[str, str]]:
    """Query parameters of a recorded request, in order."""
    return request.url.params.multi_items()


def body_of(request: httpx.Request):
    """Decoded JSON body of a recorded request."""
    return json.loads(request.content)
