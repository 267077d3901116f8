import gzip
import json
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from gedata.constants import HEADER_COMPRESS
from gedata.models import EventRecord, SubEvent

SERVER_URL = "https://collect.example.com/event_center/api/v1/event/collect/"

# (status_code, json body or None) or an exception raised by the transport
Reply = Union[Exception, Tuple[int, Optional[Dict[str, Any]]]]


class FakeEndpoint:
    """
    Collection endpoint served through httpx.MockTransport.

    Replies are taken from the queue first and fall back to the default
    reply, which accepts everything.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.replies: List[Reply] = []
        self.default: Reply = (200, {"code": 0})

    def queue(self, *replies: Reply) -> None:
        self.replies.extend(replies)

    def always(self, reply: Reply) -> None:
        self.default = reply

    def unreachable(self) -> None:
        self.default = httpx.ConnectError("Connection refused")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        status_code, body = reply
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    def payloads(self) -> List[Dict[str, Any]]:
        decoded = []
        for request in self.requests:
            content = request.content
            if request.headers.get(HEADER_COMPRESS) == "gzip":
                content = gzip.decompress(content)
            decoded.append(json.loads(content))
        return decoded

    def delivered_events(self) -> List[str]:
        return [
            item["event"]
            for payload in self.payloads()
            for item in payload["event_list"]
        ]


@pytest.fixture
def fake_endpoint() -> FakeEndpoint:
    return FakeEndpoint()


@pytest.fixture
def http_client(fake_endpoint: FakeEndpoint):
    client = httpx.Client(transport=httpx.MockTransport(fake_endpoint))
    yield client
    client.close()


@pytest.fixture
def server_url() -> str:
    return SERVER_URL


@pytest.fixture
def make_record():
    """
    Factory fixture building a one-event track record.
    """

    def _make(client_id: str = "c1", name: str = "event", **properties) -> EventRecord:
        item = SubEvent(
            kind="track",
            name=name,
            time=1765866851234,
            properties=properties,
        )
        return EventRecord(client_id=client_id, event_list=[item])

    return _make
