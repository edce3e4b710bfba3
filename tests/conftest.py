"""Shared fixtures: a scripted HTTP session and a resolution session around it."""

from typing import Dict, List, Optional, Sequence, Union
from unittest.mock import MagicMock

import pytest

from common.http_client import HttpTransport
from registry.maven.repository import MavenRepository
from registry.maven.session import ResolutionSession

REPO_A = MavenRepository("repo-a", "https://a.example.com/maven2", known_to_exist=True)
REPO_B = MavenRepository("repo-b", "https://b.example.com/maven2", known_to_exist=True)


def make_response(status: int = 200, body: Union[str, bytes] = b"") -> MagicMock:
    """Build a response double carrying ``body``."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    res = MagicMock()
    res.status_code = status
    res.content = body
    res.text = body.decode("utf-8")
    res.iter_content.return_value = [body]
    return res


def metadata_xml(versions: Sequence[str] = (), timestamp: Optional[str] = None, build_number: Optional[str] = None) -> str:
    snapshot = ""
    if timestamp is not None:
        snapshot = f"<snapshot><timestamp>{timestamp}</timestamp><buildNumber>{build_number}</buildNumber></snapshot>"
    listed = "".join(f"<version>{v}</version>" for v in versions)
    return (
        "<metadata><groupId>org.example</groupId><artifactId>lib</artifactId>"
        f"<versioning><versions>{listed}</versions>{snapshot}</versioning></metadata>"
    )


def pom_xml(group: str, artifact: str, version: str, extra: str = "") -> str:
    return (
        '<project xmlns="http://maven.apache.org/POM/4.0.0">'
        f"<modelVersion>4.0.0</modelVersion><groupId>{group}</groupId>"
        f"<artifactId>{artifact}</artifactId><version>{version}</version>{extra}</project>"
    )


class ScriptedHttp:
    """Answers GET/HEAD by URL from a routing table and records every call.

    A route holds a response double or an exception to raise. Unknown GET
    URLs answer 404; unknown HEAD URLs answer 200.
    """

    def __init__(self):
        self.routes: Dict[str, object] = {}
        self.head_routes: Dict[str, object] = {}
        self.calls: List[str] = []
        self.head_calls: List[str] = []
        self.kwargs: List[dict] = []

    def add(self, url: str, status: int = 200, body: Union[str, bytes] = b"") -> None:
        self.routes[url] = make_response(status, body)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def fail_head(self, url: str, exc: Exception) -> None:
        self.head_routes[url] = exc

    @staticmethod
    def _answer(route, default_status: int):
        if route is None:
            return make_response(default_status)
        if isinstance(route, Exception):
            raise route
        return route

    def get(self, url: str, **kwargs):
        self.calls.append(url)
        self.kwargs.append(kwargs)
        return self._answer(self.routes.get(url), 404)

    def head(self, url: str, **kwargs):
        self.head_calls.append(url)
        return self._answer(self.head_routes.get(url), 200)

    def count(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture
def http():
    """Scripted HTTP endpoints."""
    return ScriptedHttp()


@pytest.fixture
def transport(http):
    """Transport over the scripted endpoints with no retry wait."""
    fake_session = MagicMock()
    fake_session.get.side_effect = http.get
    fake_session.head.side_effect = http.head
    return HttpTransport(session=fake_session, retry_delay=0)


@pytest.fixture
def errors():
    """Exceptions reported through ``on_error``."""
    return []


@pytest.fixture
def session(transport, errors):
    """Resolution session without Maven Central."""
    with ResolutionSession(transport=transport, on_error=errors.append, include_maven_central=False) as s:
        yield s
