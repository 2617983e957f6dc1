import json

from pytest import raises

from script_alchemy import *

from .conftest import HOST, SCRIPT_ID, FakeServer, ok

PROJECT_URL = f"{HOST}/projects/{SCRIPT_ID}"
DEPLOYMENTS_URL = f"{PROJECT_URL}/deployments"


def test_context(server: FakeServer):
    with Session(host=HOST, fetcher=server) as session:
        assert session.host == HOST
        assert str(session) == f"Session(host='{HOST}')"

    assert server.closed


def test_host_normalized(server: FakeServer):
    session = Session(host=f"{HOST}/", fetcher=server)
    assert session.host == HOST


def test_token_required():
    with raises(AssertionError):
        Session()


def test_requests_fetcher():
    session = Session("token123", host=HOST)

    fetcher = session.executor._fetcher
    assert isinstance(fetcher, RequestsFetcher)
    assert fetcher._session.headers["Authorization"] == "Bearer token123"

    session.close()


def test_uncached(server: FakeServer):
    """
    Without a cache store every GET reaches the server.
    """
    session = Session(host=HOST, fetcher=server)
    server.projects[SCRIPT_ID] = []

    session.get_content(SCRIPT_ID)
    envelope = session.get_content(SCRIPT_ID)

    assert not envelope.cached
    assert len(server.calls) == 2


def test_create_project(session: Session, server: FakeServer):
    server.queue("POST", f"{HOST}/projects", ok({"scriptId": "new"}))

    envelope = session.create_project("My project", parent_id="doc1")

    assert envelope.raise_for_error().data == {"scriptId": "new"}

    _, options = server.calls[-1]
    assert json.loads(options.payload) == {
        "title": "My project",
        "parentId": "doc1",
    }


def test_get_project(session: Session, server: FakeServer):
    server.queue("GET", PROJECT_URL, ok({"scriptId": SCRIPT_ID, "title": "t"}))

    assert session.get_project(SCRIPT_ID).data["title"] == "t"
    assert session.get_project(SCRIPT_ID).cached


def test_deployments(session: Session, server: FakeServer):
    page_1 = f"{DEPLOYMENTS_URL}?pageSize=100"
    page_2 = f"{DEPLOYMENTS_URL}?pageSize=100&pageToken=t1"

    server.queue(
        "GET",
        page_1,
        ok({"deployments": [{"deploymentId": "d1"}], "nextPageToken": "t1"}),
    )
    server.queue("GET", page_2, ok({"deployments": [{"deploymentId": "d2"}]}))
    server.queue("POST", DEPLOYMENTS_URL, ok({"deploymentId": "d3"}))
    server.queue("DELETE", f"{DEPLOYMENTS_URL}/d1", ok({}))

    envelope = session.list_deployments(SCRIPT_ID)
    assert [d["deploymentId"] for d in envelope.data["deployments"]] == [
        "d1",
        "d2",
    ]

    envelope = session.create_deployment(SCRIPT_ID, 4, "release")
    assert envelope.success

    _, options = server.calls[-1]
    assert json.loads(options.payload) == {
        "versionNumber": 4,
        "manifestFileName": "appsscript",
        "description": "release",
    }

    assert session.delete_deployment(SCRIPT_ID, "d1").success
