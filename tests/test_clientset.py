import json

import pytest
import requests
import responses

from loadtestkit.clientset import ClientError, LoadTestClient
from loadtestkit.types import (
    GROUP_VERSION,
    Container,
    LoadTest,
    LoadTestList,
    LoadTestSpec,
    ObjectMeta,
    Server,
)

HOST = "https://k8s.example.com"
BASE = f"{HOST}/apis/{GROUP_VERSION.group}/{GROUP_VERSION.version}"
COLLECTION = f"{BASE}/namespaces/default/loadtests"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def _sample(name="example"):
    return LoadTest(
        metadata=ObjectMeta(name=name, labels={"Language": "go"}),
        spec=LoadTestSpec(
            servers=[Server(language="go", run=[Container(image="worker-image")])],
            timeout_seconds=900,
            ttl_seconds=86400,
        ),
    )


def test_create_posts_test_and_returns_stored(mocked):
    test = _sample()
    stored = test.deep_copy()
    stored.namespace = "default"
    mocked.add(responses.POST, COLLECTION, json=stored.to_dict(), status=201)

    result = LoadTestClient(HOST).load_tests("default").create(test)

    assert result == stored
    assert json.loads(mocked.calls[0].request.body) == test.to_dict()


def test_get_fetches_by_name(mocked):
    stored = _sample("alpha")
    mocked.add(responses.GET, f"{COLLECTION}/alpha", json=stored.to_dict())

    result = LoadTestClient(HOST).load_tests("default").get("alpha")

    assert result.name == "alpha"
    assert result.spec.servers[0].run[0].image == "worker-image"


def test_list_returns_all_items(mocked):
    listed = LoadTestList(items=[_sample("a"), _sample("b")])
    mocked.add(responses.GET, COLLECTION, json=listed.to_dict())

    result = LoadTestClient(HOST).load_tests("default").list()

    assert [item.name for item in result.items] == ["a", "b"]


def test_delete_sends_delete_request(mocked):
    mocked.add(responses.DELETE, f"{COLLECTION}/gone", json={"status": "Success"})

    result = LoadTestClient(HOST).load_tests("default").delete("gone")

    assert result is None
    assert len(mocked.calls) == 1
    assert mocked.calls[0].request.method == "DELETE"
    assert json.loads(mocked.calls[0].request.body)["kind"] == "DeleteOptions"


def test_empty_namespace_uses_cluster_path(mocked):
    mocked.add(responses.GET, f"{BASE}/loadtests", json={"items": []})

    result = LoadTestClient(HOST).load_tests("").list()

    assert result.items == []


def test_error_status_raises_client_error(mocked):
    mocked.add(
        responses.GET,
        f"{COLLECTION}/missing",
        json={"kind": "Status", "message": "loadtest missing", "reason": "NotFound"},
        status=404,
    )

    with pytest.raises(ClientError) as info:
        LoadTestClient(HOST).load_tests("default").get("missing")

    assert info.value.status_code == 404
    assert info.value.reason == "NotFound"
    assert "loadtest missing" in str(info.value)


def test_connection_failure_raises_client_error(mocked):
    mocked.add(
        responses.GET, COLLECTION, body=requests.ConnectionError("refused")
    )

    with pytest.raises(ClientError, match="refused"):
        LoadTestClient(HOST).load_tests("default").list()


def test_non_json_body_raises_client_error(mocked):
    mocked.add(responses.GET, f"{COLLECTION}/odd", body="not json", status=200)

    with pytest.raises(ClientError):
        LoadTestClient(HOST).load_tests("default").get("odd")


def test_empty_name_is_rejected():
    getter = LoadTestClient(HOST).load_tests("default")
    with pytest.raises(ClientError):
        getter.get("")


def test_headers_carry_token_and_user_agent(mocked):
    mocked.add(responses.GET, COLLECTION, json={"items": [_sample("h").to_dict()]})

    client = LoadTestClient(HOST + "/", token="token", user_agent="custom-agent")
    result = client.load_tests("default").list()

    assert [item.name for item in result.items] == ["h"]
    headers = mocked.calls[0].request.headers
    assert headers["Authorization"] == "Bearer token"
    assert headers["User-Agent"] == "custom-agent"


def test_default_user_agent_is_set(mocked):
    mocked.add(responses.GET, COLLECTION, json={"items": [_sample("u").to_dict()]})

    result = LoadTestClient(HOST).load_tests("default").list()

    assert [item.name for item in result.items] == ["u"]
    assert mocked.calls[0].request.headers["User-Agent"].startswith("loadtestkit")
    assert "Authorization" not in mocked.calls[0].request.headers