"""REST 持久層客戶端測試"""

import json

import httpx
import pytest

from vault.core.backend import HttpDatasetBackend
from vault.core.store import AssetStore
from vault.errors import LoadError, PersistenceError

BASE_URL = "http://vault.test/api"


def make_backend(handler) -> HttpDatasetBackend:
    return HttpDatasetBackend(BASE_URL, transport=httpx.MockTransport(handler))


def test_fetch_returns_dataset():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/data"
        return httpx.Response(200, json={"assets": [], "categories": ["設備"]})

    assert make_backend(handler).fetch()["categories"] == ["設備"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"ok": False, "err": "boom"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_fetch_failures_raise_load_error(response):
    with pytest.raises(LoadError):
        make_backend(lambda request: response).fetch()


def test_save_posts_full_payload():
    received = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received["method"] = request.method
        received["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    make_backend(handler).save({"assets": [{"name": "A"}]})
    assert received == {"method": "POST", "body": {"assets": [{"name": "A"}]}}


def test_save_reports_server_error_message():
    backend = make_backend(lambda request: httpx.Response(413, json={"ok": False, "err": "Payload too large"}))
    with pytest.raises(PersistenceError, match="413"):
        backend.save({"assets": []})


def test_save_rejected_by_server():
    backend = make_backend(lambda request: httpx.Response(200, json={"ok": False, "err": "磁碟已滿"}))
    with pytest.raises(PersistenceError, match="磁碟已滿"):
        backend.save({"assets": []})


def test_save_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PersistenceError):
        make_backend(handler).save({"assets": []})


def test_store_round_trip_through_api(client, repo):
    """資料倉庫經由 HTTP API 寫入檔案後，重新載入得到相同資料"""

    def forward(request: httpx.Request) -> httpx.Response:
        response = client.request(
            request.method,
            request.url.path,
            content=request.content,
            headers={"content-type": "application/json"},
        )
        return httpx.Response(response.status_code, content=response.content)

    store = AssetStore(make_backend(forward), save_debounce=0)
    store.load()
    a = store.upsert({"name": "A", "amount": "100.00"}, is_new=True)
    b = store.upsert({"name": "B", "amount": "200.30"}, is_new=True)
    d = store.upsert({"name": "D", "isComposite": True, "components": [a.origin_id, b.origin_id]}, is_new=True)
    assert store.last_persist_error is None

    on_disk = repo.read()
    assert [x["name"] for x in on_disk["assets"]] == ["A", "B", "D"]
    assert on_disk["assets"][2]["amount"] == "300.30"

    reloaded = AssetStore(make_backend(forward), save_debounce=0)
    reloaded.load()
    assert reloaded.get_by_id(d.origin_id).amount == "300.30"
    assert reloaded.get_by_id(d.origin_id).components == [a.origin_id, b.origin_id]
