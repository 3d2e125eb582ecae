import pytest
import pytest_asyncio
import httpx

import main
from nodes.ring_manager import RingManager
from utils.consistent_hashing import hash_key

# Tandai semua tes di file ini sebagai asyncio
pytestmark = pytest.mark.asyncio

NODES = [
    {"identity": 0, "address": "192.168.1.0", "port": 8080, "display_name": "host_0", "weight": 1},
    {"identity": 1, "address": "192.168.1.1", "port": 8080, "display_name": "host_1", "weight": 3},
]

@pytest_asyncio.fixture
async def async_client(monkeypatch):
    """Klien HTTP async ke app (in-process) dengan ring baru untuk setiap tes."""
    monkeypatch.setattr(main, "ring", RingManager(replicas=40))
    transport = httpx.ASGITransport(app=main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://ring.test") as client:
        yield client

async def add_nodes(client: httpx.AsyncClient):
    for node in NODES:
        resp = await client.post("/ring/nodes", json=node)
        assert resp.status_code == 201

async def test_lookup_on_empty_ring(async_client: httpx.AsyncClient):
    """Tes 1: Ring kosong -> 503, bukan crash."""
    resp = await async_client.get("/ring/lookup", params={"key": "user:42"})
    assert resp.status_code == 503

async def test_add_lookup_remove_flow(async_client: httpx.AsyncClient):
    """Tes 2: Alur Add -> Lookup -> Remove."""
    await add_nodes(async_client)

    # 1. Add duplikat ditolak
    resp_dup = await async_client.post("/ring/nodes", json=NODES[0])
    assert resp_dup.status_code == 409

    # 2. Lookup konsisten dengan ring di memori
    key = "user:42"
    resp = await async_client.get("/ring/lookup", params={"key": key})
    assert resp.status_code == 200
    body = resp.json()
    assert body["hash"] == hash_key(key)
    assert body["node"]["identity"] == main.ring.get(key).identity

    # 3. Remove node pemilik key, key pindah ke node lain
    owner = body["node"]["identity"]
    resp_del = await async_client.delete(f"/ring/nodes/{owner}")
    assert resp_del.status_code == 200
    resp = await async_client.get("/ring/lookup", params={"key": key})
    assert resp.json()["node"]["identity"] != owner

    # 4. Remove kedua kali -> 404
    resp_del = await async_client.delete(f"/ring/nodes/{owner}")
    assert resp_del.status_code == 404

async def test_list_nodes_and_status(async_client: httpx.AsyncClient):
    await add_nodes(async_client)

    resp = await async_client.get("/ring/nodes")
    assert resp.status_code == 200
    assert resp.json() == NODES

    resp = await async_client.get("/ring/status")
    status = resp.json()
    assert status["replicas"] == 40
    assert status["node_count"] == 2
    assert status["members"] == [0, 1]
    assert status["virtual_node_count"] == main.ring.virtual_node_count()

async def test_distribution(async_client: httpx.AsyncClient):
    await add_nodes(async_client)
    keys = [f"key{i}" for i in range(1000)]

    resp = await async_client.post("/ring/distribution", json={"keys": keys})
    assert resp.status_code == 200
    body = resp.json()
    assert sum(body["counts"].values()) == len(keys)
    assert body["summary"]["total"] == len(keys)
    assert set(body["counts"]) <= {"0", "1"}

async def test_invalid_node_rejected(async_client: httpx.AsyncClient):
    bad = dict(NODES[0], weight=0)
    resp = await async_client.post("/ring/nodes", json=bad)
    assert resp.status_code == 422

async def test_distribution_summary_includes_idle_nodes(async_client: httpx.AsyncClient):
    """Tes: Batch lebih kecil dari jumlah node -> node tanpa key tetap dihitung (0)."""
    await add_nodes(async_client)
    third = {"identity": 2, "address": "192.168.1.2", "port": 8080, "display_name": "host_2", "weight": 1}
    resp = await async_client.post("/ring/nodes", json=third)
    assert resp.status_code == 201

    resp = await async_client.post("/ring/distribution", json={"keys": ["only-one"]})
    assert resp.status_code == 200
    body = resp.json()

    assert set(body["counts"]) == {"0", "1", "2"}
    assert sorted(body["counts"].values()) == [0, 0, 1]
    summary = body["summary"]
    assert summary["total"] == 1
    assert summary["mean"] == pytest.approx(1 / 3)
    assert summary["min"] == 0
    assert summary["max"] == 1
    assert summary["stddev"] == pytest.approx((2 / 9) ** 0.5)
