"""Integration tests for the invocation endpoints."""

import json


class TestChaincodeRouter:
    async def _invoke(self, client, admin_headers, function, *args):
        return await client.post("/invoke", json={
            "function": function, "args": list(args),
        }, headers=admin_headers)

    async def _setup(self, client, admin_headers):
        await self._invoke(client, admin_headers, "init_owner", "o1", "alice", "supplier")
        await self._invoke(client, admin_headers, "init_owner", "o2", "bob", "core-enterprise")
        await self._invoke(client, admin_headers, "init_owner", "o3", "carol", "bank")
        resp = await self._invoke(
            client, admin_headers, "init_marble", "m1", "555", "100", "t", "o1", "supplier",
        )
        assert resp.status_code == 200

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "marbles-engine"

    async def test_missing_api_key(self, client):
        resp = await client.post("/invoke", json={"function": "init", "args": []})
        assert resp.status_code == 422

    async def test_wrong_api_key(self, client):
        resp = await client.post(
            "/invoke", json={"function": "init", "args": []},
            headers={"X-Marbles-Api-Key": "wrong"},
        )
        assert resp.status_code == 403

    async def test_invoke_success(self, client, admin_headers):
        await self._setup(client, admin_headers)
        resp = await client.post("/invoke", json={
            "function": "review_marble", "args": ["m1", "o1", "2", "ok"], "tx_id": "tx-abc",
        }, headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == 200
        assert data["tx_id"] == "tx-abc"
        marble = json.loads(data["payload"])
        assert marble["check"][2]["userid"] == "o2"
        assert marble["check"][2]["review"] == 1

    async def test_not_found_maps_to_404(self, client, admin_headers):
        resp = await self._invoke(client, admin_headers, "read", "missing")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    async def test_duplicate_maps_to_409(self, client, admin_headers):
        await self._setup(client, admin_headers)
        resp = await self._invoke(client, admin_headers, "init_owner", "o1", "x", "bank")
        assert resp.status_code == 409
        assert resp.json()["code"] == "ALREADY_EXISTS"

    async def test_bad_args_map_to_400(self, client, admin_headers):
        resp = await self._invoke(client, admin_headers, "init_owner", "o1")
        assert resp.status_code == 400
        assert "Incorrect number of arguments" in resp.json()["error"]

    async def test_wrong_actor_maps_to_403(self, client, admin_headers):
        await self._setup(client, admin_headers)
        resp = await self._invoke(client, admin_headers, "review_marble", "m1", "o3", "2", "ok")
        assert resp.status_code == 403
        assert resp.json()["code"] == "UNAUTHORIZED"

    async def test_unknown_function(self, client, admin_headers):
        resp = await self._invoke(client, admin_headers, "bogus")
        assert resp.status_code == 404
        assert resp.json()["code"] == "UNKNOWN_FUNCTION"

    async def test_query(self, client, admin_headers):
        await self._setup(client, admin_headers)
        resp = await client.post("/query", json={
            "function": "read_everything", "args": [],
        }, headers=admin_headers)
        assert resp.status_code == 200
        everything = json.loads(resp.json()["payload"])
        assert [u["id"] for u in everything["owners"]] == ["o1", "o2", "o3"]

    async def test_query_rejects_invoke_functions(self, client, admin_headers):
        resp = await client.post("/query", json={
            "function": "init_owner", "args": ["o1", "alice", "supplier"],
        }, headers=admin_headers)
        assert resp.status_code == 404
        resp = await self._invoke(client, admin_headers, "read", "o1")
        assert resp.status_code == 404
