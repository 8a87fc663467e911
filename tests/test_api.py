"""Tests for the HTTP API in kinpath/main.py.

Requirements tested:
- REQ-A1: Relationship queries return the full result document
- REQ-A2: Missing ids -> 400, unknown tree -> 404, out-of-range depth or unknown locale -> 422
- REQ-A3: Store failures -> 503, search timeouts -> 504
"""
import pytest

from kinpath import main
from kinpath.pathfinder import SearchCancelled
from kinpath.provider import GraphProviderError


def _make_tree(client, name="Test Tree"):
    return client.post("/api/trees", json={"name": name}).json()


def _person(client, tree_id, name, sex="U"):
    return client.post(f"/api/trees/{tree_id}/people",
                       json={"display_name": name, "sex": sex}).json()


@pytest.fixture
def api_family(client):
    tree = _make_tree(client)
    tid = tree["id"]
    ali = _person(client, tid, "Ali", "M")
    omar = _person(client, tid, "Omar", "M")
    sara = _person(client, tid, "Sara", "F")
    nadia = _person(client, tid, "Nadia", "F")
    client.post(f"/api/trees/{tid}/parents", json={"parent_id": ali["id"], "child_id": omar["id"]})
    client.post(f"/api/trees/{tid}/parents", json={"parent_id": ali["id"], "child_id": sara["id"]})
    client.post(f"/api/trees/{tid}/unions", json={"member_ids": [omar["id"], nadia["id"]]})
    return {"tree": tid, "ali": ali["id"], "omar": omar["id"], "sara": sara["id"], "nadia": nadia["id"]}


def _path(client, fam, a, b, **params):
    return client.get(f"/api/trees/{fam['tree']}/relationship-path",
                      params={"person1_id": fam[a], "person2_id": fam[b], **params})


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


class TestTrees:
    def test_create_and_get(self, client):
        tree = _make_tree(client, "Mine")
        resp = client.get(f"/api/trees/{tree['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Mine"

    def test_blank_name(self, client):
        assert client.post("/api/trees", json={"name": "  "}).status_code == 422

    def test_unknown_tree(self, client):
        assert client.get("/api/trees/nonexistent").status_code == 404

    def test_list_sorted(self, client):
        _make_tree(client, "Zeta")
        _make_tree(client, "Alpha")
        assert [t["name"] for t in client.get("/api/trees").json()] == ["Alpha", "Zeta"]

    def test_delete(self, client, api_family):
        tid = api_family["tree"]
        assert client.delete(f"/api/trees/{tid}").json() == {"ok": True}
        assert client.get(f"/api/trees/{tid}").status_code == 404
        assert client.delete(f"/api/trees/{tid}").status_code == 404


class TestPeopleAndEdges:
    def test_list_people(self, client, api_family):
        resp = client.get(f"/api/trees/{api_family['tree']}/people")
        assert resp.status_code == 200
        assert [p["display_name"] for p in resp.json()] == ["Ali", "Nadia", "Omar", "Sara"]

    def test_list_parents(self, client, api_family):
        resp = client.get(f"/api/trees/{api_family['tree']}/parents")
        assert resp.status_code == 200
        edges = resp.json()
        assert {e["child_id"] for e in edges} == {api_family["omar"], api_family["sara"]}
        assert all(e["parent_id"] == api_family["ali"] for e in edges)

    def test_bad_parent(self, client, api_family):
        resp = client.post(f"/api/trees/{api_family['tree']}/parents",
                           json={"parent_id": api_family["ali"], "child_id": api_family["ali"]})
        assert resp.status_code == 400

    def test_union_needs_two(self, client, api_family):
        resp = client.post(f"/api/trees/{api_family['tree']}/unions",
                           json={"member_ids": [api_family["ali"]]})
        assert resp.status_code == 422

    def test_union_unknown_member(self, client, api_family):
        resp = client.post(f"/api/trees/{api_family['tree']}/unions",
                           json={"member_ids": [api_family["ali"], "ghost"]})
        assert resp.status_code == 400


class TestRelationshipPath:
    def test_sibling(self, client, api_family):
        resp = _path(client, api_family, "omar", "sara")
        assert resp.status_code == 200
        data = resp.json()
        assert data["found"] is True
        assert data["kind"] == "sibling"
        assert data["label_key"] == "relationship.sister"
        assert data["common_ancestor_id"] == api_family["ali"]

    def test_in_law_via_bfs(self, client, api_family):
        data = _path(client, api_family, "sara", "nadia").json()
        assert data["kind"] == "distant"
        assert data["path_length"] == 3
        assert data["display_label"] == "Related (3 steps)"
        assert data["trail"] == "parent → child → spouse"
        assert [s["edge_to_next"] for s in data["path"]] == ["parent", "child", "spouse", "none"]

    def test_locale(self, client, api_family):
        data = _path(client, api_family, "omar", "ali", locale="ar").json()
        assert data["display_label"] == "أب"
        assert data["locale"] == "ar"

    def test_unsupported_locale(self, client, api_family):
        assert _path(client, api_family, "omar", "ali", locale="xx").status_code == 422

    def test_depth_limit(self, client, api_family):
        data = _path(client, api_family, "sara", "nadia", max_depth=2).json()
        assert data["found"] is False
        assert data["kind"] == "none"

    def test_missing_ids(self, client, api_family):
        resp = client.get(f"/api/trees/{api_family['tree']}/relationship-path",
                          params={"person1_id": api_family["omar"]})
        assert resp.status_code == 400

    def test_depth_out_of_range(self, client, api_family):
        assert _path(client, api_family, "omar", "sara", max_depth=-1).status_code == 422
        assert _path(client, api_family, "omar", "sara", max_depth=10_000).status_code == 422

    def test_unknown_person_is_a_result(self, client, api_family):
        resp = client.get(f"/api/trees/{api_family['tree']}/relationship-path",
                          params={"person1_id": api_family["omar"], "person2_id": "ghost"})
        assert resp.status_code == 200
        assert resp.json()["error"] == "person_not_found"

    def test_unknown_tree(self, client):
        resp = client.get("/api/trees/nonexistent/relationship-path",
                          params={"person1_id": "a", "person2_id": "b"})
        assert resp.status_code == 404

    def test_provider_failure(self, client, api_family, monkeypatch):
        def boom(*args, **kwargs):
            raise GraphProviderError("store down")

        monkeypatch.setattr(main, "find_relationship_path", boom)
        assert _path(client, api_family, "omar", "sara").status_code == 503

    def test_timeout(self, client, api_family, monkeypatch):
        def slow(*args, **kwargs):
            raise SearchCancelled("timed out")

        monkeypatch.setattr(main, "find_relationship_path", slow)
        assert _path(client, api_family, "omar", "sara").status_code == 504


class TestRelationshipTypes:
    def test_lists_bundled_vocabulary(self, client):
        resp = client.get("/api/relationship-types")
        assert resp.status_code == 200
        types = resp.json()
        assert types[0]["key"] == "father"
        assert types[0]["names"]["ar"] == "أب"
        assert any(t["key"] == "related" for t in types)
