"""Tests for kinpath/crud.py and kinpath/trees.py: populating the graph.

Requirements tested:
- REQ-P1: Every person belongs to exactly one tree
- REQ-P2: Parent edges and unions only join people of the same tree
- REQ-P3: A union needs at least two distinct members
- REQ-P4: Deleting a tree removes its people, edges and unions
"""
import pytest
from fastapi import HTTPException

from kinpath import crud, trees


class TestTrees:
    def test_create_and_get(self, conn):
        t = trees.create_tree(conn, "My Tree")
        assert trees.get_tree(conn, t["id"])["name"] == "My Tree"

    def test_get_not_found(self, conn):
        assert trees.get_tree(conn, "nonexistent") is None

    def test_list_sorted(self, conn):
        trees.create_tree(conn, "Zeta")
        trees.create_tree(conn, "Alpha")
        assert [t["name"] for t in trees.list_trees(conn)] == ["Alpha", "Zeta"]

    def test_require_tree(self, conn):
        with pytest.raises(HTTPException) as exc:
            trees.require_tree(conn, "nonexistent")
        assert exc.value.status_code == 404

    def test_delete_cascades(self, conn, kuzu_family, tree_two):
        other = crud.create_person(conn, "Other", tree_id=tree_two["id"])
        trees.delete_tree(conn, kuzu_family["tree"])
        assert trees.get_tree(conn, kuzu_family["tree"]) is None
        assert crud.list_people(conn, kuzu_family["tree"]) == []
        assert crud.list_unions(conn, kuzu_family["tree"]) == []
        assert crud.get_person(conn, other["id"]) is not None


class TestPeople:
    def test_defaults(self, conn, tree_one):
        p = crud.create_person(conn, "Test Person", tree_id=tree_one["id"])
        assert p["display_name"] == "Test Person"
        assert p["sex"] == "U"
        assert p["is_deceased"] is False
        assert p["tree_id"] == tree_one["id"]

    def test_sex_normalized(self, conn, tree_one):
        assert crud.create_person(conn, "A", "female", tree_id=tree_one["id"])["sex"] == "F"

    def test_death_date_implies_deceased(self, conn, tree_one):
        p = crud.create_person(conn, "Gone", tree_id=tree_one["id"], death_date="2020-01-01")
        assert p["is_deceased"] is True

    def test_list_ordered_and_scoped(self, conn, tree_one, tree_two):
        crud.create_person(conn, "Zara", tree_id=tree_one["id"])
        crud.create_person(conn, "Alice", tree_id=tree_one["id"])
        crud.create_person(conn, "Elsewhere", tree_id=tree_two["id"])
        names = [p["display_name"] for p in crud.list_people(conn, tree_one["id"])]
        assert names == ["Alice", "Zara"]

    def test_get_wrong_tree(self, conn, tree_one, tree_two):
        p = crud.create_person(conn, "P", tree_id=tree_one["id"])
        assert crud.get_person(conn, p["id"], tree_id=tree_two["id"]) is None


class TestParents:
    def test_add_parent(self, conn, kuzu_family):
        edges = crud.list_parent_edges(conn, kuzu_family["tree"])
        assert len(edges) == 2
        assert {e["child_id"] for e in edges} == {kuzu_family["omar"], kuzu_family["sara"]}

    def test_duplicate_returns_existing(self, conn, kuzu_family):
        again = crud.add_parent(conn, kuzu_family["tree"], kuzu_family["ali"], kuzu_family["omar"])
        assert len(crud.list_parent_edges(conn, kuzu_family["tree"])) == 2
        assert again["rel_type"] == "biological"

    def test_self_parent_rejected(self, conn, kuzu_family):
        with pytest.raises(ValueError):
            crud.add_parent(conn, kuzu_family["tree"], kuzu_family["ali"], kuzu_family["ali"])

    def test_cross_tree_rejected(self, conn, kuzu_family, tree_two):
        other = crud.create_person(conn, "Other", tree_id=tree_two["id"])
        with pytest.raises(ValueError):
            crud.add_parent(conn, kuzu_family["tree"], other["id"], kuzu_family["omar"])


class TestUnions:
    def test_list(self, conn, kuzu_family):
        unions = crud.list_unions(conn, kuzu_family["tree"])
        assert len(unions) == 1
        assert sorted(unions[0]["member_ids"]) == sorted([kuzu_family["omar"], kuzu_family["nadia"]])

    def test_too_few_members(self, conn, kuzu_family):
        with pytest.raises(ValueError):
            crud.create_union(conn, kuzu_family["tree"], [kuzu_family["omar"], kuzu_family["omar"]])

    def test_unknown_member(self, conn, kuzu_family):
        with pytest.raises(ValueError):
            crud.create_union(conn, kuzu_family["tree"], [kuzu_family["omar"], "ghost"])
