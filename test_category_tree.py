"""
Тесты построения дерева категорий
"""
import dataclasses

import pytest

from app.admin_client import CategoryTree, TreeIntegrityError, build_category_tree
from app.admin_client.schemas import CategoryRecord


def rec(cid, parent_id=0, level=None, name=None, sort_order=0, **extra):
    data = {
        "category_id": cid,
        "parent_id": parent_id,
        "level": level,
        "category_name": name or f"cat-{cid}",
        "sort_order": sort_order,
    }
    data.update(extra)
    return CategoryRecord.model_validate(data)


def assert_levels_consistent(tree: CategoryTree):
    for node in tree:
        if node.id in tree.detached_ids:
            continue
        if node.parent_id is None:
            assert node.level == 1
        else:
            assert node.level == tree.get(node.parent_id).level + 1
    assert tree.check_levels() == []


def test_flat_list_builds_forest():
    """Плоский список с parent_id превращается в лес"""
    tree = build_category_tree([
        rec(1, 0, 1), rec(2, 1, 2), rec(3, 2, 3), rec(4, 0, 1), rec(5, 1, 2),
    ])

    assert [r.id for r in tree.roots] == [1, 4]
    assert [c.id for c in tree.children_of(1)] == [2, 5]
    assert tree.get(3).level == 3
    assert tree.get(1).parent_id is None
    assert len(tree) == 5
    assert tree.max_level == 3
    assert_levels_consistent(tree)


def test_nested_response_is_flattened():
    """Вложенный ответ (children) даёт то же дерево"""
    nested = CategoryRecord.model_validate({
        "category_id": 10,
        "parent_id": 0,
        "category_name": "root",
        "children": [
            {"category_id": 11, "category_name": "a", "children": [
                {"category_id": 12, "category_name": "b"},
            ]},
        ],
    })
    tree = build_category_tree([nested])

    assert tree.get(11).parent_id == 10
    assert tree.get(12).parent_id == 11
    assert tree.get(12).level == 3
    assert_levels_consistent(tree)


def test_server_level_is_overridden_by_ancestry():
    """Уровень из ответа, не совпадающий с цепочкой предков, пересчитывается"""
    tree = build_category_tree([rec(1, 0, 5), rec(2, 1, 7)])

    assert tree.get(1).level == 1
    assert tree.get(2).level == 2
    assert_levels_consistent(tree)


def test_root_markers():
    """0, None и пустая строка обозначают корень"""
    tree = build_category_tree([rec(1, 0), rec(2, None), rec(3, "")])
    assert all(n.is_root for n in tree.roots)
    assert len(tree.roots) == 3


def test_children_sorted_by_sort_order_stable():
    tree = build_category_tree([
        rec(1), rec(2, 1, sort_order=5), rec(3, 1, sort_order=1), rec(4, 1, sort_order=5),
    ])
    assert [c.id for c in tree.children_of(1)] == [3, 2, 4]


def test_detached_nodes_from_filtered_response():
    """При фильтре ребёнок без родителя показывается наверху со своим уровнем"""
    tree = build_category_tree([rec(7, 3, 3), rec(8, 7, 4)], keyword="x")

    assert [r.id for r in tree.roots] == [7]
    assert tree.get(7).level == 3
    assert tree.get(8).level == 4
    assert tree.detached_ids == frozenset({7})
    assert tree.keyword == "x"
    assert tree.check_levels() == []


def test_cycle_is_rejected():
    with pytest.raises(TreeIntegrityError):
        build_category_tree([rec(1, 0), rec(2, 3), rec(3, 2)])


def test_self_parent_is_rejected():
    with pytest.raises(TreeIntegrityError):
        build_category_tree([rec(1, 1)])


def test_duplicate_id_is_rejected():
    with pytest.raises(TreeIntegrityError):
        build_category_tree([rec(1), rec(1)])


def test_navigation_helpers():
    tree = build_category_tree([rec(1), rec(2, 1), rec(3, 2), rec(4, 1)])

    assert [n.id for n in tree.ancestors(3)] == [1, 2]
    assert tree.ancestors(1) == []
    assert sorted(tree.subtree_ids(1)) == [1, 2, 3, 4]
    assert tree.subtree_ids(99) == []
    assert tree.has_children(2)
    assert not tree.has_children(3)
    assert 4 in tree and 99 not in tree
    assert [n.id for n in tree] == [1, 2, 3, 4]


def test_snapshot_nodes_are_immutable():
    tree = build_category_tree([rec(1)])
    with pytest.raises(dataclasses.FrozenInstanceError):
        tree.get(1).level = 3


def test_empty_tree():
    tree = CategoryTree.empty()
    assert len(tree) == 0
    assert tree.roots == ()
    assert tree.max_level == 0
    assert tree.get(1) is None


def test_string_and_int_ids_are_the_same_category_flat():
    """parent_id "1" указывает на категорию с id 1"""
    tree = build_category_tree([rec(1, 0), rec("2", "1"), rec(3, "2")])

    assert [r.id for r in tree.roots] == [1]
    assert [c.id for c in tree.children_of(1)] == [2]
    assert tree.get("3").level == 3
    assert tree.detached_ids == frozenset()
    assert "2" in tree
    assert_levels_consistent(tree)


def test_nested_child_belongs_to_enclosing_record():
    """Вложенный ребёнок принадлежит родителю по вложенности, а не по своему parent_id"""
    nested = CategoryRecord.model_validate({
        "category_id": 1,
        "parent_id": 0,
        "category_name": "root",
        "children": [
            {"category_id": "2", "parent_id": "1", "category_name": "a"},
            {"category_id": 3, "parent_id": 99, "category_name": "b"},
        ],
    })
    tree = build_category_tree([nested])

    assert [r.id for r in tree.roots] == [1]
    assert sorted(c.id for c in tree.children_of(1)) == [2, 3]
    assert tree.detached_ids == frozenset()
    assert_levels_consistent(tree)


def test_bad_row_fields_fall_back_to_defaults():
    """Одна строка с null/неизвестными значениями не ломает весь ответ"""
    record = CategoryRecord.model_validate({
        "category_id": 5,
        "parent_id": None,
        "level": "x",
        "category_name": None,
        "description": None,
        "icon_url": None,
        "sort_order": "abc",
        "status": "archived",
    })

    assert record.category_name == ""
    assert record.description == ""
    assert record.level is None
    assert record.sort_order == 0
    assert record.status.value == "active"

    none_status = CategoryRecord.model_validate({"category_id": 6, "status": None})
    assert none_status.status.value == "active"
