"""
Tests for traced operations, i.e. the steps a tree reports through a recorder
"""
import json

import pytest

from .context import Tree, TreeInsertResult, TreeDeleteResult, StepType, StepRecorder, KeyRef


def build(order, keys):
    tree = Tree(order)
    for key in keys:
        tree.insert(key, key)
    return tree


def kinds(steps):
    return [step.kind for step in steps]


# section: insert


def test_insert_into_empty_tree():
    tree = Tree(3)
    steps = tree.insert_with_trace(10, "ten")
    assert kinds(steps) == [StepType.Start, StepType.NewRoot, StepType.Final]
    assert steps[0].snapshot.root is None
    assert steps[1].snapshot.keys() == [10]
    assert steps[1].highlights.nodes == [tree.root_id]


def test_insert_without_split():
    tree = build(3, range(1, 9))
    steps = tree.insert_with_trace(9, 9)
    assert kinds(steps) == [
        StepType.Start,
        StepType.Traverse,
        StepType.Traverse,
        StepType.Found,
        StepType.Final,
    ]
    # one hop per traverse step
    assert steps[1].highlights.nodes == [6, 5]
    assert steps[2].highlights.nodes == [6, 5, 4]
    assert steps[3].highlights.nodes == [6, 5, 4]
    assert steps[-1].snapshot.keys() == list(range(1, 10))


def test_insert_with_root_split():
    tree = build(3, [10, 20, 30])
    steps = tree.insert_with_trace(40, 40)
    assert kinds(steps) == [
        StepType.Start,
        StepType.Found,
        StepType.Split,
        StepType.NewRoot,
        StepType.Final,
    ]
    split = steps[2]
    assert split.split_info.old_node_id == 0
    assert split.split_info.new_node_id == 1
    assert split.split_info.pushed_key == 30
    assert split.split_info.pushed_to_node_id is None
    assert split.highlights.nodes == [0, 1]
    # the split step is taken before the new root exists
    assert split.snapshot.root_id == 0
    assert steps[3].snapshot.root.keys == [30]


def test_insert_with_parent_update():
    tree = build(3, [10, 20, 30, 40, 50])
    steps = tree.insert_with_trace(60, 60)
    assert kinds(steps) == [
        StepType.Start,
        StepType.Traverse,
        StepType.Found,
        StepType.Split,
        StepType.UpdateParent,
        StepType.Final,
    ]
    assert steps[3].split_info.pushed_to_node_id == tree.root_id
    assert steps[4].snapshot.root.keys == [30, 50]


def test_insert_duplicate():
    tree = build(3, [10, 20])
    recorder = StepRecorder()
    assert tree.insert(20, 20, recorder) == TreeInsertResult.DuplicateKey
    steps = recorder.get_steps()
    assert kinds(steps) == [StepType.NoChange]
    assert "20" in steps[0].message


# section: delete


def test_delete_with_borrow_from_right():
    tree = build(3, [10, 20, 30, 40, 50])
    steps = tree.delete_with_trace(10)
    assert kinds(steps) == [
        StepType.Start,
        StepType.Traverse,
        StepType.Found,
        StepType.BorrowRight,
        StepType.UpdateParent,
        StepType.Final,
    ]
    info = steps[3].borrow_info
    assert (info.from_node_id, info.to_node_id, info.key, info.parent_key_node_id) == (1, 0, 30, 2)
    assert steps[2].highlights.keys == [KeyRef(0, 0)]
    # found step is taken before the key is removed
    assert 10 in steps[2].snapshot.keys()
    assert [leaf.keys for leaf in steps[-1].snapshot.leaves()] == [[20, 30], [40, 50]]
    assert steps[-1].snapshot.root.keys == [40]


def test_delete_with_borrow_from_left():
    tree = build(3, [10, 20, 30, 40, 15])
    steps = tree.delete_with_trace(30)
    assert StepType.BorrowLeft in kinds(steps)
    info = steps[kinds(steps).index(StepType.BorrowLeft)].borrow_info
    assert (info.from_node_id, info.to_node_id, info.key) == (0, 1, 20)


def test_delete_with_merge_and_collapse():
    tree = build(3, [10, 20, 30, 40])
    steps = tree.delete_with_trace(10)
    assert kinds(steps) == [
        StepType.Start,
        StepType.Traverse,
        StepType.Found,
        StepType.Merge,
        StepType.NewRoot,
        StepType.Final,
    ]
    info = steps[3].merge_info
    assert info.left_node_id == 0
    assert info.right_node_id == 1
    assert info.merged_node_id == 1
    assert info.pulled_key == 30
    assert info.from_parent_id == 2
    # merge step is taken before the nodes are combined
    assert steps[3].snapshot.root_id == 2
    assert 0 in steps[3].snapshot.node_ids()

    final = steps[-1].snapshot
    assert final.root_id == 1
    assert final.root.keys == [20, 30, 40]
    assert final.node_ids() == [1]


def test_delete_missing_key():
    tree = build(3, [10, 20, 30, 40])
    before = tree.snapshot().to_dict()
    steps = tree.delete_with_trace(25)
    assert kinds(steps) == [StepType.Start, StepType.Traverse, StepType.NoChange]
    assert tree.snapshot().to_dict() == before


def test_delete_from_empty_tree():
    tree = Tree(3)
    recorder = StepRecorder()
    assert tree.delete(5, recorder) == TreeDeleteResult.EmptyTree
    assert kinds(recorder.get_steps()) == [StepType.NoChange]


def test_delete_last_key():
    tree = build(3, [7])
    steps = tree.delete_with_trace(7)
    assert kinds(steps) == [StepType.Start, StepType.Found, StepType.Final]
    assert steps[-1].snapshot.root is None
    assert steps[-1].snapshot.to_dict() == {"order": 3, "root": None}


# section: find


def test_find_trace():
    tree = build(3, range(1, 9))
    recorder = StepRecorder()
    result = tree.find(6, recorder)
    assert result.path == [6, 5, 3]
    steps = recorder.get_steps()
    assert kinds(steps) == [StepType.Start, StepType.Traverse, StepType.Traverse, StepType.Found]
    assert steps[-1].highlights.nodes == [6, 5, 3]
    assert steps[-1].highlights.keys == [KeyRef(3, 1)]


def test_find_path_is_not_shared_with_steps():
    tree = build(3, range(1, 9))
    recorder = StepRecorder()
    result = tree.find(6, recorder)
    result.path.append(999)

    steps = recorder.get_steps()
    assert steps[-1].highlights.nodes == [6, 5, 3]
    assert steps[-2].highlights.nodes == [6, 5, 3]


def test_snapshot_nodes_cannot_alter_step():
    tree = build(3, [10, 20, 30, 40])
    step = tree.insert_with_trace(50, 50)[-1]
    before = step.snapshot.to_dict()

    step.snapshot.root.keys.append(99)
    step.snapshot.get_node(0).keys.clear()
    leaf = step.snapshot.leaves()[-1]
    leaf.keys.append(60)
    leaf.values.append(60)
    leaf.next = 7

    assert step.snapshot.to_dict() == before
    assert step.snapshot.keys() == [10, 20, 30, 40, 50]


def test_find_missing_and_empty():
    tree = build(3, range(1, 9))
    steps = tree.find_with_trace(100)
    assert steps[-1].kind == StepType.NoChange
    assert StepType.Found not in kinds(steps)

    assert kinds(Tree(3).find_with_trace(1)) == [StepType.NoChange]


# section: properties of traces


def test_snapshots_are_independent_of_tree():
    tree = build(3, [10, 20, 30])
    steps = tree.insert_with_trace(40, 40)
    final = steps[-1].snapshot.to_dict()

    for key in range(50, 200, 10):
        tree.insert(key, key)
    tree.delete(10)

    assert steps[-1].snapshot.to_dict() == final
    assert steps[0].snapshot.keys() == [10, 20, 30]


@pytest.mark.parametrize("order", [3, 4, 5])
def test_traced_and_untraced_trees_match(order):
    keys = [432, 507, 311, 35, 246, 950, 956, 929, 769, 744, 994, 438, 1, 2, 3]
    traced = Tree(order)
    untraced = Tree(order)
    for key in keys:
        steps = traced.insert_with_trace(key, key)
        untraced.insert(key, key)
        assert steps[-1].snapshot.to_dict() == traced.snapshot().to_dict()
    for key in keys[::2]:
        steps = traced.delete_with_trace(key)
        untraced.delete(key)
        assert steps[-1].kind == StepType.Final
        assert steps[-1].snapshot.to_dict() == traced.snapshot().to_dict()
    assert traced.snapshot().to_dict() == untraced.snapshot().to_dict()
    traced.validate()


def test_no_recorder_takes_no_snapshots(monkeypatch):
    tree = build(3, range(10))

    def fail():
        raise AssertionError("snapshot taken without a recorder")

    monkeypatch.setattr(tree, "snapshot", fail)
    tree.insert(100, 100)
    tree.delete(0)
    tree.find(5)


def test_step_is_json_serializable():
    # deleting 1 merges two leaves, then two internal nodes, and collapses the root
    tree = build(3, range(1, 9))
    steps = tree.delete_with_trace(1)
    for step in steps:
        data = json.loads(json.dumps(step.to_dict()))
        assert data["kind"] == step.kind.value

    merges = [step.to_dict()["merge_info"] for step in steps if step.kind == StepType.Merge]
    assert [info["pulled_key"] for info in merges] == [3, 5]
    assert merges[0] == {
        "left_node_id": 0, "right_node_id": 1, "merged_node_id": 1, "pulled_key": 3, "from_parent_id": 2,
    }


def test_snapshot_to_dict_shape():
    tree = build(3, [10, 20, 30, 40])
    data = tree.snapshot().to_dict()
    assert data["order"] == 3
    root = data["root"]
    assert root["type"] == "internal"
    assert root["keys"] == [30]
    left, right = root["children"]
    assert left == {
        "id": 0, "type": "leaf", "keys": [10, 20], "values": [10, 20], "parent": 2, "prev": None, "next": 1,
    }
    assert right["keys"] == [30, 40]
    assert right["prev"] == 0
