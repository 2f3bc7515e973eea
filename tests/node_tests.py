"""
Tests for the node model and node store
"""
from .context import NodeStore, NodeType, LeafNode, InternalNode, iter_leaf_chain


def test_ids_are_monotonic_and_never_reused():
    store = NodeStore()
    first = store.new_leaf([1], ["a"])
    second = store.new_internal([5], [first.node_id])
    assert (first.node_id, second.node_id) == (0, 1)

    store.drop(first.node_id)
    third = store.new_leaf()
    assert third.node_id == 2
    assert first.node_id not in store
    assert len(store) == 2


def test_new_nodes_have_no_links():
    store = NodeStore()
    leaf = store.new_leaf([1, 2], [10, 20])
    internal = store.new_internal([2], [leaf.node_id, leaf.node_id])
    assert leaf.node_type == NodeType.NodeLeaf
    assert internal.node_type == NodeType.NodeInternal
    assert leaf.parent is None and leaf.prev is None and leaf.next is None
    assert internal.parent is None
    # creating a parent does not re-parent its children
    assert store.get_node(leaf.node_id).parent is None


def test_clone_is_independent():
    store = NodeStore()
    leaf = store.new_leaf([1, 2], ["x", "y"])
    other = store.clone()

    leaf.keys.append(3)
    leaf.values.append("z")
    leaf.next = 99

    copied = other.get_node(leaf.node_id)
    assert copied.keys == [1, 2]
    assert copied.values == ["x", "y"]
    assert copied.next is None
    # the copy allocates the same next id
    assert other.new_leaf().node_id == store.new_leaf().node_id


def test_node_copy():
    leaf = LeafNode(4, [1], [object()], parent=2, prev=3, next=5)
    copied = leaf.copy()
    assert copied == leaf
    assert copied.keys is not leaf.keys
    # values are opaque; the same objects are referenced
    assert copied.values[0] is leaf.values[0]

    internal = InternalNode(2, [7], [4, 6])
    assert internal.copy() == internal
    assert internal.copy().children is not internal.children


def test_iter_leaf_chain():
    store = NodeStore()
    assert list(iter_leaf_chain(store, None)) == []

    left = store.new_leaf([1, 2], [1, 2])
    right = store.new_leaf([3, 4], [3, 4])
    root = store.new_internal([3], [left.node_id, right.node_id])
    left.next = right.node_id
    right.prev = left.node_id
    left.parent = right.parent = root.node_id

    leaves = list(iter_leaf_chain(store, root.node_id))
    assert [leaf.node_id for leaf in leaves] == [left.node_id, right.node_id]
    assert [leaf.node_id for leaf in iter_leaf_chain(store, left.node_id)] == [left.node_id, right.node_id]
