"""Tests for reply tree reconstruction."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from commentable.comments.aggregation import build_comment_tree


@dataclass
class Node:
    parent_comment_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    replies: list["Node"] = field(default_factory=list)


class TestBuildCommentTree:
    def test_nests_by_parent(self) -> None:
        root = Node()
        a = Node(root.id)
        b = Node(root.id)
        a1 = Node(a.id)

        tree = build_comment_tree(root, [a, b, a1], max_depth=5)

        assert tree.replies == [a, b]
        assert a.replies == [a1]
        assert b.replies == []

    def test_sibling_order_follows_input(self) -> None:
        root = Node()
        first, second = Node(root.id), Node(root.id)

        tree = build_comment_tree(root, [second, first], max_depth=1)

        assert tree.replies == [second, first]

    def test_depth_cut(self) -> None:
        """Levels below max_depth are dropped."""
        root = Node()
        child = Node(root.id)
        grandchild = Node(child.id)

        tree = build_comment_tree(root, [child, grandchild], max_depth=1)

        assert tree.replies == [child]
        assert child.replies == []

    def test_orphans_dropped(self) -> None:
        root = Node()
        orphan = Node(uuid4())

        assert build_comment_tree(root, [orphan], max_depth=3).replies == []

    def test_every_reply_shares_parent_thread(self) -> None:
        """Each nested reply points at the node it hangs under."""
        root = Node()
        level1 = [Node(root.id) for _ in range(3)]
        level2 = [Node(parent.id) for parent in level1 for _ in range(2)]

        tree = build_comment_tree(root, [*level1, *level2], max_depth=2)

        for child in tree.replies:
            assert child.parent_comment_id == tree.id
            for grandchild in child.replies:
                assert grandchild.parent_comment_id == child.id
