from typing import Any, Generic, Iterator, Optional, TypeVar

# T represents the totally ordered type used for coordinates (time)
T = TypeVar('T')


class IntervalHandle(Generic[T]):
    """Handle of a stored half-open interval [start, end) with its data."""
    __slots__ = ('start', 'end', 'data', 'left', 'right', 'parent', 'max_end', 'height')

    def __init__(self, start: T, end: T, data: Any):
        self.start: T = start
        self.end: T = end
        self.data: Any = data
        self.left: Optional['IntervalHandle[T]'] = None
        self.right: Optional['IntervalHandle[T]'] = None
        self.parent: Optional['IntervalHandle[T]'] = None
        self.max_end: T = end
        self.height: int = 1


def _height(node: Optional[IntervalHandle]) -> int:
    return node.height if node is not None else 0


def _intersects(start: T, end: T, query_start: T, query_end: T) -> bool:
    # Zero-length intervals are instants: they intersect a range containing them
    if start == end:
        return query_start <= start < query_end or start == query_start == query_end
    if query_start == query_end:
        return start <= query_start < end
    return start < query_end and query_start < end


class IntervalTree(Generic[T]):
    """
    AVL tree keyed on start, augmented with the maximum end of each subtree.

    Handles returned by insert() stay valid until deleted, except that
    delete() may move another interval into the deleted handle.
    """

    def __init__(self):
        self.root: Optional[IntervalHandle[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[IntervalHandle[T]]:
        """Handles in order of start."""
        stack: list[IntervalHandle[T]] = []
        node = self.root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node
            node = node.right

    # ==================== Structure ====================

    def _refresh(self, node: IntervalHandle[T]):
        node.height = 1 + max(_height(node.left), _height(node.right))
        node.max_end = node.end
        for child in (node.left, node.right):
            if child is not None and child.max_end > node.max_end:
                node.max_end = child.max_end

    def _replace_child(
        self,
        parent: Optional[IntervalHandle[T]],
        old: IntervalHandle[T],
        new: Optional[IntervalHandle[T]],
    ):
        if parent is None:
            self.root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new
        if new is not None:
            new.parent = parent

    def _rotate(self, node: IntervalHandle[T], to_left: bool) -> IntervalHandle[T]:
        """Rotate node down to the left or right; returns the node now in its place."""
        pivot = node.right if to_left else node.left
        inner = pivot.left if to_left else pivot.right
        self._replace_child(node.parent, node, pivot)
        if to_left:
            node.right = inner
            pivot.left = node
        else:
            node.left = inner
            pivot.right = node
        if inner is not None:
            inner.parent = node
        node.parent = pivot
        self._refresh(node)
        self._refresh(pivot)
        return pivot

    def _rebalance_upwards(self, node: Optional[IntervalHandle[T]]):
        while node is not None:
            self._refresh(node)
            balance = _height(node.left) - _height(node.right)
            if balance > 1:
                if _height(node.left.left) < _height(node.left.right):
                    self._rotate(node.left, to_left=True)
                node = self._rotate(node, to_left=False)
            elif balance < -1:
                if _height(node.right.right) < _height(node.right.left):
                    self._rotate(node.right, to_left=False)
                node = self._rotate(node, to_left=True)
            node = node.parent

    # ==================== Mutation ====================

    def insert(self, start: T, end: T, data: Any) -> IntervalHandle[T]:
        node = IntervalHandle(start, end, data)
        parent, cursor = None, self.root
        while cursor is not None:
            parent = cursor
            cursor = cursor.left if start < cursor.start else cursor.right

        if parent is None:
            self.root = node
        elif start < parent.start:
            parent.left = node
        else:
            parent.right = node
        node.parent = parent

        self._size += 1
        self._rebalance_upwards(parent)
        return node

    def delete(self, handle: Optional[IntervalHandle[T]]) -> Optional[IntervalHandle[T]]:
        """
        Remove handle's interval.

        When handle has two children its successor's interval and data are
        moved into handle; handle is returned in that case so the caller can
        re-map the moved data. Returns None otherwise.
        """
        if handle is None:
            return None
        removed = handle
        if handle.left is not None and handle.right is not None:
            removed = handle.right
            while removed.left is not None:
                removed = removed.left

        parent = removed.parent
        self._replace_child(parent, removed, removed.left if removed.left is not None else removed.right)
        self._size -= 1

        if removed is handle:
            self._rebalance_upwards(parent)
            return None
        # handle is an ancestor of parent, so the walk below refreshes it
        handle.start, handle.end, handle.data = removed.start, removed.end, removed.data
        self._rebalance_upwards(parent)
        return handle

    def clear(self):
        self.root = None
        self._size = 0

    # ==================== Queries ====================

    def find_intersecting(self, start: T, end: T) -> list[IntervalHandle[T]]:
        """Intervals overlapping the half-open range [start, end), ordered by start."""
        found: list[IntervalHandle[T]] = []

        def _visit(node):
            if node is None or node.max_end < start:
                return
            _visit(node.left)
            if _intersects(node.start, node.end, start, end):
                found.append(node)
            if node.start <= end:
                _visit(node.right)

        _visit(self.root)
        return found

    def verify_integrity(self):
        """Raise RuntimeError if balance, max_end or parent links are broken."""
        def _check(node) -> int:
            if node is None:
                return 0
            left_height = _check(node.left)
            right_height = _check(node.right)
            if abs(left_height - right_height) > 1:
                raise RuntimeError(f"AVL violation at {node.start}")

            expected_max = max([node.end] + [c.max_end for c in (node.left, node.right) if c is not None])
            if node.max_end != expected_max:
                raise RuntimeError(f"max_end violation at {node.start}")
            for child in (node.left, node.right):
                if child is not None and child.parent is not node:
                    raise RuntimeError(f"broken parent link at {child.start}")
            return 1 + max(left_height, right_height)

        _check(self.root)
