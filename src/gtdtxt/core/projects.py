"""Project path allow-list, stored as a trie over path segments."""

from collections.abc import Iterable, Sequence


class _Leaf:
    """Terminal marker: any path with this prefix matches."""

    def __repr__(self) -> str:
        return "Leaf"


LEAF = _Leaf()

# A node maps a segment to either LEAF or a child node.
ProjectNode = dict[str, "_Leaf | ProjectNode"]


def _insert(node: ProjectNode, path: Sequence[str]) -> None:
    head, rest = path[0], path[1:]
    child = node.get(head)
    if child is LEAF:
        # an existing shorter filter already covers this path
        return
    if not rest:
        node[head] = LEAF
        return
    if child is None:
        child = node[head] = {}
    _insert(child, rest)


class ProjectPathTree:
    """
    Prefix matcher for project paths.

    A filter `p/q` matches projects `p/q` and `p/q/r/...`, but not `p`
    or `x/p/q`. Built once; not mutated afterwards.
    """

    def __init__(self, paths: Iterable[Sequence[str]] = ()):
        self._root: ProjectNode = {}
        for path in paths:
            if path:
                _insert(self._root, list(path))

    def __bool__(self) -> bool:
        return bool(self._root)

    def __repr__(self) -> str:
        return f"ProjectPathTree({self._root!r})"

    def matches(self, project: Sequence[str] | None) -> bool:
        if not project:
            return False
        node = self._root
        for segment in project:
            child = node.get(segment)
            if child is None:
                return False
            if child is LEAF:
                return True
            node = child
        # project is shorter than every filter below this point
        return False
