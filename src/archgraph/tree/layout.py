"""Tidy tree layout for the visible capability tree.

Positions come from the Buchheim/Walker linear-time refinement of
Reingold-Tilford, the same algorithm as ``d3.tree``. Coordinates follow its
convention:

* ``x`` is the breadth axis (drawn vertically, scaled to the inner height);
* ``y`` is the depth axis (drawn horizontally, ``depth * depth_step``).

A painter draws node ``n`` at screen position ``(n.y, n.x)``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from archgraph.config import TreeLayoutConfig
from archgraph.tree.visibility import VisibleTree

Point = tuple[float, float]


@dataclass(frozen=True)
class PositionedNode:
    """A visible tree node with its current and previous position."""

    id: str
    depth: int
    x: float
    y: float
    x0: float
    y0: float
    parent_id: str | None = None
    has_hidden_children: bool = False

    @property
    def screen(self) -> Point:
        return self.y, self.x

    @property
    def previous_screen(self) -> Point:
        return self.y0, self.x0


@dataclass(frozen=True)
class TreeEdge:
    """Parent -> child edge with a cubic "diagonal" in screen coordinates.

    ``points`` is (start, control1, control2, end) for a path
    ``M start C control1 control2 end``.
    """

    source: str
    target: str
    points: tuple[Point, Point, Point, Point]

    def path(self) -> str:
        (sx, sy), (c1x, c1y), (c2x, c2y), (tx, ty) = self.points
        return f"M {sx} {sy} C {c1x} {c1y}, {c2x} {c2y}, {tx} {ty}"


def diagonal(source: Point, target: Point) -> tuple[Point, Point, Point, Point]:
    """Horizontal cubic link between two screen points."""
    (sx, sy), (tx, ty) = source, target
    mid = (sx + tx) / 2
    return (sx, sy), (mid, sy), (mid, ty), (tx, ty)


@dataclass
class TreeLayout:
    """Result of one layout pass.

    ``exiting`` maps ids that were laid out last time but are now hidden to
    the position they should collapse into (their nearest visible ancestor).
    """

    nodes: dict[str, PositionedNode] = field(default_factory=dict)
    edges: list[TreeEdge] = field(default_factory=list)
    exiting: dict[str, Point] = field(default_factory=dict)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[PositionedNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def position(self, node_id: str) -> Point:
        node = self.nodes[node_id]
        return node.x, node.y


# =============================================================================
# Buchheim / Walker
# =============================================================================


class _WalkNode:
    """Scratch state for one node during the layout walk."""

    __slots__ = (
        "id",
        "parent",
        "children",
        "index",
        "ancestor",
        "thread",
        "prelim",
        "mod",
        "change",
        "shift",
        "apportion_anchor",
        "x",
    )

    def __init__(self, node_id: str | None, index: int) -> None:
        self.id = node_id
        self.parent: _WalkNode | None = None
        self.children: list[_WalkNode] = []
        self.index = index
        self.ancestor: _WalkNode = self
        self.thread: _WalkNode | None = None
        self.prelim = 0.0
        self.mod = 0.0
        self.change = 0.0
        self.shift = 0.0
        self.apportion_anchor: _WalkNode | None = None
        self.x = 0.0


def _next_left(v: _WalkNode) -> _WalkNode | None:
    return v.children[0] if v.children else v.thread


def _next_right(v: _WalkNode) -> _WalkNode | None:
    return v.children[-1] if v.children else v.thread


def _move_subtree(wm: _WalkNode, wp: _WalkNode, shift: float) -> None:
    change = shift / (wp.index - wm.index)
    wp.change -= change
    wp.shift += shift
    wm.change += change
    wp.prelim += shift
    wp.mod += shift


def _execute_shifts(v: _WalkNode) -> None:
    shift = 0.0
    change = 0.0
    for w in reversed(v.children):
        w.prelim += shift
        w.mod += shift
        change += w.change
        shift += w.shift + change


def _next_ancestor(vim: _WalkNode, v: _WalkNode, ancestor: _WalkNode) -> _WalkNode:
    return vim.ancestor if vim.ancestor.parent is v.parent else ancestor


class _Buchheim:
    def __init__(self, separation: Callable[[_WalkNode, _WalkNode], float]) -> None:
        self.separation = separation

    def first_walk(self, v: _WalkNode) -> None:
        siblings = v.parent.children
        w = siblings[v.index - 1] if v.index else None
        if v.children:
            _execute_shifts(v)
            midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
            if w is not None:
                v.prelim = w.prelim + self.separation(v, w)
                v.mod = v.prelim - midpoint
            else:
                v.prelim = midpoint
        elif w is not None:
            v.prelim = w.prelim + self.separation(v, w)
        v.parent.apportion_anchor = self.apportion(v, w, v.parent.apportion_anchor or siblings[0])

    def apportion(self, v: _WalkNode, w: _WalkNode | None, ancestor: _WalkNode) -> _WalkNode:
        if w is None:
            return ancestor
        vip = vop = v
        vim: _WalkNode | None = w
        vom: _WalkNode | None = v.parent.children[0]
        sip = vip.mod
        sop = vop.mod
        sim = vim.mod
        som = vom.mod
        vim = _next_right(vim)
        vip = _next_left(vip)
        while vim is not None and vip is not None:
            vom = _next_left(vom)
            vop = _next_right(vop)
            vop.ancestor = v
            shift = vim.prelim + sim - vip.prelim - sip + self.separation(vim, vip)
            if shift > 0:
                _move_subtree(_next_ancestor(vim, v, ancestor), v, shift)
                sip += shift
                sop += shift
            sim += vim.mod
            sip += vip.mod
            som += vom.mod
            sop += vop.mod
            vim = _next_right(vim)
            vip = _next_left(vip)
        if vim is not None and _next_right(vop) is None:
            vop.thread = vim
            vop.mod += sim - sop
        if vip is not None and _next_left(vom) is None:
            vom.thread = vip
            vom.mod += sip - som
            ancestor = v
        return ancestor

    @staticmethod
    def second_walk(v: _WalkNode) -> None:
        v.x = v.prelim + v.parent.mod
        v.mod += v.parent.mod


def _build_walk_tree(visible: VisibleTree) -> tuple[_WalkNode, list[_WalkNode]]:
    """Mirror the visible tree; returns the root and nodes in pre-order."""
    root = _WalkNode(visible.root_id, 0)
    # Sentinel parent so the root is handled like any other first child.
    sentinel = _WalkNode(None, 0)
    sentinel.children = [root]
    root.parent = sentinel

    preorder = []
    stack = [root]
    while stack:
        node = stack.pop()
        preorder.append(node)
        for index, child_id in enumerate(visible.children[node.id]):
            child = _WalkNode(child_id, index)
            child.parent = node
            node.children.append(child)
        stack.extend(reversed(node.children))
    return root, preorder


def _postorder(root: _WalkNode) -> list[_WalkNode]:
    """Children before parents, siblings left to right."""
    order: list[_WalkNode] = []
    stack: list[tuple[_WalkNode, bool]] = [(root, False)]
    while stack:
        node, visited = stack.pop()
        if visited:
            order.append(node)
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))
    return order


# =============================================================================
# Engine
# =============================================================================


class TreeLayoutEngine:
    """Lays out a VisibleTree and carries positions between passes.

    Args:
        config: Viewport and spacing settings
    """

    def __init__(self, config: TreeLayoutConfig | None = None) -> None:
        self.config = config or TreeLayoutConfig()

    def breadth_positions(self, visible: VisibleTree) -> dict[str, float]:
        """Breadth coordinate per visible node, scaled to the inner height."""
        if not len(visible):
            return {}
        config = self.config

        def separation(a: _WalkNode, b: _WalkNode) -> float:
            return config.sibling_separation if a.parent is b.parent else config.cousin_separation

        root, preorder = _build_walk_tree(visible)
        walker = _Buchheim(separation)
        for node in _postorder(root):
            walker.first_walk(node)
        root.parent.mod = -root.prelim
        for node in preorder:
            walker.second_walk(node)

        left = min(preorder, key=lambda n: n.x)
        right = max(preorder, key=lambda n: n.x)
        s = 1.0 if left is right else separation(left, right) / 2
        tx = s - left.x
        kx = config.inner_height / (right.x + s + tx)
        return {node.id: (node.x + tx) * kx for node in preorder}

    def layout(self, visible: VisibleTree, previous: TreeLayout | None = None) -> TreeLayout:
        """Compute positions for every visible node.

        Nodes already present in ``previous`` keep their old position as
        ``x0, y0``; new nodes start from their nearest ancestor's old
        position so the painter can animate them out of it.
        """
        breadth = self.breadth_positions(visible)
        if not breadth:
            return TreeLayout(exiting=self._exiting(visible, previous, {}))

        tree = visible.tree
        current: dict[str, Point] = {
            node_id: (breadth[node_id], tree.depth(node_id) * self.config.depth_step) for node_id in visible.order
        }
        root_start = current[visible.root_id]

        nodes: dict[str, PositionedNode] = {}
        for node_id in visible.order:
            x, y = current[node_id]
            x0, y0 = self._start_position(node_id, visible, previous, root_start)
            nodes[node_id] = PositionedNode(
                id=node_id,
                depth=tree.depth(node_id),
                x=x,
                y=y,
                x0=x0,
                y0=y0,
                parent_id=tree.parent(node_id),
                has_hidden_children=visible.has_hidden_children(node_id),
            )

        edges = [
            TreeEdge(source=parent, target=child, points=diagonal(nodes[parent].screen, nodes[child].screen))
            for parent, child in visible.edges()
        ]
        return TreeLayout(nodes=nodes, edges=edges, exiting=self._exiting(visible, previous, current))

    @staticmethod
    def _start_position(
        node_id: str,
        visible: VisibleTree,
        previous: TreeLayout | None,
        fallback: Point,
    ) -> Point:
        if previous is None:
            return fallback
        if node_id in previous:
            return previous.position(node_id)
        for ancestor in visible.tree.ancestors(node_id):
            if ancestor in previous:
                return previous.position(ancestor)
        return fallback

    @staticmethod
    def _exiting(
        visible: VisibleTree,
        previous: TreeLayout | None,
        current: dict[str, Point],
    ) -> dict[str, Point]:
        if previous is None:
            return {}
        exiting: dict[str, Point] = {}
        for node_id in previous.nodes:
            if node_id in current:
                continue
            target = next((a for a in visible.tree.ancestors(node_id) if a in current), None)
            exiting[node_id] = current[target] if target is not None else previous.position(node_id)
        return exiting
