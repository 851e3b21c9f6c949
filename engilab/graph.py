"""Editable graph model behind the graph-basics level.

A :class:`Graph` holds nodes with canvas coordinates and edges that are individually
directed or undirected.  Editing follows the rules of the editor widget:

* clicking two nodes toggles an edge between them; in undirected mode any edge joining
  the pair counts as a match, in directed mode only an edge with the same direction
  and directedness does;
* removing a node removes every edge touching it;
* weights must be finite numbers.

The graph serialises to ``{"nodes": [...], "edges": [...], "directed": bool,
"weighted": bool}`` with edges using ``from``/``to`` keys.
"""

from __future__ import annotations

import json
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .errors import InvalidInput, InvalidWeight, MalformedImport
from .ids import IdAllocator
from .logging_config import get_logger

logger = get_logger(__name__)

CANVAS_WIDTH = 780
CANVAS_HEIGHT = 300
NODE_HIT_RADIUS = 22.0


@dataclass
class Node:
    id: str
    x: float
    y: float
    label: str = ""


@dataclass
class Edge:
    id: str
    source: str
    target: str
    weight: Optional[float] = None
    directed: bool = False

    def joins(self, a: str, b: str) -> bool:
        """Whether the edge connects ``a`` and ``b`` in either order."""

        return (self.source == a and self.target == b) or (self.source == b and self.target == a)


class Neighbor(NamedTuple):
    neighbor: str
    weight: Optional[float]


def _parse_weight(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidWeight(f"invalid weight {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidWeight(f"invalid weight {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidWeight(f"weight must be finite, got {value!r}")
    return number


class Graph:
    """Mutable graph with per-widget directed/weighted editing modes."""

    def __init__(self, *, directed: bool = False, weighted: bool = False) -> None:
        self.directed = directed
        self.weighted = weighted
        self._nodes: List[Node] = []
        self._edges: List[Edge] = []
        self._ids = IdAllocator()

    # --- views -----------------------------------------------------------------

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._edges)

    def node(self, node_id: str) -> Node:
        for node in self._nodes:
            if node.id == node_id:
                return node
        raise InvalidInput(f"unknown node {node_id!r}")

    def edge(self, edge_id: str) -> Edge:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        raise InvalidInput(f"unknown edge {edge_id!r}")

    def _taken(self) -> set:
        return {node.id for node in self._nodes} | {edge.id for edge in self._edges}

    # --- nodes -----------------------------------------------------------------

    def add_node(self, x: float, y: float, label: Optional[str] = None) -> str:
        """Add a node at ``(x, y)`` and return its id; labels default to the node count."""

        node_id = self._ids.allocate("n", self._taken())
        if label is None:
            label = str(len(self._nodes) + 1)
        self._nodes.append(Node(id=node_id, x=float(x), y=float(y), label=label))
        return node_id

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.node(node_id)
        node.x, node.y = float(x), float(y)

    def remove_node(self, node_id: str) -> List[str]:
        """Remove a node and every incident edge; return the removed edge ids."""

        self.node(node_id)
        removed = [edge.id for edge in self._edges if node_id in (edge.source, edge.target)]
        self._nodes = [node for node in self._nodes if node.id != node_id]
        self._edges = [edge for edge in self._edges if node_id not in (edge.source, edge.target)]
        logger.debug("Removed node %s and %d incident edges", node_id, len(removed))
        return removed

    def node_at(self, x: float, y: float, radius: float = NODE_HIT_RADIUS) -> Optional[Node]:
        """Return the first node whose centre lies within *radius* of ``(x, y)``."""

        for node in self._nodes:
            if (x - node.x) ** 2 + (y - node.y) ** 2 <= radius * radius:
                return node
        return None

    # --- edges -----------------------------------------------------------------

    def find_edge(self, a: str, b: str, directed: Optional[bool] = None) -> Optional[Edge]:
        """Return the edge that a toggle between ``a`` and ``b`` would act on."""

        if directed is None:
            directed = self.directed
        for edge in self._edges:
            if edge.source == a and edge.target == b and edge.directed == directed:
                return edge
            if not directed and edge.joins(a, b):
                return edge
        return None

    def toggle_edge(
        self,
        a: str,
        b: str,
        directed: Optional[bool] = None,
        weighted: Optional[bool] = None,
    ) -> Optional[Edge]:
        """Remove the matching edge between ``a`` and ``b`` or create one.

        Returns the new edge, or ``None`` when an existing edge was removed.  New edges
        get weight ``1`` when *weighted* (default: the graph's mode) is set.
        """

        if directed is None:
            directed = self.directed
        if weighted is None:
            weighted = self.weighted
        self.node(a)
        self.node(b)
        if a == b:
            raise InvalidInput("an edge needs two distinct nodes")

        existing = self.find_edge(a, b, directed)
        if existing is not None:
            self._edges.remove(existing)
            return None
        edge = Edge(
            id=self._ids.allocate("e", self._taken()),
            source=a,
            target=b,
            weight=1.0 if weighted else None,
            directed=directed,
        )
        self._edges.append(edge)
        return edge

    def remove_edge(self, edge_id: str) -> None:
        self._edges.remove(self.edge(edge_id))

    def set_edge_weight(self, edge_id: str, value: Any) -> float:
        """Set the weight of an edge; rejects anything that is not a finite number."""

        edge = self.edge(edge_id)
        weight = _parse_weight(value)
        edge.weight = weight
        return weight

    # --- derived structures ----------------------------------------------------

    def adjacency(self) -> Dict[str, List[Neighbor]]:
        """One-hop neighbour lists per node; undirected edges appear at both ends."""

        result: Dict[str, List[Neighbor]] = {node.id: [] for node in self._nodes}
        for edge in self._edges:
            result[edge.source].append(Neighbor(edge.target, edge.weight))
            if not edge.directed:
                result[edge.target].append(Neighbor(edge.source, edge.weight))
        return result

    def adjacency_matrix(self) -> Tuple[List[str], List[List[float]]]:
        """Return ``(ids, matrix)`` indexed by the current node order.

        A cell holds the edge weight (``1`` for unweighted edges) or ``0`` when there is
        no edge.
        """

        ids = [node.id for node in self._nodes]
        index = {node_id: position for position, node_id in enumerate(ids)}
        matrix = [[0.0 for _ in ids] for _ in ids]
        for edge in self._edges:
            value = 1.0 if edge.weight is None else edge.weight
            matrix[index[edge.source]][index[edge.target]] = value
            if not edge.directed:
                matrix[index[edge.target]][index[edge.source]] = value
        return ids, matrix

    # --- bulk editing ----------------------------------------------------------

    def clear(self) -> None:
        self._nodes = []
        self._edges = []

    def seed(self, count: int = 8) -> List[str]:
        """Lay out ``count`` fresh nodes on the default grid (eight per row)."""

        self.clear()
        return [
            self.add_node(60 + (i % 8) * 90, 40 + (i // 8) * 80, label=str(i + 1))
            for i in range(max(0, count))
        ]

    def randomize(self, count: int = 8, probability: float = 0.18, *, rng: random.Random | None = None) -> None:
        """Replace the graph with ``count`` random nodes joined with *probability*."""

        if rng is None:
            rng = random.Random()
        self.clear()
        ids = [
            self.add_node(
                40 + rng.random() * (CANVAS_WIDTH - 80),
                30 + rng.random() * (CANVAS_HEIGHT - 60),
                label=str(i + 1),
            )
            for i in range(count)
        ]
        for i in range(count):
            for j in range(0 if self.directed else i + 1, count):
                if i == j or rng.random() >= probability:
                    continue
                self._edges.append(
                    Edge(
                        id=self._ids.allocate("e", self._taken()),
                        source=ids[i],
                        target=ids[j],
                        weight=float(math.ceil(rng.random() * 10) or 1) if self.weighted else None,
                        directed=self.directed,
                    )
                )

    # --- documents -------------------------------------------------------------

    def to_document(self) -> Dict[str, Any]:
        return {
            "nodes": [{"id": n.id, "x": n.x, "y": n.y, "label": n.label} for n in self._nodes],
            "edges": [
                {"id": e.id, "from": e.source, "to": e.target, "weight": e.weight, "directed": e.directed}
                for e in self._edges
            ],
            "directed": self.directed,
            "weighted": self.weighted,
        }

    def to_json(self, **kwargs: Any) -> str:
        kwargs.setdefault("indent", 2)
        return json.dumps(self.to_document(), **kwargs)

    def load_document(self, document: Any) -> None:
        """Replace the graph with *document*; on any error the graph is left unchanged."""

        if not isinstance(document, dict):
            raise MalformedImport("graph document must be a JSON object")
        raw_nodes, raw_edges = document.get("nodes"), document.get("edges")
        if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
            raise MalformedImport("graph document needs 'nodes' and 'edges' arrays")

        try:
            nodes = [_node_from_document(item) for item in raw_nodes]
            edges = [_edge_from_document(item) for item in raw_edges]
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedImport(f"invalid graph entry: {exc}") from exc

        node_ids = [node.id for node in nodes]
        if len(set(node_ids)) != len(node_ids):
            raise MalformedImport("duplicate node ids")
        edge_ids = [edge.id for edge in edges]
        if len(set(edge_ids)) != len(edge_ids):
            raise MalformedImport("duplicate edge ids")
        known = set(node_ids)
        if known & set(edge_ids):
            raise MalformedImport("edge ids must not reuse node ids")
        for edge in edges:
            if edge.source not in known or edge.target not in known:
                raise MalformedImport(f"edge {edge.id!r} references a missing node")
            if edge.source == edge.target:
                raise MalformedImport(f"edge {edge.id!r} is a self-loop")

        self._nodes = nodes
        self._edges = edges
        self.directed = bool(document.get("directed", False))
        self.weighted = bool(document.get("weighted", False))
        logger.info("Imported graph with %d nodes and %d edges", len(nodes), len(edges))

    def load_json(self, text: str) -> None:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Rejected graph import: %s", exc)
            raise MalformedImport("failed to parse JSON") from exc
        self.load_document(document)

    def snapshot(self) -> Dict[str, Any]:
        ids, matrix = self.adjacency_matrix()
        snapshot = self.to_document()
        snapshot["adjacency"] = {
            node_id: [{"neighbor": n.neighbor, "weight": n.weight} for n in neighbors]
            for node_id, neighbors in self.adjacency().items()
        }
        snapshot["matrix"] = {"ids": ids, "cells": matrix}
        return snapshot


def _node_from_document(item: Any) -> Node:
    if not isinstance(item, dict):
        raise TypeError(f"node entry must be an object, got {item!r}")
    return Node(id=str(item["id"]), x=float(item["x"]), y=float(item["y"]), label=str(item.get("label", "")))


def _edge_from_document(item: Any) -> Edge:
    if not isinstance(item, dict):
        raise TypeError(f"edge entry must be an object, got {item!r}")
    weight = item.get("weight")
    return Edge(
        id=str(item["id"]),
        source=str(item["from"]),
        target=str(item["to"]),
        weight=None if weight is None else _parse_weight(weight),
        directed=bool(item.get("directed", False)),
    )

