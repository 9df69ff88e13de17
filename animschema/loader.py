# animschema/loader.py
"""
Boundary between untyped scene documents and the typed SceneGraph.

A document is plain JSON:

    {
      "nodes": [
        {"id": "S1", "type": "shape", "data": {"graphics": {...}, "transform": {"x": 0, "y": 0}}},
        {"id": "C1", "type": "container", "data": {"children": [{"$ref": "S1"}]}},
        ...
      ],
      "shapes": ["S1"], "containers": ["C1"], "animations": [...]
    }

References are written {"$ref": "<id>"} anywhere inside a record. Root lists
that are left out default to every node of that kind, in declaration order.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .ir_types import (
    AnimationNode, BoundsNode, ContainerNode, GraphError, MovieClipNode,
    NativeObjectNode, Node, NodeKind, NodeRef, SceneGraph, ShapeNode, TweenNode,
)

log = logging.getLogger(__name__)

REF_KEY = "$ref"

_ROOTS = (
    ("shapes", NodeKind.SHAPE),
    ("containers", NodeKind.CONTAINER),
    ("animations", NodeKind.ANIMATION),
)


def _refs(value: Any) -> Any:
    """Replace {"$ref": id} markers with NodeRef, recursively."""
    if isinstance(value, dict):
        if set(value) == {REF_KEY}:
            return NodeRef(str(value[REF_KEY]))
        return {k: _refs(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_refs(v) for v in value]
    return value


def ref_markers(value: Any) -> Any:
    """NodeRef values back to {"$ref": id} markers, recursively."""
    if isinstance(value, NodeRef):
        return {REF_KEY: value.id}
    if isinstance(value, dict):
        return {k: ref_markers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [ref_markers(v) for v in value]
    return value


def node_data(node: Node) -> Any:
    """
    The `data` payload of a node as it appears in a document record, with
    camelCase keys and references written as {"$ref": id}. Absent optional
    fields are left out.
    """
    if isinstance(node, BoundsNode):
        return ref_markers(node.data)
    if isinstance(node, ShapeNode):
        data = {"graphics": node.graphics, "transform": node.transform,
                "bounds": node.bounds, "frameBounds": node.frame_bounds}
    elif isinstance(node, ContainerNode):
        data = {"children": node.children, "bounds": node.bounds,
                "transform": node.transform, "off": node.off}
    elif isinstance(node, MovieClipNode):
        data = {"constructorArgs": node.constructor_args, "transform": node.transform,
                "off": node.off}
    elif isinstance(node, NativeObjectNode):
        data = {"object": node.object}
    elif isinstance(node, TweenNode):
        data = {"target": node.target, "tweenCalls": node.tween_calls}
    else:
        data = {"tweens": node.tweens, "bounds": node.bounds, "frameBounds": node.frame_bounds}
    return ref_markers({k: v for k, v in data.items() if v is not None})


def _require_ref(value: Any, what: str, oid: str) -> NodeRef:
    if not isinstance(value, NodeRef):
        raise GraphError("E.NODE.FIELD", f"{what} of '{oid}' must be a node reference, got {value!r}.")
    return value


def node_from_record(record: Dict[str, Any], loc=None) -> Node:
    """Convert one {id, type, data, bounds?, frameBounds?} record into a typed node."""
    oid = record.get("id")
    if oid is None or oid == "":
        raise GraphError("E.NODE.ID", f"Missing id in node record {record!r}.")
    oid = str(oid)
    try:
        kind = NodeKind(record.get("type"))
    except ValueError:
        raise GraphError("E.NODE.TYPE", f"Unknown node type {record.get('type')!r} for '{oid}'.") from None

    if kind is NodeKind.BOUNDS:
        return BoundsNode(id=oid, data=_refs(record.get("data")), loc=loc)

    data = _refs(record.get("data") or {})
    if not isinstance(data, dict):
        raise GraphError("E.NODE.FIELD", f"data of '{oid}' must be a mapping.")

    if kind is NodeKind.SHAPE:
        return ShapeNode(id=oid, graphics=data.get("graphics"), transform=data.get("transform"),
                         bounds=data.get("bounds"), frame_bounds=data.get("frameBounds"), loc=loc)
    if kind is NodeKind.CONTAINER:
        children = [_require_ref(c, "child", oid) for c in data.get("children") or []]
        return ContainerNode(id=oid, children=children, bounds=data.get("bounds"),
                             transform=data.get("transform"), off=data.get("off") is True, loc=loc)
    if kind is NodeKind.MOVIE_CLIP:
        return MovieClipNode(id=oid, constructor_args=data.get("constructorArgs"),
                             transform=data.get("transform"), off=data.get("off") is True, loc=loc)
    if kind is NodeKind.NATIVE_OBJECT:
        obj = data.get("object")
        if obj is None:
            obj = {}
        if not isinstance(obj, (dict, list)):
            raise GraphError("E.NODE.FIELD", f"object of '{oid}' must be a mapping or a list.")
        return NativeObjectNode(id=oid, object=obj, loc=loc)
    if kind is NodeKind.TWEEN:
        return TweenNode(id=oid,
                         target=_require_ref(data.get("target"), "target", oid),
                         tween_calls=_require_ref(data.get("tweenCalls"), "tweenCalls", oid),
                         loc=loc)
    tweens = [_require_ref(t, "tween", oid) for t in data.get("tweens") or []]
    return AnimationNode(id=oid, tweens=tweens,
                         bounds=data.get("bounds"), frame_bounds=data.get("frameBounds"),
                         nominal_bounds=_refs(record.get("bounds")),
                         nominal_frame_bounds=_refs(record.get("frameBounds")),
                         loc=loc)


def build_graph(nodes: List[Node], roots: Optional[Dict[str, List[str]]] = None) -> SceneGraph:
    """Put typed nodes into an arena and fill the root lists."""
    graph = SceneGraph()
    for node in nodes:
        graph.add(node)
    roots = roots or {}
    for attr, kind in _ROOTS:
        ids = roots.get(attr)
        refs = graph.of_kind(kind) if ids is None else [graph.ref(str(i)) for i in ids]
        setattr(graph, attr, refs)
    log.debug("built graph: %d nodes, %d shapes, %d containers, %d animations",
              len(graph.nodes), len(graph.shapes), len(graph.containers), len(graph.animations))
    return graph


def load_graph(document: Dict[str, Any]) -> SceneGraph:
    nodes = [node_from_record(r) for r in document.get("nodes", [])]
    roots = {attr: document[attr] for attr, _ in _ROOTS if attr in document}
    return build_graph(nodes, roots)


def load_graph_file(path) -> SceneGraph:
    text = Path(path).read_text(encoding="utf-8")
    return load_graph(json.loads(text))
