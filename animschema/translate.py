# animschema/translate.py
"""
Scene graph -> flat, JSON-safe animation schema.

Shapes and containers translate independently. Each animation gets its own
block-name scope: every shape, container or movie clip reached from its tweens
(as a tween target or inside call arguments) is emitted once as a construction
block {bn, gn, ...} and referred to by its block name `bn` afterwards.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .ir_types import (
    AnimationNode, ContainerNode, MovieClipNode, NativeObjectNode,
    NodeRef, SceneGraph, ShapeNode,
)
from .loader import node_data

log = logging.getLogger(__name__)


class TranslationError(Exception):
    def __init__(self, code: str, msg: str):
        super().__init__(f"{code}: {msg}")
        self.code = code


class InvalidTargetType(TranslationError):
    def __init__(self, detail: str = ""):
        super().__init__("E.TARGET.TYPE", "Invalid target type" + (f" ({detail})" if detail else ""))


class InvalidContainerChild(TranslationError):
    def __init__(self, detail: str = ""):
        super().__init__("E.CONTAINER.CHILD",
                         "Containers only support shapes and child containers" + (f" ({detail})" if detail else ""))


# ---------- block names ----------
class BlockNameAllocator:
    """Issues bn_<target>_<n> names; n counts up per target for the allocator's lifetime."""

    def __init__(self) -> None:
        self.counters: Dict[str, int] = {}

    def allocate(self, target_id: str, scope: Dict[str, str]) -> str:
        n = self.counters.get(target_id, 0)
        self.counters[target_id] = n + 1
        name = f"bn_{target_id}_{n}"
        scope[target_id] = name
        log.debug("allocated %s", name)
        return name

    def reset(self) -> None:
        self.counters.clear()


@dataclass
class AnimationScope:
    """Construction blocks and block names accumulated while translating one animation."""
    movie_clips: List[Dict[str, Any]] = field(default_factory=list)
    shapes: List[Dict[str, Any]] = field(default_factory=list)
    containers: List[Dict[str, Any]] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)  # gn -> bn


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None (optional fields are omitted, never null)."""
    return {k: v for k, v in d.items() if v is not None}


# ---------- bounds ----------
def translate_bounds(graph: SceneGraph, bounds: Any) -> Any:
    if isinstance(bounds, (list, tuple)):
        return [translate_bounds(graph, b) for b in bounds]
    if isinstance(bounds, NodeRef):
        return node_data(graph.resolve(bounds))
    return bounds


# ---------- construction blocks ----------
def _block_for(node, scope: AnimationScope,
               allocator: BlockNameAllocator, as_target: bool = False) -> str:
    """Return the block name for a shape/container/movie clip, emitting its block on first sight."""
    known = scope.names.get(node.id)
    if known is not None:
        if as_target and isinstance(node, ContainerNode):
            # first seen as a call argument; the target carries transform and visibility
            for block in scope.containers:
                if block["gn"] == node.id:
                    if node.transform is not None:
                        block.setdefault("t", node.transform)
                    block.setdefault("o", node.off is True)
        return known

    bn = allocator.allocate(node.id, scope.names)
    if isinstance(node, MovieClipNode):
        scope.movie_clips.append(_compact({
            "bn": bn, "gn": node.id, "a": node.constructor_args, "t": node.transform,
        }))
    elif isinstance(node, ContainerNode):
        block = {"bn": bn, "gn": node.id}
        if as_target:
            block = _compact({"bn": bn, "gn": node.id, "t": node.transform, "o": node.off is True})
        scope.containers.append(block)
    elif isinstance(node, ShapeNode):
        scope.shapes.append({"bn": bn, "gn": node.id})
    else:
        raise InvalidTargetType(f"'{node.id}' is a {node.kind.value}")
    return bn


def _deref_value(graph: SceneGraph, value: Any, scope: AnimationScope,
                 allocator: BlockNameAllocator) -> Any:
    if isinstance(value, NodeRef):
        node = graph.resolve(value)
        if isinstance(node, NativeObjectNode):
            return dereference_native_object(graph, value, scope, allocator)
        if isinstance(node, (MovieClipNode, ContainerNode, ShapeNode)):
            return _block_for(node, scope, allocator)
        raise InvalidTargetType(f"'{node.id}' is a {node.kind.value}")
    if isinstance(value, dict):
        return {k: _deref_value(graph, v, scope, allocator) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_deref_value(graph, v, scope, allocator) for v in value]
    return value


def dereference_native_object(graph: SceneGraph, ref: NodeRef, scope: AnimationScope,
                              allocator: BlockNameAllocator):
    """
    Build a plain copy of a native object's payload with every embedded node
    reference replaced: shapes, containers and movie clips by their block name
    (recording a construction block in `scope` on first encounter), nested
    native objects by their own dereferenced payload.

    `scope` is mutated in place; blocks are appended in depth-first encounter order.
    """
    node = graph.resolve(ref)
    if not isinstance(node, NativeObjectNode):
        raise InvalidTargetType(f"'{node.id}' is a {node.kind.value}, expected native_object")
    return _deref_value(graph, node.object, scope, allocator)


# ---------- stages ----------
def _translate_shape(graph: SceneGraph, shape: ShapeNode) -> Dict[str, Any]:
    out = dict(shape.graphics or {})
    if shape.transform is not None:
        out["t"] = [shape.transform.get("x"), shape.transform.get("y")]
    if shape.bounds is not None:
        out["bounds"] = translate_bounds(graph, shape.bounds)
    if shape.frame_bounds is not None:
        out["frameBounds"] = translate_bounds(graph, shape.frame_bounds)
    return out


def _translate_container(graph: SceneGraph, container: ContainerNode) -> Dict[str, Any]:
    children = []
    for ref in container.children:
        child = graph.resolve(ref)
        if isinstance(child, ShapeNode):
            children.append(child.id)
        elif isinstance(child, ContainerNode):
            entry: Dict[str, Any] = {"gn": child.id}
            if child.transform is not None:
                entry["t"] = child.transform
            children.append(entry)
        else:
            raise InvalidContainerChild(f"'{child.id}' in '{container.id}' is a {child.kind.value}")

    out: Dict[str, Any] = {"c": children}
    if container.bounds is not None:
        out["b"] = translate_bounds(graph, container.bounds)
    return out


def _translate_animation(graph: SceneGraph, animation: AnimationNode,
                         allocator: BlockNameAllocator) -> Dict[str, Any]:
    scope = AnimationScope()
    tweens: List[List[Dict[str, Any]]] = []

    for tween_ref in animation.tweens:
        tween = graph.resolve(tween_ref)
        target = graph.resolve(tween.target)

        if isinstance(target, (MovieClipNode, ContainerNode, ShapeNode)):
            get_arg = _block_for(target, scope, allocator, as_target=True)
        elif isinstance(target, NativeObjectNode):
            # addressed directly by the player (stage, globals); no construction block
            get_arg = target.object
        else:
            raise InvalidTargetType(f"tween '{tween.id}' targets a {target.kind.value}")

        instructions = [{"n": "get", "a": [get_arg]}]

        calls = dereference_native_object(graph, tween.tween_calls, scope, allocator)
        if isinstance(calls, dict):
            calls = list(calls.values())
        for call in calls:
            args = call.get("args")
            instructions.append({"n": call.get("name"), "a": [] if args is None else args})

        tweens.append(instructions)

    out = {
        "animations": scope.movie_clips,
        "shapes": scope.shapes,
        "containers": scope.containers,
        "tweens": tweens,
        "graphics": [],
    }

    bounds = animation.nominal_bounds
    if animation.bounds is not None:
        bounds = translate_bounds(graph, animation.bounds)
    frame_bounds = animation.nominal_frame_bounds
    if animation.frame_bounds is not None:
        frame_bounds = translate_bounds(graph, animation.frame_bounds)
    if bounds is not None:
        out["bounds"] = bounds
    if frame_bounds is not None:
        out["frameBounds"] = frame_bounds

    log.debug("animation %s: %d tweens, %d clips, %d shapes, %d containers", animation.id,
              len(tweens), len(scope.movie_clips), len(scope.shapes), len(scope.containers))
    return out


def _unresolved(value: Any):
    if isinstance(value, NodeRef):
        raise TranslationError("E.SCHEMA.UNRESOLVED", f"Unresolved reference to '{value.id}' in output.")
    raise TranslationError("E.SCHEMA.UNRESOLVED", f"Value {value!r} is not JSON serializable.")


def normalize(result: Dict[str, Any]) -> Dict[str, Any]:
    """Encode/decode through JSON so the schema holds only plain JSON values."""
    try:
        text = json.dumps(result, default=_unresolved, allow_nan=False)
    except ValueError as e:
        # NaN and +/-Infinity have no JSON spelling
        raise TranslationError("E.SCHEMA.UNRESOLVED", f"Output is not valid JSON: {e}.") from None
    return json.loads(text)


# ---------- Public API ----------
def tree_to_schema(graph: SceneGraph, allocator: Optional[BlockNameAllocator] = None) -> Dict[str, Any]:
    """
    Translate a scene graph into {shapes, containers, animations}.

    Block names come from `allocator`. Without one, a fresh allocator is used, so
    names restart at bn_<id>_0 for every call; share an allocator between calls
    to keep names unique across them.
    """
    if allocator is None:
        allocator = BlockNameAllocator()

    shapes = {}
    for ref in graph.shapes:
        shape = graph.resolve(ref)
        shapes[shape.id] = _translate_shape(graph, shape)

    containers = {}
    for ref in graph.containers:
        container = graph.resolve(ref)
        containers[container.id] = _translate_container(graph, container)

    animations = {}
    for ref in graph.animations:
        animation = graph.resolve(ref)
        animations[animation.id] = _translate_animation(graph, animation, allocator)

    log.debug("translated %d shapes, %d containers, %d animations",
              len(shapes), len(containers), len(animations))
    return normalize({"shapes": shapes, "containers": containers, "animations": animations})
