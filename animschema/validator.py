from typing import Any, Iterator

from .ir_types import (
    AnimationNode, ContainerNode, GraphError, NativeObjectNode, NodeKind, NodeRef,
    SceneGraph, ShapeNode, TweenNode,
)


def _refs_in(value: Any) -> Iterator[NodeRef]:
    if isinstance(value, NodeRef):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _refs_in(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _refs_in(v)


def _node_refs(node) -> Iterator[NodeRef]:
    for name in ("children", "bounds", "frame_bounds", "nominal_bounds", "nominal_frame_bounds",
                 "object", "target", "tween_calls", "tweens", "data", "graphics",
                 "transform", "constructor_args"):
        yield from _refs_in(getattr(node, name, None))


def validate(graph: SceneGraph) -> None:
    # 1) No dangling references
    for oid, node in graph.nodes.items():
        for ref in _node_refs(node):
            if ref.id not in graph.nodes:
                raise GraphError("E.REF.DANGLING", f"Node '{oid}' references unknown node '{ref.id}'.")

    # 2) Root lists hold the kind they are named after
    for attr, kind in (("shapes", NodeKind.SHAPE), ("containers", NodeKind.CONTAINER),
                       ("animations", NodeKind.ANIMATION)):
        for ref in getattr(graph, attr):
            node = graph.resolve(ref)
            if node.kind is not kind:
                raise GraphError("E.ROOT.KIND",
                    f"'{ref.id}' listed under {attr} is a {node.kind.value}.")

    # 3) Container children are shapes or containers
    for oid, node in graph.nodes.items():
        if isinstance(node, ContainerNode):
            for ref in node.children:
                if not isinstance(graph.resolve(ref), (ShapeNode, ContainerNode)):
                    raise GraphError("E.CONTAINER.CHILD",
                        f"Container '{oid}' has child '{ref.id}' that is neither shape nor container.")

    # 4) Animations list tweens; tweens call through a native object of {name, args} entries
    for oid, node in graph.nodes.items():
        if isinstance(node, AnimationNode):
            for ref in node.tweens:
                if not isinstance(graph.resolve(ref), TweenNode):
                    raise GraphError("E.ANIM.TWEEN", f"Animation '{oid}' lists '{ref.id}', which is not a tween.")
        elif isinstance(node, TweenNode):
            calls = graph.resolve(node.tween_calls)
            if not isinstance(calls, NativeObjectNode):
                raise GraphError("E.TWEEN.CALLS",
                    f"Tween '{oid}' calls '{calls.id}', which is not a native object.")
            entries = calls.object.values() if isinstance(calls.object, dict) else calls.object
            for entry in entries:
                if isinstance(entry, NodeRef):
                    entry = graph.resolve(entry)
                    entry = entry.object if isinstance(entry, NativeObjectNode) else None
                if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                    raise GraphError("E.TWEEN.CALL",
                        f"Tween '{oid}' has a call without a method name: {entry!r}.")

    # Target kinds are checked by the translator itself.
