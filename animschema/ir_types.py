from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union


class GraphError(Exception):
    def __init__(self, code: str, msg: str):
        super().__init__(f"{code}: {msg}")
        self.code = code


class NodeKind(str, Enum):
    SHAPE = "shape"
    CONTAINER = "container"
    MOVIE_CLIP = "movie_clip"
    NATIVE_OBJECT = "native_object"
    TWEEN = "tween"
    ANIMATION = "animation"
    BOUNDS = "bounds"


@dataclass(frozen=True)
class NodeRef:
    id: str


Loc = Optional[Tuple[int, int]]  # (line, column) of the ADD_* statement, if parsed


# ---------- node kinds ----------
@dataclass
class ShapeNode:
    kind: ClassVar[NodeKind] = NodeKind.SHAPE
    id: str
    graphics: Optional[Dict[str, Any]] = None
    transform: Optional[Dict[str, Any]] = None  # {x, y}
    bounds: Any = None
    frame_bounds: Any = None
    loc: Loc = None


@dataclass
class ContainerNode:
    kind: ClassVar[NodeKind] = NodeKind.CONTAINER
    id: str
    children: List[NodeRef] = field(default_factory=list)
    bounds: Any = None
    transform: Optional[Dict[str, Any]] = None
    off: bool = False
    loc: Loc = None


@dataclass
class MovieClipNode:
    kind: ClassVar[NodeKind] = NodeKind.MOVIE_CLIP
    id: str
    constructor_args: Any = None
    transform: Optional[Dict[str, Any]] = None
    off: bool = False  # kept in the record payload (loader.node_data); clip blocks carry no `o`
    loc: Loc = None


@dataclass
class NativeObjectNode:
    kind: ClassVar[NodeKind] = NodeKind.NATIVE_OBJECT
    id: str
    object: Union[Dict[str, Any], List[Any]] = field(default_factory=dict)
    loc: Loc = None


@dataclass
class TweenNode:
    kind: ClassVar[NodeKind] = NodeKind.TWEEN
    id: str
    target: NodeRef
    tween_calls: NodeRef
    loc: Loc = None


@dataclass
class AnimationNode:
    kind: ClassVar[NodeKind] = NodeKind.ANIMATION
    id: str
    tweens: List[NodeRef] = field(default_factory=list)
    bounds: Any = None
    frame_bounds: Any = None
    nominal_bounds: Any = None        # record-level bounds, used when data carries none
    nominal_frame_bounds: Any = None
    loc: Loc = None


@dataclass
class BoundsNode:
    kind: ClassVar[NodeKind] = NodeKind.BOUNDS
    id: str
    data: Any = None
    loc: Loc = None


Node = Union[ShapeNode, ContainerNode, MovieClipNode, NativeObjectNode,
             TweenNode, AnimationNode, BoundsNode]

NODE_TYPES: Dict[NodeKind, type] = {
    cls.kind: cls
    for cls in (ShapeNode, ContainerNode, MovieClipNode, NativeObjectNode,
                TweenNode, AnimationNode, BoundsNode)
}


# ---------- arena ----------
@dataclass
class SceneGraph:
    nodes: Dict[str, Node] = field(default_factory=dict)
    shapes: List[NodeRef] = field(default_factory=list)
    containers: List[NodeRef] = field(default_factory=list)
    animations: List[NodeRef] = field(default_factory=list)

    def add(self, node: Node) -> NodeRef:
        if node.id in self.nodes:
            where = f" at line {node.loc[0]}" if node.loc else ""
            raise GraphError("E.ID.DUP", f"Duplicate id '{node.id}'{where}.")
        self.nodes[node.id] = node
        return NodeRef(node.id)

    def ref(self, node_id: str) -> NodeRef:
        if node_id not in self.nodes:
            raise GraphError("E.REF.DANGLING", f"No node with id '{node_id}'.")
        return NodeRef(node_id)

    def resolve(self, ref: NodeRef) -> Node:
        try:
            return self.nodes[ref.id]
        except KeyError:
            raise GraphError("E.REF.DANGLING", f"Reference to unknown node '{ref.id}'.") from None

    def of_kind(self, kind: NodeKind) -> List[NodeRef]:
        return [NodeRef(oid) for oid, n in self.nodes.items() if n.kind is kind]
