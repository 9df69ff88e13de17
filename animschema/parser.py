# animschema/parser.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

from lark import Lark, Transformer, v_args, Token
from lark.exceptions import UnexpectedInput

from .ir_types import NodeRef, SceneGraph
from .loader import build_graph, node_from_record, ref_markers

# ---------- Load grammar ----------
def _load_grammar() -> str:
    path = Path(__file__).with_name("scene_grammar.lark")
    return path.read_text(encoding="utf-8")

_GRAMMAR = _load_grammar()
_parser = Lark(_GRAMMAR, start="script", parser="lalr", propagate_positions=True)

# ADD_* keyword -> node record type
_KEYWORD_TYPES = {
    "ADD_SHAPE": "shape",
    "ADD_CONTAINER": "container",
    "ADD_MOVIE_CLIP": "movie_clip",
    "ADD_NATIVE_OBJECT": "native_object",
    "ADD_TWEEN": "tween",
    "ADD_ANIMATION": "animation",
    "ADD_BOUNDS": "bounds",
}

# script keys that differ from the record's data keys
_DATA_KEYS = {
    "args": "constructorArgs",
    "calls": "tweenCalls",
    "frame_bounds": "frameBounds",
}

# script keys stored on the record itself rather than under data
_RECORD_KEYS = {
    "nominal_bounds": "bounds",
    "nominal_frame_bounds": "frameBounds",
}


def _number(text: str):
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


# ---------- Transformer ----------
class ToGraph(Transformer):
    def __init__(self) -> None:
        super().__init__()
        self.records: List[Tuple[Dict[str, Any], Tuple[int, int]]] = []

    # ----- atoms -----
    @v_args(inline=True)
    def string(self, tok):
        return json.loads(tok)

    @v_args(inline=True)
    def number(self, tok):
        return _number(tok)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def null(self, _):
        return None

    @v_args(inline=True)
    def ref(self, tok):
        return NodeRef(str(tok))

    @v_args(inline=True)
    def name(self, tok):
        return str(tok)

    # ----- composites -----
    def array(self, items):
        return list(items)

    def object(self, members):
        return dict(members)

    @v_args(inline=True)
    def member(self, key, value):
        if isinstance(key, Token) and key.type == "STRING":
            return json.loads(key), value
        return str(key), value

    @v_args(inline=True)
    def pair(self, key, value):
        return str(key), value

    # ----- statements -----
    @v_args(meta=True)
    def stmt(self, meta, children):
        keyword, pairs = children[0], children[1:]
        record: Dict[str, Any] = {"type": _KEYWORD_TYPES[str(keyword)], "data": {}}
        for key, value in pairs:
            if key == "id":
                record["id"] = value
            elif key in _RECORD_KEYS:
                record[_RECORD_KEYS[key]] = value
            elif record["type"] == "bounds" and key == "data":
                record["data"] = value
            else:
                record["data"][_DATA_KEYS.get(key, key)] = value
        # converted after the transform so GraphError is not wrapped in a VisitError
        self.records.append((ref_markers(record), (meta.line, meta.column)))
        return None


# ---------- Public API ----------
class ParseError(Exception):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column

def parse(text: str) -> SceneGraph:
    """
    Parse scene script text into a SceneGraph. Raises ParseError on syntax problems
    and GraphError on duplicate ids or malformed node fields.
    """
    try:
        tree = _parser.parse(text)
    except UnexpectedInput as e:
        # Build a helpful error with line context
        line = getattr(e, 'line', None)
        column = getattr(e, 'column', None)
        lines = text.splitlines()
        context = ""
        if line and 1 <= line <= len(lines):
            src_line = lines[line-1]
            caret = " " * (column-1 if column and column > 0 else 0) + "^"
            context = f"\n{src_line}\n{caret}"
        msg = f"Syntax error at line {line}, column {column}.{context}\nExpected one of: {getattr(e, 'expected', [])}"
        raise ParseError(msg, line, column) from None
    tx = ToGraph()
    tx.transform(tree)
    return build_graph([node_from_record(record, loc=loc) for record, loc in tx.records])


def parse_file(path) -> SceneGraph:
    return parse(Path(path).read_text(encoding="utf-8"))
