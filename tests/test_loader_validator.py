#!/usr/bin/env python3
"""
Tests for loading JSON scene documents and for structural validation.
"""

import json
import os
import sys
import tempfile
import unittest
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from animschema.ir_types import GraphError, NodeRef, ShapeNode, TweenNode
from animschema.loader import load_graph, load_graph_file, node_from_record
from animschema.parser import parse
from animschema.translate import tree_to_schema
from animschema.validator import validate


def ref(oid):
    return {"$ref": oid}


DOCUMENT = {
    "nodes": [
        {"id": "S1", "type": "shape", "data": {"graphics": {"p": "M0 0"}, "transform": {"x": 4, "y": 5}}},
        {"id": "S2", "type": "shape"},
        {"id": "C1", "type": "container", "data": {"children": [ref("S1"), ref("S2")]}},
        {"id": "M", "type": "movie_clip", "data": {"constructorArgs": [5], "transform": {"x": 1, "y": 2}}},
        {"id": "N1", "type": "native_object", "data": {"object": [{"name": "play", "args": [ref("S2")]}]}},
        {"id": "T1", "type": "tween", "data": {"target": ref("M"), "tweenCalls": ref("N1")}},
        {"id": "A1", "type": "animation", "data": {"tweens": [ref("T1")]},
         "bounds": [0, 0, 10, 10]},
    ],
    "shapes": ["S2", "S1"],
    "containers": ["C1"],
    "animations": ["A1"],
}


class TestLoader(unittest.TestCase):

    def test_load_document(self):
        graph = load_graph(DOCUMENT)
        self.assertEqual(graph.shapes, [NodeRef('S2'), NodeRef('S1')])
        self.assertEqual(graph.nodes['C1'].children, [NodeRef('S1'), NodeRef('S2')])
        self.assertEqual(graph.nodes['N1'].object, [{'name': 'play', 'args': [NodeRef('S2')]}])
        self.assertEqual(graph.nodes['A1'].nominal_bounds, [0, 0, 10, 10])

    def test_translate_loaded_document(self):
        schema = tree_to_schema(load_graph(DOCUMENT))
        self.assertEqual(list(schema['shapes']), ['S2', 'S1'])
        self.assertEqual(schema['shapes']['S1'], {'p': 'M0 0', 't': [4, 5]})
        self.assertEqual(schema['containers'], {'C1': {'c': ['S1', 'S2']}})
        anim = schema['animations']['A1']
        self.assertEqual(anim['shapes'], [{'bn': 'bn_S2_0', 'gn': 'S2'}])
        self.assertEqual(anim['tweens'], [[{'n': 'get', 'a': ['bn_M_0']},
                                           {'n': 'play', 'a': ['bn_S2_0']}]])
        self.assertEqual(anim['bounds'], [0, 0, 10, 10])

    def test_roots_default_to_every_node_of_kind(self):
        doc = {"nodes": DOCUMENT["nodes"]}
        graph = load_graph(doc)
        self.assertEqual(graph.shapes, [NodeRef('S1'), NodeRef('S2')])
        self.assertEqual(graph.animations, [NodeRef('A1')])

    def test_unknown_type(self):
        with self.assertRaises(GraphError) as ctx:
            node_from_record({"id": "X", "type": "sprite", "data": {}})
        self.assertEqual(ctx.exception.code, 'E.NODE.TYPE')

    def test_missing_id(self):
        with self.assertRaises(GraphError) as ctx:
            node_from_record({"type": "shape"})
        self.assertEqual(ctx.exception.code, 'E.NODE.ID')

    def test_record_conversion(self):
        node = node_from_record({"id": 7, "type": "tween",
                                 "data": {"target": ref("S1"), "tweenCalls": ref("N1")}})
        self.assertIsInstance(node, TweenNode)
        self.assertEqual(node.id, '7')
        shape = node_from_record({"id": "S", "type": "shape", "data": {"bounds": [ref("B"), [1, 2]]}})
        self.assertIsInstance(shape, ShapeNode)
        self.assertEqual(shape.bounds, [NodeRef('B'), [1, 2]])

    def test_unknown_root_id(self):
        with self.assertRaises(GraphError) as ctx:
            load_graph({"nodes": [], "shapes": ["nope"]})
        self.assertEqual(ctx.exception.code, 'E.REF.DANGLING')

    def test_load_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'scene.json')
            with open(path, 'w', encoding='utf-8') as fh:
                json.dump(DOCUMENT, fh)
            graph = load_graph_file(path)
        self.assertEqual(len(graph.nodes), len(DOCUMENT['nodes']))


class TestValidator(unittest.TestCase):

    def assertRule(self, script, code):
        with self.assertRaises(GraphError) as ctx:
            validate(parse(script))
        self.assertEqual(ctx.exception.code, code)

    def test_valid_graph(self):
        validate(load_graph(DOCUMENT))

    def test_dangling_reference(self):
        self.assertRule("""
ADD_NATIVE_OBJECT id=N1, object=[{name: "swap", args: [@ghost]}]
        """, 'E.REF.DANGLING')

    def test_root_kind(self):
        graph = load_graph({
            "nodes": [{"id": "C1", "type": "container"}],
            "shapes": ["C1"],
        })
        with self.assertRaises(GraphError) as ctx:
            validate(graph)
        self.assertEqual(ctx.exception.code, 'E.ROOT.KIND')

    def test_container_child(self):
        self.assertRule("""
ADD_MOVIE_CLIP id=M
ADD_CONTAINER id=C1, children=[@M]
        """, 'E.CONTAINER.CHILD')

    def test_animation_lists_tweens(self):
        self.assertRule("""
ADD_SHAPE id=S1
ADD_ANIMATION id=A1, tweens=[@S1]
        """, 'E.ANIM.TWEEN')

    def test_tween_calls_native_object(self):
        self.assertRule("""
ADD_SHAPE id=S1
ADD_TWEEN id=T1, target=@S1, calls=@S1
        """, 'E.TWEEN.CALLS')

    def test_tween_call_needs_name(self):
        self.assertRule("""
ADD_SHAPE id=S1
ADD_NATIVE_OBJECT id=N1, object=[{args: [1]}]
ADD_TWEEN id=T1, target=@S1, calls=@N1
        """, 'E.TWEEN.CALL')

    def test_call_entries_by_reference(self):
        validate(parse("""
ADD_SHAPE id=S1
ADD_NATIVE_OBJECT id=call1, object={name: "play", args: []}
ADD_NATIVE_OBJECT id=N1, object=[@call1]
ADD_TWEEN id=T1, target=@S1, calls=@N1
        """))


if __name__ == '__main__':
    unittest.main()
