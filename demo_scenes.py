#!/usr/bin/env python3
"""
Demonstration of scene-graph translation
Builds a few small animations with the scene script and prints their schema
"""

import json
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from animschema.parser import parse
from animschema.validator import validate
from animschema.translate import tree_to_schema


def demonstrate_scene(name, script):
    """Parse, validate and translate a scene script, then summarize the schema"""
    print(f"\n{'=' * 60}")
    print(f"🎬 {name.upper()}")
    print('=' * 60)

    try:
        graph = parse(script)
        validate(graph)
        schema = tree_to_schema(graph)
    except Exception as e:
        print(f"❌ Translation error: {e}")
        return

    print(f"✅ Translated {len(graph.nodes)} nodes")
    print(f"🔷 Shapes:     {len(schema['shapes'])}")
    print(f"📦 Containers: {len(schema['containers'])}")
    print(f"🎞  Animations: {len(schema['animations'])}")

    for anim_id, anim in schema['animations'].items():
        blocks = len(anim['animations']) + len(anim['shapes']) + len(anim['containers'])
        print(f"\n  {anim_id}: {len(anim['tweens'])} tweens, {blocks} construction blocks")
        for i, tween in enumerate(anim['tweens']):
            calls = ", ".join(f"{ins['n']}({json.dumps(ins['a'])[1:-1]})" for ins in tween)
            print(f"    [{i}] {calls}")


def main():
    """Demonstrate a few scene layouts"""

    print("🌟 SCENE GRAPH -> ANIMATION SCHEMA")

    # 1. A movie clip that plays once
    movie_clip = """
# Single movie clip, played on the first frame
ADD_MOVIE_CLIP id=M, args=[5], transform={x: 1, y: 2}
ADD_NATIVE_OBJECT id=calls-1, object=[{name: "play", args: []}]
ADD_TWEEN id=tw-1, target=@M, calls=@calls-1
ADD_ANIMATION id=intro, tweens=[@tw-1]
    """

    # 2. A container fading in, then swapping one of its shapes
    container = """
# Container built from two shapes
ADD_BOUNDS id=box, data={x: 0, y: 0, width: 100, height: 40}
ADD_SHAPE id=S1, graphics={p: "M0 0L100 0L100 40Z", f: "#f80"}, transform={x: 0, y: 0}, bounds=@box
ADD_SHAPE id=S2, graphics={p: "M0 0L40 40", s: "#000"}, transform={x: 10, y: 5}
ADD_CONTAINER id=C1, children=[@S1, @S2], bounds=@box, off=true
ADD_NATIVE_OBJECT id=fade, object=[{name: "to", args: [{alpha: 1}, 500]}, {name: "call", args: [@S2]}]
ADD_NATIVE_OBJECT id=swap, object=[{name: "addChild", args: [@S2]}]
ADD_TWEEN id=tw-fade, target=@C1, calls=@fade
ADD_TWEEN id=tw-swap, target=@S2, calls=@swap
ADD_ANIMATION id=fade-in, tweens=[@tw-fade, @tw-swap], bounds=@box
    """

    # 3. Stage-level tween on a native object
    stage = """
ADD_NATIVE_OBJECT id=stage, object={name: "stage"}
ADD_NATIVE_OBJECT id=stage-calls, object=[{name: "wait", args: [250]}]
ADD_TWEEN id=tw-stage, target=@stage, calls=@stage-calls
ADD_ANIMATION id=pause, tweens=[@tw-stage], nominal_bounds=[0, 0, 320, 240]
    """

    demonstrate_scene("Movie clip", movie_clip)
    demonstrate_scene("Container fade-in", container)
    demonstrate_scene("Stage tween", stage)


if __name__ == '__main__':
    main()
