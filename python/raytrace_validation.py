"""
Pixel Validation - trace selected pixels and report the primary ray, the
nearest hit and what every light contributes, then mark those pixels on a
full render.
"""
from dataclasses import dataclass, field
from PIL import Image, ImageDraw
from typing import Tuple, Optional, List

from vector import Vec3
from scene import Scene, Element, Light, scene_from_file
from raytrace_cpu import (
    RGB, primary_ray, nearest_hit, shade_samples, to_rgb, render,
)

MARK_LIT = (0, 255, 0)
MARK_SHADOWED = (255, 0, 0)

@dataclass
class LightSample:
    """What one light adds at a hit point."""
    light: Light
    direction: Vec3
    occluded: bool
    diffuse: Vec3
    specular: Vec3

@dataclass
class PixelTrace:
    """Everything cast_ray works out for a single pixel."""
    x: int
    y: int
    origin: Vec3
    direction: Vec3
    element: Optional[Element] = None
    t: Optional[float] = None
    point: Optional[Vec3] = None
    normal: Optional[Vec3] = None
    samples: List[LightSample] = field(default_factory=list)
    color: RGB = (0, 0, 0)

    @property
    def shadowed(self) -> bool:
        return any(s.occluded for s in self.samples)

def trace_pixel(scene: Scene, x: int, y: int) -> PixelTrace:
    """
    Follow cast_ray for one pixel, keeping every intermediate value.

    The resulting color is the same as cast_ray(scene, x, y).
    """
    ro, rd = primary_ray(scene, x, y)
    trace = PixelTrace(x, y, ro, rd)
    element, t = nearest_hit(scene, ro, rd)
    if element is None:
        return trace

    hit, n, col, samples = shade_samples(scene, element, t, ro, rd)
    trace.samples = [LightSample(light, *sample) for light, sample in zip(scene.lights, samples)]

    trace.element = element
    trace.t = t
    trace.point = hit
    trace.normal = n
    trace.color = to_rgb(col)
    return trace

def _fmt(v: Vec3) -> str:
    return "(" + ", ".join(f"{c:.3f}" for c in v) + ")"

def format_trace(trace: PixelTrace) -> str:
    lines = [f"Pixel ({trace.x}, {trace.y}): ray {_fmt(trace.origin)} -> {_fmt(trace.direction)}"]
    if trace.element is None:
        lines.append("  no hit")
    else:
        lines.append(f"  hit {type(trace.element).__name__} (vertex {trace.element.vertex}) "
                     f"at t={trace.t:.4f}, point {_fmt(trace.point)}, normal {_fmt(trace.normal)}")
        for s in trace.samples:
            state = "occluded" if s.occluded else "visible"
            lines.append(f"  {type(s.light).__name__} (vertex {s.light.vertex}): {state}, "
                         f"diffuse {_fmt(s.diffuse)}, specular {_fmt(s.specular)}")
    lines.append(f"  color {trace.color}")
    return "\n".join(lines)

def mark_pixel(draw: ImageDraw.ImageDraw, x: int, y: int,
               color: Tuple[int, int, int], size: int = 4) -> None:
    draw.line([(x - size, y), (x - 2, y)], fill=color)
    draw.line([(x + 2, y), (x + size, y)], fill=color)
    draw.line([(x, y - size), (x, y - 2)], fill=color)
    draw.line([(x, y + 2), (x, y + size)], fill=color)

def render_ray_validation(scene: Scene, probes: List[Tuple[int, int]],
                          output_path: Optional[str] = "render_validation.png") -> Image.Image:
    """
    Render the scene and cross-mark every probe pixel: green when all lights
    reach it, red when at least one light is blocked.
    """
    img = render(scene, output_path=None)
    draw = ImageDraw.Draw(img)

    print(f"Tracing {len(probes)} probe pixels...")
    traces = [trace_pixel(scene, x, y) for x, y in probes]
    for trace in traces:
        print(format_trace(trace))
        mark_pixel(draw, trace.x, trace.y, MARK_SHADOWED if trace.shadowed else MARK_LIT)

    hits = sum(1 for t in traces if t.element is not None)
    print(f"Probes hitting an element: {hits}/{len(traces)}")

    if output_path is not None:
        img.save(output_path)
        print(f"Saved validation render: {output_path}")
    return img

if __name__ == "__main__":
    import os
    import sys
    from datetime import datetime
    import logging

    logging.basicConfig(level=logging.INFO)

    scene_path = sys.argv[1] if len(sys.argv) > 1 else (
        "../scene.json" if os.path.exists("../scene.json") else "scene.json")
    scene = scene_from_file(scene_path)

    W, H = scene.camera.width, scene.camera.height
    coords = [int(v) for v in sys.argv[2:]]
    if coords:
        probes = list(zip(coords[0::2], coords[1::2]))
    else:
        probes = [(W * i // 4, H * j // 4) for j in range(1, 4) for i in range(1, 4)]

    renders_dir = os.path.join(os.path.dirname(os.path.abspath(scene_path)), "renders")
    os.makedirs(renders_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = os.path.join(renders_dir, f"validation_{timestamp}_{len(probes)}probes.png")

    render_ray_validation(scene, probes, output_path)
