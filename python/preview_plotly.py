"""
Interactive 3D preview of the scene using Plotly.
Helps verify geometry before rendering.
"""
import plotly.graph_objects as go

from vector import WORLD_UP, add, sub, mul, cross, norm, length
from scene import Scene, Sphere, Plane, PointLight, Material, scene_from_file

PLANE_EXTENT = 5.0
DIRECTIONAL_LENGTH = 2.0

def _rgb(material: Material) -> str:
    r, g, b = (max(0, min(255, int(c * 255))) for c in material.diffuse)
    return f'rgb({r}, {g}, {b})'

def _plane_corners(plane: Plane):
    """Corners of a square patch of the plane around its anchor point."""
    u = cross(plane.normal, WORLD_UP)
    if length(u) < 1e-6:
        u = cross(plane.normal, (1.0, 0.0, 0.0))
    u = mul(norm(u), PLANE_EXTENT)
    v = mul(norm(cross(plane.normal, u)), PLANE_EXTENT)
    p = plane.point
    return [add(sub(p, u), mul(v, -1.0)), add(add(p, u), mul(v, -1.0)),
            add(add(p, u), v), add(sub(p, u), v)]

def create_scene_preview(scene: Scene):
    """Create interactive 3D plot of scene."""
    fig = go.Figure()

    for i, element in enumerate(scene.elements):
        if isinstance(element, Sphere):
            c = element.center
            fig.add_trace(go.Scatter3d(
                x=[c[0]], y=[c[1]], z=[c[2]],
                mode='markers',
                marker=dict(size=max(2.0, 10 * element.radius), color=_rgb(element.material),
                            symbol='circle'),
                name=f'Sphere {i+1}'
            ))
        else:
            corners = _plane_corners(element)
            fig.add_trace(go.Mesh3d(
                x=[p[0] for p in corners],
                y=[p[1] for p in corners],
                z=[p[2] for p in corners],
                i=[0, 0], j=[1, 2], k=[2, 3],
                color=_rgb(element.material),
                opacity=0.4,
                name=f'Plane {i+1}'
            ))

    for i, light in enumerate(scene.lights):
        if isinstance(light, PointLight):
            p = light.position
            fig.add_trace(go.Scatter3d(
                x=[p[0]], y=[p[1]], z=[p[2]],
                mode='markers',
                marker=dict(size=6 + 10 * light.intensity, color='yellow', symbol='circle'),
                name=f'Point light {i+1}'
            ))
        else:
            # Drawn as a segment ending at the origin, pointing the way the light travels
            start = mul(norm(light.direction), -DIRECTIONAL_LENGTH)
            fig.add_trace(go.Scatter3d(
                x=[start[0], 0.0], y=[start[1], 0.0], z=[start[2], 0.0],
                mode='lines',
                line=dict(color='orange', width=4),
                name=f'Directional light {i+1}'
            ))

    # Camera
    cam = scene.camera
    look_at = add(cam.position, norm(cam.direction))

    fig.add_trace(go.Scatter3d(
        x=[cam.position[0]],
        y=[cam.position[1]],
        z=[cam.position[2]],
        mode='markers',
        marker=dict(size=10, color='red', symbol='diamond'),
        name='Camera'
    ))

    fig.add_trace(go.Scatter3d(
        x=[cam.position[0], look_at[0]],
        y=[cam.position[1], look_at[1]],
        z=[cam.position[2], look_at[2]],
        mode='lines',
        line=dict(color='red', width=3, dash='dash'),
        name='Camera Look'
    ))

    fig.update_layout(
        title="Scene Preview (Interactive 3D)",
        scene=dict(
            xaxis_title="X",
            yaxis_title="Y",
            zaxis_title="Z",
            aspectmode='data'
        ),
        width=1000,
        height=800
    )

    return fig

if __name__ == "__main__":
    import os
    import sys

    scene_path = sys.argv[1] if len(sys.argv) > 1 else (
        "../scene.json" if os.path.exists("../scene.json") else "scene.json")
    fig = create_scene_preview(scene_from_file(scene_path))
    fig.show()
