import plotly.graph_objects as go

from instructions import (
    VertexInstr, DiffuseInstr, SphereInstr, PlaneInstr, CameraInstr,
    PointLightInstr, DirectionalLightInstr,
)
from scene import construct
from preview_plotly import create_scene_preview


def make_scene():
    return construct([
        VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0)),
        VertexInstr((0.0, -1.0, 0.0), (0.0, 1.0, 0.0)),
        VertexInstr((0.0, 0.0, -5.0), (0.0, 0.0, 1.0)),
        VertexInstr((0.0, 1.0, 2.0), (0.0, 0.0, -1.0)),
        VertexInstr((2.0, 4.0, -3.0), (-1.0, -1.0, 0.0)),
        DiffuseInstr((1.0, 0.5, 0.0)),
        SphereInstr(0),
        PlaneInstr(1),
        PlaneInstr(2),
        CameraInstr(3),
        PointLightInstr(4, 0.5),
        DirectionalLightInstr(4, 0.5),
    ], 32, 32)


def test_one_trace_per_scene_object():
    fig = create_scene_preview(make_scene())
    names = [t.name for t in fig.data]
    assert names == [
        'Sphere 1', 'Plane 2', 'Plane 3',
        'Point light 1', 'Directional light 2',
        'Camera', 'Camera Look',
    ]


def test_trace_kinds_and_colours():
    fig = create_scene_preview(make_scene())
    sphere, floor, wall = fig.data[:3]
    assert isinstance(sphere, go.Scatter3d)
    assert sphere.marker.color == 'rgb(255, 127, 0)'
    assert isinstance(floor, go.Mesh3d)
    assert len(floor.x) == 4
    # Floor patch stays in its plane
    assert set(floor.y) == {-1.0}
    assert set(wall.z) == {-5.0}


def test_camera_look_line():
    fig = create_scene_preview(make_scene())
    look = fig.data[-1]
    assert tuple(look.x) == (0.0, 0.0)
    assert tuple(look.y) == (1.0, 1.0)
    assert tuple(look.z) == (2.0, 1.0)
