import json
import logging
import math

import pytest

from instructions import (
    VertexInstr, AmbientInstr, DiffuseInstr, SpecularInstr,
    SphereInstr, PlaneInstr, CameraInstr,
    PointLightInstr, DirectionalLightInstr,
    SettingsInstr, CommentInstr,
)
from scene import (
    construct, load_scene, validate_scene, instructions_from_scene, scene_from_file,
    Sphere, Plane, PointLight, DirectionalLight, Material, Settings,
    DEFAULT_CAMERA_VERTEX,
)


@pytest.fixture
def instructions():
    return [
        VertexInstr((0.0, 0.0, -5.0), (2.0, 0.0, 0.0)),
        VertexInstr((0.0, -1.0, 0.0), (0.0, 3.0, 0.0)),
        VertexInstr((1.0, 2.0, 3.0), (0.0, 0.0, -1.0)),
        VertexInstr((5.0, 5.0, 5.0), (-1.0, -1.0, 0.0)),
        AmbientInstr((0.1, 0.1, 0.1)),
        DiffuseInstr((0.5, 0.0, 0.0)),
        SpecularInstr((1.0, 1.0, 1.0), 20.0),
        SphereInstr(0),
        DiffuseInstr((0.0, 0.5, 0.0)),
        PlaneInstr(1),
        CameraInstr(2),
        PointLightInstr(3, 0.8),
        DirectionalLightInstr(3, 0.2),
        CommentInstr("done"),
    ]


def test_vertex_zero_is_default_camera():
    scene = construct([], 4, 3)
    assert scene.vertices == (DEFAULT_CAMERA_VERTEX,)
    assert scene.camera.vertex == 0
    assert scene.camera.position == (0.0, 0.0, 0.0)
    assert scene.camera.direction == (0.0, 0.0, -1.0)
    assert (scene.camera.width, scene.camera.height) == (4, 3)
    assert scene.elements == ()
    assert scene.lights == ()


def test_default_settings():
    scene = construct([], 1, 1)
    assert scene.settings == Settings(True, True, True, 1, 1.0)


def test_vertex_indices_are_shifted_by_one(instructions):
    scene = construct(instructions, 10, 10)
    sphere, plane = scene.elements
    assert sphere.vertex == 1
    assert plane.vertex == 2
    assert scene.camera.vertex == 3
    assert [l.vertex for l in scene.lights] == [4, 4]


def test_geometry_resolved_from_vertices(instructions):
    scene = construct(instructions, 10, 10)
    sphere, plane = scene.elements
    assert isinstance(sphere, Sphere)
    assert sphere.center == (0.0, 0.0, -5.0)
    assert sphere.radius == 2.0
    assert isinstance(plane, Plane)
    assert plane.point == (0.0, -1.0, 0.0)
    assert plane.normal == (0.0, 1.0, 0.0)
    assert scene.camera.position == (1.0, 2.0, 3.0)
    assert scene.camera.direction == (0.0, 0.0, -1.0)


def test_lights_keep_declaration_order(instructions):
    scene = construct(instructions, 10, 10)
    point, directional = scene.lights
    assert isinstance(point, PointLight)
    assert point.position == (5.0, 5.0, 5.0)
    assert point.intensity == 0.8
    assert isinstance(directional, DirectionalLight)
    assert directional.direction == (-1.0, -1.0, 0.0)
    assert directional.intensity == 0.2


def test_materials_are_snapshotted_at_declaration(instructions):
    scene = construct(instructions, 10, 10)
    sphere, plane = scene.elements
    assert sphere.material == Material((0.1, 0.1, 0.1), (0.5, 0.0, 0.0), (1.0, 1.0, 1.0), 20.0)
    assert plane.material == Material((0.1, 0.1, 0.1), (0.0, 0.5, 0.0), (1.0, 1.0, 1.0), 20.0)


def test_material_after_element_does_not_apply():
    scene = construct([
        VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0)),
        SphereInstr(0),
        AmbientInstr((1.0, 1.0, 1.0)),
    ], 10, 10)
    assert scene.elements[0].material == Material()


def test_material_cells_do_not_leak_between_constructions():
    construct([AmbientInstr((1.0, 0.0, 0.0))], 10, 10)
    scene = construct([
        VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0)),
        SphereInstr(0),
    ], 10, 10)
    assert scene.elements[0].material.ambient == (0.0, 0.0, 0.0)


def test_last_settings_win():
    scene = construct([
        SettingsInstr(False, False, False, 3, 0.5),
        SettingsInstr(True, False, True, 2, 0.25),
    ], 10, 10)
    assert scene.settings == Settings(True, False, True, 2, 0.25)


def test_element_may_reference_later_vertex():
    scene = construct([
        SphereInstr(0),
        VertexInstr((0.0, 0.0, -3.0), (0.5, 0.0, 0.0)),
    ], 10, 10)
    assert scene.elements[0].center == (0.0, 0.0, -3.0)


def test_out_of_range_vertex_fails_fast():
    with pytest.raises(IndexError):
        construct([VertexInstr((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)), SphereInstr(1)], 10, 10)
    with pytest.raises(IndexError):
        construct([CameraInstr(0)], 10, 10)


def test_negative_vertex_index_fails_fast():
    with pytest.raises(IndexError):
        construct([VertexInstr((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)), PlaneInstr(-2)], 10, 10)


@pytest.mark.parametrize("instr", [
    SphereInstr(-1), PlaneInstr(-1), CameraInstr(-1),
    PointLightInstr(-1, 1.0), DirectionalLightInstr(-1, 1.0),
])
def test_minus_one_does_not_reach_default_camera_slot(instr):
    with pytest.raises(IndexError):
        construct([VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0)), instr], 10, 10)


def test_construction_summary_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="scene"):
        construct([VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0)), SphereInstr(0)], 4, 3)
    assert "1 vertices, 1 elements, 0 lights, 4x3" in caplog.text


def test_zero_plane_normal_is_nan():
    scene = construct([VertexInstr((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)), PlaneInstr(0)], 10, 10)
    assert all(math.isnan(c) for c in scene.elements[0].normal)


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, -1)])
def test_frame_size_must_be_positive(width, height):
    with pytest.raises(ValueError):
        construct([], width, height)


def test_unrecognised_instruction_is_ignored():
    scene = construct([object(), CommentInstr("x")], 10, 10)
    assert scene == construct([], 10, 10)


def test_scene_is_immutable(instructions):
    scene = construct(instructions, 10, 10)
    with pytest.raises(AttributeError):
        scene.settings = Settings()


# --- scene.json ---

@pytest.fixture
def scene_data():
    return {
        "render": {"width": 8, "height": 6},
        "instructions": [
            {"type": "comment", "text": "hello"},
            {"type": "vertex", "position": [0, 0, -5], "direction": [1, 0, 0]},
            {"type": "vertex", "position": [0, 5, 0], "direction": [0, 0, 0]},
            {"type": "ambient", "color": [0.1, 0.2, 0.3]},
            {"type": "diffuse", "color": [1, 0, 0]},
            {"type": "specular", "color": [1, 1, 1], "phong": 8},
            {"type": "sphere", "vertex": 0},
            {"type": "plane", "vertex": 0},
            {"type": "camera", "vertex": 0},
            {"type": "point_light", "vertex": 1, "intensity": 1},
            {"type": "directional_light", "vertex": 0, "intensity": 0.5},
            {"type": "settings", "diffuse": True, "specular": False, "shadows": True,
             "reflect_depth": 2, "ambient_intensity": 0.5},
        ],
    }


def test_validate_scene_accepts_well_formed(scene_data, capsys):
    validate_scene(scene_data)
    assert "Scene validation passed!" in capsys.readouterr().out


@pytest.mark.parametrize("mutate", [
    lambda d: d.pop("render"),
    lambda d: d.pop("instructions"),
    lambda d: d["render"].update(width=0),
    lambda d: d["render"].update(height=2.5),
    lambda d: d["instructions"].append({"type": "triangle"}),
    lambda d: d["instructions"].append({"type": "vertex", "position": [0, 0], "direction": [0, 0, 1]}),
    lambda d: d["instructions"].append({"type": "specular", "color": [1, 1, 1]}),
    lambda d: d["instructions"].append({"type": "sphere", "vertex": -1}),
    lambda d: d["instructions"].append({"type": "point_light", "vertex": 0}),
    lambda d: d["instructions"].append({"type": "settings", "diffuse": True}),
])
def test_validate_scene_rejects_malformed(scene_data, mutate):
    mutate(scene_data)
    with pytest.raises(AssertionError):
        validate_scene(scene_data)


def test_instructions_from_scene(scene_data):
    instrs = instructions_from_scene(scene_data)
    assert instrs[0] == CommentInstr("hello")
    assert instrs[1] == VertexInstr((0.0, 0.0, -5.0), (1.0, 0.0, 0.0))
    assert instrs[5] == SpecularInstr((1.0, 1.0, 1.0), 8.0)
    assert instrs[6] == SphereInstr(0)
    assert instrs[8] == CameraInstr(0)
    assert instrs[9] == PointLightInstr(1, 1.0)
    assert instrs[10] == DirectionalLightInstr(0, 0.5)
    assert instrs[11] == SettingsInstr(True, False, True, 2, 0.5)


def test_scene_from_file(tmp_path, scene_data):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(scene_data))
    assert load_scene(str(path)) == scene_data

    scene = scene_from_file(str(path))
    assert (scene.camera.width, scene.camera.height) == (8, 6)
    assert scene.camera.position == (0.0, 0.0, -5.0)
    assert len(scene.elements) == 2
    assert scene.settings.ambient_int == 0.5
    assert scene.settings.reflect_depth == 2
