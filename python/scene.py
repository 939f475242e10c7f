"""Scene model, construction from instructions, and loading from scene.json"""
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Any, Optional, Union

from vector import Vec3, length, norm
from instructions import (
    Color, Instruction,
    VertexInstr, AmbientInstr, DiffuseInstr, SpecularInstr,
    SphereInstr, PlaneInstr, CameraInstr,
    PointLightInstr, DirectionalLightInstr,
    SettingsInstr, CommentInstr,
)

logger = logging.getLogger(__name__)

BLACK: Color = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Vertex:
    position: Vec3
    direction: Vec3


# Slot 0 of every vertex array: a camera at the origin looking down -z.
DEFAULT_CAMERA_VERTEX = Vertex((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))


@dataclass(frozen=True)
class Material:
    """Reflectance active when an element was declared."""
    ambient: Color = BLACK
    diffuse: Color = BLACK
    specular: Color = BLACK
    phong: float = 1.0


@dataclass(frozen=True)
class Sphere:
    vertex: int
    center: Vec3
    radius: float
    material: Material


@dataclass(frozen=True)
class Plane:
    vertex: int
    point: Vec3
    normal: Vec3
    material: Material


@dataclass(frozen=True)
class DirectionalLight:
    vertex: int
    direction: Vec3
    intensity: float


@dataclass(frozen=True)
class PointLight:
    vertex: int
    position: Vec3
    intensity: float


@dataclass(frozen=True)
class Camera:
    vertex: int
    position: Vec3
    direction: Vec3
    width: int
    height: int


@dataclass(frozen=True)
class Settings:
    diffuse: bool = True
    specular: bool = True
    shadows: bool = True
    reflect_depth: int = 1  # stored only, nothing recurses on it
    ambient_int: float = 1.0


Element = Union[Sphere, Plane]
Light = Union[DirectionalLight, PointLight]


@dataclass(frozen=True)
class Scene:
    vertices: Tuple[Vertex, ...]
    lights: Tuple[Light, ...]
    camera: Camera
    settings: Settings
    elements: Tuple[Element, ...]


@dataclass
class _Fold:
    """Accumulator threaded through one construct() call."""
    vertices: List[Vertex] = field(default_factory=lambda: [DEFAULT_CAMERA_VERTEX])
    camera: Optional[int] = None  # None keeps the default camera in slot 0
    lights: List[Tuple[type, int, float]] = field(default_factory=list)
    elements: List[Tuple[type, int, Material]] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    ambient: Color = BLACK
    diffuse: Color = BLACK
    specular: Color = BLACK
    phong: float = 1.0

    def material(self) -> Material:
        return Material(self.ambient, self.diffuse, self.specular, self.phong)

    def step(self, instr: Instruction) -> None:
        if isinstance(instr, VertexInstr):
            self.vertices.append(Vertex(tuple(instr.position), tuple(instr.direction)))
        elif isinstance(instr, AmbientInstr):
            self.ambient = tuple(instr.color)
        elif isinstance(instr, DiffuseInstr):
            self.diffuse = tuple(instr.color)
        elif isinstance(instr, SpecularInstr):
            self.specular = tuple(instr.color)
            self.phong = instr.phong
        elif isinstance(instr, SphereInstr):
            self.elements.append((Sphere, instr.vertex + 1, self.material()))
        elif isinstance(instr, PlaneInstr):
            self.elements.append((Plane, instr.vertex + 1, self.material()))
        elif isinstance(instr, CameraInstr):
            self.camera = instr.vertex + 1
        elif isinstance(instr, PointLightInstr):
            self.lights.append((PointLight, instr.vertex + 1, instr.intensity))
        elif isinstance(instr, DirectionalLightInstr):
            self.lights.append((DirectionalLight, instr.vertex + 1, instr.intensity))
        elif isinstance(instr, SettingsInstr):
            self.settings = Settings(instr.diffuse, instr.specular, instr.shadows,
                                     instr.reflect_depth, instr.ambient_int)
        elif not isinstance(instr, CommentInstr):
            logger.debug("Ignoring unrecognised instruction %r", instr)

    def vertex(self, index: int, what: str) -> Vertex:
        # Declared references never reach slot 0.
        if not 1 <= index < len(self.vertices):
            raise IndexError(
                f"{what} references vertex {index - 1}, "
                f"but only {len(self.vertices) - 1} vertices are declared")
        return self.vertices[index]


def _make_element(fold: _Fold, kind: type, index: int, material: Material) -> Element:
    v = fold.vertex(index, kind.__name__)
    if kind is Sphere:
        return Sphere(index, v.position, length(v.direction), material)
    return Plane(index, v.position, norm(v.direction), material)


def _make_light(fold: _Fold, kind: type, index: int, intensity: float) -> Light:
    v = fold.vertex(index, kind.__name__)
    if kind is PointLight:
        return PointLight(index, v.position, intensity)
    return DirectionalLight(index, v.direction, intensity)


def construct(instructions: List[Instruction], width: int, height: int) -> Scene:
    """
    Fold a well-formed instruction sequence into an immutable Scene.

    Material instructions only affect elements declared after them. Elements
    and lights keep declaration order. Vertex references are resolved once the
    whole sequence has been read, so an element may name a vertex declared
    later; a reference past the end raises IndexError.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}")

    fold = _Fold()
    for instr in instructions:
        fold.step(instr)

    if fold.camera is None:
        cam_index, cam_vertex = 0, fold.vertices[0]
    else:
        cam_index, cam_vertex = fold.camera, fold.vertex(fold.camera, "Camera")
    camera = Camera(cam_index, cam_vertex.position, cam_vertex.direction, width, height)
    elements = tuple(_make_element(fold, *e) for e in fold.elements)
    lights = tuple(_make_light(fold, *l) for l in fold.lights)

    logger.info("Constructed scene: %d vertices, %d elements, %d lights, %dx%d",
                len(fold.vertices) - 1, len(elements), len(lights), width, height)
    return Scene(tuple(fold.vertices), lights, camera, fold.settings, elements)


# --- scene.json ---

_TRIPLE_FIELDS = {
    "vertex": ("position", "direction"),
    "ambient": ("color",),
    "diffuse": ("color",),
    "specular": ("color",),
}
_INDEX_TYPES = ("sphere", "plane", "camera", "point_light", "directional_light")
_SETTINGS_FIELDS = ("diffuse", "specular", "shadows", "reflect_depth", "ambient_intensity")
INSTRUCTION_TYPES = tuple(_TRIPLE_FIELDS) + _INDEX_TYPES + ("settings", "comment")


def load_scene(json_path: str = "scene.json") -> Dict[str, Any]:
    """Load scene configuration from JSON file."""
    with open(json_path, 'r') as f:
        return json.load(f)

def validate_scene(scene: Dict[str, Any]) -> None:
    """Structural validation of a scene.json document."""
    assert "render" in scene, "Scene must have render settings"
    assert "instructions" in scene, "Scene must have instructions"

    render = scene["render"]
    for key in ("width", "height"):
        assert isinstance(render.get(key), int) and render[key] > 0, \
            f"render.{key} must be a positive integer"

    for i, instr in enumerate(scene["instructions"]):
        kind = instr.get("type")
        assert kind in INSTRUCTION_TYPES, f"Instruction {i}: unknown type {kind!r}"
        for key in _TRIPLE_FIELDS.get(kind, ()):
            assert key in instr and len(instr[key]) == 3, \
                f"Instruction {i} ({kind}): {key} must have 3 components"
        if kind == "specular":
            assert "phong" in instr, f"Instruction {i} (specular): missing phong"
        if kind in _INDEX_TYPES:
            assert isinstance(instr.get("vertex"), int) and instr["vertex"] >= 0, \
                f"Instruction {i} ({kind}): vertex must be a non-negative integer"
        if kind.endswith("_light"):
            assert "intensity" in instr, f"Instruction {i} ({kind}): missing intensity"
        if kind == "settings":
            for key in _SETTINGS_FIELDS:
                assert key in instr, f"Instruction {i} (settings): missing {key}"

    print("Scene validation passed!")

def _instruction(instr: Dict[str, Any]) -> Instruction:
    kind = instr["type"]
    if kind == "vertex":
        return VertexInstr(tuple(map(float, instr["position"])),
                           tuple(map(float, instr["direction"])))
    if kind == "ambient":
        return AmbientInstr(tuple(map(float, instr["color"])))
    if kind == "diffuse":
        return DiffuseInstr(tuple(map(float, instr["color"])))
    if kind == "specular":
        return SpecularInstr(tuple(map(float, instr["color"])), float(instr["phong"]))
    if kind == "sphere":
        return SphereInstr(instr["vertex"])
    if kind == "plane":
        return PlaneInstr(instr["vertex"])
    if kind == "camera":
        return CameraInstr(instr["vertex"])
    if kind == "point_light":
        return PointLightInstr(instr["vertex"], float(instr["intensity"]))
    if kind == "directional_light":
        return DirectionalLightInstr(instr["vertex"], float(instr["intensity"]))
    if kind == "settings":
        return SettingsInstr(bool(instr["diffuse"]), bool(instr["specular"]),
                             bool(instr["shadows"]), int(instr["reflect_depth"]),
                             float(instr["ambient_intensity"]))
    return CommentInstr(str(instr.get("text", "")))

def instructions_from_scene(scene: Dict[str, Any]) -> List[Instruction]:
    """Convert a validated scene.json document into instruction records."""
    return [_instruction(instr) for instr in scene["instructions"]]

def scene_from_file(json_path: str = "scene.json") -> Scene:
    """Load, validate and construct the scene described by a JSON file."""
    scene_data = load_scene(json_path)
    validate_scene(scene_data)
    render = scene_data["render"]
    return construct(instructions_from_scene(scene_data), render["width"], render["height"])
