"""
Scene-description instructions.

One record per instruction kind. Vertex indices are as written in the scene
description (0 is the first declared vertex); the +1 shift onto the vertex
array happens in scene construction.
"""
from dataclasses import dataclass
from typing import Union

from vector import Vec3

Color = Vec3


@dataclass(frozen=True)
class VertexInstr:
    position: Vec3
    direction: Vec3


@dataclass(frozen=True)
class AmbientInstr:
    color: Color


@dataclass(frozen=True)
class DiffuseInstr:
    color: Color


@dataclass(frozen=True)
class SpecularInstr:
    color: Color
    phong: float


@dataclass(frozen=True)
class SphereInstr:
    vertex: int


@dataclass(frozen=True)
class PlaneInstr:
    vertex: int


@dataclass(frozen=True)
class CameraInstr:
    vertex: int


@dataclass(frozen=True)
class PointLightInstr:
    vertex: int
    intensity: float


@dataclass(frozen=True)
class DirectionalLightInstr:
    vertex: int
    intensity: float


@dataclass(frozen=True)
class SettingsInstr:
    diffuse: bool
    specular: bool
    shadows: bool
    reflect_depth: int
    ambient_int: float


@dataclass(frozen=True)
class CommentInstr:
    text: str = ""


Instruction = Union[
    VertexInstr, AmbientInstr, DiffuseInstr, SpecularInstr,
    SphereInstr, PlaneInstr, CameraInstr,
    PointLightInstr, DirectionalLightInstr,
    SettingsInstr, CommentInstr,
]
