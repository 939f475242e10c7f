"""Vector math on plain 3-tuples of floats."""
import math
from typing import Tuple

Vec3 = Tuple[float, float, float]

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])

def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])

def mul(a: Vec3, s: float) -> Vec3:
    return (a[0] * s, a[1] * s, a[2] * s)

def neg(a: Vec3) -> Vec3:
    return (-a[0], -a[1], -a[2])

def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0]
    )

def length(v: Vec3) -> float:
    return math.sqrt(dot(v, v))

def norm(v: Vec3) -> Vec3:
    """Unit vector along v. A zero vector has no direction and gives NaNs."""
    l = length(v)
    if l == 0.0:
        return (math.nan, math.nan, math.nan)
    return mul(v, 1.0 / l)
