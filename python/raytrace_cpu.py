"""
CPU ray caster for sphere/plane scenes.
One primary ray per pixel, ambient + diffuse + specular shading with hard shadows.
"""
import logging
import math
from PIL import Image
from typing import Tuple, Optional

from vector import Vec3, WORLD_UP, add, sub, mul, neg, dot, cross, norm
from scene import (
    Scene, Sphere, Element, Light, PointLight, scene_from_file,
)

RGB = Tuple[int, int, int]

# Image plane distance in camera space.
IMAGE_PLANE_Z = -math.sqrt(3.0) / 2.0

# Ray intersection functions
def ray_sphere(ro: Vec3, rd: Vec3, center: Vec3, radius: float) -> Optional[float]:
    """
    Near root of |ro + t*rd - center|^2 = radius^2, or None when the ray
    misses. The far root is never returned.
    """
    dd = dot(rd, rd)
    eminc = sub(ro, center)
    dec = dot(rd, eminc)
    disc = dec * dec - dd * (dot(eminc, eminc) - radius * radius)
    if disc < 0:
        return None
    return (-dec - math.sqrt(disc)) / dd

def ray_plane(ro: Vec3, rd: Vec3, point: Vec3, normal: Vec3) -> Optional[float]:
    """Ray-plane intersection. Parallel rays and t == 0 are misses."""
    denom = dot(rd, normal)
    if denom == 0:
        return None
    d = -dot(normal, neg(point))
    t = (d - dot(ro, normal)) / denom
    if t == 0:
        return None
    return t

def intersect(element: Element, ro: Vec3, rd: Vec3) -> Optional[float]:
    if isinstance(element, Sphere):
        return ray_sphere(ro, rd, element.center, element.radius)
    return ray_plane(ro, rd, element.point, element.normal)

def surface_normal(element: Element, hit: Vec3) -> Vec3:
    if isinstance(element, Sphere):
        return norm(sub(hit, element.center))
    return element.normal

# Camera
def camera_basis(direction: Vec3) -> Tuple[Vec3, Vec3, Vec3]:
    """
    Orthonormal (x, y, z) basis for a camera looking along direction.
    Undefined when direction is parallel to world up.
    """
    basis_z = norm(neg(direction))
    basis_x = norm(cross(direction, WORLD_UP))
    basis_y = cross(basis_z, basis_x)
    return basis_x, basis_y, basis_z

def primary_ray(scene: Scene, x: int, y: int) -> Tuple[Vec3, Vec3]:
    """
    Origin and direction of the ray through pixel (x, y); y = 0 is the top row.
    The direction is the image-plane point expressed in the camera basis and
    is neither normalized nor offset by the camera position.
    """
    cam = scene.camera
    basis_x, basis_y, basis_z = camera_basis(cam.direction)
    px = x / cam.width - 0.5
    py = (0.5 - y / cam.height) * (cam.height / cam.width)
    rd = add(add(mul(basis_x, px), mul(basis_y, py)), mul(basis_z, IMAGE_PLANE_Z))
    return cam.position, rd

def nearest_hit(scene: Scene, ro: Vec3, rd: Vec3) -> Tuple[Optional[Element], Optional[float]]:
    """Closest element with t > 0. On equal t the earlier element wins."""
    nearest = None
    nearest_t = None
    for element in scene.elements:
        t = intersect(element, ro, rd)
        if t is not None and t > 0 and (nearest_t is None or t < nearest_t):
            nearest = element
            nearest_t = t
    return nearest, nearest_t

def occluded(scene: Scene, ro: Vec3, rd: Vec3) -> bool:
    """True if the ray hits any element in front of its origin, at any distance."""
    for element in scene.elements:
        t = intersect(element, ro, rd)
        if t is not None and t > 0:
            return True
    return False

# Shading
def light_direction(light: Light, hit: Vec3) -> Vec3:
    """Unit vector from the hit point towards the light."""
    if isinstance(light, PointLight):
        return norm(sub(light.position, hit))
    return norm(neg(light.direction))

def light_sample(scene: Scene, element: Element, hit: Vec3, n: Vec3,
                 rd: Vec3, light: Light) -> Tuple[Vec3, bool, Vec3, Vec3]:
    """
    Contribution of one light at a hit point.

    Returns (light direction, occluded, diffuse term, specular term). The
    shadow probe starts one whole unit along the light direction. The terms
    are zero when they are disabled in the settings or the light is blocked
    with shadows on.
    """
    settings = scene.settings
    material = element.material
    l = light_direction(light, hit)
    blocked = occluded(scene, add(hit, l), l)
    diffuse = (0.0, 0.0, 0.0)
    specular = (0.0, 0.0, 0.0)
    if blocked and settings.shadows:
        return l, blocked, diffuse, specular

    if settings.diffuse:
        diffuse = mul(material.diffuse, light.intensity * max(0.0, dot(n, l)))
    if settings.specular:
        h = norm(add(norm(neg(rd)), l))
        spec = max(0.0, dot(n, h)) ** material.phong
        specular = mul(material.specular, light.intensity * spec)
    return l, blocked, diffuse, specular

def shade_samples(scene: Scene, element: Element, t: float, ro: Vec3, rd: Vec3):
    """
    Hit point, normal, unquantized colour and the light_sample() of every
    light, for element seen along the ray at parameter t.
    """
    hit = add(ro, mul(rd, t))
    n = surface_normal(element, hit)
    col = mul(element.material.ambient, scene.settings.ambient_int)
    samples = []
    for light in scene.lights:
        sample = light_sample(scene, element, hit, n, rd, light)
        samples.append(sample)
        col = add(add(col, sample[2]), sample[3])
    return hit, n, col, samples

def shade(scene: Scene, element: Element, t: float, ro: Vec3, rd: Vec3) -> Vec3:
    """Unquantized colour of element seen along the ray at parameter t."""
    return shade_samples(scene, element, t, ro, rd)[2]

def to_channel(value: float) -> int:
    """Quantize to 0..255. NaN becomes 0."""
    scaled = 255.0 * value
    if math.isnan(scaled):
        return 0
    return int(math.floor(max(0.0, min(255.0, scaled))))

def to_rgb(col: Vec3) -> RGB:
    return (to_channel(col[0]), to_channel(col[1]), to_channel(col[2]))

def cast_ray(scene: Scene, x: int, y: int) -> RGB:
    """Colour of pixel (x, y). Black where nothing is hit."""
    ro, rd = primary_ray(scene, x, y)
    element, t = nearest_hit(scene, ro, rd)
    if element is None:
        return (0, 0, 0)
    return to_rgb(shade(scene, element, t, ro, rd))

def render(scene: Scene, output_path: Optional[str] = "render.png") -> Image.Image:
    """Cast every pixel into a Pillow image, saved to output_path when given."""
    W = scene.camera.width
    H = scene.camera.height

    img = Image.new("RGB", (W, H))
    pix = img.load()

    print(f"Rendering {W}x{H} image with {len(scene.elements)} elements and {len(scene.lights)} lights...")

    for y in range(H):
        if y % 50 == 0:
            print(f"Progress: {y}/{H} ({100*y//H}%)")
        for x in range(W):
            pix[x, y] = cast_ray(scene, x, y)

    if output_path is not None:
        img.save(output_path)
        print(f"Saved {output_path}")
    return img

if __name__ == "__main__":
    import os
    import sys
    from datetime import datetime

    logging.basicConfig(level=logging.INFO)

    # Scene file from the command line, else scene.json in parent or current directory
    if len(sys.argv) > 1:
        scene_path = sys.argv[1]
    else:
        scene_path = "../scene.json" if os.path.exists("../scene.json") else "scene.json"
    scene = scene_from_file(scene_path)

    renders_dir = os.path.join(os.path.dirname(os.path.abspath(scene_path)), "renders")
    os.makedirs(renders_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = (f"render_{timestamp}_e{len(scene.elements)}_l{len(scene.lights)}"
                f"_{scene.camera.width}x{scene.camera.height}.png")
    output_path = os.path.join(renders_dir, filename)

    render(scene, output_path)
