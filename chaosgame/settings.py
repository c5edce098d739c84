import math
from dataclasses import dataclass, fields, replace

import yaml

from chaosgame.colors import color_to_rgb255
from chaosgame.datatypes import PolygonSpec
from chaosgame.errors import InvalidConfiguration
from chaosgame.geometry import polygon_name


WARMUP_POINTS = 5  # early points are not yet on the attractor
OUTPUT_FORMATS = ("gif", "mp4")


@dataclass
class AnimationSettings:
    vertices: int
    width: int
    height: int
    duration: float  # seconds
    frame_rate: int
    seed: int | None
    radius_fraction: float  # polygon radius relative to the width
    rotation: float  # degrees
    warmup: int
    point_radius: float
    highlight_radius: float
    line_width: int
    background: str
    outline: str
    highlight: str
    show_text: bool
    output_dir: str
    output_format: str

    @property
    def total_frames(self):
        return int(round(self.duration * self.frame_rate))

    @property
    def radius(self):
        return self.radius_fraction * self.width

    def polygon_spec(self):
        return PolygonSpec(
            vertex_count=self.vertices,
            radius=self.radius,
            rotation_offset=math.radians(self.rotation),
        )


# Portrait 9:16 video, a few points of the Sierpinski triangle
default_settings = AnimationSettings(
    vertices=3,
    width=1080,
    height=1920,
    duration=25 / 60,
    frame_rate=60,
    seed=42,
    radius_fraction=0.5,
    rotation=-90.0,
    warmup=WARMUP_POINTS,
    point_radius=3.5,
    highlight_radius=15.0,
    line_width=3,
    background="black",
    outline="white",
    highlight="white",
    show_text=True,
    output_dir="./output",
    output_format="gif",
)


def validate_settings(settings):
    """Raise InvalidConfiguration for anything that cannot produce a run."""
    polygon_name(settings.vertices)  # unmapped vertex counts are rejected here
    for name in ("width", "height", "line_width"):
        value = getattr(settings, name)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidConfiguration(f"{name} must be a positive integer, got {value!r}")
    for name in ("duration", "frame_rate", "radius_fraction", "point_radius", "highlight_radius"):
        value = getattr(settings, name)
        if not _is_finite_number(value) or value <= 0:
            raise InvalidConfiguration(f"{name} must be positive, got {value!r}")
    if settings.total_frames < 1:
        raise InvalidConfiguration(
            f"duration {settings.duration}s at {settings.frame_rate} fps does not produce a single frame"
        )
    if not _is_finite_number(settings.rotation):
        raise InvalidConfiguration(f"rotation must be a finite angle in degrees, got {settings.rotation!r}")
    if isinstance(settings.warmup, bool) or not isinstance(settings.warmup, int) or settings.warmup < 0:
        raise InvalidConfiguration(f"warmup must be a non-negative integer, got {settings.warmup!r}")
    if settings.seed is not None and (isinstance(settings.seed, bool) or not isinstance(settings.seed, int)):
        raise InvalidConfiguration(f"seed must be an integer or empty, got {settings.seed!r}")
    if settings.output_format not in OUTPUT_FORMATS:
        raise InvalidConfiguration(f"output format must be one of {OUTPUT_FORMATS}, got {settings.output_format!r}")
    for name in ("background", "outline", "highlight"):
        color_to_rgb255(getattr(settings, name))
    return settings


def _is_finite_number(value):
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def settings_to_dict(settings):
    """Convert AnimationSettings to a dictionary for YAML serialization."""
    return {
        "polygon": {
            "vertices": settings.vertices,
            "radius_fraction": settings.radius_fraction,
            "rotation": settings.rotation,
        },
        "video": {
            "width": settings.width,
            "height": settings.height,
            "duration": settings.duration,
            "frame_rate": settings.frame_rate,
            "seed": settings.seed,
        },
        "presentation": {
            "warmup": settings.warmup,
            "point_radius": settings.point_radius,
            "highlight_radius": settings.highlight_radius,
            "line_width": settings.line_width,
            "colors": {
                "background": settings.background,
                "outline": settings.outline,
                "highlight": settings.highlight,
            },
            "show_text": settings.show_text,
        },
        "output": {
            "directory": settings.output_dir,
            "format": settings.output_format,
        },
    }


def dict_to_settings(settings_dict, base=default_settings):
    """Convert a (possibly partial) dictionary to an AnimationSettings object. Missing keys keep the base values."""
    if settings_dict is None:
        settings_dict = {}
    if not isinstance(settings_dict, dict):
        raise InvalidConfiguration(f"Settings must be a mapping, got {type(settings_dict).__name__}")

    polygon = _section(settings_dict, "polygon")
    video = _section(settings_dict, "video")
    presentation = _section(settings_dict, "presentation")
    colors = _section(presentation, "colors")
    output = _section(settings_dict, "output")

    values = {
        "vertices": polygon.get("vertices"),
        "radius_fraction": polygon.get("radius_fraction"),
        "rotation": polygon.get("rotation"),
        "width": video.get("width"),
        "height": video.get("height"),
        "duration": video.get("duration"),
        "frame_rate": video.get("frame_rate"),
        "warmup": presentation.get("warmup"),
        "point_radius": presentation.get("point_radius"),
        "highlight_radius": presentation.get("highlight_radius"),
        "line_width": presentation.get("line_width"),
        "show_text": presentation.get("show_text"),
        "background": colors.get("background"),
        "outline": colors.get("outline"),
        "highlight": colors.get("highlight"),
        "output_dir": output.get("directory"),
        "output_format": output.get("format"),
    }
    settings = replace(base, **{key: value for key, value in values.items() if value is not None})
    if "seed" in video:  # an explicit empty seed means unseeded
        settings = replace(settings, seed=video["seed"])
    return settings


def _section(settings_dict, name):
    section = settings_dict.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfiguration(f"Settings section '{name}' must be a mapping")
    return section


def override_settings(settings, **overrides):
    """Replace the fields given in overrides, ignoring None values."""
    names = {field.name for field in fields(settings)}
    unknown = set(overrides) - names
    if unknown:
        raise InvalidConfiguration(f"Unknown settings: {', '.join(sorted(unknown))}")
    return replace(settings, **{key: value for key, value in overrides.items() if value is not None})


def load_settings(file_path):
    """Load animation settings from a YAML file."""
    with open(file_path, "r") as file:
        try:
            settings_dict = yaml.safe_load(file)
        except yaml.YAMLError as error:
            raise InvalidConfiguration(f"Cannot parse {file_path}: {error}") from error
    return dict_to_settings(settings_dict)


def save_settings(settings, file_path):
    """Save animation settings to a YAML file."""
    with open(file_path, "w") as file:
        yaml.dump(settings_to_dict(settings), file, default_flow_style=False, sort_keys=False)
