import logging

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from chaosgame.colors import color_to_rgb255, hsv_to_rgb255, point_hsv
from chaosgame.datatypes import Frame, Point
from chaosgame.errors import RenderFailure
from chaosgame.geometry import optimal_rate, polygon_name, vertices_of


FONT_FILES = ("FreeSansBold.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf")
REFERENCE_HEIGHT = 1920  # font sizes and text positions are laid out for this height
TITLE = "Chaos Game"


def load_font(size):
    """Load a bold TrueType font, falling back to Pillow's built-in font."""
    for font_file in FONT_FILES:
        try:
            return ImageFont.truetype(font_file, size)
        except OSError:
            continue
    logging.debug(f"No TrueType font found, using the default font at size {size}.")
    return ImageFont.load_default(size=size)


class FrameRenderer:
    """
    Draws one frame: background, text, polygon outline, the colored point cloud and the current point.
    Rendering only reads the points it is given.
    """

    def __init__(self, settings, vertices=None, rate=None):
        self.settings = settings
        self.polygon = settings.polygon_spec()
        self.vertices = vertices_of(self.polygon) if vertices is None else np.asarray(vertices, dtype=np.float64)
        self.rate = optimal_rate(self.polygon.vertex_count) if rate is None else rate
        self.name = polygon_name(self.polygon.vertex_count)

        self.size = (settings.width, settings.height)
        self.origin = np.array([settings.width / 2, settings.height / 2])
        self.background = color_to_rgb255(settings.background)
        self.outline = color_to_rgb255(settings.outline)
        self.highlight = color_to_rgb255(settings.highlight)

        self.fonts = None
        if settings.show_text:
            scale = settings.height / REFERENCE_HEIGHT
            self.fonts = {
                "title": load_font(max(1, int(80 * scale))),
                "subtitle": load_font(max(1, int(72 * scale))),
                "counter": load_font(max(1, int(60 * scale))),
            }

    def to_image(self, points):
        """Shift center-relative coordinates to pixel coordinates."""
        return np.asarray(points, dtype=np.float64) + self.origin

    def render(self, frame_index, points):
        """Render frame `frame_index` from the points generated so far."""
        points = np.array(points, dtype=np.float64).reshape(-1, 2)
        if len(points) == 0:
            raise RenderFailure(frame_index, "no points to draw")

        try:
            image = Image.new("RGB", self.size, self.background)
            draw = ImageDraw.Draw(image)
            if self.fonts is not None:
                self.draw_text(draw, frame_index)
            self.draw_polygon(draw)
            self.draw_points(draw, points[self.settings.warmup:])
            self.draw_marker(draw, points[-1], self.settings.highlight_radius, self.highlight)
        except (OSError, MemoryError, ValueError) as error:
            raise RenderFailure(frame_index, f"rasterization failed: {error}") from error

        return Frame(index=frame_index, image=image, highlight=Point(float(points[-1, 0]), float(points[-1, 1])))

    def draw_text(self, draw, frame_index):
        height = self.settings.height
        center_x = self.origin[0]
        center_y = self.origin[1]
        draw.text((center_x, center_y - 0.35 * height), TITLE,
                  fill=self.outline, font=self.fonts["title"], anchor="mm")
        draw.text((center_x, center_y + 0.20 * height), f"Sierpinski {self.name}",
                  fill=self.outline, font=self.fonts["subtitle"], anchor="mm")
        draw.text((center_x, center_y + 0.25 * height), f"n = {frame_index:4d}",
                  fill=self.outline, font=self.fonts["counter"], anchor="mm")

    def draw_polygon(self, draw):
        corners = [tuple(corner) for corner in self.to_image(self.vertices)]
        draw.line(corners + corners[:1], fill=self.outline, width=self.settings.line_width, joint="curve")

    def draw_points(self, draw, points):
        if len(points) == 0:
            return
        colors = hsv_to_rgb255(point_hsv(points, self.polygon.radius))
        radius = self.settings.point_radius
        for (x, y), color in zip(self.to_image(points), colors):
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=tuple(int(c) for c in color))

    def draw_marker(self, draw, point, radius, color):
        x, y = self.to_image(point)
        draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=color)
