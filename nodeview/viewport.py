"""Screen/world coordinate transforms, grid snapping and grid marks."""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from .exceptions import ViewportConfigError
from .models import Point, Rect
from .path_data import format_number

logger = logging.getLogger(__name__)

DEFAULT_ZOOM_FACTOR = 1.2
DEFAULT_FIT_MARGIN = 0.1
DEFAULT_MAX_GRID_DOTS = 20_000


class CoordinateOrigin(Enum):
    """Where the world origin sits on screen."""

    TOP_LEFT = "top-left"
    BOTTOM_LEFT = "bottom-left"
    CENTER = "center"


class Units(Enum):
    """Display units for world coordinates."""

    PX = "px"
    MM = "mm"
    IN = "in"
    MIL = "mil"
    UNITS = "units"


class GridLevel(NamedTuple):
    """One adaptive grid level, used while zoom <= max_zoom."""

    max_zoom: float
    multiplier: float
    dot_size: float
    opacity: float


# Coarsest level first; the first level whose max_zoom >= zoom wins and the
# last level covers everything zoomed in past the table.
GRID_LEVELS: tuple[GridLevel, ...] = (
    GridLevel(max_zoom=0.125, multiplier=8.0, dot_size=0.8, opacity=0.3),
    GridLevel(max_zoom=0.25, multiplier=4.0, dot_size=0.6, opacity=0.35),
    GridLevel(max_zoom=0.5, multiplier=2.0, dot_size=0.4, opacity=0.4),
    GridLevel(max_zoom=2.0, multiplier=1.0, dot_size=0.3, opacity=0.5),
    GridLevel(max_zoom=4.0, multiplier=0.5, dot_size=0.15, opacity=0.6),
)


def select_grid_level(zoom: float, levels: tuple[GridLevel, ...] = GRID_LEVELS) -> GridLevel:
    """Pick the grid level for a zoom factor."""
    for level in levels:
        if zoom <= level.max_zoom:
            return level
    return levels[-1]


class GridDot(NamedTuple):
    x: float
    y: float
    size: float
    opacity: float


class GridLine(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class GridConfig:
    """Grid settings. size is in world units."""

    size: float
    visible: bool = True
    snap: bool = False


@dataclass(frozen=True)
class ViewportConfig:
    """Viewport configuration.

    ``width``/``height`` are screen pixels, ``world_bounds`` is in world
    units and ``pan`` is a fraction of the world bounds extents.
    """

    width: float
    height: float
    world_bounds: Rect
    zoom: float = 1.0
    pan: Point = field(default_factory=lambda: Point(0.0, 0.0))
    origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT
    units: Units = Units.UNITS
    grid: GridConfig | None = None
    # Upper bound on generate_grid_dots() output
    max_grid_dots: int = DEFAULT_MAX_GRID_DOTS

    def __post_init__(self) -> None:
        # Frozen: enum coercion goes through object.__setattr__
        object.__setattr__(self, "origin", CoordinateOrigin(self.origin))
        object.__setattr__(self, "units", Units(self.units))

    def validate(self) -> None:
        """Check the config can produce a valid transform.

        Raises:
            ViewportConfigError: On non-positive sizes, zoom or grid size,
                or zero-area world bounds.
        """
        if self.width <= 0 or self.height <= 0:
            raise ViewportConfigError(
                f"Viewport size must be positive, got {self.width}x{self.height}"
            )
        if self.world_bounds.width <= 0 or self.world_bounds.height <= 0:
            raise ViewportConfigError(
                f"World bounds must have positive area, got {self.world_bounds}"
            )
        if self.zoom <= 0:
            raise ViewportConfigError(f"Zoom must be positive, got {self.zoom}")
        if self.grid is not None and self.grid.size <= 0:
            raise ViewportConfigError(f"Grid size must be positive, got {self.grid.size}")
        if self.max_grid_dots < 1:
            raise ViewportConfigError(
                f"max_grid_dots must be at least 1, got {self.max_grid_dots}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ViewportConfig:
        """Build a config from plain mappings, e.g. parsed JSON.

        ``world_bounds``, ``pan`` and ``grid`` may be given as mappings;
        ``origin`` and ``units`` as their string values.
        """
        values = dict(data)
        if isinstance(values.get("world_bounds"), Mapping):
            values["world_bounds"] = Rect(**values["world_bounds"])
        if isinstance(values.get("pan"), Mapping):
            values["pan"] = Point(**values["pan"])
        if isinstance(values.get("grid"), Mapping):
            values["grid"] = GridConfig(**values["grid"])
        return cls(**values)


def _origin_to_world(origin: CoordinateOrigin, zx: float, zy: float, bounds: Rect) -> Point:
    """Map zoomed normalized coordinates into world space for an origin mode."""
    if origin is CoordinateOrigin.BOTTOM_LEFT:
        return Point(
            bounds.x + zx * bounds.width,
            bounds.y + bounds.height - zy * bounds.height,
        )
    if origin is CoordinateOrigin.CENTER:
        return Point(
            bounds.x + (zx - 0.5) * bounds.width,
            bounds.y + (0.5 - zy) * bounds.height,
        )
    return Point(bounds.x + zx * bounds.width, bounds.y + zy * bounds.height)


def _origin_to_normalized(origin: CoordinateOrigin, wx: float, wy: float, bounds: Rect) -> tuple[float, float]:
    """Inverse of _origin_to_world."""
    nx = (wx - bounds.x) / bounds.width
    ny = (wy - bounds.y) / bounds.height
    if origin is CoordinateOrigin.BOTTOM_LEFT:
        return nx, 1 - ny
    if origin is CoordinateOrigin.CENTER:
        return nx + 0.5, 0.5 - ny
    return nx, ny


class Viewport:
    """Owns a ViewportConfig and converts between screen and world space.

    Not safe for concurrent mutation; one interaction controller should own
    each instance.
    """

    def __init__(self, config: ViewportConfig):
        config.validate()
        self._config = config

    @property
    def config(self) -> ViewportConfig:
        return self._config

    def update_config(self, **changes: Any) -> ViewportConfig:
        """Merge field changes into the config atomically.

        The new config is validated before it replaces the old one, so a
        rejected update leaves the viewport unchanged.
        """
        new_config = dataclasses.replace(self._config, **changes)
        new_config.validate()
        self._config = new_config
        return new_config

    # -- transforms --------------------------------------------------------

    def screen_to_world(self, screen_x: float, screen_y: float) -> Point:
        """Convert screen pixel coordinates to world coordinates."""
        c = self._config

        normalized_x = screen_x / c.width
        normalized_y = screen_y / c.height

        zoomed_x = (normalized_x - 0.5) / c.zoom + 0.5 + c.pan.x
        zoomed_y = (normalized_y - 0.5) / c.zoom + 0.5 + c.pan.y

        return _origin_to_world(c.origin, zoomed_x, zoomed_y, c.world_bounds)

    def world_to_screen(self, world_x: float, world_y: float) -> Point:
        """Convert world coordinates to screen pixel coordinates."""
        c = self._config

        normalized_x, normalized_y = _origin_to_normalized(
            c.origin, world_x, world_y, c.world_bounds
        )

        zoomed_x = (normalized_x - 0.5 - c.pan.x) * c.zoom + 0.5
        zoomed_y = (normalized_y - 0.5 - c.pan.y) * c.zoom + 0.5

        return Point(zoomed_x * c.width, zoomed_y * c.height)

    # -- grid --------------------------------------------------------------

    def get_effective_grid_size(self) -> float | None:
        """Grid spacing after the zoom-dependent level multiplier."""
        grid = self._config.grid
        if grid is None:
            return None
        return grid.size * select_grid_level(self._config.zoom).multiplier

    def snap_to_grid(self, point: Point) -> Point:
        """Snap a world point to the effective grid if snapping is enabled."""
        grid = self._config.grid
        if grid is None or not grid.snap:
            return point

        size = self.get_effective_grid_size()
        return Point(round(point.x / size) * size, round(point.y / size) * size)

    def generate_grid_dots(self) -> list[GridDot]:
        """One dot per grid intersection inside the visible world rectangle.

        Spacing follows the adaptive grid level. When the dot count would
        exceed ``max_grid_dots`` the spacing is doubled until it fits.
        """
        c = self._config
        if c.grid is None or not c.grid.visible:
            return []

        level = select_grid_level(c.zoom)
        spacing = c.grid.size * level.multiplier
        visible = self.visible_world_rect()

        while True:
            first_col = math.ceil(visible.x / spacing)
            last_col = math.floor(visible.right / spacing)
            first_row = math.ceil(visible.y / spacing)
            last_row = math.floor(visible.bottom / spacing)
            count = max(0, last_col - first_col + 1) * max(0, last_row - first_row + 1)
            if count <= c.max_grid_dots:
                break
            logger.debug(
                "Grid spacing %s gives %d dots (max %d), coarsening",
                spacing, count, c.max_grid_dots,
            )
            spacing *= 2

        size = level.dot_size / c.zoom
        return [
            GridDot(col * spacing, row * spacing, size, level.opacity)
            for row in range(first_row, last_row + 1)
            for col in range(first_col, last_col + 1)
        ]

    def generate_grid_lines(self) -> list[GridLine]:
        """Vertical then horizontal lines at the base grid size across the world bounds."""
        c = self._config
        if c.grid is None or not c.grid.visible:
            return []

        size = c.grid.size
        b = c.world_bounds
        lines = []

        for col in range(math.ceil(b.x / size), math.floor(b.right / size) + 1):
            x = col * size
            lines.append(GridLine(x, b.y, x, b.bottom))

        for row in range(math.ceil(b.y / size), math.floor(b.bottom / size) + 1):
            y = row * size
            lines.append(GridLine(b.x, y, b.right, y))

        return lines

    # -- visible area -------------------------------------------------------

    def view_rect(self) -> Rect:
        """World rectangle covered by the view box."""
        c = self._config
        b = c.world_bounds

        view_width = b.width / c.zoom
        view_height = b.height / c.zoom

        center_x = b.x + b.width / 2 + c.pan.x * b.width
        center_y = b.y + b.height / 2 + c.pan.y * b.height

        return Rect(center_x - view_width / 2, center_y - view_height / 2, view_width, view_height)

    def get_view_box(self) -> str:
        """View box as ``"minX minY width height"``."""
        r = self.view_rect()
        return " ".join(format_number(v) for v in (r.x, r.y, r.width, r.height))

    def visible_world_rect(self) -> Rect:
        """View rectangle extended on its narrower axis to the screen aspect ratio."""
        c = self._config
        view = self.view_rect()

        screen_aspect = c.width / c.height
        view_aspect = view.width / view.height

        if view_aspect < screen_aspect:
            width = view.height * screen_aspect
            height = view.height
        else:
            width = view.width
            height = view.width / screen_aspect

        center = view.center
        return Rect(center.x - width / 2, center.y - height / 2, width, height)

    # -- display -----------------------------------------------------------

    def format_coordinate(self, value: float) -> str:
        """Render a world value in the configured units."""
        units = self._config.units
        if units is Units.MM:
            return f"{value:.2f}mm"
        if units is Units.IN:
            return f'{value:.3f}"'
        if units is Units.MIL:
            return f"{value * 1000:.0f}mil"
        if units is Units.PX:
            return f"{math.floor(value + 0.5)}px"
        return f"{value:.2f}"

    # -- navigation --------------------------------------------------------

    def zoom_in(self, factor: float = DEFAULT_ZOOM_FACTOR) -> None:
        self.update_config(zoom=self._config.zoom * factor)

    def zoom_out(self, factor: float = DEFAULT_ZOOM_FACTOR) -> None:
        self.update_config(zoom=self._config.zoom / factor)

    def pan_by(self, delta_x: float, delta_y: float) -> None:
        """Shift the pan by a normalized delta, scaled down by the zoom."""
        c = self._config
        self.update_config(pan=c.pan.offset(delta_x / c.zoom, delta_y / c.zoom))

    def fit_to_view(self, content_bounds: Rect, margin: float = DEFAULT_FIT_MARGIN) -> None:
        """Zoom and pan so that content_bounds (plus margin) fills the view."""
        b = self._config.world_bounds

        zoom_x = b.width / (content_bounds.width * (1 + margin))
        zoom_y = b.height / (content_bounds.height * (1 + margin))

        center = content_bounds.center
        pan = Point(
            (center.x - b.x) / b.width - 0.5,
            (center.y - b.y) / b.height - 0.5,
        )
        self.update_config(zoom=min(zoom_x, zoom_y), pan=pan)
