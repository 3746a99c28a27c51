"""
Heatmap rendering.

Turns a normalized density grid into an RGBA raster: bilinear resampling to
the output size, optional gamma, piecewise-linear color lookup across fixed
color stops, and a strike zone overlay (outline plus 3x3 cell lines).
Stateless and deterministic: identical inputs give identical pixels.
"""

import math
import numpy as np
from typing import List, Optional, Sequence, Tuple

from config import COLOR_STOPS, HEATMAP_CONFIG, DENSITY_CONFIG, STRIKE_ZONE
from .density import build_density_grid, pitch_points
from .models import PitchEvent


def _stop_arrays(stops: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    """Split color stops into a threshold vector and a (k, 4) RGBA matrix.

    Raises:
        ValueError: If the stops are unsorted or don't span [0, 1]
    """
    if len(stops) < 2:
        raise ValueError("At least two color stops are required")

    thresholds = np.array([float(s[0]) for s in stops])
    colors = np.array([tuple(s[1]) + (255,) if len(s[1]) == 3 else tuple(s[1]) for s in stops],
                      dtype=float)

    if thresholds[0] != 0.0 or thresholds[-1] != 1.0:
        raise ValueError("Color stops must start at 0 and end at 1")
    if np.any(np.diff(thresholds) < 0):
        raise ValueError("Color stop thresholds must be sorted")
    return thresholds, colors


def interpolate_color(value: float, stops: Sequence = COLOR_STOPS) -> Tuple[int, int, int, int]:
    """Look up the RGBA color for a density value.

    Finds the pair of stops bracketing the value and interpolates each channel
    linearly by the value's fractional position between their thresholds.
    Values are clamped to [0, 1]; NaN is treated as 0.

    Args:
        value (float): Density in [0, 1]
        stops: (threshold, (r, g, b[, a])) pairs

    Returns:
        Tuple[int, int, int, int]: RGBA channels, 0-255
    """
    thresholds, colors = _stop_arrays(stops)
    if value is None or math.isnan(value):
        value = 0.0
    value = max(0.0, min(1.0, float(value)))

    lower, upper = 0, len(thresholds) - 1
    for i in range(len(thresholds) - 1):
        if thresholds[i] <= value <= thresholds[i + 1]:
            lower, upper = i, i + 1
            break

    span = thresholds[upper] - thresholds[lower]
    t = (value - thresholds[lower]) / span if span > 0 else 0.0
    rgba = colors[lower] + t * (colors[upper] - colors[lower])
    return tuple(int(math.floor(c + 0.5)) for c in rgba)


def colorize(values: np.ndarray, stops: Sequence = COLOR_STOPS) -> np.ndarray:
    """Vectorized interpolate_color over an array of densities.

    Returns:
        np.ndarray: values.shape + (4,) uint8 array
    """
    thresholds, colors = _stop_arrays(stops)
    values = np.clip(np.nan_to_num(np.asarray(values, dtype=float), nan=0.0), 0.0, 1.0)

    channels = [np.interp(values, thresholds, colors[:, c]) for c in range(4)]
    rgba = np.stack(channels, axis=-1)
    return np.floor(rgba + 0.5).astype(np.uint8)


def bilinear_resample(grid: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample a grid to height x width by bilinear interpolation.

    Output pixel (px, py) samples fractional grid position
    (px / width * (cols - 1), py / height * (rows - 1)).
    """
    n_rows, n_cols = grid.shape

    gx = np.arange(width, dtype=float) / width * (n_cols - 1)
    gy = np.arange(height, dtype=float) / height * (n_rows - 1)

    x0 = np.floor(gx).astype(int)
    y0 = np.floor(gy).astype(int)
    x1 = np.minimum(x0 + 1, n_cols - 1)
    y1 = np.minimum(y0 + 1, n_rows - 1)
    fx = gx - x0
    fy = (gy - y0)[:, None]

    top = grid[np.ix_(y0, x0)] * (1 - fx) + grid[np.ix_(y0, x1)] * fx
    bottom = grid[np.ix_(y1, x0)] * (1 - fx) + grid[np.ix_(y1, x1)] * fx
    return top * (1 - fy) + bottom * fy


def zone_pixel_bounds(width: int, height: int) -> Tuple[float, float, float, float]:
    """Strike zone rectangle in pixel space as (left, top, right, bottom)."""
    left = (STRIKE_ZONE['left'] + 1) / 2 * width
    right = (STRIKE_ZONE['right'] + 1) / 2 * width
    top = (1 - STRIKE_ZONE['top']) / 2 * height
    bottom = (1 - STRIKE_ZONE['bottom']) / 2 * height
    return left, top, right, bottom


def _line_mask(width: int, height: int, segments: List[Tuple], line_width: int) -> np.ndarray:
    # segments: ('v', x, y_start, y_end) or ('h', y, x_start, x_end) in pixels
    mask = np.zeros((height, width), dtype=bool)
    for orient, pos, start, end in segments:
        lo = int(math.floor(pos - line_width / 2 + 0.5))
        hi = lo + line_width
        a = int(math.floor(start + 0.5))
        b = int(math.floor(end + 0.5)) + 1
        if orient == 'v':
            mask[max(a, 0):min(b, height), max(lo, 0):min(hi, width)] = True
        else:
            mask[max(lo, 0):min(hi, height), max(a, 0):min(b, width)] = True
    return mask


def _blend(raster: np.ndarray, mask: np.ndarray, color: Tuple[int, int, int], alpha: float):
    pixels = raster[mask].astype(float)
    rgb = np.asarray(color, dtype=float)
    pixels[:, :3] = pixels[:, :3] * (1 - alpha) + rgb * alpha
    pixels[:, 3] = alpha * 255 + pixels[:, 3] * (1 - alpha)
    raster[mask] = np.floor(pixels + 0.5).astype(np.uint8)


def draw_zone_overlay(raster: np.ndarray, style: Optional[dict] = None) -> np.ndarray:
    """Draw the zone outline and its internal 3x3 lines onto a copy of the raster.

    The overlay style is fixed configuration and doesn't depend on the density data.
    """
    style = style or HEATMAP_CONFIG
    out = raster.copy()
    height, width = out.shape[:2]
    left, top, right, bottom = zone_pixel_bounds(width, height)
    cell_w = (right - left) / 3
    cell_h = (bottom - top) / 3

    inner = []
    for i in (1, 2):
        inner.append(('v', left + cell_w * i, top, bottom))
        inner.append(('h', top + cell_h * i, left, right))
    _blend(out, _line_mask(width, height, inner, style['grid_line_width']),
           style['grid_line_color'], style['grid_line_alpha'])

    outline = [
        ('v', left, top, bottom),
        ('v', right, top, bottom),
        ('h', top, left, right),
        ('h', bottom, left, right),
    ]
    _blend(out, _line_mask(width, height, outline, style['outline_width']),
           style['outline_color'], style['outline_alpha'])
    return out


def render_heatmap(grid: np.ndarray,
                   width: int = HEATMAP_CONFIG['width'],
                   height: int = HEATMAP_CONFIG['height'],
                   gamma: Optional[float] = HEATMAP_CONFIG['gamma'],
                   stops: Sequence = COLOR_STOPS,
                   overlay: bool = True) -> np.ndarray:
    """
    Render a normalized density grid to an RGBA raster.

    An all-zero grid is the no-data state: the raster is filled with the
    no-data color and only the overlay is drawn.

    Args:
        grid (np.ndarray): Density grid with values in [0, 1]
        width (int): Output width in pixels
        height (int): Output height in pixels
        gamma (float): Exponent applied to density before color lookup, None to skip
        stops: Color stops for the gradient
        overlay (bool): Draw the strike zone overlay

    Returns:
        np.ndarray: height x width x 4 uint8 array

    Raises:
        ValueError: If the output size is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid raster size {width}x{height}")

    grid = np.asarray(grid, dtype=float)
    if grid.size == 0 or not np.any(grid > 0):
        raster = np.empty((height, width, 4), dtype=np.uint8)
        raster[:] = HEATMAP_CONFIG['no_data_color']
    else:
        values = np.clip(bilinear_resample(grid, width, height), 0.0, 1.0)
        if gamma is not None and gamma != 1:
            values = values ** gamma
        raster = colorize(values, stops)

    return draw_zone_overlay(raster) if overlay else raster


def render_pitch_heatmap(events: List[PitchEvent],
                         width: int = HEATMAP_CONFIG['width'],
                         height: int = HEATMAP_CONFIG['height'],
                         pitch_type: Optional[int] = None,
                         grid_size: int = DENSITY_CONFIG['grid_size']) -> np.ndarray:
    """Build the density grid for a pitcher's charted pitches and render it."""
    grid = build_density_grid(pitch_points(events, pitch_type), grid_size=grid_size)
    return render_heatmap(grid, width, height)
