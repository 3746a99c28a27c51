"""
Density estimation for pitch location heatmaps.

Builds a bounded-radius discrete approximation of a kernel density estimate:
each pitch adds a truncated Gaussian footprint to an N x N grid, the grid is
smoothed with a fixed 3x3 kernel, and the result is normalized so its
maximum is 1.0. Density is relative within a single grid, never an absolute count.
"""

import logging
import numpy as np
from typing import Iterable, List, Optional, Tuple

from config import DENSITY_CONFIG, BLUR_KERNEL
from .models import PitchEvent

logger = logging.getLogger(__name__)


def gaussian_footprint(influence_radius: int, sigma: float) -> np.ndarray:
    """Weights for one pitch, on a (2r+1) x (2r+1) stencil centered on the pitch.

    Cells further than influence_radius from the center get zero weight.
    """
    offsets = np.arange(-influence_radius, influence_radius + 1, dtype=float)
    dy, dx = np.meshgrid(offsets, offsets, indexing='ij')
    dist_sq = dx * dx + dy * dy

    weights = np.exp(-dist_sq / (2.0 * sigma * sigma))
    weights[dist_sq > influence_radius * influence_radius] = 0.0
    return weights


def _to_grid_indices(points: np.ndarray, grid_size: int) -> Tuple[np.ndarray, np.ndarray]:
    # Row 0 is the top of the plate (y = +1)
    scale = grid_size - 1
    cols = np.floor((points[:, 0] + 1.0) / 2.0 * scale + 0.5).astype(int)
    rows = np.floor((1.0 - points[:, 1]) / 2.0 * scale + 0.5).astype(int)
    return rows, cols


def accumulate_density(points: Iterable[Tuple[float, float]],
                       grid_size: int = DENSITY_CONFIG['grid_size'],
                       influence_radius: int = DENSITY_CONFIG['influence_radius'],
                       sigma_divisor: float = DENSITY_CONFIG['sigma_divisor']) -> np.ndarray:
    """
    Add a truncated Gaussian contribution for every pitch to an empty grid.

    Points are clipped to [-1, 1] before mapping, and points with non-finite
    coordinates are skipped. Cost is O(pitches * influence_radius^2).

    Args:
        points: (x, y) pairs in normalized coordinates
        grid_size (int): Grid resolution N
        influence_radius (int): Footprint radius in cells
        sigma_divisor (float): sigma = influence_radius / sigma_divisor

    Returns:
        np.ndarray: N x N grid of accumulated (unnormalized) weights
    """
    if influence_radius < 1:
        raise ValueError(f"Influence radius must be at least 1 cell, got {influence_radius}")

    grid = np.zeros((grid_size, grid_size), dtype=float)

    coords = np.asarray(list(points), dtype=float).reshape(-1, 2)
    finite = np.isfinite(coords).all(axis=1)
    if not finite.all():
        logger.warning(f"Skipping {int((~finite).sum())} pitches with missing coordinates")
    coords = np.clip(coords[finite], -1.0, 1.0)
    if len(coords) == 0:
        return grid

    r = int(influence_radius)
    footprint = gaussian_footprint(r, r / sigma_divisor)
    rows, cols = _to_grid_indices(coords, grid_size)

    for row, col in zip(rows, cols):
        r0, r1 = max(row - r, 0), min(row + r + 1, grid_size)
        c0, c1 = max(col - r, 0), min(col + r + 1, grid_size)
        grid[r0:r1, c0:c1] += footprint[r0 - (row - r):r1 - (row - r),
                                        c0 - (col - r):c1 - (col - r)]

    return grid


def smooth_grid(grid: np.ndarray, passes: int = DENSITY_CONFIG['blur_passes']) -> np.ndarray:
    """Apply the 3x3 smoothing kernel `passes` times with zero padding at the borders."""
    kernel = np.asarray(BLUR_KERNEL, dtype=float)
    n_rows, n_cols = grid.shape
    smoothed = grid.astype(float, copy=True)

    for _ in range(passes):
        padded = np.pad(smoothed, 1, mode='constant', constant_values=0.0)
        out = np.zeros_like(smoothed)
        for ky in range(3):
            for kx in range(3):
                out += kernel[ky, kx] * padded[ky:ky + n_rows, kx:kx + n_cols]
        smoothed = out

    return smoothed


def normalize_grid(grid: np.ndarray) -> np.ndarray:
    """Scale a grid so its maximum is exactly 1.0.

    An all-zero grid is the "no data" state and is returned as zeros.
    """
    peak = float(grid.max()) if grid.size else 0.0
    if peak <= 0.0:
        return np.zeros_like(grid, dtype=float)
    return grid / peak


def build_density_grid(points: Iterable[Tuple[float, float]],
                       grid_size: int = DENSITY_CONFIG['grid_size'],
                       influence_radius: int = DENSITY_CONFIG['influence_radius'],
                       sigma_divisor: float = DENSITY_CONFIG['sigma_divisor'],
                       blur_passes: int = DENSITY_CONFIG['blur_passes']) -> np.ndarray:
    """Full pipeline: accumulate, smooth, normalize.

    Returns:
        np.ndarray: N x N grid with values in [0, 1]; max is 1.0 whenever at
            least one pitch was supplied, all zeros otherwise.
    """
    grid = accumulate_density(points, grid_size, influence_radius, sigma_divisor)
    grid = smooth_grid(grid, blur_passes)
    return normalize_grid(grid)


def pitch_points(events: List[PitchEvent], pitch_type: Optional[int] = None) -> List[Tuple[float, float]]:
    """Extract (x, y) pairs from pitch events, optionally for one pitch type."""
    return [(e.x_location, e.y_location) for e in events
            if pitch_type is None or e.pitch_type == pitch_type]
