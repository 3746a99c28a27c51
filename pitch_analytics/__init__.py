"""
Pitch Analytics Engine

Strike zone classification, pitch location heatmaps, achievement badges and
windowed workload/performance rollups for a pitching development program.
"""

from .zone import is_strike, in_shadow_zone, in_bottom_third, in_top_third
from .models import Outing, PitchEvent, BadgeDefinition, BadgeResult
from .density import build_density_grid
from .heatmap import render_heatmap, render_pitch_heatmap, interpolate_color
from .badges import BADGES, evaluate_badges
from .aggregation import compute_window_stats, compare_windows, trend_direction, pitcher_summary
from .analysis import build_report_card, summarize_badges
from .data_processing import OutingDataLoader, validate_outing

__version__ = "1.0"

__all__ = [
    'is_strike',
    'in_shadow_zone',
    'in_bottom_third',
    'in_top_third',
    'Outing',
    'PitchEvent',
    'BadgeDefinition',
    'BadgeResult',
    'build_density_grid',
    'render_heatmap',
    'render_pitch_heatmap',
    'interpolate_color',
    'BADGES',
    'evaluate_badges',
    'compute_window_stats',
    'compare_windows',
    'trend_direction',
    'pitcher_summary',
    'build_report_card',
    'summarize_badges',
    'OutingDataLoader',
    'validate_outing',
]
