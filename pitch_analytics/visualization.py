"""
Visualization and export functionality for pitch analytics results.

Contains functions for saving heatmap images, plotting season trends, and
exporting results to JSON and text reports.
"""

import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap, Normalize
from matplotlib.cm import ScalarMappable
import seaborn as sns
import pandas as pd
import numpy as np
import json
import logging
from datetime import date
from typing import Dict, List, Optional

from config import COLOR_STOPS
from .models import Outing, outings_to_frame

logger = logging.getLogger(__name__)


def heatmap_colormap(stops=COLOR_STOPS) -> LinearSegmentedColormap:
    """Matplotlib colormap built from the same stops the raster renderer uses."""
    return LinearSegmentedColormap.from_list(
        'pitch_density',
        [(threshold, tuple(c / 255 for c in rgb[:3])) for threshold, rgb in stops]
    )


def save_heatmap_png(raster: np.ndarray, filename: str, title: Optional[str] = None):
    """Save a rendered RGBA heatmap with a density colorbar.

    Args:
        raster (np.ndarray): height x width x 4 uint8 raster from render_heatmap
        filename (str): Output PNG path
        title (str): Optional figure title
    """
    height, width = raster.shape[:2]
    fig, ax = plt.subplots(figsize=(width / 80 + 1.5, height / 80))

    ax.imshow(raster, interpolation='nearest')
    ax.set_axis_off()
    if title:
        ax.set_title(title)

    mappable = ScalarMappable(norm=Normalize(0, 1), cmap=heatmap_colormap())
    fig.colorbar(mappable, ax=ax, label='Relative density', fraction=0.046, pad=0.04)

    fig.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Heatmap saved as '{filename}'")


def plot_season_trends(outings: List[Outing], filename: str, title: Optional[str] = None) -> bool:
    """Plot per-outing strike % and max velocity over time.

    Args:
        outings (List[Outing]): Outings to plot (typically one pitcher, one season)
        filename (str): Output PNG path
        title (str): Optional figure title

    Returns:
        bool: False when there was nothing to plot
    """
    df = outings_to_frame(outings).dropna(subset=['date']).sort_values('date')
    if df.empty:
        logger.warning("No outings to plot")
        return False

    df['strike_pct'] = np.where(df['pitch_count'] > 0,
                                df['strikes'] / df['pitch_count'].where(df['pitch_count'] > 0) * 100,
                                np.nan)

    sns.set_style('whitegrid')
    fig, axes = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    # Strike percentage
    strikes = df.dropna(subset=['strike_pct'])
    if not strikes.empty:
        sns.lineplot(data=strikes, x='date', y='strike_pct', marker='o', ax=axes[0])
    axes[0].set_ylabel('Strike %')
    axes[0].set_title('Strike Percentage by Outing')

    # Velocity
    velos = df[df['max_velo'] > 0]
    if not velos.empty:
        sns.lineplot(data=velos, x='date', y='max_velo', marker='o', color='indianred', ax=axes[1])
    axes[1].set_ylabel('Max Velo (MPH)')
    axes[1].set_xlabel('Date')
    axes[1].set_title('Max Velocity by Outing')

    if title:
        fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Season trends saved as '{filename}'")
    return True


def _clean_nan(value):
    """Replace float NaN anywhere in nested dicts and lists with None."""
    if isinstance(value, dict):
        return {k: _clean_nan(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean_nan(v) for v in value]
    if isinstance(value, (float, np.floating)) and np.isnan(value):
        return None
    return value


def _json_default(value):
    if isinstance(value, (date, pd.Timestamp)):
        return value.isoformat()
    if isinstance(value, pd.Period):
        return str(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, pd.DataFrame):
        return _clean_nan(value.reset_index().to_dict('records'))
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def export_results(pitcher_reports: List[Dict], window_comparison: Dict,
                   team_stats: pd.DataFrame, filename: str = "pitch_analytics_results.json"):
    """Export per-pitcher reports and team rollups to JSON.

    Args:
        pitcher_reports (List[Dict]): One report per pitcher built by the pipeline
        window_comparison (Dict): Output of compare_windows for the whole team
        team_stats (pd.DataFrame): Output of team_window_stats
        filename (str): Output filename for JSON export
    """
    export_data = {
        "team": {
            "current_window": window_comparison['current'],
            "previous_window": window_comparison['previous'],
            "trends": window_comparison['trends'],
            "changes": window_comparison['changes'],
            "pitchers": team_stats.to_dict('records') if not team_stats.empty else [],
        },
        "pitchers": pitcher_reports,
        "summary": {
            "total_pitchers": len(pitcher_reports),
            "badges_earned": sum(r['badge_summary']['earned_count'] for r in pitcher_reports),
        }
    }

    # Missing values are written as null, never NaN
    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(_clean_nan(export_data), f, indent=2, default=_json_default, allow_nan=False)

    logger.info(f"Results exported to {filename}")


def _fmt(value, spec: str = '.1f', suffix: str = '') -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return 'N/A'
    return f"{value:{spec}}{suffix}"


def save_summary_report(pitcher_reports: List[Dict], window_comparison: Dict,
                        filename: str = "pitch_analytics_summary.txt"):
    """Generate and save a plain-text summary report.

    Args:
        pitcher_reports (List[Dict]): One report per pitcher built by the pipeline
        window_comparison (Dict): Output of compare_windows for the whole team
        filename (str): Output text file name
    """
    current = window_comparison['current']
    trends = window_comparison['trends']

    with open(filename, 'w', encoding='utf-8') as f:
        f.write("PITCH ANALYTICS - SUMMARY REPORT\n")
        f.write("=" * 50 + "\n\n")

        # Team window
        f.write("TEAM - TRAILING WINDOW\n")
        f.write("-" * 22 + "\n")
        f.write(f"Window: {current['start']} to {current['end']}\n")
        f.write(f"Pitches: {current['total_pitches']} ({trends['total_pitches']})\n")
        f.write(f"Strike %: {_fmt(current['strike_percentage'], suffix='%')} "
                f"({trends['strike_percentage']})\n")
        f.write(f"Max Velo: {_fmt(current['max_velo'], suffix=' MPH')} ({trends['max_velo']})\n")
        f.write(f"Outings: {current['outing_count']} ({trends['outing_count']})\n\n")

        # Pitchers
        f.write("PITCHERS\n")
        f.write("-" * 8 + "\n")
        for report in pitcher_reports:
            summary = report['summary']
            f.write(f"\n{summary['pitcher_name']}\n")
            f.write(f"  7-day pulse: {summary['seven_day_pulse']} ({summary['pulse_label']})\n")
            f.write(f"  Strike %: {_fmt(summary['strike_percentage'], suffix='%')}\n")
            f.write(f"  Max Velo: {_fmt(summary['max_velo'], 'g', ' MPH')}\n")

            badge_summary = report['badge_summary']
            f.write(f"  Badges: {badge_summary['earned_count']}/{badge_summary['total']}")
            if badge_summary['earned']:
                f.write(f" ({', '.join(badge_summary['earned'])})")
            f.write("\n")

            card = report.get('report_card')
            if card:
                grades = ', '.join(f"{g['label']} {g['grade']}" for g in card['grades'])
                f.write(f"  Report card: {card['overall']} ({grades})\n")

            for category, notes in report.get('takeaways', {}).items():
                f.write(f"  {category}:\n")
                for note in notes:
                    f.write(f"    • {note}\n")

    logger.info(f"Summary report saved as '{filename}'")
