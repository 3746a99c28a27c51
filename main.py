"""
Main execution file for the Pitch Analytics Engine.

This file orchestrates the pipeline from loading logged outings and charted
pitches through badge evaluation, heatmap rendering, team rollups and export.
"""

import os
import argparse
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from pitch_analytics.data_processing import OutingDataLoader, pitch_type_label
from pitch_analytics.models import Outing, PitchEvent
from pitch_analytics.heatmap import render_pitch_heatmap
from pitch_analytics.badges import evaluate_badges
from pitch_analytics.aggregation import (
    pitcher_summary, compare_windows, team_window_stats, window_bounds,
    season_summary, detect_milestones
)
from pitch_analytics.analysis import build_report_card, summarize_badges, generate_takeaways
from pitch_analytics.visualization import (
    save_heatmap_png, plot_season_trends, export_results, save_summary_report
)
from config import DATA_DIR, RESULTS_DIR, FASTBALL_TYPE

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def _slug(name: str) -> str:
    return ''.join(c if c.isalnum() else '_' for c in name.lower()).strip('_')


def analyze_pitcher(pitcher_name: str, outings: List[Outing], events: List[PitchEvent],
                    as_of: date, results_dir: str) -> Dict:
    """Build the full report for one pitcher and write their images.

    Args:
        pitcher_name (str): Pitcher to analyze
        outings (List[Outing]): Outings for the whole roster
        events (List[PitchEvent]): Charted pitches for the whole roster
        as_of (date): Reference day for trailing windows and badge lookbacks
        results_dir (str): Directory for heatmap and trend images

    Returns:
        Dict: summary, badges, badge_summary, report_card, season,
            milestones, takeaways and image paths
    """
    own = [o for o in outings if o.pitcher_name == pitcher_name]
    own_ids = {o.id for o in own}
    own_events = [e for e in events if e.outing_id in own_ids]
    logger.info(f"Analyzing {pitcher_name}: {len(own)} outings, {len(own_events)} charted pitches")

    summary = pitcher_summary(pitcher_name, outings, as_of)
    badges = evaluate_badges(own, own_events, team_outings=outings, as_of=as_of)
    badge_summary = summarize_badges(badges)
    report_card = build_report_card(own, badges, as_of.year)
    season = season_summary(own, as_of.year)

    slug = _slug(pitcher_name)
    images = {}

    heatmap_file = os.path.join(results_dir, f"{slug}_heatmap.png")
    save_heatmap_png(render_pitch_heatmap(own_events), heatmap_file, f"{pitcher_name} - All Pitches")
    images['heatmap'] = heatmap_file

    if any(e.pitch_type == FASTBALL_TYPE for e in own_events):
        fastball_file = os.path.join(results_dir, f"{slug}_heatmap_fb.png")
        save_heatmap_png(render_pitch_heatmap(own_events, pitch_type=FASTBALL_TYPE), fastball_file,
                         f"{pitcher_name} - {pitch_type_label(FASTBALL_TYPE)}")
        images['fastball_heatmap'] = fastball_file

    trends_file = os.path.join(results_dir, f"{slug}_season.png")
    season_outings = [o for o in own if o.date.year == as_of.year]
    if plot_season_trends(season_outings, trends_file, f"{pitcher_name} - {as_of.year} Season"):
        images['season_trends'] = trends_file

    return {
        'summary': summary,
        'badges': [r.to_dict() for r in badges],
        'badge_summary': badge_summary,
        'report_card': report_card,
        'season': season,
        'milestones': detect_milestones(own, as_of.year),
        'takeaways': generate_takeaways(summary, badge_summary, report_card),
        'images': images,
    }


def run_pipeline(data_dir: str = DATA_DIR, results_dir: str = RESULTS_DIR,
                 as_of: Optional[date] = None) -> Dict:
    """Run the end-to-end pipeline: load, per-pitcher analysis, team rollups, export.

    Steps:
        1) Load and validate outings and charted pitches.
        2) For every pitcher: workload summary, badges, report card, heatmaps.
        3) Compare the team's trailing window with the one before it.
        4) Export JSON results and a text summary report.

    Args:
        data_dir (str): Directory with outings.csv and pitch_locations.csv
        results_dir (str): Output directory, created if missing
        as_of (date): Reference day; defaults to the most recent outing date

    Returns:
        Dict: pitcher_reports, window_comparison, team_stats, as_of
    """
    logger.info("Starting pitch analytics pipeline...")

    try:
        logger.info("Step 1: Loading data...")
        outings, events = OutingDataLoader(data_dir).load()
        if not outings:
            raise ValueError(f"No valid outings found in {data_dir}")

        if as_of is None:
            as_of = max(o.date for o in outings)
        logger.info(f"Reference date: {as_of}")

        os.makedirs(results_dir, exist_ok=True)

        logger.info("Step 2: Analyzing pitchers...")
        pitcher_reports = [
            analyze_pitcher(name, outings, events, as_of, results_dir)
            for name in sorted({o.pitcher_name for o in outings})
        ]

        logger.info("Step 3: Comparing team windows...")
        window_comparison = compare_windows(outings, as_of)
        team_stats = team_window_stats(outings, *window_bounds(as_of))
        for metric, direction in window_comparison['trends'].items():
            logger.info(f"  {metric}: {direction}")

        logger.info("Step 4: Exporting results...")
        export_results(pitcher_reports, window_comparison, team_stats,
                       os.path.join(results_dir, "pitch_analytics_results.json"))
        save_summary_report(pitcher_reports, window_comparison,
                            os.path.join(results_dir, "pitch_analytics_summary.txt"))

        logger.info("Pitch analytics pipeline completed successfully!")

        return {
            'pitcher_reports': pitcher_reports,
            'window_comparison': window_comparison,
            'team_stats': team_stats,
            'as_of': as_of,
        }

    except Exception as e:
        logger.error(f"Error in pipeline execution: {str(e)}")
        raise


def main():
    parser = argparse.ArgumentParser(description="Pitch analytics: badges, heatmaps and workload rollups")
    parser.add_argument('--data-dir', default=DATA_DIR, help="Directory with the CSV exports")
    parser.add_argument('--results-dir', default=RESULTS_DIR, help="Where to write reports and images")
    parser.add_argument('--as-of', type=lambda s: datetime.strptime(s, '%Y-%m-%d').date(),
                        help="Reference date YYYY-MM-DD (default: latest outing)")
    args = parser.parse_args()

    run_pipeline(args.data_dir, args.results_dir, args.as_of)

    print("\nAnalysis complete! Check the generated files in", args.results_dir)


if __name__ == "__main__":
    main()
