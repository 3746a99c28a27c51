"""
Season report card and achievement summaries.

Turns season outings and badge results into letter grades and short,
readable takeaways for players and coaches.
"""

import logging
import pandas as pd
from typing import Dict, List, Optional

from config import (
    GRADE_SCALE, GRADE_POINTS, REPORT_CARD_CONFIG, TREND_CONFIG
)
from .aggregation import session_trend, season_frame, strike_totals
from .models import BadgeResult, Outing

logger = logging.getLogger(__name__)


def letter_grade(score: float) -> str:
    """Map a 0-100 score to a letter grade."""
    for minimum, letter in GRADE_SCALE:
        if score >= minimum:
            return letter
    return GRADE_SCALE[-1][1]


def _consistency_score(strike_pcts: List[float]) -> Optional[float]:
    # 0 points of average drift between consecutive outings scores 100, 20+ scores 0
    if len(strike_pcts) < 2:
        return None
    diffs = [abs(b - a) for a, b in zip(strike_pcts, strike_pcts[1:])]
    avg_diff = sum(diffs) / len(diffs)
    return max(0.0, min(100.0, (1 - avg_diff / REPORT_CARD_CONFIG['consistency_zero_score_diff']) * 100))


def build_report_card(outings: List[Outing], badge_results: List[BadgeResult],
                      season: int) -> Optional[Dict]:
    """
    Grade a pitcher's season on accuracy, consistency, work ethic and achievements.

    Grading Categories:
    - Accuracy: season strike % scaled so the 65% target scores 90
    - Consistency: how little strike % moves between consecutive outings
    - Work Ethic: outings per week, 3 per week scores 100
    - Achievements: share of badges earned

    Args:
        outings (List[Outing]): The pitcher's outings (any seasons)
        badge_results (List[BadgeResult]): Output of evaluate_badges
        season (int): Season year to grade

    Returns:
        Dict or None: 'grades' (list of dicts with label, grade, score, value,
            trend) and 'overall' letter. None with fewer than two season outings.
    """
    df = season_frame(outings, season)
    if len(df) < 2:
        logger.info(f"Not enough {season} outings for a report card")
        return None

    cfg = REPORT_CARD_CONFIG

    # Accuracy
    _, _, strike_pct = strike_totals(df)
    strike_pct = strike_pct or 0.0
    accuracy = min(100.0, strike_pct / cfg['accuracy_target_pct'] * cfg['accuracy_target_score'])

    per_outing = [
        row.strikes / row.pitch_count * 100 if not pd.isna(row.strikes) and row.pitch_count > 0 else None
        for row in df.itertuples(index=False)
    ]
    accuracy_trend = session_trend(per_outing, TREND_CONFIG['report_min_values'],
                                   TREND_CONFIG['report_tolerance'])

    # Consistency
    tracked_pcts = [p for p in per_outing if p is not None]
    consistency = _consistency_score(tracked_pcts)

    # Work ethic
    span_days = (df['date'].iloc[-1] - df['date'].iloc[0]).days
    weeks = max(1.0, span_days / 7)
    per_week = len(df) / weeks
    work_ethic = min(100.0, per_week / cfg['outings_per_week_target'] * 100)

    # Achievements
    earned = sum(r.earned for r in badge_results)
    achievements = earned / len(badge_results) * 100 if badge_results else 0.0

    grades = [
        {'label': 'Accuracy', 'score': accuracy, 'grade': letter_grade(accuracy),
         'value': f"{strike_pct:.0f}% strikes", 'trend': accuracy_trend},
        {'label': 'Consistency', 'score': consistency or 0.0, 'grade': letter_grade(consistency or 0.0),
         'value': f"{consistency:.0f}% stable" if consistency is not None else 'Need data', 'trend': None},
        {'label': 'Work Ethic', 'score': work_ethic, 'grade': letter_grade(work_ethic),
         'value': f"{per_week:.1f}/week", 'trend': None},
        {'label': 'Achievements', 'score': achievements, 'grade': letter_grade(achievements),
         'value': f"{earned}/{len(badge_results)} earned", 'trend': None},
    ]

    points = [GRADE_POINTS.get(g['grade'], 70) for g in grades]
    overall = letter_grade(sum(points) / len(points))

    return {'season': season, 'outing_count': int(len(df)), 'grades': grades, 'overall': overall}


def summarize_badges(results: List[BadgeResult], closest: int = 3) -> Dict:
    """Earned count plus the unearned badges closest to completion."""
    earned = [r for r in results if r.earned]
    pending = sorted((r for r in results if not r.earned), key=lambda r: r.progress, reverse=True)

    return {
        'earned_count': len(earned),
        'total': len(results),
        'earned': [r.badge.name for r in earned],
        'closest': [
            {'name': r.badge.name, 'progress': round(r.progress), 'detail': r.detail}
            for r in pending[:closest]
        ],
    }


def generate_takeaways(summary: Dict, badge_summary: Dict,
                       report_card: Optional[Dict] = None) -> Dict[str, List[str]]:
    """Translate a pitcher's numbers into short coaching notes.

    Args:
        summary (Dict): Output of pitcher_summary
        badge_summary (Dict): Output of summarize_badges
        report_card (Dict): Output of build_report_card, if available

    Returns:
        Dict[str, List[str]]: Notes bucketed into Workload, Command and Goals
    """
    takeaways = {"Workload": [], "Command": [], "Goals": []}

    level = summary['pulse_level']
    if level in ('caution', 'danger'):
        takeaways["Workload"].append(f"{summary['pulse_label']} - plan extra recovery before the next outing")
    elif level == 'warning':
        takeaways["Workload"].append(f"{summary['pulse_label']} - keep the next session short")
    else:
        takeaways["Workload"].append(f"7-day pitch count {summary['pulse_label']}")

    pct = summary['strike_percentage']
    if pct is None:
        takeaways["Command"].append("Track strikes in upcoming sessions to measure command")
    else:
        takeaways["Command"].append(f"Trailing strike rate {pct:.1f}%")

    if report_card:
        for grade in report_card['grades']:
            if grade['trend']:
                takeaways["Command"].append(f"{grade['label']} trending {grade['trend']} ({grade['value']})")

    takeaways["Goals"].append(f"{badge_summary['earned_count']}/{badge_summary['total']} badges earned")
    for item in badge_summary['closest']:
        takeaways["Goals"].append(f"Next up: {item['name']} at {item['progress']}%"
                                  + (f" ({item['detail']})" if item['detail'] else ""))

    return takeaways
