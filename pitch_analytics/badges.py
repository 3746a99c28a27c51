"""
Achievement badge evaluation.

Ten independent scoring rules evaluated against a pitcher's outings and
charted pitches. Every rule returns a BadgeResult with an earned flag, a
progress value clamped to [0, 100] and a detail string. Missing or sparse
data yields earned=False with partial progress, never an exception.
"""

import logging
import math
import pandas as pd
from datetime import date
from typing import Callable, Dict, List, Optional

from config import BADGE_THRESHOLDS, FASTBALL_TYPE
from .models import (
    BadgeDefinition, BadgeResult, Outing, PitchEvent,
    outings_to_frame, pitch_events_to_frame
)
from .zone import in_shadow_zone, in_bottom_third, in_top_third

logger = logging.getLogger(__name__)

T = BADGE_THRESHOLDS

BADGES = [
    BadgeDefinition('zone-master', 'Zone Master', '🎯',
                    'Overall accuracy gold standard',
                    f"≥ {T['zone_master_pct']}% Strike %", 'accuracy'),
    BadgeDefinition('sniper-status', 'Sniper Status', '🔫',
                    'Corner command specialist',
                    f"≥ {T['sniper_shadow_pitches']} shadow zone pitches in one session", 'command'),
    BadgeDefinition('bridge-builder', 'Bridge Builder', '🌉',
                    'Off-speed consistency',
                    f"≥ {T['bridge_builder_pct']}% strike rate on off-speed", 'accuracy'),
    BadgeDefinition('down-away', 'Down & Away', '⬇️',
                    'Low zone command',
                    f"≥ {T['down_away_pitches']} pitches in bottom 1/3", 'command'),
    BadgeDefinition('velocity-jump', 'Velocity Jump', '🚀',
                    'Growth over time',
                    f"+{T['velocity_jump_mph']} MPH vs. {T['velocity_lookback_days']}-day avg", 'velocity'),
    BadgeDefinition('terminator', 'The Terminator', '🤖',
                    'Dominant session performance',
                    f"≥ {T['terminator_pct']}% strikes in {T['terminator_min_pitches']}+ pitch session",
                    'dominance'),
    BadgeDefinition('power-precision', 'Power & Precision', '⚡',
                    'The dual threat',
                    f"Top 25% velo + ≥ {T['power_strike_pct']}% strikes", 'dominance'),
    BadgeDefinition('stratosphere', 'The Stratosphere', '☁️',
                    'High heat command',
                    f"≥ {T['stratosphere_fastballs']} fastballs in top 1/3 zone", 'command'),
    BadgeDefinition('repeatable-motion', 'Repeatable Motion', '🔁',
                    'Consistency across sessions',
                    f"{T['repeatable_streak']}+ outings within {T['repeatable_tolerance_pct']}% strike rate",
                    'consistency'),
    BadgeDefinition('early-count-killer', 'Early Count Killer', '💀',
                    'Zone aggression',
                    f"≥ {T['early_count_pct']}% zone rate in a session", 'dominance'),
]


def _progress(value: float, target: float, scale: float = 100.0) -> float:
    """value/target * scale, clamped to [0, 100]; NaN counts as no progress."""
    if target <= 0 or value is None or math.isnan(value):
        return 0.0
    return min(100.0, max(0.0, value / target * scale))


def _tracked(outings_df: pd.DataFrame) -> pd.DataFrame:
    # Untracked sessions never count toward strike percentages
    return outings_df.dropna(subset=['strikes'])


def _strike_pct(outings_df: pd.DataFrame) -> Optional[float]:
    tracked = _tracked(outings_df)
    total = tracked['pitch_count'].sum()
    if total <= 0:
        return None
    return float(tracked['strikes'].sum() / total * 100)


def _best_session_count(events_df: pd.DataFrame, mask: pd.Series) -> int:
    """Largest number of matching pitches in any single outing."""
    matching = events_df[mask]
    if matching.empty:
        return 0
    return int(matching.groupby('outing_id').size().max())


# 1. Zone Master
def eval_zone_master(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    pct = _strike_pct(outings_df)
    if pct is None:
        return BadgeResult(badge, False, 0.0, 'No tracked strikes')
    target = T['zone_master_pct']
    return BadgeResult(badge, pct >= target, _progress(pct, target), f"{pct:.1f}% strikes")


# 2. Sniper Status
def eval_sniper_status(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    if events_df.empty:
        return BadgeResult(badge, False, 0.0, 'No charted pitches')
    shadow = events_df.apply(lambda p: in_shadow_zone(p['x_location'], p['y_location']), axis=1)
    best = _best_session_count(events_df, shadow.astype(bool))
    target = T['sniper_shadow_pitches']
    return BadgeResult(badge, best >= target, _progress(best, target), f"Best: {best} shadow pitches")


# 3. Bridge Builder
def eval_bridge_builder(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    off_speed = events_df[events_df['pitch_type'] != FASTBALL_TYPE]
    if off_speed.empty:
        return BadgeResult(badge, False, 0.0, 'No off-speed data')
    pct = float(off_speed['is_strike'].mean() * 100)
    target = T['bridge_builder_pct']
    return BadgeResult(badge, pct >= target, _progress(pct, target), f"{pct:.0f}% off-speed strikes")


# 4. Down & Away
def eval_down_away(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    if events_df.empty:
        return BadgeResult(badge, False, 0.0, 'No charted pitches')
    low = events_df['y_location'].map(in_bottom_third).astype(bool)
    best = _best_session_count(events_df, low)
    target = T['down_away_pitches']
    return BadgeResult(badge, best >= target, _progress(best, target), f"Best: {best} low zone pitches")


# 5. Velocity Jump
def eval_velocity_jump(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    velo = outings_df[outings_df['max_velo'] > 0].sort_values('date', ascending=False, kind='mergesort')
    if len(velo) < 2:
        return BadgeResult(badge, False, 0.0, 'Need more data')

    current = float(velo['max_velo'].iloc[0])
    reference = pd.Timestamp(as_of) if as_of is not None else outings_df['date'].max()
    cutoff = reference - pd.Timedelta(days=T['velocity_lookback_days'])
    older = velo[velo['date'] < cutoff]
    if older.empty:
        return BadgeResult(badge, False, 0.0, f"Need {T['velocity_lookback_days']}+ days of data")

    jump = current - float(older['max_velo'].mean())
    target = T['velocity_jump_mph']
    sign = '+' if jump >= 0 else ''
    return BadgeResult(badge, jump >= target, _progress(jump, target), f"{sign}{jump:.1f} MPH")


# 6. The Terminator
def eval_terminator(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    qualifying = _tracked(outings_df)
    qualifying = qualifying[qualifying['pitch_count'] >= T['terminator_min_pitches']]
    if qualifying.empty:
        return BadgeResult(badge, False, 0.0, f"No {T['terminator_min_pitches']}+ pitch sessions")
    best = float((qualifying['strikes'] / qualifying['pitch_count'] * 100).max())
    target = T['terminator_pct']
    return BadgeResult(badge, best >= target, _progress(best, target), f"Best: {best:.0f}% in a session")


# 7. Power & Precision
def eval_power_precision(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    """Top-quartile max velocity on the roster plus a 60% strike rate.

    Progress is half velocity (full marks inside the top quartile, otherwise
    the ratio to the cutoff) and half strike rate toward the target.
    """
    pct = _strike_pct(outings_df) or 0.0
    target = T['power_strike_pct']
    my_velo = outings_df['max_velo'].max() if not outings_df.empty else 0.0
    my_velo = 0.0 if pd.isna(my_velo) else float(my_velo)

    team_velos = []
    if team_df is not None and not team_df.empty:
        per_pitcher = team_df.groupby('pitcher_name')['max_velo'].max()
        team_velos = sorted((v for v in per_pitcher if v > 0), reverse=True)

    if not team_velos or my_velo <= 0:
        return BadgeResult(badge, False, _progress(pct, target, scale=50.0),
                           'Need team data for velo ranking')

    cutoff = team_velos[int(math.floor(len(team_velos) * T['power_velo_top_fraction']))]
    in_top = my_velo >= cutoff
    velo_part = 50.0 if in_top else my_velo / cutoff * 50.0
    strike_part = min(pct, target) / target * 50.0
    earned = in_top and pct >= target
    return BadgeResult(badge, earned, min(100.0, max(0.0, velo_part + strike_part)),
                       f"{my_velo:g} MPH, {pct:.0f}% strikes")


# 8. The Stratosphere
def eval_stratosphere(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    if events_df.empty:
        return BadgeResult(badge, False, 0.0, 'No charted pitches')
    high_heat = (events_df['pitch_type'] == FASTBALL_TYPE) & \
        events_df['y_location'].map(in_top_third).astype(bool)
    best = _best_session_count(events_df, high_heat)
    target = T['stratosphere_fastballs']
    return BadgeResult(badge, best >= target, _progress(best, target), f"Best: {best} high fastballs")


# 9. Repeatable Motion
def eval_repeatable_motion(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    tracked = _tracked(outings_df)
    tracked = tracked[tracked['pitch_count'] > 0].sort_values('date', kind='mergesort')
    pcts = (tracked['strikes'] / tracked['pitch_count'] * 100).tolist()
    streak_target = T['repeatable_streak']

    if len(pcts) < streak_target:
        return BadgeResult(badge, False, _progress(len(pcts), streak_target, scale=50.0),
                           f"{len(pcts)}/{streak_target} outings")

    longest = current = 1
    for prev, cur in zip(pcts, pcts[1:]):
        if abs(cur - prev) <= T['repeatable_tolerance_pct']:
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return BadgeResult(badge, longest >= streak_target, _progress(longest, streak_target),
                       f"{longest} consecutive consistent")


# 10. Early Count Killer
def eval_early_count_killer(badge, outings_df, events_df, team_df, as_of) -> BadgeResult:
    min_pitches = T['early_count_min_pitches']
    target = T['early_count_pct']
    if events_df.empty:
        return BadgeResult(badge, False, 0.0, 'No charted pitches')

    per_outing = events_df.groupby('outing_id')['is_strike'].agg(['sum', 'count'])
    per_outing = per_outing[per_outing['count'] >= min_pitches]
    if per_outing.empty:
        return BadgeResult(badge, False, 0.0, f"Need a session with {min_pitches}+ charted pitches")

    best = float((per_outing['sum'] / per_outing['count'] * 100).max())
    return BadgeResult(badge, best >= target, _progress(best, target), f"Best: {best:.0f}% zone rate")


RULES: Dict[str, Callable] = {
    'zone-master': eval_zone_master,
    'sniper-status': eval_sniper_status,
    'bridge-builder': eval_bridge_builder,
    'down-away': eval_down_away,
    'velocity-jump': eval_velocity_jump,
    'terminator': eval_terminator,
    'power-precision': eval_power_precision,
    'stratosphere': eval_stratosphere,
    'repeatable-motion': eval_repeatable_motion,
    'early-count-killer': eval_early_count_killer,
}


def evaluate_badges(outings: List[Outing],
                    pitch_events: List[PitchEvent],
                    team_outings: Optional[List[Outing]] = None,
                    as_of: Optional[date] = None) -> List[BadgeResult]:
    """
    Evaluate every badge for one pitcher.

    Args:
        outings (List[Outing]): The pitcher's outings
        pitch_events (List[PitchEvent]): The pitcher's charted pitches
        team_outings (List[Outing]): Outings for the whole roster, needed for
            the velocity ranking in Power & Precision
        as_of (date): Reference date for Velocity Jump's lookback; defaults
            to the pitcher's most recent outing date

    Returns:
        List[BadgeResult]: One result per badge, in BADGES order
    """
    outings_df = outings_to_frame(outings)
    events_df = pitch_events_to_frame(pitch_events)
    team_df = outings_to_frame(team_outings) if team_outings else None

    results = []
    for badge in BADGES:
        rule = RULES[badge.id]
        try:
            results.append(rule(badge, outings_df, events_df, team_df, as_of))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Badge '{badge.id}' could not be evaluated: {str(e)}")
            results.append(BadgeResult(badge, False, 0.0, 'Insufficient data'))

    earned = sum(r.earned for r in results)
    logger.info(f"Evaluated {len(results)} badges from {len(outings)} outings and "
                f"{len(pitch_events)} pitches: {earned} earned")
    return results
