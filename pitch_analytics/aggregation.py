"""
Windowed rollups and trend detection over outing collections.

Every function takes explicit dates (window bounds or an ``as_of`` day)
instead of reading the clock, so results are reproducible. Untracked
strikes (None) are excluded from strike percentages everywhere.
"""

import logging
import pandas as pd
import numpy as np
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from config import (
    EVENT_TYPES, WORKLOAD_CONFIG, TREND_CONFIG, MILESTONE_CONFIG,
    TREND_UP, TREND_DOWN, TREND_NEUTRAL
)
from .models import Outing, outings_to_frame

logger = logging.getLogger(__name__)

TREND_METRICS = ['total_pitches', 'strike_percentage', 'max_velo', 'avg_velo', 'outing_count']


def _none_if_nan(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def strike_totals(df: pd.DataFrame):
    """(tracked pitches, strikes, strike %) over outings with tracked strikes.

    The percentage is None when no pitches were tracked.
    """
    tracked = df.dropna(subset=['strikes'])
    pitches = int(tracked['pitch_count'].sum())
    strikes = int(tracked['strikes'].sum())
    pct = strikes / pitches * 100 if pitches > 0 else None
    return pitches, strikes, pct


def _between(df: pd.DataFrame, start: Optional[date], end: Optional[date]) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    if start is not None:
        mask &= df['date'] >= pd.Timestamp(start)
    if end is not None:
        mask &= df['date'] <= pd.Timestamp(end)
    return df[mask]


def filter_by_window(items: Sequence, start_date: Optional[date] = None,
                     field: str = 'date') -> List:
    """Keep records dated on or after start_date (the achievement window).

    Records without a value in ``field`` are kept; with no start date every
    record is kept.
    """
    if start_date is None:
        return list(items)

    start = pd.Timestamp(start_date)
    kept = []
    for item in items:
        value = getattr(item, field, None)
        if value is None:
            kept.append(item)
            continue
        stamp = pd.Timestamp(value)
        if stamp.tzinfo is not None:
            stamp = stamp.tz_convert(None)
        if stamp >= start:
            kept.append(item)
    return kept


def compute_window_stats(outings: List[Outing], start: Optional[date] = None,
                         end: Optional[date] = None) -> Dict:
    """
    Aggregate outings dated within [start, end] (both inclusive, either optional).

    Args:
        outings (List[Outing]): Outings to roll up, any number of pitchers
        start (date): First day of the window
        end (date): Last day of the window

    Returns:
        Dict: total_pitches, tracked_pitches, total_strikes, strike_percentage
            (None when nothing was tracked), min_velo / max_velo / avg_velo
            (None without velocity readings), outing_count, event_type_counts,
            unique_pitchers, start, end
    """
    df = _between(outings_to_frame(outings), start, end)

    tracked_pitches, total_strikes, strike_pct = strike_totals(df)
    velos = df.loc[df['max_velo'] > 0, 'max_velo']

    event_counts = {event: 0 for event in EVENT_TYPES}
    event_counts.update({str(k): int(v) for k, v in df['event_type'].value_counts().items()})

    return {
        'start': start,
        'end': end,
        'total_pitches': int(df['pitch_count'].sum()),
        'tracked_pitches': tracked_pitches,
        'total_strikes': total_strikes,
        'strike_percentage': strike_pct,
        'min_velo': _none_if_nan(velos.min()) if not velos.empty else None,
        'max_velo': _none_if_nan(velos.max()) if not velos.empty else None,
        'avg_velo': _none_if_nan(velos.mean()) if not velos.empty else None,
        'outing_count': int(len(df)),
        'event_type_counts': event_counts,
        'unique_pitchers': int(df['pitcher_name'].nunique()),
    }


def trend_direction(current: Optional[float], previous: Optional[float]) -> str:
    """Compare a metric between two windows by the sign of the difference.

    Neutral whenever either value is missing or the previous value is zero.
    """
    if current is None or previous is None or pd.isna(current) or pd.isna(previous):
        return TREND_NEUTRAL
    if previous == 0:
        return TREND_NEUTRAL
    diff = current - previous
    if diff > 0:
        return TREND_UP
    if diff < 0:
        return TREND_DOWN
    return TREND_NEUTRAL


def window_bounds(as_of: date, window_days: int = TREND_CONFIG['window_days'], offset: int = 0):
    """(start, end) of the window_days-long window ending `offset` windows before as_of."""
    end = as_of - timedelta(days=window_days * offset)
    start = end - timedelta(days=window_days - 1)
    return start, end


def compare_windows(outings: List[Outing], as_of: date,
                    window_days: int = TREND_CONFIG['window_days']) -> Dict:
    """
    Compare the trailing window ending at as_of with the window before it.

    Returns:
        Dict: 'current' and 'previous' window stats, 'trends' (metric ->
            up/down/neutral) and 'changes' (metric -> {'diff', 'pct_change'},
            None where the prior value is missing or zero). When the prior
            window logged no pitches every trend is neutral.
    """
    current = compute_window_stats(outings, *window_bounds(as_of, window_days, 0))
    previous = compute_window_stats(outings, *window_bounds(as_of, window_days, 1))

    trends = {}
    changes = {}
    for metric in TREND_METRICS:
        cur, prev = current[metric], previous[metric]
        if previous['total_pitches'] == 0:
            trends[metric] = TREND_NEUTRAL
        else:
            trends[metric] = trend_direction(cur, prev)

        if cur is None or prev is None:
            changes[metric] = {'diff': None, 'pct_change': None}
        else:
            changes[metric] = {
                'diff': cur - prev,
                'pct_change': (cur - prev) / prev * 100 if prev else None,
            }

    return {'current': current, 'previous': previous, 'trends': trends, 'changes': changes}


def team_window_stats(outings: List[Outing], start: Optional[date] = None,
                      end: Optional[date] = None) -> pd.DataFrame:
    """Per-pitcher rollup for a window, one row per pitcher sorted by name."""
    df = _between(outings_to_frame(outings), start, end)
    columns = ['pitcher_name', 'total_pitches', 'total_strikes', 'strike_percentage',
               'min_velo', 'max_velo', 'outing_count']
    if df.empty:
        return pd.DataFrame(columns=columns)

    rows = []
    for name, group in df.groupby('pitcher_name'):
        _, strikes, pct = strike_totals(group)
        velos = group.loc[group['max_velo'] > 0, 'max_velo']
        rows.append({
            'pitcher_name': name,
            'total_pitches': int(group['pitch_count'].sum()),
            'total_strikes': strikes,
            'strike_percentage': pct,
            'min_velo': float(velos.min()) if not velos.empty else None,
            'max_velo': float(velos.max()) if not velos.empty else None,
            'outing_count': int(len(group)),
        })

    team = pd.DataFrame(rows, columns=columns).sort_values('pitcher_name').reset_index(drop=True)
    # Float columns turn None into NaN; keep missing readings as None
    return team.astype(object).where(team.notna(), None)


# === Workload ===

def seven_day_pulse(outings: List[Outing], as_of: date,
                    window_days: int = WORKLOAD_CONFIG['window_days']) -> int:
    """Total pitches thrown in the trailing window ending at as_of."""
    start, end = window_bounds(as_of, window_days)
    return compute_window_stats(outings, start, end)['total_pitches']


def pulse_level(pulse: int, max_weekly: int = WORKLOAD_CONFIG['max_weekly_pitches']) -> str:
    """Workload level: normal, warning (>=75%), caution (>=90%), danger (>=100%)."""
    if not max_weekly or max_weekly <= 0:
        max_weekly = WORKLOAD_CONFIG['max_weekly_pitches']
    pct = pulse / max_weekly * 100

    if pct >= WORKLOAD_CONFIG['danger_pct']:
        return 'danger'
    if pct >= WORKLOAD_CONFIG['caution_pct']:
        return 'caution'
    if pct >= WORKLOAD_CONFIG['warning_pct']:
        return 'warning'
    return 'normal'


def pulse_label(level: str, pulse: int,
                max_weekly: int = WORKLOAD_CONFIG['max_weekly_pitches']) -> str:
    if not max_weekly or max_weekly <= 0:
        max_weekly = WORKLOAD_CONFIG['max_weekly_pitches']
    pct = round(pulse / max_weekly * 100)

    if level == 'danger':
        return f"Over limit ({pct}%)"
    if level == 'caution':
        return f"Near limit ({pct}%)"
    if level == 'warning':
        return f"Approaching limit ({pct}%)"
    return f"{pulse} / {max_weekly}"


def pitcher_summary(pitcher_name: str, outings: List[Outing], as_of: date,
                    max_weekly: int = WORKLOAD_CONFIG['max_weekly_pitches']) -> Dict:
    """Current-status card for one pitcher.

    Velocity comes from the trailing window, falling back to the all-time
    max when nothing recent has a reading.
    """
    own = [o for o in outings if o.pitcher_name == pitcher_name]
    summary = {
        'pitcher_name': pitcher_name,
        'seven_day_pulse': 0,
        'pulse_level': 'normal',
        'pulse_label': pulse_label('normal', 0, max_weekly),
        'strike_percentage': None,
        'max_velo': None,
        'last_outing': None,
        'last_pitch_count': 0,
        'notes': '',
        'focus': None,
        'coach_notes': None,
        'outing_count': len(own),
    }
    if not own:
        return summary

    start, end = window_bounds(as_of, WORKLOAD_CONFIG['window_days'])
    recent = compute_window_stats(own, start, end)
    all_time = compute_window_stats(own)

    pulse = recent['total_pitches']
    level = pulse_level(pulse, max_weekly)
    pct = recent['strike_percentage']

    latest_first = sorted(own, key=lambda o: o.date, reverse=True)
    last = latest_first[0]

    summary.update({
        'seven_day_pulse': pulse,
        'pulse_level': level,
        'pulse_label': pulse_label(level, pulse, max_weekly),
        'strike_percentage': round(pct, 2) if pct is not None else None,
        'max_velo': recent['max_velo'] if recent['max_velo'] is not None else all_time['max_velo'],
        'last_outing': last.date,
        'last_pitch_count': last.pitch_count,
        'notes': last.notes or '',
        'focus': next((o.focus for o in latest_first if o.focus), None),
        'coach_notes': next((o.coach_notes for o in latest_first if o.coach_notes), None),
    })
    return summary


# === Season ===

def season_frame(outings: List[Outing], season: int) -> pd.DataFrame:
    """Outings dated in the given calendar year, oldest first."""
    df = outings_to_frame(outings)
    df = df[df['date'].dt.year == season]
    return df.sort_values('date', kind='mergesort').reset_index(drop=True)


def _half_stats(df: pd.DataFrame) -> Dict:
    velos = df.loc[df['max_velo'] > 0, 'max_velo']
    _, _, pct = strike_totals(df)
    return {
        'avg_velo': float(velos.mean()) if not velos.empty else 0.0,
        'strike_percentage': pct if pct is not None else 0.0,
        'avg_pitch_count': float(df['pitch_count'].mean()) if not df.empty else 0.0,
    }


def season_summary(outings: List[Outing], season: int) -> Optional[Dict]:
    """
    Season totals, monthly breakdown and first-half vs second-half comparison.

    Returns:
        Dict or None: None when the pitcher has no outings that season.
            'monthly' is a DataFrame indexed by month period with pitches,
            outings, strikes, strike_pitches, max_velo and strike_percentage.
            'improvements' is None with fewer than 4 outings.
    """
    df = season_frame(outings, season)
    if df.empty:
        return None

    tracked_pitches, total_strikes, pct = strike_totals(df)
    velos = df.loc[df['max_velo'] > 0, 'max_velo']

    monthly = df.assign(
        month=df['date'].dt.to_period('M'),
        strike_pitches=np.where(df['strikes'].notna(), df['pitch_count'], 0),
        tracked_strikes=df['strikes'].fillna(0),
    ).groupby('month').agg(
        pitches=('pitch_count', 'sum'),
        outings=('id', 'count'),
        strikes=('tracked_strikes', 'sum'),
        strike_pitches=('strike_pitches', 'sum'),
        max_velo=('max_velo', 'max'),
    )
    monthly['max_velo'] = monthly['max_velo'].fillna(0.0)
    monthly['strike_percentage'] = np.where(
        monthly['strike_pitches'] > 0,
        (monthly['strikes'] / monthly['strike_pitches'].where(monthly['strike_pitches'] > 0) * 100).round(),
        0.0,
    )

    improvements = None
    if len(df) >= TREND_CONFIG['report_min_values']:
        mid = len(df) // 2
        improvements = {'first_half': _half_stats(df.iloc[:mid]),
                        'second_half': _half_stats(df.iloc[mid:])}

    return {
        'season': season,
        'total_outings': int(len(df)),
        'total_pitches': int(df['pitch_count'].sum()),
        'tracked_pitches': tracked_pitches,
        'total_strikes': total_strikes,
        'strike_percentage': pct,
        'max_velo': float(velos.max()) if not velos.empty else None,
        'avg_velo': float(velos.mean()) if not velos.empty else None,
        'event_type_counts': {str(k): int(v) for k, v in df['event_type'].value_counts().items()},
        'monthly': monthly,
        'improvements': improvements,
    }


def detect_milestones(outings: List[Outing], season: int,
                      limit: int = MILESTONE_CONFIG['max_events']) -> List[Dict]:
    """Walk the season chronologically and record notable outings.

    New max velocity and new best strike % (sessions with enough pitches) are
    positive events, starting from the second such outing; high pitch counts
    are flagged negative. Only the most recent `limit` events are returned.
    """
    events = []
    best_velo = 0.0
    best_pct = 0.0

    for row in season_frame(outings, season).itertuples(index=False):
        day = row.date.date()
        velo = row.max_velo if not pd.isna(row.max_velo) else 0.0
        if velo > best_velo:
            if best_velo > 0:
                events.append({'date': day, 'label': f"New max velo: {velo:g} mph", 'type': 'positive'})
            best_velo = velo

        if not pd.isna(row.strikes) and row.pitch_count >= MILESTONE_CONFIG['best_strike_min_pitches']:
            pct = row.strikes / row.pitch_count * 100
            if pct > best_pct:
                if best_pct > 0:
                    events.append({'date': day, 'label': f"Best strike %: {pct:.0f}%", 'type': 'positive'})
                best_pct = pct

        if row.pitch_count >= MILESTONE_CONFIG['high_pitch_count']:
            events.append({'date': day, 'label': f"High pitch count: {row.pitch_count}", 'type': 'negative'})

    return events[-limit:] if limit else events


def session_trend(values: Sequence[Optional[float]],
                  min_values: int = TREND_CONFIG['session_min_values'],
                  tolerance: float = TREND_CONFIG['session_tolerance']) -> Optional[str]:
    """Trend of a per-outing series from the average of its first vs second half.

    Missing values are dropped first; returns None with fewer than min_values.
    """
    clean = [float(v) for v in values if v is not None and not pd.isna(v)]
    if len(clean) < min_values:
        return None

    mid = len(clean) // 2
    first = sum(clean[:mid]) / mid
    second = sum(clean[mid:]) / (len(clean) - mid)
    diff = second - first
    if abs(diff) < tolerance:
        return TREND_NEUTRAL
    return TREND_UP if diff > 0 else TREND_DOWN
