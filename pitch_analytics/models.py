"""
Record types for outings, charted pitches, and badges.

Also converts record lists into the pandas DataFrames the aggregation and
badge modules work on.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import List, Optional

import pandas as pd

from .zone import is_strike

OUTING_COLUMNS = [
    'id', 'pitcher_id', 'pitcher_name', 'date', 'event_type', 'pitch_count',
    'strikes', 'max_velo', 'notes', 'focus', 'coach_notes'
]

PITCH_EVENT_COLUMNS = [
    'id', 'outing_id', 'pitcher_id', 'pitch_number', 'pitch_type',
    'x_location', 'y_location', 'is_strike', 'created_at'
]


@dataclass(frozen=True)
class PitchEvent:
    """
    One charted pitch.

    ``is_strike`` is a point-in-time snapshot: it is computed once when the
    pitch is recorded (see ``record``) and stored. Records loaded back from
    storage keep whatever flag they were saved with, so later changes to the
    zone constants never reclassify history.

    Attributes:
        outing_id (str): Outing that produced the pitch
        pitcher_id (str): Pitcher who threw it
        pitch_number (int): Sequence within the outing, starting at 1
        pitch_type (int): Pitcher-defined category 1-5 (1 = fastball)
        x_location (float): Horizontal plate crossing, -1 to 1
        y_location (float): Vertical plate crossing, -1 to 1
        is_strike (bool): Stored classification
        created_at (datetime): When the pitch was charted
        id (str): Storage identifier, if any
    """
    outing_id: str
    pitcher_id: str
    pitch_number: int
    pitch_type: int
    x_location: float
    y_location: float
    is_strike: bool
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def record(cls, outing_id: str, pitcher_id: str, pitch_number: int,
               pitch_type: int, x_location: float, y_location: float,
               created_at: Optional[datetime] = None,
               id: Optional[str] = None) -> 'PitchEvent':
        """Create a new pitch, classifying its location once."""
        return cls(
            outing_id=outing_id,
            pitcher_id=pitcher_id,
            pitch_number=pitch_number,
            pitch_type=pitch_type,
            x_location=x_location,
            y_location=y_location,
            is_strike=is_strike(x_location, y_location),
            created_at=created_at,
            id=id,
        )


@dataclass(frozen=True)
class Outing:
    """
    One practice or game session.

    ``strikes`` is None when strikes were not tracked for the session; such
    outings are left out of every strike-percentage numerator and denominator.
    """
    id: str
    pitcher_name: str
    date: date
    event_type: str
    pitch_count: int
    strikes: Optional[int] = None
    max_velo: Optional[float] = None
    notes: str = ''
    focus: str = ''
    coach_notes: str = ''
    pitcher_id: Optional[str] = None

    @property
    def strikes_tracked(self) -> bool:
        return self.strikes is not None

    @property
    def strike_percentage(self) -> Optional[float]:
        if self.strikes is None or self.pitch_count <= 0:
            return None
        return self.strikes / self.pitch_count * 100


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    emoji: str
    description: str
    metric: str
    category: str


@dataclass
class BadgeResult:
    """Evaluation of one badge for one pitcher. Rebuilt on every evaluation."""
    badge: BadgeDefinition
    earned: bool
    progress: float
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'id': self.badge.id,
            'name': self.badge.name,
            'category': self.badge.category,
            'earned': self.earned,
            'progress': round(self.progress, 1),
            'detail': self.detail,
        }


def outings_to_frame(outings: List[Outing]) -> pd.DataFrame:
    """Convert outings into a DataFrame with stable columns and dtypes.

    ``strikes`` and ``max_velo`` become float columns with NaN for untracked
    values, ``date`` becomes datetime64. An empty list gives an empty frame
    with the same columns.

    Args:
        outings (List[Outing]): Outing records

    Returns:
        pd.DataFrame: One row per outing
    """
    df = pd.DataFrame([asdict(o) for o in outings], columns=OUTING_COLUMNS)

    df['date'] = pd.to_datetime(df['date'], errors='coerce')
    df['pitch_count'] = pd.to_numeric(df['pitch_count'], errors='coerce').fillna(0).astype(int)
    df['strikes'] = pd.to_numeric(df['strikes'], errors='coerce').astype(float)
    df['max_velo'] = pd.to_numeric(df['max_velo'], errors='coerce').astype(float)
    for col in ('notes', 'focus', 'coach_notes'):
        df[col] = df[col].fillna('').astype(str)

    return df


def pitch_events_to_frame(events: List[PitchEvent]) -> pd.DataFrame:
    """Convert pitch events into a DataFrame with stable columns and dtypes."""
    df = pd.DataFrame([asdict(e) for e in events], columns=PITCH_EVENT_COLUMNS)

    df['pitch_type'] = pd.to_numeric(df['pitch_type'], errors='coerce').fillna(0).astype(int)
    df['x_location'] = pd.to_numeric(df['x_location'], errors='coerce').astype(float)
    df['y_location'] = pd.to_numeric(df['y_location'], errors='coerce').astype(float)
    df['is_strike'] = df['is_strike'].eq(True)
    df['outing_id'] = df['outing_id'].astype(str)

    return df
