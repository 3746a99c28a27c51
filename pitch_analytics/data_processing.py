"""
Data processing module for the pitch analytics engine.

Loads outings and charted pitches from the CSV exports of the storage
layer, validates logged outings, and handles pitch type display labels.
"""

import os
import re
import math
import numbers
import logging
import pandas as pd
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from config import (
    DATA_DIR, OUTINGS_FILE, PITCH_LOCATIONS_FILE, EVENT_TYPES,
    VALIDATION_LIMITS, DEFAULT_PITCH_TYPES
)
from .models import Outing, PitchEvent
from .zone import classify_locations

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    return isinstance(value, numbers.Real) and math.isnan(value)


def _as_integer(value) -> Optional[int]:
    """Integer value of ints, integral floats and numeric strings; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or not number.is_integer():
        return None
    return int(number)


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def validate_outing(record: Dict) -> Tuple[bool, Optional[str]]:
    """
    Check a logged outing against the input sanity limits.

    Args:
        record (Dict): Outing fields keyed like the Outing record
            (pitcher_name, date, event_type, pitch_count, strikes, max_velo,
            notes, focus)

    Returns:
        Tuple[bool, Optional[str]]: (True, None) when valid, otherwise
            (False, message describing the first problem found)
    """
    limits = VALIDATION_LIMITS

    name = record.get('pitcher_name')
    if not isinstance(name, str) or not name.strip():
        return False, "Pitcher name is required"
    if len(name.strip()) > limits['name_max_length']:
        return False, f"Pitcher name must be at most {limits['name_max_length']} characters"

    if _parse_date(record.get('date')) is None:
        return False, "Date must be a valid YYYY-MM-DD date"

    if record.get('event_type') not in EVENT_TYPES:
        return False, f"Event type must be one of: {', '.join(EVENT_TYPES)}"

    pitch_count = _as_integer(record.get('pitch_count'))
    if pitch_count is None:
        return False, "Pitch count must be a whole number"
    if pitch_count < 0 or pitch_count > limits['max_pitch_count']:
        return False, f"Pitch count must be between 0 and {limits['max_pitch_count']}"

    strikes = record.get('strikes')
    if not _is_missing(strikes):
        strikes = _as_integer(strikes)
        if strikes is None:
            return False, "Strikes must be a whole number"
        if strikes < 0 or strikes > limits['max_pitch_count']:
            return False, f"Strikes must be between 0 and {limits['max_pitch_count']}"
        if strikes > pitch_count:
            return False, "Strikes cannot exceed pitch count"

    max_velo = record.get('max_velo')
    if not _is_missing(max_velo):
        max_velo = _as_number(max_velo)
        if max_velo is None or max_velo < 0 or max_velo > limits['max_velo']:
            return False, f"Max velocity must be between 0 and {limits['max_velo']} MPH"

    notes = record.get('notes')
    if not _is_missing(notes) and len(str(notes)) > limits['notes_max_length']:
        return False, f"Notes must be at most {limits['notes_max_length']} characters"

    focus = record.get('focus')
    if not _is_missing(focus) and len(str(focus)) > limits['focus_max_length']:
        return False, f"Focus must be at most {limits['focus_max_length']} characters"

    return True, None


def _text(value) -> str:
    return '' if _is_missing(value) else str(value)


def _optional_id(value) -> Optional[str]:
    return None if _is_missing(value) else str(value)


class OutingDataLoader:
    """
    Loads outings and charted pitches from CSV exports.

    Column names follow the storage tables: outings.csv has id, pitcher_id,
    pitcher_name, date, event_type, pitch_count, strikes, max_velocity,
    notes, focus, coach_notes; pitch_locations.csv has id, outing_id,
    pitcher_id, pitch_number, pitch_type, x_location, y_location,
    is_strike, created_at.

    Invalid rows are dropped with a warning rather than failing the load.

    Attributes:
        data_dir (str): Directory holding the CSV files
    """

    def __init__(self, data_dir: str = DATA_DIR):
        self.data_dir = data_dir

    def _read(self, filename: str, id_columns: List[str]) -> pd.DataFrame:
        path = os.path.join(self.data_dir, filename)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Required data file not found: {path}")
        return pd.read_csv(path, dtype={col: str for col in id_columns})

    def load_outings(self) -> List[Outing]:
        """
        Load and validate outings.

        Returns:
            List[Outing]: Valid outings in file order

        Raises:
            FileNotFoundError: If outings.csv is missing
            ValueError: If required columns are missing
        """
        logger.info("Loading outings...")
        df = self._read(OUTINGS_FILE, ['id', 'pitcher_id', 'date'])

        required = ['id', 'pitcher_name', 'date', 'event_type', 'pitch_count']
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(f"{OUTINGS_FILE} is missing columns: {', '.join(missing)}")

        df = df.rename(columns={'max_velocity': 'max_velo'})
        for col in ['pitcher_id', 'strikes', 'max_velo', 'notes', 'focus', 'coach_notes']:
            if col not in df.columns:
                df[col] = None

        outings = []
        skipped = 0
        for record in df.to_dict('records'):
            ok, message = validate_outing(record)
            if not ok:
                skipped += 1
                logger.warning(f"Skipping outing {record.get('id')}: {message}")
                continue

            outings.append(Outing(
                id=str(record['id']),
                pitcher_name=record['pitcher_name'].strip(),
                date=_parse_date(record['date']),
                event_type=record['event_type'],
                pitch_count=_as_integer(record['pitch_count']),
                strikes=None if _is_missing(record['strikes']) else _as_integer(record['strikes']),
                max_velo=None if _is_missing(record['max_velo']) else _as_number(record['max_velo']),
                notes=_text(record['notes']),
                focus=_text(record['focus']),
                coach_notes=_text(record['coach_notes']),
                pitcher_id=_optional_id(record['pitcher_id']),
            ))

        logger.info(f"Loaded {len(outings)} outings ({skipped} skipped)")
        return outings

    def load_pitch_events(self) -> List[PitchEvent]:
        """
        Load charted pitches.

        The stored is_strike flag is kept as recorded. Rows without one (or a
        file without the column) are classified from their location.

        Returns:
            List[PitchEvent]: Pitches ordered by outing and pitch number

        Raises:
            FileNotFoundError: If pitch_locations.csv is missing
            ValueError: If required columns are missing
        """
        logger.info("Loading pitch locations...")
        df = self._read(PITCH_LOCATIONS_FILE, ['id', 'outing_id', 'pitcher_id'])

        required = ['outing_id', 'pitch_number', 'pitch_type', 'x_location', 'y_location']
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(f"{PITCH_LOCATIONS_FILE} is missing columns: {', '.join(missing)}")

        for col in ['id', 'pitcher_id', 'is_strike', 'created_at']:
            if col not in df.columns:
                df[col] = None

        df = df.dropna(subset=['outing_id'])
        df['pitch_number'] = pd.to_numeric(df['pitch_number'], errors='coerce')
        df['pitch_type'] = pd.to_numeric(df['pitch_type'], errors='coerce')
        df['x_location'] = pd.to_numeric(df['x_location'], errors='coerce')
        df['y_location'] = pd.to_numeric(df['y_location'], errors='coerce')
        df['created_at'] = pd.to_datetime(df['created_at'], errors='coerce')

        valid_type = df['pitch_type'].isin(list(DEFAULT_PITCH_TYPES))
        if not valid_type.all():
            logger.warning(f"Skipping {int((~valid_type).sum())} pitches with unknown pitch type")
            df = df[valid_type]

        stored = df['is_strike'].map(_parse_flag)
        unclassified = stored.isna()
        if unclassified.any():
            logger.warning(f"{int(unclassified.sum())} pitches have no stored strike flag, "
                           f"classifying from location")
            computed = pd.Series(classify_locations(df['x_location'], df['y_location']), index=df.index)
            stored = stored.where(~unclassified, computed)

        df = df.assign(is_strike=stored.astype(bool))
        df = df.sort_values(['outing_id', 'pitch_number'], kind='mergesort')

        events = [
            PitchEvent(
                outing_id=str(row['outing_id']),
                pitcher_id=_optional_id(row['pitcher_id']),
                pitch_number=int(row['pitch_number']) if not pd.isna(row['pitch_number']) else 0,
                pitch_type=int(row['pitch_type']),
                x_location=float(row['x_location']),
                y_location=float(row['y_location']),
                is_strike=bool(row['is_strike']),
                created_at=row['created_at'].to_pydatetime() if not pd.isna(row['created_at']) else None,
                id=_optional_id(row['id']),
            )
            for row in df.to_dict('records')
        ]

        logger.info(f"Loaded {len(events)} pitch locations")
        return events

    def load(self) -> Tuple[List[Outing], List[PitchEvent]]:
        """Load both files and drop pitches whose outing is not in outings.csv."""
        outings = self.load_outings()
        events = self.load_pitch_events()

        known = {o.id for o in outings}
        orphans = [e for e in events if e.outing_id not in known]
        if orphans:
            logger.warning(f"Dropping {len(orphans)} pitches that reference unknown outings")
            events = [e for e in events if e.outing_id in known]

        return outings, events


def _parse_flag(value) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if _is_missing(value):
        return None
    if isinstance(value, numbers.Real):
        return bool(value)
    text = str(value).strip().lower()
    if text in ('true', 't', '1', 'yes'):
        return True
    if text in ('false', 'f', '0', 'no'):
        return False
    return None


def resolve_pitch_types(overrides: Optional[Dict[int, str]] = None) -> Dict[int, str]:
    """Merge a pitcher's custom pitch labels over the defaults.

    Only the five known pitch types can be relabeled; blank labels are ignored.
    """
    labels = dict(DEFAULT_PITCH_TYPES)
    for pitch_type, label in (overrides or {}).items():
        key = _as_integer(pitch_type)
        if key in labels and isinstance(label, str) and label.strip():
            labels[key] = label.strip()
    return labels


def pitch_type_label(pitch_type: int, labels: Optional[Dict[int, str]] = None) -> str:
    labels = labels or DEFAULT_PITCH_TYPES
    return labels.get(pitch_type, f"Type {pitch_type}")


def remove_outing(outings: List[Outing], events: List[PitchEvent],
                  outing_id: str) -> Tuple[List[Outing], List[PitchEvent]]:
    """Remove an outing together with every pitch charted in it.

    Returns:
        Tuple[List[Outing], List[PitchEvent]]: New lists without the outing
    """
    kept_outings = [o for o in outings if o.id != outing_id]
    kept_events = [e for e in events if e.outing_id != outing_id]

    if len(kept_outings) == len(outings):
        logger.warning(f"Outing {outing_id} not found")
    else:
        logger.info(f"Removed outing {outing_id} and {len(events) - len(kept_events)} pitches")
    return kept_outings, kept_events
