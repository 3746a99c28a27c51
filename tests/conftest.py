import matplotlib

matplotlib.use("Agg")

from datetime import date

from pitch_analytics.models import Outing, PitchEvent


def make_outing(id, pitch_count, strikes=None, day=date(2025, 4, 14), pitcher="Alex Rivera",
                event_type="Bullpen", max_velo=None, **kwargs) -> Outing:
    return Outing(
        id=id,
        pitcher_name=pitcher,
        date=day,
        event_type=event_type,
        pitch_count=pitch_count,
        strikes=strikes,
        max_velo=max_velo,
        **kwargs,
    )


def make_pitches(outing_id, locations, pitch_type=1, start=1):
    return [
        PitchEvent.record(outing_id, "p1", start + i, pitch_type, x, y)
        for i, (x, y) in enumerate(locations)
    ]
