from datetime import date, timedelta

import pytest

from pitch_analytics import badges
from pitch_analytics.badges import BADGES, evaluate_badges
from pitch_analytics.models import PitchEvent

from conftest import make_outing, make_pitches


def _result(results, badge_id):
    return next(r for r in results if r.badge.id == badge_id)


def test_all_badges_evaluated_in_order():
    results = evaluate_badges([], [])
    assert [r.badge.id for r in results] == [b.id for b in BADGES]
    assert len(results) == 10


def test_empty_history_earns_nothing():
    results = evaluate_badges([], [])
    assert not any(r.earned for r in results)
    assert all(r.progress == 0.0 for r in results)


def test_zone_master_earned_above_target():
    results = evaluate_badges([make_outing("o1", 70, 47)], [])
    zone_master = _result(results, 'zone-master')
    assert zone_master.earned
    assert zone_master.progress == 100.0
    assert zone_master.detail == "67.1% strikes"


def test_untracked_outings_are_left_out_of_strike_percentage():
    outings = [make_outing("o1", 50, 40), make_outing("o2", 50, None)]
    zone_master = _result(evaluate_badges(outings, []), 'zone-master')
    assert zone_master.detail == "80.0% strikes"


def test_zone_master_without_tracked_strikes():
    zone_master = _result(evaluate_badges([make_outing("o1", 50, None)], []), 'zone-master')
    assert not zone_master.earned
    assert zone_master.progress == 0.0
    assert zone_master.detail == "No tracked strikes"


def test_center_pitches_do_not_count_for_sniper():
    pitches = make_pitches("o1", [(0.0, 0.0)] * 5)
    sniper = _result(evaluate_badges([make_outing("o1", 5, 5)], pitches), 'sniper-status')
    assert not sniper.earned
    assert sniper.progress == 0.0


def test_sniper_needs_shadow_pitches_in_one_session():
    split = make_pitches("o1", [(0.35, 0.0)] * 3) + make_pitches("o2", [(0.35, 0.0)] * 3)
    sniper = _result(evaluate_badges([], split), 'sniper-status')
    assert not sniper.earned
    assert sniper.progress == pytest.approx(60.0)

    one_session = make_pitches("o1", [(0.35, 0.0)] * 5)
    assert _result(evaluate_badges([], one_session), 'sniper-status').earned


def test_bridge_builder_uses_off_speed_pitches_only():
    pitches = (make_pitches("o1", [(0.0, 0.0)] * 3 + [(0.9, 0.9)], pitch_type=2) +
               make_pitches("o1", [(0.9, 0.9)] * 10, pitch_type=1, start=5))
    bridge = _result(evaluate_badges([], pitches), 'bridge-builder')
    assert bridge.earned
    assert bridge.detail == "75% off-speed strikes"


def test_bridge_builder_without_off_speed():
    pitches = make_pitches("o1", [(0.0, 0.0)] * 3, pitch_type=1)
    assert _result(evaluate_badges([], pitches), 'bridge-builder').detail == "No off-speed data"


def test_down_and_away_counts_bottom_third():
    pitches = make_pitches("o1", [(0.1, -0.3)] * 5)
    assert _result(evaluate_badges([], pitches), 'down-away').earned

    high = make_pitches("o1", [(0.1, 0.3)] * 5)
    assert not _result(evaluate_badges([], high), 'down-away').earned


def test_velocity_jump_over_lookback_average():
    latest = date(2025, 5, 5)
    outings = [
        make_outing("o1", 40, 25, day=latest - timedelta(days=35), max_velo=50.0),
        make_outing("o2", 40, 25, day=latest, max_velo=53.0),
    ]
    jump = _result(evaluate_badges(outings, []), 'velocity-jump')
    assert jump.earned
    assert jump.progress == 100.0
    assert jump.detail == "+3.0 MPH"


def test_velocity_jump_needs_history():
    single = [make_outing("o1", 40, 25, max_velo=60.0)]
    assert _result(evaluate_badges(single, []), 'velocity-jump').detail == "Need more data"

    recent = [
        make_outing("o1", 40, 25, day=date(2025, 5, 1), max_velo=60.0),
        make_outing("o2", 40, 25, day=date(2025, 5, 5), max_velo=63.0),
    ]
    jump = _result(evaluate_badges(recent, []), 'velocity-jump')
    assert not jump.earned
    assert jump.detail == "Need 30+ days of data"


def test_velocity_jump_uses_explicit_reference_date():
    outings = [
        make_outing("o1", 40, 25, day=date(2025, 3, 1), max_velo=50.0),
        make_outing("o2", 40, 25, day=date(2025, 3, 20), max_velo=51.0),
    ]
    jump = _result(evaluate_badges(outings, [], as_of=date(2025, 4, 15)), 'velocity-jump')
    # Cutoff is March 16: only the March 1 outing is in the lookback average
    assert jump.detail == "+1.0 MPH"
    assert jump.progress == pytest.approx(50.0)
    assert not jump.earned


def test_velocity_jump_defaults_to_latest_outing_date():
    # The latest outing has no velocity reading but still sets the reference date
    outings = [
        make_outing("o1", 40, 25, day=date(2025, 3, 1), max_velo=50.0),
        make_outing("o2", 40, 25, day=date(2025, 3, 20), max_velo=53.0),
        make_outing("o3", 40, 25, day=date(2025, 4, 10)),
    ]
    implicit = _result(evaluate_badges(outings, []), 'velocity-jump')
    explicit = _result(evaluate_badges(outings, [], as_of=date(2025, 4, 10)), 'velocity-jump')
    assert implicit.detail == explicit.detail == "+3.0 MPH"
    assert implicit.earned


def test_terminator_requires_long_session():
    assert _result(evaluate_badges([make_outing("o1", 30, 21)], []), 'terminator').earned

    short = _result(evaluate_badges([make_outing("o1", 29, 29)], []), 'terminator')
    assert not short.earned
    assert short.detail == "No 30+ pitch sessions"


def test_power_and_precision_without_team_data():
    power = _result(evaluate_badges([make_outing("o1", 100, 60, max_velo=80.0)], []), 'power-precision')
    assert not power.earned
    assert power.progress == pytest.approx(50.0)
    assert power.detail == "Need team data for velo ranking"


def test_power_and_precision_with_team_ranking():
    team = [
        make_outing("a", 100, 65, pitcher="A", max_velo=80.0),
        make_outing("b", 100, 50, pitcher="B", max_velo=75.0),
        make_outing("c", 100, 50, pitcher="C", max_velo=70.0),
        make_outing("d", 100, 50, pitcher="D", max_velo=65.0),
    ]
    ace = _result(evaluate_badges(team[:1], [], team_outings=team), 'power-precision')
    assert ace.earned
    assert ace.progress == 100.0

    slow = _result(evaluate_badges(team[3:], [], team_outings=team), 'power-precision')
    assert not slow.earned
    assert slow.progress < 100.0


def test_stratosphere_counts_only_high_fastballs():
    fastballs = make_pitches("o1", [(0.0, 0.3)] * 4, pitch_type=1)
    assert _result(evaluate_badges([], fastballs), 'stratosphere').earned

    curveballs = make_pitches("o1", [(0.0, 0.3)] * 4, pitch_type=2)
    assert not _result(evaluate_badges([], curveballs), 'stratosphere').earned


def test_repeatable_motion_streak():
    outings = [
        make_outing("o1", 50, 30, day=date(2025, 4, 1)),
        make_outing("o2", 50, 31, day=date(2025, 4, 3)),
        make_outing("o3", 50, 32, day=date(2025, 4, 5)),
    ]
    assert _result(evaluate_badges(outings, []), 'repeatable-motion').earned


def test_repeatable_motion_with_too_few_outings():
    outings = [make_outing("o1", 50, 30), make_outing("o2", 50, 31)]
    repeatable = _result(evaluate_badges(outings, []), 'repeatable-motion')
    assert not repeatable.earned
    assert repeatable.progress == pytest.approx(100 / 3)
    assert repeatable.detail == "2/3 outings"


def test_early_count_killer_needs_five_pitch_session():
    few = make_pitches("o1", [(0.0, 0.0)] * 4)
    assert _result(evaluate_badges([], few), 'early-count-killer').detail == \
        "Need a session with 5+ charted pitches"

    enough = make_pitches("o1", [(0.0, 0.0)] * 3 + [(0.9, 0.9)] * 2)
    killer = _result(evaluate_badges([], enough), 'early-count-killer')
    assert killer.earned
    assert killer.detail == "Best: 60% zone rate"


def test_stored_strike_flag_is_used():
    # A pitch saved as a ball stays a ball even if it is in the zone
    stored = [PitchEvent("o1", "p1", i, 1, 0.0, 0.0, False) for i in range(1, 6)]
    assert not _result(evaluate_badges([], stored), 'early-count-killer').earned


def test_progress_is_always_clamped():
    outings = [make_outing(f"o{i}", 40, 40, day=date(2025, 4, i), max_velo=90.0) for i in range(1, 8)]
    pitches = make_pitches("o1", [(0.38, -0.4)] * 20)
    for result in evaluate_badges(outings, pitches):
        assert 0.0 <= result.progress <= 100.0


def test_failing_rule_does_not_stop_other_badges(monkeypatch):
    def broken(*args):
        raise ValueError("bad data")

    monkeypatch.setitem(badges.RULES, 'zone-master', broken)
    results = evaluate_badges([make_outing("o1", 30, 21)], [])

    zone_master = _result(results, 'zone-master')
    assert not zone_master.earned
    assert zone_master.detail == "Insufficient data"
    assert _result(results, 'terminator').earned


def _pitches(outing_id, hits, hit_location, miss_location, total, pitch_type=1):
    return make_pitches(outing_id, [hit_location] * hits + [miss_location] * (total - hits),
                        pitch_type=pitch_type)


ROSTER = [
    make_outing("b", 100, 50, pitcher="B", max_velo=75.0),
    make_outing("c", 100, 50, pitcher="C", max_velo=70.0),
    make_outing("d", 100, 50, pitcher="D", max_velo=65.0),
]

# Each scenario maps a metric level to evaluate_badges arguments; higher levels
# move the metric toward the badge threshold
PROGRESS_SCENARIOS = [
    pytest.param('zone-master', lambda k: {'outings': [make_outing("o1", 100, k * 10)]},
                 range(8), id='zone-master'),
    pytest.param('sniper-status',
                 lambda k: {'pitch_events': _pitches("o1", k, (0.35, 0.0), (0.0, 0.0), 6)},
                 range(7), id='sniper-status'),
    pytest.param('bridge-builder',
                 lambda k: {'pitch_events': _pitches("o1", k, (0.0, 0.0), (0.9, 0.9), 6, pitch_type=2)},
                 range(7), id='bridge-builder'),
    pytest.param('down-away',
                 lambda k: {'pitch_events': _pitches("o1", k, (0.1, -0.3), (0.0, 0.0), 6)},
                 range(7), id='down-away'),
    pytest.param('velocity-jump', lambda k: {'outings': [
        make_outing("o1", 40, 25, day=date(2025, 3, 1), max_velo=50.0),
        make_outing("o2", 40, 25, day=date(2025, 4, 10), max_velo=50.0 + k * 0.5),
    ]}, range(7), id='velocity-jump'),
    pytest.param('terminator', lambda k: {'outings': [make_outing("o1", 40, k * 5)]},
                 range(9), id='terminator'),
    pytest.param('power-precision', lambda k: {
        'outings': [make_outing("a", 100, k * 10, pitcher="A", max_velo=80.0)],
        'team_outings': ROSTER + [make_outing("a", 100, k * 10, pitcher="A", max_velo=80.0)],
    }, range(8), id='power-precision-strikes'),
    pytest.param('power-precision', lambda k: {
        'outings': [make_outing("a", 100, 50, pitcher="A", max_velo=60.0 + k * 5)],
        'team_outings': ROSTER + [make_outing("a", 100, 50, pitcher="A", max_velo=60.0 + k * 5)],
    }, range(5), id='power-precision-velocity'),
    pytest.param('stratosphere',
                 lambda k: {'pitch_events': _pitches("o1", k, (0.0, 0.3), (0.0, 0.0), 5)},
                 range(6), id='stratosphere'),
    pytest.param('repeatable-motion', lambda k: {'outings': [
        make_outing(f"o{i}", 50, 30, day=date(2025, 4, i + 1)) for i in range(k)
    ]}, range(5), id='repeatable-motion'),
    pytest.param('early-count-killer',
                 lambda k: {'pitch_events': _pitches("o1", k, (0.0, 0.0), (0.9, 0.9), 5)},
                 range(6), id='early-count-killer'),
]


@pytest.mark.parametrize("badge_id, scenario, levels", PROGRESS_SCENARIOS)
def test_progress_never_drops_as_metric_improves(badge_id, scenario, levels):
    progress = []
    for level in levels:
        args = {'outings': [], 'pitch_events': []}
        args.update(scenario(level))
        progress.append(_result(evaluate_badges(**args), badge_id).progress)

    assert progress == sorted(progress)
    assert progress[-1] > progress[0]
