from datetime import date

import pytest

from pitch_analytics.analysis import (
    letter_grade, build_report_card, summarize_badges, generate_takeaways,
)
from pitch_analytics.badges import BADGES
from pitch_analytics.models import BadgeResult

from conftest import make_outing


def _badge_results(earned_ids=(), progress=None):
    progress = progress or {}
    return [
        BadgeResult(b, b.id in earned_ids, 100.0 if b.id in earned_ids else progress.get(b.id, 0.0))
        for b in BADGES
    ]


@pytest.mark.parametrize("score, expected", [
    (95, 'A+'), (90, 'A+'), (85, 'A'), (70, 'B+'), (65, 'B'),
    (55, 'C+'), (40, 'C'), (39.9, 'D'), (0, 'D'),
])
def test_letter_grade(score, expected):
    assert letter_grade(score) == expected


def test_report_card_needs_two_season_outings():
    outings = [
        make_outing("o1", 20, 13, day=date(2025, 4, 1)),
        make_outing("o2", 20, 13, day=date(2024, 4, 1)),
    ]
    assert build_report_card(outings, _badge_results(), 2025) is None


def test_report_card_grades():
    outings = [
        make_outing("o1", 20, 13, day=date(2025, 4, 1)),
        make_outing("o2", 20, 13, day=date(2025, 4, 8)),
    ]
    card = build_report_card(outings, _badge_results(), 2025)
    grades = {g['label']: g for g in card['grades']}

    # 65% strikes scores exactly 90
    assert grades['Accuracy']['score'] == pytest.approx(90.0)
    assert grades['Accuracy']['grade'] == 'A+'
    assert grades['Consistency']['score'] == pytest.approx(100.0)
    # Two outings over one week against a target of three
    assert grades['Work Ethic']['score'] == pytest.approx(200 / 3)
    assert grades['Work Ethic']['grade'] == 'B'
    assert grades['Achievements']['grade'] == 'D'
    assert grades['Achievements']['value'] == "0/10 earned"
    # Points 97, 97, 83, 65 average to 85.5
    assert card['overall'] == 'A'


def test_report_card_consistency_drops_with_swings():
    outings = [
        make_outing("o1", 20, 10, day=date(2025, 4, 1)),
        make_outing("o2", 20, 16, day=date(2025, 4, 3)),
        make_outing("o3", 20, 10, day=date(2025, 4, 5)),
    ]
    card = build_report_card(outings, _badge_results(), 2025)
    consistency = next(g for g in card['grades'] if g['label'] == 'Consistency')
    # 30 point swings each time
    assert consistency['score'] == 0.0
    assert consistency['grade'] == 'D'


def test_report_card_without_tracked_strikes():
    outings = [
        make_outing("o1", 20, None, day=date(2025, 4, 1)),
        make_outing("o2", 20, None, day=date(2025, 4, 2)),
    ]
    card = build_report_card(outings, _badge_results(), 2025)
    grades = {g['label']: g for g in card['grades']}
    assert grades['Accuracy']['score'] == 0.0
    assert grades['Consistency']['value'] == 'Need data'


def test_summarize_badges():
    results = _badge_results(earned_ids={'zone-master'},
                             progress={'terminator': 80.0, 'sniper-status': 60.0, 'stratosphere': 20.0})
    summary = summarize_badges(results)
    assert summary['earned_count'] == 1
    assert summary['total'] == 10
    assert summary['earned'] == ['Zone Master']
    assert [c['name'] for c in summary['closest']] == ['The Terminator', 'Sniper Status', 'The Stratosphere']


def test_generate_takeaways():
    summary = {'pulse_level': 'danger', 'pulse_label': 'Over limit (110%)', 'strike_percentage': None}
    badge_summary = summarize_badges(_badge_results(progress={'terminator': 80.0}))
    takeaways = generate_takeaways(summary, badge_summary)

    assert set(takeaways) == {'Workload', 'Command', 'Goals'}
    assert 'Over limit' in takeaways['Workload'][0]
    assert takeaways['Command'][0].startswith('Track strikes')
    assert takeaways['Goals'][0] == "0/10 badges earned"
    assert 'The Terminator' in takeaways['Goals'][1]
