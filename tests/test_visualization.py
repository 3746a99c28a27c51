import json
from datetime import date

import numpy as np

from pitch_analytics.aggregation import compare_windows, team_window_stats, window_bounds
from pitch_analytics.heatmap import render_heatmap
from pitch_analytics.visualization import (
    heatmap_colormap, save_heatmap_png, plot_season_trends, export_results, save_summary_report,
)

from conftest import make_outing

AS_OF = date(2025, 4, 14)


def _report(name="Alex Rivera"):
    return {
        'summary': {
            'pitcher_name': name,
            'seven_day_pulse': 95,
            'pulse_label': 'Approaching limit (79%)',
            'strike_percentage': 64.21,
            'max_velo': 72.0,
            'last_outing': AS_OF,
        },
        'badges': [],
        'badge_summary': {'earned_count': 1, 'total': 10, 'earned': ['Zone Master'], 'closest': []},
        'report_card': {'overall': 'B+', 'grades': [{'label': 'Accuracy', 'grade': 'A'}]},
        'takeaways': {'Workload': ['Keep the next session short']},
        'score': np.float64(1.5),
    }


def _team():
    outings = [
        make_outing("o1", 50, 30, day=date(2025, 4, 3), max_velo=70.0),
        make_outing("o2", 45, 30, day=date(2025, 4, 12), max_velo=72.0),
    ]
    return compare_windows(outings, AS_OF), team_window_stats(outings, *window_bounds(AS_OF))


def test_colormap_spans_the_color_stops():
    cmap = heatmap_colormap()
    np.testing.assert_allclose(cmap(0.0)[:3], (1.0, 0.0, 1.0))
    np.testing.assert_allclose(cmap(1.0)[:3], (1.0, 0.0, 0.0))


def test_save_heatmap_png(tmp_path):
    target = tmp_path / "heatmap.png"
    save_heatmap_png(render_heatmap(np.zeros((100, 100))), str(target), title="Empty")
    assert target.exists()
    assert target.stat().st_size > 0


def test_plot_season_trends(tmp_path):
    target = tmp_path / "season.png"
    outings = [
        make_outing("o1", 40, 20, day=date(2025, 4, 1), max_velo=70.0),
        make_outing("o2", 40, None, day=date(2025, 4, 5), max_velo=71.0),
        make_outing("o3", 40, 30, day=date(2025, 4, 9)),
    ]
    assert plot_season_trends(outings, str(target))
    assert target.exists()


def test_plot_season_trends_without_outings(tmp_path):
    target = tmp_path / "season.png"
    assert not plot_season_trends([], str(target))
    assert not target.exists()


def test_export_results_writes_json(tmp_path):
    comparison, team = _team()
    target = tmp_path / "results.json"
    export_results([_report()], comparison, team, str(target))

    data = json.loads(target.read_text())
    assert data['summary'] == {'total_pitchers': 1, 'badges_earned': 1}
    assert data['pitchers'][0]['summary']['last_outing'] == "2025-04-14"
    assert data['pitchers'][0]['score'] == 1.5
    assert data['team']['trends']['total_pitches'] == 'down'
    assert data['team']['pitchers'][0]['pitcher_name'] == "Alex Rivera"


def test_export_results_writes_missing_values_as_null(tmp_path):
    outings = [
        make_outing("o1", 50, 30, day=date(2025, 4, 12), max_velo=72.0),
        make_outing("o2", 40, 20, day=date(2025, 4, 12), pitcher="Sam Cole"),
    ]
    team = team_window_stats(outings, *window_bounds(AS_OF))
    report = _report()
    report['consistency'] = float('nan')
    report['velocities'] = [np.float64('nan'), 71.5]
    target = tmp_path / "results.json"
    export_results([report], compare_windows(outings, AS_OF), team, str(target))

    text = target.read_text(encoding="utf-8")
    assert "NaN" not in text
    data = json.loads(text)
    sam = data['team']['pitchers'][1]
    assert sam['pitcher_name'] == "Sam Cole"
    assert sam['min_velo'] is None
    assert sam['max_velo'] is None
    assert data['pitchers'][0]['consistency'] is None
    assert data['pitchers'][0]['velocities'] == [None, 71.5]


def test_save_summary_report(tmp_path):
    comparison, _ = _team()
    target = tmp_path / "summary.txt"
    save_summary_report([_report(), _report("Sam Cole")], comparison, str(target))

    text = target.read_text(encoding="utf-8")
    assert "PITCH ANALYTICS - SUMMARY REPORT" in text
    assert "Alex Rivera" in text
    assert "Sam Cole" in text
    assert "Strike %: 64.2%" in text
    assert "Badges: 1/10 (Zone Master)" in text
    assert "Report card: B+ (Accuracy A)" in text
    assert "    • Keep the next session short" in text
