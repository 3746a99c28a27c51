"""
Configuration file for the pitch analytics engine.

Contains all constants, mappings, and configuration parameters used throughout the project.
"""

# Strike zone in normalized plate-crossing coordinates (-1 to 1 on both axes)
# Plate is 17" wide plus one 2.94" ball diameter, so the box spans 19.94" x 25.79"
STRIKE_ZONE = {
    'left': -0.4,
    'right': 0.4,
    'bottom': -0.45,
    'top': 0.45,
    'ball_radius': 0.07,    # 1.47" / 19.94" rounded; any part of the ball touching counts
}

# Inner "heart" rectangle as a fraction of zone width/height; the shadow zone is what's left
SHADOW_CORE_FRACTION = 0.75

# Density grid parameters (tunable, not derived)
DENSITY_CONFIG = {
    'grid_size': 100,          # N x N cells
    'influence_radius': 8,     # Hard cutoff in cells
    'sigma_divisor': 2.5,      # sigma = influence_radius / sigma_divisor
    'blur_passes': 3,
}

# 3x3 smoothing kernel applied on every blur pass
BLUR_KERNEL = [
    [0.0625, 0.125, 0.0625],
    [0.125,  0.25,  0.125],
    [0.0625, 0.125, 0.0625],
]

# Raster output
HEATMAP_CONFIG = {
    'width': 300,
    'height': 388,             # Keeps the 19.94 / 25.79 zone aspect ratio
    'gamma': 0.8,
    'no_data_color': (255, 0, 255, 255),
    'outline_color': (255, 255, 255),
    'outline_alpha': 0.8,
    'outline_width': 2,
    'grid_line_color': (255, 255, 255),
    'grid_line_alpha': 0.3,
    'grid_line_width': 1,
}

# Gradient lookup: (threshold, RGB) from lowest to highest density
COLOR_STOPS = [
    (0.0,  (255, 0, 255)),     # magenta
    (0.15, (128, 0, 255)),     # purple
    (0.25, (0, 0, 255)),       # blue
    (0.35, (0, 128, 255)),     # light blue
    (0.45, (0, 255, 255)),     # cyan
    (0.55, (0, 255, 128)),     # teal
    (0.65, (0, 255, 0)),       # green
    (0.75, (255, 255, 0)),     # yellow
    (0.85, (255, 128, 0)),     # orange
    (1.0,  (255, 0, 0)),       # red
]

# Badge targets
BADGE_THRESHOLDS = {
    'zone_master_pct': 65,
    'sniper_shadow_pitches': 5,
    'bridge_builder_pct': 50,
    'down_away_pitches': 5,
    'velocity_jump_mph': 2,
    'velocity_lookback_days': 30,
    'terminator_min_pitches': 30,
    'terminator_pct': 70,
    'power_velo_top_fraction': 0.25,
    'power_strike_pct': 60,
    'stratosphere_fastballs': 4,
    'repeatable_streak': 3,
    'repeatable_tolerance_pct': 5,
    'early_count_pct': 60,
    'early_count_min_pitches': 5,
}

# Pitch type 1 is the primary fastball; everything else is scored as off-speed
FASTBALL_TYPE = 1

# Display labels only, pitchers may override them
DEFAULT_PITCH_TYPES = {
    1: 'FB',
    2: 'CB',
    3: 'CH',
    4: 'SL',
    5: 'CT',
}

EVENT_TYPES = ['Bullpen', 'Game', 'External', 'Practice']

# Weekly arm-care workload
WORKLOAD_CONFIG = {
    'max_weekly_pitches': 120,
    'window_days': 7,
    'warning_pct': 75,
    'caution_pct': 90,
    'danger_pct': 100,
}

# Trend detection
TREND_CONFIG = {
    'window_days': 7,
    'session_min_values': 3,
    'session_tolerance': 0.5,
    'report_min_values': 4,
    'report_tolerance': 1.0,
}

TREND_UP = 'up'
TREND_DOWN = 'down'
TREND_NEUTRAL = 'neutral'

# Season milestones
MILESTONE_CONFIG = {
    'best_strike_min_pitches': 15,
    'high_pitch_count': 76,
    'max_events': 8,
}

# Report card: (minimum score, letter) from best to worst, and points per letter
GRADE_SCALE = [
    (90, 'A+'),
    (80, 'A'),
    (70, 'B+'),
    (60, 'B'),
    (50, 'C+'),
    (40, 'C'),
    (0, 'D'),
]

GRADE_POINTS = {'A+': 97, 'A': 93, 'B+': 87, 'B': 83, 'C+': 77, 'C': 73, 'D': 65}

REPORT_CARD_CONFIG = {
    'accuracy_target_pct': 65,         # 65% strikes scores 90
    'accuracy_target_score': 90,
    'consistency_zero_score_diff': 20,
    'outings_per_week_target': 3,
}

# Input sanity limits for logged outings
VALIDATION_LIMITS = {
    'name_max_length': 100,
    'max_pitch_count': 300,
    'max_velo': 120,
    'notes_max_length': 2000,
    'focus_max_length': 200,
}

# File paths
DATA_DIR = "data"
RESULTS_DIR = "results"

OUTINGS_FILE = "outings.csv"
PITCH_LOCATIONS_FILE = "pitch_locations.csv"
