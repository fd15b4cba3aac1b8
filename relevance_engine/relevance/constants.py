"""
Scoring, selection and learning constants for the relevance engine.
"""

# Classifier
MIN_KEYWORD_MATCHES = 2  # a single keyword hit is noise
DEFAULT_GEOGRAPHY = 'US'
INTERNATIONAL_GEOGRAPHY = 'international'

GEO_LEVEL_LOCAL = 'local'
GEO_LEVEL_STATE = 'state'
GEO_LEVEL_INTERNATIONAL = 'international'
GEO_LEVEL_NATIONAL = 'national'

# Narrowest first
GEO_LEVEL_PRIORITY = (
    GEO_LEVEL_LOCAL,
    GEO_LEVEL_STATE,
    GEO_LEVEL_INTERNATIONAL,
    GEO_LEVEL_NATIONAL,
)

# Relevance score terms (integer points)
DOMAIN_POINTS_PER_MATCH = 20
DOMAIN_MAX_POINTS = 35
FOCUS_POINTS_PER_MATCH = 10
FOCUS_MAX_POINTS = 20
WATCHLIST_POINTS_PER_MATCH = 10
WATCHLIST_MAX_POINTS = 15
AFFINITY_SCALE = 20
AFFINITY_MAX_POINTS = 20
EXPLORATION_BONUS = 10
EXPLORATION_MAX_USES = 2  # declared domain used in fewer campaigns than this is "unexplored"
GEOGRAPHY_BONUS = 5
BREAKING_BONUS = 5
BREAKING_MIN_SCORE = 20  # breaking only boosts trends that are already relevant
MAX_SCORE = 100

PRIORITY_HIGH_THRESHOLD = 55
PRIORITY_MEDIUM_THRESHOLD = 30
PRIORITY_HIGH = 'high'
PRIORITY_MEDIUM = 'medium'
PRIORITY_LOW = 'low'

PROVEN_TOPIC_MIN_USES = 2
PROVEN_TOPIC_MIN_SCORE = 0.6

# Flags
FLAG_NEW_OPPORTUNITY = 'new-opportunity'
FLAG_PROVEN_TOPIC = 'proven-topic'
FLAG_WATCHLIST_MATCH = 'watchlist-match'
FLAG_BREAKING = 'breaking'
FLAG_BLOCKED = 'blocked'

# Filter log reasons
FILTER_BELOW_THRESHOLD = 'below_threshold'
FILTER_BLOCKED = 'blocked'
FILTER_SLATE_FULL = 'slate_full'

# Selector passes
SELECTED_BY_COVERAGE = 'coverage'
SELECTED_BY_EXPLORATION = 'exploration'
SELECTED_BY_SCORE = 'score'

# Affinity learning
DEFAULT_AFFINITY = 0.5
AFFINITY_EMA_ALPHA = 0.3
AFFINITY_MIN = 0.2
AFFINITY_MAX = 0.95

# Decay
DECAY_FACTOR = 0.95
DECAY_FLOOR = 0.3
DECAY_STALE_DAYS = 30
DECAY_MIN_INTERVAL_DAYS = 6

# Trend/campaign correlation
CORRELATION_WINDOW_HOURS = 48
CORRELATION_MAX_TRENDS = 100
CORRELATION_DOMAIN_WEIGHT = 0.4
CORRELATION_TOPIC_WEIGHT = 0.3
CORRELATION_BREAKING_WEIGHT = 0.2
CORRELATION_POSITIVE_WEIGHT = 0.1
CORRELATION_MIN_SCORE = 0.2

OUTCOME_HIGH_PERFORMER = 'high_performer'
OUTCOME_PERFORMER = 'performer'
OUTCOME_NEUTRAL = 'neutral'
OUTCOME_UNDERPERFORMER = 'underperformer'

# Campaign performance vs baseline
PERFORMANCE_OPEN_WEIGHT = 0.2
PERFORMANCE_CLICK_WEIGHT = 0.4
PERFORMANCE_CONVERSION_WEIGHT = 0.4
BASELINE_WINDOW_DAYS = 30
BASELINE_MIN_CAMPAIGNS = 3
DEFAULT_CHANNEL_BASELINES = {
    'sms': 0.08,
    'email': 0.05,
    'push': 0.03,
    'social': 0.02,
}
DEFAULT_BASELINE = 0.05
