"""Application constants - all magic numbers centralized."""

# Dialogue
DEFAULT_SKILL_LEVEL = "beginner"  # Applied when the level answer is unclear
DEFAULT_GOAL = "concepts"  # Applied when the goal answer is unclear
MAX_REPROMPTS = 1  # A question is re-asked at most this many times before defaulting

# New-topic detection while results are showing
NEW_TOPIC_MIN_TOKEN_LENGTH = 4  # Tokens shorter than this are ignored
NEW_TOPIC_MIN_TOKENS = 3  # Utterance needs at least this many significant tokens

# Search
LEVEL_QUERY_MODIFIERS = {
    "beginner": "for beginners",
    "intermediate": "intermediate",
    "advanced": "advanced",
}
GOAL_QUERY_MODIFIERS = {
    "project": "project build hands-on",
    "concepts": "concepts explained",
    "quick": "crash course",
}
SEARCH_EXTRA_RESULTS = 3  # Over-fetch to survive filtering
SEARCH_PROVIDER_MAX_RESULTS = 50
SEARCH_PUBLISHED_WITHIN_DAYS = 730
DIRECT_SEARCH_DEFAULT_RESULTS = 7
DIRECT_SEARCH_MAX_RESULTS = 10

# Curation
CURATION_DESCRIPTION_MAX_CHARS = 200
CURATION_HISTORY_MESSAGES = 10
CURATION_MIN_STAGES = 2
CURATION_MAX_STAGES = 4
CURATION_MIN_VIDEOS = 5
CURATION_MAX_VIDEOS = 12
UNKNOWN_TOTAL_TIME = "Unknown"
