"""Server-wide configuration constants for Wordplay Server."""

import os

# Card game
MAX_HAND_SIZE = 5               # Cards a player may hold
INITIAL_HAND_SIZE = 3           # Cards dealt at game start
CARD_BASE_TIME = int(os.environ.get("WORDPLAY_CARD_BASE_TIME", "300"))  # seconds
MAX_QUESTIONS = 10              # Questions per session (bank is truncated)
MISS_TIME_PENALTY = 0           # Seconds lost on an unshielded miss
POINTS_PER_DIFFICULTY = 10      # Base points = difficulty * this
COMBO_STEP = 0.1                # Combo bonus per consecutive correct answer
COMBO_MULTIPLIER_CAP = 2.0      # Combo multiplier never exceeds this
ENABLE_NEGATIVE_BUFFS = True

# Achievements
COMBO_MASTER_THRESHOLD = 5
FLAWLESS_ACCURACY = 90          # percent
HIGH_SCORE_THRESHOLD = 500
COLLECTOR_THRESHOLD = 3         # rare-or-better cards used

# Word grid
GRID_SIZE = 5                   # n x n letters
GRID_TIME_LIMIT = int(os.environ.get("WORDPLAY_GRID_TIME_LIMIT", "120"))  # seconds
POINTS_PER_LETTER = 10
LENGTH_BONUSES = ((4, 10), (5, 20), (6, 30))  # (min length, bonus), cumulative
END_WHEN_ALL_FOUND = False

# Host
MAX_SESSIONS = int(os.environ.get("WORDPLAY_MAX_SESSIONS", "1000"))
LOG_LEVEL = os.environ.get("WORDPLAY_LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("WORDPLAY_LOG_FILE")  # None = console only
