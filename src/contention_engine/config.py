# Search limits: games counted per call, including games nobody picked
MAX_REMAINING_GAMES = 20
EXHAUSTIVE_MAX_REMAINING_GAMES = 16  # every one of the 2^R outcomes is visited

# Tie policy: True counts a shared top total as "still alive"
DEFAULT_ALLOW_TIES = True

# Search strategy
DEFAULT_STRATEGY = "pruned"  # "pruned", "exhaustive"
VALID_STRATEGIES = ("pruned", "exhaustive")
