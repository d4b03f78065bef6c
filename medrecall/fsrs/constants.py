"""
FSRS Constants and Parameters

All fixed parameters for the step-based scheduler in one place.
The weight vector is the published FSRS-5 default set; fitting it to a
learner's history is not done here.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum


# ---- Grades ----

class Grade(IntEnum):
    """User's self-assessed recall for one review."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently


# ---- Card States ----
# Integer values match the persisted fsrsState codes.

class State(IntEnum):
    """Position of an item in the scheduling state machine."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


# ---- Forgetting Curve ----

DECAY = -0.5
FACTOR = 19 / 81  # Chosen so that R(S, S) = 0.9


# ---- Bounds ----

S_MIN = 0.01       # Minimum stability (days)
D_MIN = 1.0        # Minimum difficulty
D_MAX = 10.0       # Maximum difficulty
MAX_COUNT = 9999   # Upper bound for per-day limits
MIN_INTERVAL_DAYS = 1


# ---- Default Weights (FSRS-5) ----

DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.40255, 1.18385, 3.173, 15.69105,   # w0-w3: initial stability per grade
    7.1949, 0.5345,                      # w4-w5: initial difficulty
    1.4604, 0.0046,                      # w6-w7: difficulty delta, mean reversion
    1.54575, 0.1192, 1.01925,            # w8-w10: recall stability
    1.9395, 0.11, 0.29605, 2.2698,       # w11-w14: forget stability
    0.2315, 2.9898,                      # w15-w16: hard penalty, easy bonus
    0.51655, 0.6621,                     # w17-w18: short-term stability
)

DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500  # 100 years


@dataclass(frozen=True)
class FsrsParameters:
    """
    Externally supplied model parameters.

    Passed by value into the scheduler; never mutated.
    """
    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    desired_retention: float = DEFAULT_DESIRED_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_short_term: bool = True

    def __post_init__(self):
        if len(self.weights) != len(DEFAULT_WEIGHTS):
            raise ValueError(
                f"Expected {len(DEFAULT_WEIGHTS)} weights, got {len(self.weights)}"
            )
        if not 0.0 < self.desired_retention < 1.0:
            raise ValueError("desired_retention must be between 0 and 1")
        if self.maximum_interval < MIN_INTERVAL_DAYS:
            raise ValueError("maximum_interval must be at least 1 day")


DEFAULT_PARAMETERS = FsrsParameters()
