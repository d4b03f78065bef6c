"""
Memory Model - stability and difficulty updates (FSRS-5).

Every function here is a pure function of the current memory state,
the grade and the parameter set.

Key principles:
- Successful recall at low retrievability produces the largest stability gains
- Failures reset stability toward a difficulty-dependent floor
- Difficulty drifts with each grade and reverts slowly toward the Easy baseline
"""

from __future__ import annotations
import math

from medrecall.fsrs.constants import (
    DECAY,
    FACTOR,
    D_MAX,
    D_MIN,
    MIN_INTERVAL_DAYS,
    S_MIN,
    FsrsParameters,
    Grade,
)


def _clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def initial_stability(grade: Grade, params: FsrsParameters) -> float:
    """
    Stability after the first review.

    Formula: S0(G) = w[G-1]
    """
    return max(S_MIN, params.weights[int(grade) - 1])


def initial_difficulty(grade: Grade, params: FsrsParameters) -> float:
    """
    Difficulty after the first review.

    Formula: D0(G) = w4 - e^(w5 * (G - 1)) + 1, clipped to [1, 10]
    """
    w = params.weights
    return _clamp_difficulty(w[4] - math.exp(w[5] * (int(grade) - 1)) + 1.0)


def next_difficulty(difficulty: float, grade: Grade, params: FsrsParameters) -> float:
    """
    Update difficulty after a review.

    Formula:
        delta = -w6 * (G - 3)
        D' = D + delta * (10 - D) / 9           (linear damping near the ceiling)
        D'' = w7 * D0(Easy) + (1 - w7) * D'     (mean reversion)

    Again/Hard raise difficulty, Easy lowers it, Good leaves it nearly
    unchanged apart from mean reversion.
    """
    w = params.weights
    delta = -w[6] * (int(grade) - 3)
    damped = difficulty + delta * (D_MAX - difficulty) / 9.0
    reverted = w[7] * initial_difficulty(Grade.EASY, params) + (1.0 - w[7]) * damped
    return _clamp_difficulty(reverted)


def next_recall_stability(
    stability: float,
    difficulty: float,
    retrievability: float,
    grade: Grade,
    params: FsrsParameters
) -> float:
    """
    Stability after a successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^((1-R)*w10) - 1) * hp * eb)

    Where hp = w15 on Hard (penalty) and eb = w16 on Easy (bonus).
    """
    if grade == Grade.AGAIN:
        raise ValueError("Use next_forget_stability for AGAIN")

    w = params.weights
    hard_penalty = w[15] if grade == Grade.HARD else 1.0
    easy_bonus = w[16] if grade == Grade.EASY else 1.0

    growth = (
        math.exp(w[8])
        * (11.0 - difficulty)
        * stability ** (-w[9])
        * (math.exp((1.0 - retrievability) * w[10]) - 1.0)
        * hard_penalty
        * easy_bonus
    )
    return max(S_MIN, stability * (1.0 + growth))


def next_forget_stability(
    stability: float,
    difficulty: float,
    retrievability: float,
    params: FsrsParameters
) -> float:
    """
    Stability after a lapse (Again).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^((1-R)*w14)

    Never larger than S / e^(w17 * w18), so forgetting cannot raise stability.
    """
    w = params.weights
    long_term = (
        w[11]
        * difficulty ** (-w[12])
        * ((stability + 1.0) ** w[13] - 1.0)
        * math.exp((1.0 - retrievability) * w[14])
    )
    ceiling = stability / math.exp(w[17] * w[18])
    return max(S_MIN, min(long_term, ceiling))


def next_short_term_stability(stability: float, grade: Grade, params: FsrsParameters) -> float:
    """
    Stability after a same-day review (elapsed < 1 day).

    Formula: S' = S * e^(w17 * (G - 3 + w18))
    """
    w = params.weights
    return max(S_MIN, stability * math.exp(w[17] * (int(grade) - 3 + w[18])))


def next_interval(stability: float, params: FsrsParameters) -> int:
    """
    Interval in whole days at which R falls to the desired retention.

    Formula: I = S / FACTOR * (r^(1/DECAY) - 1), rounded and clipped
    to [1, maximum_interval]
    """
    interval = stability / FACTOR * (params.desired_retention ** (1.0 / DECAY) - 1.0)
    return max(MIN_INTERVAL_DAYS, min(params.maximum_interval, round(interval)))
