# irt.py

import math
from typing import Optional

from schemas.exam import THETA_MAX, THETA_MIN, IrtParams

# One gradient step per response; fixed, no decay.
LEARNING_RATE = 0.6
_LOGIT_CLIP = 20.0


def logistic(x: float) -> float:
    # Saturate instead of overflowing exp()
    if x > _LOGIT_CLIP:
        return 1.0
    if x < -_LOGIT_CLIP:
        return 0.0
    return 1.0 / (1.0 + math.exp(-x))


def prob_correct(theta: float, a: float, b: float, c: Optional[float] = None) -> float:
    """P(correct) under the 3PL model; c defaults to 0 (2PL)."""
    cc = c or 0.0
    return cc + (1.0 - cc) * logistic(a * (theta - b))


def clamp_theta(theta: float) -> float:
    return min(max(theta, THETA_MIN), THETA_MAX)


def update_theta(theta: float, irt: Optional[IrtParams], correct: bool) -> float:
    """
    Single stochastic-gradient step toward the maximum-likelihood theta.
    Items without IRT parameters leave theta untouched.
    """
    if irt is None:
        return theta
    p = prob_correct(theta, irt.a, irt.b, irt.c)
    u = 1.0 if correct else 0.0
    return clamp_theta(theta + LEARNING_RATE * (u - p))
