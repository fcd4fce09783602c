# State machine module - claim lifecycle rules
from .machine import ClaimLifecycle, TransitionResult

__all__ = ["ClaimLifecycle", "TransitionResult"]
