# Application SRS Package
from .queue import ReviewQueueResult, build_review_queue, due_items, is_due
from .scheduler import SRSScheduler, ease_delta, validate_quality

__all__ = [
    "ReviewQueueResult",
    "SRSScheduler",
    "build_review_queue",
    "due_items",
    "ease_delta",
    "is_due",
    "validate_quality",
]
