# Domain SRS Package
from .models import LEARNED_STAGE, STAGE_NAMES, ItemType, ReviewOutcome, SRSState, Stage, stage_name

__all__ = [
    "ItemType",
    "LEARNED_STAGE",
    "ReviewOutcome",
    "SRSState",
    "Stage",
    "STAGE_NAMES",
    "stage_name",
]
