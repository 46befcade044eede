from enum import Enum


class OptimisticOutcome(Enum):
    CONFIRMED = "CONFIRMED"      # Server accepted the tentative state
    ROLLED_BACK = "ROLLED_BACK"  # Request failed, prior snapshot restored
    STALE = "STALE"              # Request failed but state moved on meanwhile, nothing restored
