from enum import Enum


class CheckoutState(Enum):
    LOADING = "LOADING"                  # Resolving the item set (buy-now lookup)
    ADDRESS_ENTRY = "ADDRESS_ENTRY"      # Form entry, shipping rates recomputed alongside
    PAYMENT_PENDING = "PAYMENT_PENDING"  # Order + intent created, hosted widget open
    VERIFYING = "VERIFYING"              # Widget reported success, server verification running
    SUCCESS = "SUCCESS"                  # Verified, cart finalized (final)
    FAILED = "FAILED"                    # See CheckoutOrchestrator.can_retry
