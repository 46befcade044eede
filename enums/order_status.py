from enum import Enum


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"   # Created by checkout, waiting for gateway confirmation
    PAID = "paid"                         # Verified by the server after gateway confirmation
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
