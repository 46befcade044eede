from enum import Enum


class NotificationType(str, Enum):
    ORDER_CREATED = "order_created"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_STATUS = "order_status"
    LOW_STOCK = "low_stock"
    PRODUCT_UPDATE = "product_update"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: str | None) -> "NotificationType":
        """Unknown or missing tags from the server collapse to OTHER."""
        try:
            return cls(tag)
        except ValueError:
            return cls.OTHER

    def get_icon(self) -> str:
        match self:
            case NotificationType.ORDER_CREATED:
                return "📦"
            case NotificationType.ORDER_SHIPPED:
                return "🚚"
            case NotificationType.ORDER_DELIVERED:
                return "✅"
            case NotificationType.ORDER_STATUS:
                return "📋"
            case NotificationType.LOW_STOCK:
                return "⚠️"
            case NotificationType.PRODUCT_UPDATE:
                return "🆕"
            case _:
                return "🔔"
