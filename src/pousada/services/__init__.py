from .notification_service import Notification, NotificationLevel, NotificationService, NotificationSink
from .error_classifier import ErrorInfo, classify_exception, classify_failure
from .lifecycle import ReservationAction, available_actions, can_perform, is_terminal
from .booking_service import count_nights, preview_amount, quote_booking
from .dashboard_service import DashboardService, DashboardSnapshot, DashboardStats

__all__ = [
    "Notification",
    "NotificationLevel",
    "NotificationService",
    "NotificationSink",
    "ErrorInfo",
    "classify_exception",
    "classify_failure",
    "ReservationAction",
    "available_actions",
    "can_perform",
    "is_terminal",
    "count_nights",
    "preview_amount",
    "quote_booking",
    "DashboardService",
    "DashboardSnapshot",
    "DashboardStats",
]
