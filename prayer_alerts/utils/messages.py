"""
Centralized user-facing message strings for Prayer Alerts.

Usage:
    from prayer_alerts.utils.messages import MSG

    title = MSG.ALERT_TITLE.format(name="Maghrib")
"""


class Messages:
    """All user-facing messages."""

    # ==================== ALERTS ====================
    ALERT_TITLE = "🕌 Time for {name} Prayer"
    ALERT_BODY = "Prayer time is at {time}"

    # ==================== PERMISSION ====================
    PERMISSION_GRANTED = "✅ Notifications enabled! You'll be notified before prayer times."
    PERMISSION_DENIED = "❌ Please allow notifications for the bot and set TELEGRAM_CHAT_ID"

    # ==================== ERRORS ====================
    NO_EVENTS_LOADED = "Prayer times have not been loaded yet"
    TIME_SOURCE_UNAVAILABLE = "Prayer time source unavailable: {error}"
    SETTINGS_NOT_SAVED = "Notification settings could not be saved: {error}"
    UNKNOWN_TRIGGER = "Unknown type: {type}. Use 'rollover' or 'rearm'"


# Singleton instance for easy import
MSG = Messages()
