"""Custom exception hierarchy for Slack Widget."""


class SlackWidgetError(Exception):
    """Base error type."""


class ConfigError(SlackWidgetError):
    pass


class AuthenticationError(SlackWidgetError):
    """Raised when the bot token fails the identity check."""
    pass


class SlackError(SlackWidgetError):
    pass


class RecordNotFound(SlackError):
    """Raised when Slack reports that a user or channel does not exist."""
    pass


class WebhookError(SlackWidgetError):
    pass


class InvalidSignatureError(WebhookError):
    pass


class InvalidPayloadError(WebhookError):
    pass


class EventChannelClosed(SlackWidgetError):
    """Raised when sending to or receiving from a terminated event channel."""
    pass


class HandoffTimeout(SlackWidgetError):
    """Raised when no consumer took an event within the hand-off timeout."""
    pass
