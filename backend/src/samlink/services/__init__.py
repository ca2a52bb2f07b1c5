"""Application services built on the resolution engine."""

from .webhook import WebhookEvent, WebhookProcessor, WebhookSummary, parse_events

__all__ = ["WebhookEvent", "WebhookProcessor", "WebhookSummary", "parse_events"]
