"""
Incredicer Events.

Observer interface between the progression engine and its consumers.
"""

from src.events.bus import EventBus, Subscriber
from src.events.types import CoreEvent, EventPayload

__all__ = [
    "CoreEvent",
    "EventBus",
    "EventPayload",
    "Subscriber",
]
