"""Visionboard event system."""

from visionboard.events.bus import EventBus
from visionboard.events.types import EventType

__all__ = ["EventBus", "EventType"]
