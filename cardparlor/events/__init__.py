"""
Event system for the Cardparlor engines.

This package provides the event emitter engines publish on and the event
types renderers subscribe to.
"""

from cardparlor.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "EngineEventType"]
