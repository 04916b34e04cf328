from wmlink.models.message import EVENT_MASK, EventType, Message, MessageType

__all__ = [
    "EVENT_MASK",
    "EventType",
    "Message",
    "MessageType",
]
