"""
SQLAlchemy models for the Assistant-Lite engine.

Models:
- Channel: Channel dimension (read-only for the assistant)
- Video: Video dimension (read-only for the assistant)
- ChannelDay: Daily channel metrics feeding the KPI facade
- Anomaly: Stored ML anomalies per metric and day
- AssistantThread: Conversation scoped to one channel
- AssistantMessage: User/assistant turns of a thread
- MessageEvidence: Facts cited by assistant messages
"""

from db.models.channel import Channel
from db.models.video import Video
from db.models.channel_day import ChannelDay
from db.models.anomaly import Anomaly
from db.models.assistant_thread import AssistantThread
from db.models.assistant_message import AssistantMessage
from db.models.message_evidence import MessageEvidence

__all__ = [
    "Channel",
    "Video",
    "ChannelDay",
    "Anomaly",
    "AssistantThread",
    "AssistantMessage",
    "MessageEvidence",
]
