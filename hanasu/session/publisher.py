"""Session event publisher for pub/sub fan-out to views."""

import copy
import logging
from typing import Optional

from pubsub import pub

from ..models.session import SessionStatus
from ..models.transcript import LogEntry

logger = logging.getLogger(__name__)

STATUS_TOPIC = "session_status"
ENTRY_TOPIC = "transcript_entry"
CLEARED_TOPIC = "transcript_cleared"


# Prototype listeners defining each topic's message data
def _status_message(status: SessionStatus, reason: Optional[str] = None) -> None:
    pass


def _entry_message(entry: LogEntry) -> None:
    pass


def _cleared_message(count: int) -> None:
    pass


class SessionPublisher:
    """Publishes session status and transcript changes using pubsub.pub."""

    def __init__(self,
                 status_topic: str = STATUS_TOPIC,
                 entry_topic: str = ENTRY_TOPIC,
                 cleared_topic: str = CLEARED_TOPIC):
        self.status_topic = status_topic
        self.entry_topic = entry_topic
        self.cleared_topic = cleared_topic

        topic_manager = pub.getDefaultTopicMgr()
        topic_manager.getOrCreateTopic(status_topic, _status_message)
        topic_manager.getOrCreateTopic(entry_topic, _entry_message)
        topic_manager.getOrCreateTopic(cleared_topic, _cleared_message)
        logger.info(f"SessionPublisher initialized with topics: {status_topic}, {entry_topic}, {cleared_topic}")

    def publish_status(self, status: SessionStatus, reason: Optional[str] = None) -> None:
        pub.sendMessage(self.status_topic, status=status, reason=reason)
        logger.debug(f"Published status: {status.value}{f' ({reason})' if reason else ''}")

    def publish_entry(self, entry: LogEntry) -> None:
        # Subscribers get a snapshot; the live entry keeps changing
        pub.sendMessage(self.entry_topic, entry=copy.copy(entry))

    def publish_cleared(self, count: int) -> None:
        pub.sendMessage(self.cleared_topic, count=count)
        logger.debug(f"Published log cleared ({count} entries)")
