"""Notification port — abstract interface for moderation notices."""

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    """Abstract interface for notification dispatch adapters."""

    @abstractmethod
    def send(self, recipient_id: str, subject: str, body: str) -> dict:
        """Send a notification to a user or a team.

        ``recipient_id`` identifies who is notified, not how: the adapter
        resolves it to a deliverable address for its channel.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
