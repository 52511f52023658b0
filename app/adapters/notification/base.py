from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationMessage:
	"""Plain-text notification addressed to the site owners."""

	subject: str
	text_body: str
	reply_to: str


@dataclass(frozen=True)
class NotificationResult:
	"""Transport acknowledgement for one sent notification."""

	message_id: str


class AbstractNotifier(ABC):
	"""Interface for outbound notification transports."""

	@abstractmethod
	async def send(self, message: NotificationMessage) -> NotificationResult:
		"""Send a notification to the configured recipient.

		Args:
			message: Subject, body and reply-to address.

		Returns:
			NotificationResult: Carries the transport's message id.

		Raises:
			NotificationAppError: If the transport failed or timed out.
		"""
		...
