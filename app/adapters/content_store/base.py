from abc import ABC, abstractmethod
from typing import Any


class AbstractContentStore(ABC):
	"""Interface for the external content backend's document creation call."""

	@abstractmethod
	async def create(self, collection: str, document: dict[str, Any]) -> str | None:
		"""Create a document in a collection.

		Args:
			collection: Collection (content type) name, e.g. "contact-submissions".
			document: Serialized document fields.

		Returns:
			str | None: Backend identifier of the created document, when provided.

		Raises:
			PersistenceAppError: If the backend rejects or cannot receive the document.
		"""
		...
