from abc import ABC, abstractmethod


class AbstractHumanVerifier(ABC):
    """Interface for third-party human verification checks."""

    @abstractmethod
    async def verify(self, token: str, secret: str, *, remote_ip: str | None = None) -> bool:
        """Check a client-supplied verification token.

        Implementations make a single attempt and never raise: an empty token,
        a transport failure or a negative answer all return False.

        Args:
            token: Token produced by the client-side widget.
            secret: Server-held secret for the verification provider.
            remote_ip: Optional end-user address forwarded to the provider.

        Returns:
            True only when the provider positively verified the token.
        """
        ...
