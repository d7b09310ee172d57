from abc import ABC, abstractmethod
from typing import Iterator, List, Optional
from .models import ChatMessage


class IChatModel(ABC):
    """
    Interface for a hosted chat-completion model.
    The correction engine calls complete(); the assistant calls complete() and stream().
    """

    @abstractmethod
    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: endpoint or credential missing.
        """
        pass

    @abstractmethod
    def complete(self, messages: List[ChatMessage], max_tokens: int,
                 temperature: Optional[float] = None) -> str:
        """
        Returns the first choice's message content ("" when absent).

        Raises:
            ProviderError: non-success response / timeout.
        """
        pass

    @abstractmethod
    def stream(self, messages: List[ChatMessage], max_tokens: int) -> Iterator[str]:
        """Yields content tokens in arrival order."""
        pass
