"""Capability interfaces for operations the provider has no native endpoint shape for."""

from abc import ABC, abstractmethod


class ProviderCapability(ABC):
    """Base class for capabilities that handle operation-specific logic.

    Capabilities sit beside the transformers: transformers convert chat
    payloads, capabilities implement the auxiliary operations (token
    counting, embeddings) on top of whatever the provider offers.
    """

    @abstractmethod
    def get_operation_name(self) -> str:
        """Get the operation name this capability handles.

        Returns:
            Operation name (e.g., 'count_tokens', 'embed_content')
        """
        pass
