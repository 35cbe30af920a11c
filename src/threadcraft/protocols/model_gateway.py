"""Model gateway protocol."""

from typing import Protocol, runtime_checkable

from threadcraft.config import ProviderConfig


@runtime_checkable
class ModelGateway(Protocol):
    """Protocol for chat-completion backends."""

    async def complete(
        self,
        prompt: str,
        provider: ProviderConfig,
        system_prompt: str,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """Send one prompt and return the completion text.

        Args:
            prompt: The user message
            provider: Provider, credential and model to use
            system_prompt: The system instruction
            temperature: Sampling temperature
            json_mode: Request strict JSON output where the model supports it

        Returns:
            Raw completion text (not yet normalized)

        Raises:
            ModelGatewayError: If the provider fails or returns no content
        """
        ...
