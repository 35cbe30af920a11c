"""Chat-completions gateway for OpenAI-compatible providers.

Model invocation flow:
    service -> ``complete(prompt, provider, ...)`` -> payload shaping (capability
    gating) -> POST ``{base_url}/chat/completions`` -> completion text.

Provider quirks are data, not branches:
    - ``JSON_MODE_UNSUPPORTED`` lists models that reject
      ``response_format={"type": "json_object"}``. For those the flag is never
      sent and a stricter JSON-only instruction is added to the system prompt.
    - ``RETRY_RULES`` maps (provider, status, error signature) to a payload
      mutation. A matching failure is retried exactly once with the mutation
      applied and a lower temperature. Any other failure, and any failure of
      the retry, propagates unchanged.

Every HTTP call is bounded by ``settings.llm_timeout_seconds``.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from threadcraft.config import ProviderConfig, Settings, settings
from threadcraft.errors import ModelGatewayError

logger = logging.getLogger(__name__)

PROVIDER_LABELS = {
    "openrouter": "OpenRouter",
    "openai": "OpenAI",
}

# Model-name prefixes, per provider, that reject the strict JSON output flag
JSON_MODE_UNSUPPORTED: dict[str, tuple[str, ...]] = {
    "openrouter": ("anthropic/", "google/gemma", "meta-llama/", "mistralai/"),
    "openai": (),
}

STRICT_JSON_INSTRUCTION = (
    "Respond with a single valid JSON object and nothing else. "
    "Do not wrap it in markdown code fences and do not add commentary."
)

RETRY_TEMPERATURE = 0.1


def _append_to_system(messages: list[dict], text: str) -> list[dict]:
    result = []
    appended = False
    for message in messages:
        if message.get("role") == "system" and not appended:
            message = {**message, "content": f"{message.get('content', '')}\n\n{text}".strip()}
            appended = True
        result.append(message)
    if not appended:
        result.insert(0, {"role": "system", "content": text})
    return result


def drop_response_format(payload: dict) -> dict:
    """Remove the strict JSON flag, moving the requirement into the system prompt."""
    mutated = {key: value for key, value in payload.items() if key != "response_format"}
    if "response_format" in payload:
        mutated["messages"] = _append_to_system(payload.get("messages", []), STRICT_JSON_INSTRUCTION)
    return mutated


def fold_system_message(payload: dict) -> dict:
    """Merge system messages into the first user message.

    For models that reject a separate system/developer instruction.
    """
    messages = payload.get("messages", [])
    system_text = "\n\n".join(
        str(m.get("content", "")) for m in messages if m.get("role") == "system"
    )
    folded = []
    for message in messages:
        if message.get("role") == "system":
            continue
        if system_text and message.get("role") == "user":
            message = {**message, "content": f"{system_text}\n\n{message.get('content', '')}"}
            system_text = ""
        folded.append(message)
    return {**payload, "messages": folded}


@dataclass(frozen=True)
class RetryRule:
    """One provider quirk: which failure triggers which payload change.

    Attributes:
        provider: Provider name, or "*" for any provider
        statuses: Upstream HTTP statuses the rule applies to
        signature: Lowercase substring searched for in the error body
        mutation: Payload transformation applied before the single retry
    """

    provider: str
    statuses: frozenset[int]
    signature: str
    mutation: Callable[[dict], dict]

    def matches(self, provider: str, error: ModelGatewayError) -> bool:
        if self.provider not in ("*", provider):
            return False
        if error.upstream_status not in self.statuses:
            return False
        return self.signature in (error.body or error.message).lower()


RETRY_RULES: tuple[RetryRule, ...] = (
    RetryRule("*", frozenset({400, 422}), "response_format", drop_response_format),
    RetryRule("*", frozenset({400, 422}), "json_object", drop_response_format),
    RetryRule("openrouter", frozenset({400, 404}), "json mode is not supported", drop_response_format),
    RetryRule(
        "openrouter", frozenset({400}), "developer instruction is not enabled", fold_system_message
    ),
    RetryRule("*", frozenset({400}), "system messages are not supported", fold_system_message),
)


def find_retry_rule(provider: str, error: ModelGatewayError) -> RetryRule | None:
    """Return the first rule matching the failure, or None."""
    for rule in RETRY_RULES:
        if rule.matches(provider, error):
            return rule
    return None


def supports_json_mode(provider: ProviderConfig) -> bool:
    """Check whether the provider/model accepts the strict JSON output flag."""
    prefixes = JSON_MODE_UNSUPPORTED.get(provider.provider, ())
    model = provider.model.lower()
    return not any(model.startswith(prefix) for prefix in prefixes)


def _extract_content(data: Any) -> str:
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError):
        return ""
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        # Some providers return content parts instead of a plain string
        content = "".join(
            part.get("text", "") for part in content if isinstance(part, dict)
        )
    return content.strip() if isinstance(content, str) else ""


class ChatCompletionGateway:
    """OpenAI-compatible implementation of ModelGateway protocol.

    This class satisfies the ModelGateway protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        async with httpx.AsyncClient() as client:
            gateway = ChatCompletionGateway(client)
            text = await gateway.complete(
                "Summarize ...",
                ProviderConfig(provider="openrouter", api_key="sk-...", model="openai/gpt-4o"),
                system_prompt="You are concise.",
                json_mode=True,
            )
        ```
    """

    def __init__(self, client: httpx.AsyncClient, config: Settings | None = None) -> None:
        """Initialize the gateway.

        Args:
            client: Shared async HTTP client (owned by the caller)
            config: Settings for endpoints and deadlines. Defaults to settings.
        """
        self._client = client
        self._settings = config or settings

    def build_payload(
        self,
        prompt: str,
        provider: ProviderConfig,
        system_prompt: str,
        temperature: float,
        json_mode: bool,
    ) -> dict:
        """Build the chat request body, applying capability gating."""
        system = system_prompt
        payload: dict[str, Any] = {"model": provider.model, "temperature": temperature}

        if json_mode:
            if supports_json_mode(provider):
                payload["response_format"] = {"type": "json_object"}
            else:
                system = f"{system_prompt}\n\n{STRICT_JSON_INSTRUCTION}".strip()

        payload["messages"] = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        return payload

    def _headers(self, provider: ProviderConfig) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {provider.api_key}",
            "Content-Type": "application/json",
        }
        if provider.provider == "openrouter":
            # Optional routing headers
            headers["HTTP-Referer"] = self._settings.app_referer
            headers["X-Title"] = self._settings.app_title
        return headers

    async def _send(self, provider: ProviderConfig, payload: dict) -> str:
        label = PROVIDER_LABELS.get(provider.provider, provider.provider)
        url = f"{self._settings.base_url_for(provider.provider).rstrip('/')}/chat/completions"
        deadline = self._settings.llm_timeout_seconds

        try:
            response = await asyncio.wait_for(
                self._client.post(url, headers=self._headers(provider), json=payload, timeout=deadline),
                timeout=deadline,
            )
        except asyncio.TimeoutError as e:
            raise ModelGatewayError(f"{label} request timed out after {deadline:g}s") from e
        except httpx.HTTPError as e:
            raise ModelGatewayError(f"{label} request failed: {e}") from e

        if not response.is_success:
            body = response.text
            raise ModelGatewayError(
                f"{label} error: {response.status_code} {body}".strip(),
                upstream_status=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ModelGatewayError(
                f"{label} returned a non-JSON response",
                upstream_status=response.status_code,
                body=response.text,
            ) from e

        content = _extract_content(data)
        if not content:
            raise ModelGatewayError(
                f"{label} returned empty content", upstream_status=response.status_code
            )
        return content

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
            Raw completion text

        Raises:
            ModelGatewayError: If the provider fails (after at most one retry)
        """
        payload = self.build_payload(prompt, provider, system_prompt, temperature, json_mode)

        try:
            return await self._send(provider, payload)
        except ModelGatewayError as e:
            rule = find_retry_rule(provider.provider, e)
            if rule is None:
                raise
            logger.warning(
                "%s rejected request for %s (%s); retrying once with %s",
                PROVIDER_LABELS.get(provider.provider, provider.provider),
                provider.model,
                e.upstream_status,
                rule.mutation.__name__,
            )

        retry_payload = rule.mutation(payload)
        retry_payload["temperature"] = min(temperature, RETRY_TEMPERATURE)
        return await self._send(provider, retry_payload)
