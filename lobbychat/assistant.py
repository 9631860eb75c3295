"""Assistant ("DM") replies generated through an external completion provider."""

import logging
from typing import Callable, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from lobbychat.constants import (
    ASSISTANT_SENDER,
    ASSISTANT_SYSTEM_PROMPT,
    EMPTY_REPLY,
    NOT_CONFIGURED_REPLY,
    UNAVAILABLE_REPLY,
    Role,
)
from lobbychat.errors import ExternalProviderError, StorageError
from lobbychat.models import Message, now_ms
from lobbychat.registry import LobbyRegistry
from lobbychat.store import MessageStore

logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    async def complete(self, credential: str, system_prompt: str, user_content: str) -> Optional[str]:
        """Return the first completion text, or None when there is none.

        Any failure is raised as ``ExternalProviderError``.
        """
        ...


class OpenAICompletionProvider:
    def __init__(self, model: str, timeout: float, max_retries: int = 0) -> None:
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries

    async def complete(self, credential: str, system_prompt: str, user_content: str) -> Optional[str]:
        try:
            async with AsyncOpenAI(
                api_key=credential, timeout=self.timeout, max_retries=self.max_retries
            ) as client:
                completion = await client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_content},
                    ],
                )
        except OpenAIError as exc:
            # Only the class name travels on; SDK messages can echo the key.
            raise ExternalProviderError(exc.__class__.__name__) from exc
        choices = completion.choices or []
        if not choices or choices[0].message is None:
            return None
        return choices[0].message.content


class AssistantResponder:
    """Produces exactly one persisted assistant message per user message."""

    def __init__(
        self,
        registry: LobbyRegistry,
        store: MessageStore,
        provider: CompletionProvider,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._store = store
        self._provider = provider
        self._clock = clock

    async def respond(self, code: str, user_content: str) -> Message:
        credential = self._registry.get_credential(code)
        if credential:
            content = await self._complete(code, credential, user_content)
        else:
            content = NOT_CONFIGURED_REPLY
        created_at = self._clock()
        try:
            await self._store.append(code, ASSISTANT_SENDER, Role.ASSISTANT, content, created_at)
        except StorageError:
            logger.exception("Could not persist assistant reply for lobby %s", code)
        return Message(
            id=created_at,
            lobby_code=code,
            sender=ASSISTANT_SENDER,
            role=Role.ASSISTANT,
            content=content,
            created_at=created_at,
        )

    async def _complete(self, code: str, credential: str, user_content: str) -> str:
        try:
            text = await self._provider.complete(credential, ASSISTANT_SYSTEM_PROMPT, user_content)
        except ExternalProviderError as exc:
            logger.warning("Assistant provider failed for lobby %s: %s", code, exc)
            return UNAVAILABLE_REPLY
        except Exception:
            logger.exception("Unexpected assistant provider error for lobby %s", code)
            return UNAVAILABLE_REPLY
        text = (text or "").strip()
        return text or EMPTY_REPLY
