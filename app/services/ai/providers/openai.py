import logging
import json
from typing import Dict, Any, List, Optional
from openai import AsyncOpenAI, RateLimitError, AuthenticationError, APIConnectionError, OpenAIError
from app.exceptions import AIError, wrap_exception
from app.services.ai.base import AIProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    name = "openai"

    def __init__(self, api_keys: List[str], model_name: str = "gpt-4.1-mini", timeout: float = 15.0):
        self.api_keys = [k for k in api_keys if k]
        self.model_name = model_name
        self.timeout = timeout
        self.current_key_index = 0
        self.client: Optional[AsyncOpenAI] = None
        self._configure_current_key()

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _configure_current_key(self):
        if not self.api_keys:
            logger.warning("No OpenAI API Keys provided.")
            self.client = None
            return

        current_key = self.api_keys[self.current_key_index]
        self.client = AsyncOpenAI(api_key=current_key, timeout=self.timeout, max_retries=0)
        logger.info(f"Switched to OpenAI Key Index: {self.current_key_index}")

    def _rotate_key(self) -> bool:
        if len(self.api_keys) <= 1:
            return False

        self.current_key_index = (self.current_key_index + 1) % len(self.api_keys)
        self._configure_current_key()
        return True

    async def _complete(self, messages: List[Dict[str, Any]], model: Optional[str], **kwargs) -> str:
        if not self.client:
            raise AIError("OpenAI API 키가 설정되어 있지 않습니다", provider=self.name, recoverable=False)

        target_model = model or self.model_name
        max_retries = len(self.api_keys)
        attempts = 0

        while attempts < max_retries:
            try:
                response = await self.client.chat.completions.create(
                    model=target_model,
                    messages=messages,
                    **kwargs
                )
                return response.choices[0].message.content or ""
            except (RateLimitError, AuthenticationError, APIConnectionError) as e:
                logger.warning(f"OpenAI Key {self.current_key_index} error: {e}. Rotating.")
                attempts += 1
                if not self._rotate_key():
                    raise AIError(f"All OpenAI keys exhausted: {e}", provider=self.name, model=target_model) from e
            except OpenAIError as e:
                logger.error(f"OpenAI completion failed: {e}")
                raise wrap_exception(e, AIError, provider=self.name, model=target_model) from e

        raise AIError("All OpenAI keys exhausted.", provider=self.name, model=target_model)

    async def generate_json(self, prompt: str, model: Optional[str] = None) -> Dict[str, Any] | List[Any]:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": "You are a helpful assistant. Output valid JSON only."},
            {"role": "user", "content": prompt},
        ]
        content = await self._complete(
            messages,
            model,
            response_format={"type": "json_object"},
            temperature=0.3,
        )
        if not content:
            raise AIError("OpenAI 응답이 비어 있습니다", provider=self.name, model=model or self.model_name)
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"OpenAI JSON parse error: {e} / {content[:200]}")
            raise AIError("OpenAI 응답 JSON 파싱 실패", provider=self.name, response_text=content[:200]) from e
