from types import SimpleNamespace

import pytest

from app.exceptions import AIError
from app.services.ai.providers.openai import OpenAIProvider


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def provider_with(content) -> tuple[OpenAIProvider, FakeCompletions]:
    provider = OpenAIProvider(api_keys=["sk-test"])
    completions = FakeCompletions(content)
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return provider, completions


@pytest.mark.unit
def test_provider_without_keys_is_not_configured():
    provider = OpenAIProvider(api_keys=["", ""])
    assert provider.is_configured is False
    assert OpenAIProvider(api_keys=["sk-test"]).is_configured is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_json_without_client_raises():
    with pytest.raises(AIError):
        await OpenAIProvider(api_keys=[]).generate_json("prompt")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_json_requests_json_object():
    provider, completions = provider_with('{"adjRate": 0.1, "comment": "ok"}')
    data = await provider.generate_json("prompt")
    assert data == {"adjRate": 0.1, "comment": "ok"}
    assert completions.calls[0]["response_format"] == {"type": "json_object"}
    assert completions.calls[0]["model"] == "gpt-4.1-mini"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_json_invalid_content_raises():
    provider, _ = provider_with("not json")
    with pytest.raises(AIError):
        await provider.generate_json("prompt")

    provider, _ = provider_with("")
    with pytest.raises(AIError):
        await provider.generate_json("prompt")
