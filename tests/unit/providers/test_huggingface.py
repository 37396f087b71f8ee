"""Unit tests for the Hugging Face provider with a fake inference client."""
import asyncio

import pytest

from ytldr.config import HuggingFaceSettings
from ytldr.summarization.errors import CompletionServiceError
from ytldr.summarization.providers import GenerationConfig, HuggingFaceProvider

CLIENT_PATH = "ytldr.summarization.providers.huggingface.AsyncInferenceClient"


class FakeInferenceClient:
    """Stands in for AsyncInferenceClient; records calls on the class."""

    instances = []
    reply = "generated text"
    error = None
    in_flight = 0
    max_in_flight = 0

    def __init__(self, model=None, token=None, timeout=None):
        self.model = model
        self.token = token
        self.timeout = timeout
        self.calls = []
        FakeInferenceClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def _answer(self, method, prompt, kwargs):
        self.calls.append((method, prompt, kwargs))
        cls = FakeInferenceClient
        cls.in_flight += 1
        cls.max_in_flight = max(cls.max_in_flight, cls.in_flight)
        try:
            await asyncio.sleep(0.01)
            if cls.error is not None:
                raise cls.error
            if callable(cls.reply):
                return cls.reply(prompt)
            return cls.reply
        finally:
            cls.in_flight -= 1

    async def text_generation(self, prompt, **kwargs):
        return await self._answer("text_generation", prompt, kwargs)

    async def summarization(self, text, **kwargs):
        return await self._answer("summarization", text, kwargs)


@pytest.fixture
def fake_client(mocker):
    FakeInferenceClient.instances = []
    FakeInferenceClient.reply = "generated text"
    FakeInferenceClient.error = None
    FakeInferenceClient.in_flight = 0
    FakeInferenceClient.max_in_flight = 0
    mocker.patch(CLIENT_PATH, FakeInferenceClient)
    return FakeInferenceClient


def test_huggingface_rejects_unknown_task():
    with pytest.raises(ValueError):
        HuggingFaceProvider(model="some/model", task="translation")


def test_huggingface_from_settings_strips_v1_suffix(clean_env):
    clean_env.setenv("HUGGINGFACE_API_BASE", "http://tgi.local:8080/v1")
    clean_env.setenv("HUGGINGFACE_API_KEY", "-")

    provider = HuggingFaceProvider.from_settings(HuggingFaceSettings())

    assert provider.model_name == "http://tgi.local:8080"
    assert provider._token is None


def test_huggingface_from_settings_uses_model_id(clean_env):
    clean_env.setenv("HF_TOKEN", "hf_secret")
    clean_env.setenv("HUGGINGFACE_MODEL", "facebook/bart-large-cnn")
    clean_env.setenv("HUGGINGFACE_TASK", "summarization")

    provider = HuggingFaceProvider.from_settings(HuggingFaceSettings())

    assert provider.name == "huggingface"
    assert provider.model_name == "facebook/bart-large-cnn"
    assert provider._token == "hf_secret"
    assert provider._task == "summarization"


@pytest.mark.asyncio
async def test_text_generation_sampling_params(fake_client):
    provider = HuggingFaceProvider(model="some/model", token="tok", timeout=30)

    text = await provider.generate(
        "prompt", GenerationConfig(temperature=0.4, max_output_tokens=256, top_p=0.9, top_k=10)
    )

    assert text == "generated text"
    client = fake_client.instances[0]
    assert (client.model, client.token, client.timeout) == ("some/model", "tok", 30)
    method, prompt, kwargs = client.calls[0]
    assert method == "text_generation"
    assert prompt == "prompt"
    assert kwargs == {
        "max_new_tokens": 256,
        "return_full_text": False,
        "do_sample": True,
        "temperature": 0.4,
        "top_p": 0.9,
        "top_k": 10,
    }


@pytest.mark.asyncio
async def test_text_generation_zero_temperature_is_greedy(fake_client):
    provider = HuggingFaceProvider(model="some/model")

    await provider.generate("prompt", GenerationConfig(temperature=0.0, max_output_tokens=64))

    kwargs = fake_client.instances[0].calls[0][2]
    assert kwargs == {"max_new_tokens": 64, "return_full_text": False, "do_sample": False}


@pytest.mark.asyncio
async def test_summarization_task(fake_client):
    fake_client.reply = {"summary_text": "A concise summary."}
    provider = HuggingFaceProvider(model="facebook/bart-large-cnn", task="summarization")

    text = await provider.generate("long text", GenerationConfig(max_output_tokens=30))

    assert text == "A concise summary."
    method, _, kwargs = fake_client.instances[0].calls[0]
    assert method == "summarization"
    assert kwargs == {
        "generate_parameters": {"max_length": 30, "min_length": 30, "do_sample": False}
    }


@pytest.mark.asyncio
async def test_output_object_attribute_is_read(fake_client):
    class Output:
        generated_text = "from attribute"

    fake_client.reply = Output()
    provider = HuggingFaceProvider(model="some/model")

    assert await provider.generate("prompt") == "from attribute"


@pytest.mark.asyncio
async def test_client_exception_becomes_completion_error(fake_client):
    fake_client.error = RuntimeError("model is loading")
    provider = HuggingFaceProvider(model="some/model")

    with pytest.raises(CompletionServiceError) as excinfo:
        await provider.generate("prompt")

    assert excinfo.value.provider == "huggingface"
    assert "model is loading" in str(excinfo.value)


@pytest.mark.asyncio
async def test_empty_generation_is_an_error(fake_client):
    fake_client.reply = "   "
    provider = HuggingFaceProvider(model="some/model")

    with pytest.raises(CompletionServiceError, match="Empty generation"):
        await provider.generate("prompt")


@pytest.mark.asyncio
async def test_batch_preserves_order_and_limits_concurrency(fake_client):
    fake_client.reply = lambda prompt: f"summary of {prompt}"
    provider = HuggingFaceProvider(model="some/model", max_concurrency=2)

    results = await provider.generate_batch([f"p{i}" for i in range(5)])

    assert results == [f"summary of p{i}" for i in range(5)]
    assert fake_client.max_in_flight == 2
    assert len(fake_client.instances) == 1


@pytest.mark.asyncio
async def test_batch_empty(fake_client):
    provider = HuggingFaceProvider(model="some/model")
    assert await provider.generate_batch([]) == []
    assert fake_client.instances == []


@pytest.mark.asyncio
async def test_health_check(fake_client):
    provider = HuggingFaceProvider(model="some/model")
    assert (await provider.health_check()).healthy is True

    fake_client.error = RuntimeError("unreachable")
    health = await provider.health_check()
    assert health.healthy is False
    assert "unreachable" in health.error_message
