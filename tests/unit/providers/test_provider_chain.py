"""Unit tests for provider chain and fallback logic."""
import pytest

from tests.fakes.completion import ScriptedProvider
from ytldr.summarization.errors import CompletionServiceError
from ytldr.summarization.providers import (
    GenerationConfig,
    ProviderChain,
    ProviderHealth,
    SummaryProvider,
)


def echo(name):
    return lambda prompt: f"{name}: {prompt[:20]}"


def test_provider_chain_requires_providers():
    with pytest.raises(ValueError):
        ProviderChain([])


@pytest.mark.asyncio
async def test_provider_chain_single_healthy_provider():
    """Test basic generation with single healthy provider."""
    provider = ScriptedProvider("test", responder=echo("test"))
    chain = ProviderChain([provider], sticky=True)

    result = await chain.generate("test prompt")
    assert result == "test: test prompt"
    assert provider.call_count == 1


@pytest.mark.asyncio
async def test_provider_chain_fallback_to_second():
    """Test fallback when first provider fails."""
    provider1 = ScriptedProvider("provider1", always_fail=True)
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=True)

    await chain.check_all_health()

    result = await chain.generate("test prompt")
    assert result == "provider2: test prompt"
    assert provider1.call_count == 1
    assert provider2.call_count == 1


@pytest.mark.asyncio
async def test_provider_chain_skip_unhealthy():
    """Test that unhealthy providers are skipped."""
    provider1 = ScriptedProvider("provider1", healthy=False)
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=True)

    await chain.check_all_health()

    result = await chain.generate("test prompt")
    assert result == "provider2: test prompt"
    assert provider1.call_count == 0
    assert provider2.call_count == 1


@pytest.mark.asyncio
async def test_provider_chain_sticky_mode():
    """Test sticky mode reuses successful provider."""
    provider1 = ScriptedProvider("provider1", responder=echo("provider1"))
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=True)

    assert await chain.generate("prompt1") == "provider1: prompt1"
    assert await chain.generate("prompt2") == "provider1: prompt2"

    assert provider1.call_count == 2
    assert provider2.call_count == 0
    assert chain.model_name == "fake-model"


@pytest.mark.asyncio
async def test_provider_chain_sticky_provider_failure_falls_back():
    provider1 = ScriptedProvider("provider1", fail_on_call=1, responder=echo("provider1"))
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=True)

    await chain.generate("prompt1")
    result = await chain.generate("prompt2")

    assert result == "provider2: prompt2"
    # The failed sticky provider is not retried within the same call
    assert provider1.call_count == 2


@pytest.mark.asyncio
async def test_provider_chain_batch_generation():
    """Test batch generation with single provider."""
    provider = ScriptedProvider("test", responder=echo("test"))
    chain = ProviderChain([provider], sticky=True)

    results = await chain.generate_batch(["prompt1", "prompt2", "prompt3"])

    assert results == ["test: prompt1", "test: prompt2", "test: prompt3"]


@pytest.mark.asyncio
async def test_provider_chain_batch_falls_back_as_a_whole():
    """Test that a failed batch is retried on the next provider."""
    provider1 = ScriptedProvider("provider1", fail_on_call=1, responder=echo("provider1"))
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=True)

    results = await chain.generate_batch(["prompt1", "prompt2", "prompt3"])

    assert results == ["provider2: prompt1", "provider2: prompt2", "provider2: prompt3"]
    assert chain.model_name == provider2.model_name


@pytest.mark.asyncio
async def test_provider_chain_non_sticky_batch():
    provider1 = ScriptedProvider("provider1", fail_on_call=1, responder=echo("provider1"))
    provider2 = ScriptedProvider("provider2", responder=echo("provider2"))
    chain = ProviderChain([provider1, provider2], sticky=False)

    results = await chain.generate_batch(["prompt1", "prompt2", "prompt3"])

    assert results == ["provider1: prompt1", "provider2: prompt2", "provider1: prompt3"]


@pytest.mark.asyncio
async def test_provider_chain_reset_session():
    """Test that reset_session clears sticky provider."""
    provider1 = ScriptedProvider("provider1", fail_on_call=0)
    provider2 = ScriptedProvider("provider2")
    chain = ProviderChain([provider1, provider2], sticky=True)

    await chain.generate("prompt1")
    await chain.generate("prompt2")
    assert provider1.call_count == 1
    assert provider2.call_count == 2

    chain.reset_session()

    await chain.generate("prompt3")
    assert provider1.call_count == 2


@pytest.mark.asyncio
async def test_provider_chain_fork_has_fresh_session():
    provider1 = ScriptedProvider("provider1", fail_on_call=0)
    provider2 = ScriptedProvider("provider2")
    chain = ProviderChain([provider1, provider2], sticky=True)
    await chain.generate("prompt1")

    forked = chain.fork()
    await forked.generate("prompt2")

    assert forked.providers is chain.providers
    assert provider1.call_count == 2


@pytest.mark.asyncio
async def test_provider_chain_all_fail():
    """Test that an error is raised when all providers fail."""
    provider1 = ScriptedProvider("provider1", always_fail=True)
    provider2 = ScriptedProvider("provider2", always_fail=True)
    chain = ProviderChain([provider1, provider2], sticky=True)

    await chain.check_all_health()

    with pytest.raises(CompletionServiceError, match="All providers failed"):
        await chain.generate("test prompt")


@pytest.mark.asyncio
async def test_provider_chain_passes_generation_config():
    provider = ScriptedProvider("test")
    chain = ProviderChain([provider])
    config = GenerationConfig(temperature=0.1)

    await chain.generate("prompt", config)

    assert provider.configs == [config]


@pytest.mark.asyncio
async def test_provider_chain_health_check_survives_exceptions():
    class ExplodingProvider(SummaryProvider):
        @property
        def name(self) -> str:
            return "exploding"

        async def health_check(self) -> ProviderHealth:
            raise RuntimeError("boom")

        async def generate(self, prompt, config=None):
            return "never"

    chain = ProviderChain([ExplodingProvider(), ScriptedProvider("ok")])
    results = await chain.check_all_health()

    assert results[0][0] == "exploding"
    assert results[0][1].healthy is False
    assert "boom" in results[0][1].error_message
    assert (await chain.health_check()).healthy is True
