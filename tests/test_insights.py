"""Tests for streaming insight generation."""

import pytest

from crm_insights.insights import (
    NO_DATA_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    InsightGenerationError,
    InsightGenerator,
)
from crm_insights.prompts import NO_DATA_SENTINEL, format_full_context

from conftest import FakeLLM


async def collect(stream) -> list[str]:
    return [fragment async for fragment in stream]


@pytest.mark.asyncio
async def test_no_data_sentinel_yields_one_fragment_without_calling_model():
    llm = FakeLLM(fragments=["should not appear"])
    generator = InsightGenerator(llm)

    fragments = await collect(generator.generate_insights(NO_DATA_SENTINEL, "Why do we win?"))

    assert fragments == [NO_DATA_MESSAGE]
    assert "expand your search criteria" in fragments[0]
    assert llm.stream_calls == []


@pytest.mark.asyncio
async def test_missing_api_key_yields_not_configured_fragment(innovate_corp):
    llm = FakeLLM(configured=False)
    generator = InsightGenerator(llm)

    fragments = await collect(
        generator.generate_insights(format_full_context([innovate_corp]), "Why do we win?")
    )

    assert fragments == [NOT_CONFIGURED_MESSAGE]
    assert llm.stream_calls == []


@pytest.mark.asyncio
async def test_fragments_stream_in_arrival_order(innovate_corp):
    llm = FakeLLM(fragments=["## Findings\n", "", "- Data fragmentation", " is the top pain."])
    generator = InsightGenerator(llm)
    context = format_full_context([innovate_corp])

    fragments = await collect(generator.generate_insights(context, "What problems come up?"))

    assert fragments == ["## Findings\n", "- Data fragmentation", " is the top pain."]
    assert len(llm.stream_calls) == 1
    system, content = llm.stream_calls[0]
    assert content == "What problems come up?"
    assert system.endswith(context)
    assert "world-class sales analyst" in system


@pytest.mark.asyncio
async def test_failure_before_first_fragment_raises_typed_error(innovate_corp):
    llm = FakeLLM(stream_error=ConnectionError("connection refused"))
    generator = InsightGenerator(llm)

    with pytest.raises(InsightGenerationError) as exc_info:
        await collect(generator.generate_insights(format_full_context([innovate_corp]), "Q?"))

    assert "API key" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_failure_mid_stream_keeps_yielded_fragments(innovate_corp):
    llm = FakeLLM(fragments=["Partial ", "answer"], stream_error=TimeoutError("stream dropped"))
    generator = InsightGenerator(llm)
    received = []

    with pytest.raises(InsightGenerationError):
        async for fragment in generator.generate_insights(
            format_full_context([innovate_corp]), "Q?"
        ):
            received.append(fragment)

    assert received == ["Partial ", "answer"]
