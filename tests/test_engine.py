"""Tests for the recommendation engine."""

import asyncio
import threading
from datetime import datetime, timedelta

import pytest

from shotnotes.config import RecommendationSettings
from shotnotes.recommendation.engine import (
    RECORD_SIZE_ESTIMATE,
    RecommendationEngine,
    calculate_confidence,
)
from shotnotes.recommendation.matchers import AnalysisCancelled
from shotnotes.recommendation.profile import DiscoveryProfile


@pytest.fixture
def corpus(make_record, base_time):
    """Invoice screenshots taken at the same time on consecutive days, plus noise."""
    records = [
        make_record(record_id=f"invoice-{d}", text=f"invoice total ${40 + d}", at=base_time - timedelta(days=d))
        for d in range(0, 5)
    ]
    records.append(make_record(record_id="noise", text="boarding pass gate 12", at=base_time - timedelta(days=25)))
    return records


@pytest.fixture
def profile():
    return DiscoveryProfile(last_update=datetime(2000, 1, 1))


@pytest.fixture
def engine(profile):
    return RecommendationEngine(RecommendationSettings(), profile)


def test_calculate_confidence():
    """Test confidence is the count-weighted mean of category weights."""
    assert calculate_confidence([], [], [], [], []) == 0.0
    assert calculate_confidence([1, 2], [1], [], [], []) == pytest.approx((2 * 0.4 + 0.2) / 3)
    assert calculate_confidence([], [], [], [1], [1]) == pytest.approx(0.1)


@pytest.mark.asyncio
async def test_generate_recommendations(engine, corpus):
    source = corpus[0]

    result = await engine.generate_recommendations(source, corpus)

    assert result.source is source
    assert source.id not in {item.record.id for item in result.related_content}
    assert {item.record.id for item in result.related_content} == {
        "invoice-1", "invoice-2", "invoice-3", "invoice-4",
    }
    assert len(result.temporal_matches) == 1
    assert len(result.semantic_matches) == 4
    assert result.visual_matches == ()
    assert result.workflow_matches == ()
    assert 0.0 < result.confidence <= 1.0
    assert result.confidence == pytest.approx((4 * 0.4 + 0.2 + 4 * 0.2) / 9)


@pytest.mark.asyncio
async def test_processing_metrics(engine, corpus):
    result = await engine.generate_recommendations(corpus[0], corpus)
    metrics = result.processing_metrics

    pool_size = len(corpus) - 1
    assert metrics.total_comparisons == pool_size * 5
    assert metrics.memory_usage == RECORD_SIZE_ESTIMATE * pool_size
    assert metrics.analysis_time >= 0.0


@pytest.mark.asyncio
async def test_max_results_caps_related_content(engine, corpus):
    result = await engine.generate_recommendations(corpus[0], corpus, max_results=2)

    assert len(result.related_content) == 2


@pytest.mark.asyncio
async def test_discovery_disabled(profile, corpus):
    """Test a disabled engine returns an empty zero-confidence result."""
    engine = RecommendationEngine(RecommendationSettings(enable_content_discovery=False), profile)

    result = await engine.generate_recommendations(corpus[0], corpus)

    assert result.total_matches == 0
    assert result.confidence == 0.0
    assert result.processing_metrics.total_comparisons == 0
    assert profile.last_update == datetime(2000, 1, 1)


@pytest.mark.asyncio
async def test_empty_corpus(engine, make_record):
    result = await engine.generate_recommendations(make_record(text="alone"), [])

    assert result.total_matches == 0
    assert result.confidence == 0.0


@pytest.mark.asyncio
async def test_profile_updated_after_cycle(engine, profile, corpus):
    await engine.generate_recommendations(corpus[0], corpus)

    assert profile.last_update > datetime(2000, 1, 1)
    assert all(w == 0.5 for w in profile.preferred_relationship_types.values())


@pytest.mark.asyncio
async def test_published_state(engine, corpus):
    """Test snapshots and notifications after a cycle."""
    snapshots = []
    unsubscribe = engine.subscribe(snapshots.append)

    before = engine.state()
    assert before.is_analyzing is False
    assert before.last_analysis_results is None

    result = await engine.generate_recommendations(corpus[0], corpus)

    after = engine.state()
    assert after.is_analyzing is False
    assert after.last_analysis_results is result
    assert len(after.content_relationships) == len(result.related_content)
    assert len(after.temporal_patterns) == 1
    assert any(s.is_analyzing for s in snapshots)
    assert snapshots[-1].last_analysis_results is result

    unsubscribe()
    count = len(snapshots)
    await engine.generate_recommendations(corpus[1], corpus)
    assert len(snapshots) == count


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_cycle(engine, corpus):
    def broken(state):
        raise RuntimeError("listener failure")

    engine.subscribe(broken)

    result = await engine.generate_recommendations(corpus[0], corpus)

    assert result.related_content


@pytest.mark.asyncio
async def test_cancelled_cycle_leaves_state_untouched(engine, profile, corpus):
    """Test cancellation propagates without touching profile or state."""
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(AnalysisCancelled):
        await engine.generate_recommendations(corpus[0], corpus, cancel_event=cancel)

    state = engine.state()
    assert state.is_analyzing is False
    assert state.last_analysis_results is None
    assert state.content_relationships == ()
    assert profile.last_update == datetime(2000, 1, 1)


@pytest.mark.asyncio
async def test_cleanup_resources(engine, corpus):
    await engine.generate_recommendations(corpus[0], corpus)
    assert engine.memory_footprint > 1024

    engine.cleanup_resources()

    state = engine.state()
    assert state.last_analysis_results is None
    assert state.content_relationships == ()
    assert state.temporal_patterns == ()
    assert engine.memory_footprint == 1024


@pytest.mark.asyncio
async def test_task_cancellation_stops_matchers(engine, profile, corpus, monkeypatch):
    """Test cancelling the awaiting task sets the event and leaves state alone."""
    started = threading.Event()
    seen = {}

    def blocking_workflow(source, candidates, cancel_event=None):
        seen["event"] = cancel_event
        started.set()
        cancel_event.wait(timeout=5)
        raise AnalysisCancelled("workflow matcher cancelled")

    monkeypatch.setattr(engine.workflow_matcher, "match", blocking_workflow)
    snapshots = []
    engine.subscribe(snapshots.append)

    task = asyncio.create_task(engine.generate_recommendations(corpus[0], corpus))
    while not started.is_set():
        await asyncio.sleep(0.01)
    assert engine.is_analyzing is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert seen["event"].is_set()
    state = engine.state()
    assert state.is_analyzing is False
    assert state.last_analysis_results is None
    assert state.content_relationships == ()
    assert profile.last_update == datetime(2000, 1, 1)
    assert snapshots[-1].is_analyzing is False


@pytest.mark.asyncio
async def test_results_published_with_end_of_analysis(engine, corpus):
    snapshots = []
    engine.subscribe(snapshots.append)

    result = await engine.generate_recommendations(corpus[0], corpus)

    assert [s.is_analyzing for s in snapshots] == [True, False]
    assert snapshots[0].last_analysis_results is None
    assert snapshots[1].last_analysis_results is result


@pytest.mark.asyncio
async def test_relationships_accumulate_until_cleanup(engine, corpus):
    """Test published edges are keyed by pair and kept across cycles."""
    first = await engine.generate_recommendations(corpus[0], corpus)
    await engine.generate_recommendations(corpus[0], corpus)
    assert len(engine.state().content_relationships) == len(first.related_content)

    second = await engine.generate_recommendations(corpus[1], corpus)
    pairs = {(r.source_id, r.target_id) for r in engine.state().content_relationships}
    assert len(pairs) == len(first.related_content) + len(second.related_content)

    engine.cleanup_resources()
    assert engine.state().content_relationships == ()
