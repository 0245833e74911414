"""Tests for bounded sampling and random sources."""

import itertools

import pytest

from porpsim.core.random_source import GeneratedRandomSource, ReplayedRandomSource
from porpsim.movement.base import SampleResult, sample_bounded


class TestSampleBounded:
    """Test the capped rejection sampler."""

    def test_first_draw_accepted(self):
        result = sample_bounded(
            draw=lambda: 5.0,
            accept=lambda v: v < 10,
            max_attempts=200,
            fallback=lambda last: -1.0,
        )
        assert result == SampleResult(value=5.0, attempts=1, fell_back=False)

    def test_accepts_after_rejections(self):
        """Rejected draws are retried until one is accepted."""
        values = iter([50.0, 40.0, 3.0, 2.0])
        result = sample_bounded(
            draw=lambda: next(values),
            accept=lambda v: v < 10,
            max_attempts=200,
            fallback=lambda last: -1.0,
        )
        assert result.value == 3.0
        assert result.attempts == 3
        assert not result.fell_back

    def test_fallback_after_cap(self):
        """The fallback receives the last rejected draw after max_attempts draws."""
        counter = itertools.count()
        seen = []

        def fallback(last):
            seen.append(last)
            return 99.0

        result = sample_bounded(
            draw=lambda: float(next(counter)),
            accept=lambda v: v < 0,
            max_attempts=200,
            fallback=fallback,
        )
        assert result.fell_back
        assert result.value == 99.0
        assert result.attempts == 200
        assert seen == [199.0]

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            sample_bounded(lambda: 1.0, lambda v: True, 0, lambda last: last)


class TestRandomSources:
    """Test generated and replayed random sources."""

    def test_generated_is_reproducible(self):
        """Same seed gives the same stream."""
        a = GeneratedRandomSource(seed=42)
        b = GeneratedRandomSource(seed=42)
        draws_a = [a.next_normal(0, 1) for _ in range(5)] + [a.next_uniform(0, 10) for _ in range(5)]
        draws_b = [b.next_normal(0, 1) for _ in range(5)] + [b.next_uniform(0, 10) for _ in range(5)]
        assert draws_a == draws_b

    def test_generated_ranges(self):
        rng = GeneratedRandomSource(seed=1)
        for _ in range(100):
            assert 2.0 <= rng.next_uniform(2.0, 3.0) < 3.0
            assert 0 <= rng.next_int(0, 4) < 4

    def test_replayed_values(self):
        """Normals are replayed unchanged, uniforms scaled to the range."""
        rng = ReplayedRandomSource([12.5, 0.25])
        assert rng.next_normal(0, 38) == 12.5
        assert rng.next_uniform(90, 110) == pytest.approx(95.0)
        assert rng.consumed == 2

    def test_replayed_exhausted(self):
        rng = ReplayedRandomSource([0.1])
        rng.next_uniform()
        with pytest.raises(RuntimeError):
            rng.next_uniform()

    def test_replayed_cycle_and_reset(self):
        rng = ReplayedRandomSource([1.0, 2.0], cycle=True)
        assert [rng.next_normal() for _ in range(5)] == [1.0, 2.0, 1.0, 2.0, 1.0]
        rng.reset()
        assert rng.consumed == 0
        assert rng.next_normal() == 1.0
