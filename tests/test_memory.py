"""Tests for the reference and working spatial memory."""

import math

import pytest

from porpsim.behavior import SpatialMemory, logistic_decay, wrap_displacement


def decayed(rate, times, start=0.999):
    value = start
    for _ in range(times):
        value = logistic_decay(value, rate)
    return value


class TestLogisticDecay:
    """Test the decay function."""

    def test_single_step(self):
        assert logistic_decay(0.999, 0.1) == pytest.approx(0.999 - 0.1 * 0.001 * 0.999)

    def test_monotonic_and_bounded(self):
        """Strength decreases every step and stays within (0, 1)."""
        value = 0.999
        for _ in range(500):
            new = logistic_decay(value, 0.2)
            assert 0.0 < new < value
            value = new

    def test_faster_rate_decays_faster(self):
        assert decayed(0.2, 30) < decayed(0.1, 30)


class TestWrapDisplacement:
    """Test shortest displacement on a torus."""

    def test_short_offsets_unchanged(self):
        assert wrap_displacement(3.0, -4.0, 100, 100) == (3.0, -4.0)

    def test_crossing_the_border(self):
        assert wrap_displacement(90.0, -70.0, 100, 100) == (-10.0, 30.0)

    def test_no_extent_means_no_wrap(self):
        assert wrap_displacement(90.0, -70.0) == (90.0, -70.0)

    def test_full_extent_is_no_displacement(self):
        """Points exactly one grid extent apart coincide on the torus."""
        assert wrap_displacement(100.0, -100.0, 100, 100) == (0.0, 0.0)
        assert wrap_displacement(-100.0, 60.0, 100, 60) == (0.0, 0.0)

    def test_half_extent_left_alone(self):
        assert wrap_displacement(50.0, 0.0, 100, 100) == (50.0, 0.0)
        assert wrap_displacement(-50.0, -30.0, 100, 60) == (-50.0, -30.0)

    def test_wrapped_offset_matches_modulo(self):
        """The wrapped displacement equals the raw one modulo the extent."""
        for dx in (-95.0, -51.0, -10.0, 0.0, 10.0, 51.0, 95.0):
            wx, _ = wrap_displacement(dx, 0.0, 100, 100)
            assert abs(wx) <= 50.0
            assert (wx - dx) % 100 == pytest.approx(0.0)


class TestSpatialMemory:
    """Test memory records and decay bookkeeping."""

    def test_push_most_recent_first(self):
        memory = SpatialMemory()
        memory.push(1.0, 1.0, 0.5)
        memory.push(2.0, 2.0, 0.25)
        assert len(memory) == 2
        assert memory.positions == [(2.0, 2.0), (1.0, 1.0)]
        assert memory[0].stored_utility == 0.25
        assert memory[0].ref_strength == 0.999
        assert memory[1].ref_strength == pytest.approx(decayed(0.1, 1))

    def test_bounded_length(self):
        """Records beyond memory_max are dropped, oldest first."""
        memory = SpatialMemory(memory_max=5)
        for i in range(12):
            memory.push(float(i), 0.0, 0.1)
        assert len(memory) == 5
        assert memory[0].x == 11.0
        assert memory[4].x == 7.0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            SpatialMemory(memory_max=0)

    def test_nan_utility_stored_as_zero(self):
        memory = SpatialMemory()
        memory.push(0.0, 0.0, float("nan"))
        assert memory[0].stored_utility == 0.0

    def test_working_memory_once_per_tick(self):
        """A second update in the same tick is a no-op."""
        memory = SpatialMemory(work_mem_decay=0.2)
        memory.push(0.0, 0.0, 1.0)
        memory.push(1.0, 0.0, 1.0)
        memory.update_working_memory()
        first = memory[1].work_strength
        memory.update_working_memory()
        assert memory[1].work_strength == first
        assert memory[0].work_strength == 0.999

    def test_strengths_aligned_with_age(self):
        """After N ticks the record of age k has decayed k times in both memories."""
        memory = SpatialMemory(memory_max=20, ref_mem_decay=0.1, work_mem_decay=0.2)
        for tick in range(30):
            memory.update_working_memory()
            for age, record in enumerate(memory):
                assert record.ref_strength == pytest.approx(decayed(0.1, age))
                assert record.work_strength == pytest.approx(decayed(0.2, age))
            memory.push(float(tick), 0.0, 0.5)
        assert len(memory) == 20

    def test_push_catches_up_working_memory(self):
        """Skipping the working memory update in a tick does not desynchronise ages."""
        memory = SpatialMemory(work_mem_decay=0.2)
        for tick in range(6):
            memory.push(float(tick), 0.0, 0.5)
        memory.update_working_memory()
        for age, record in enumerate(memory):
            assert record.work_strength == pytest.approx(decayed(0.2, age))

    def test_expected_food_value(self):
        memory = SpatialMemory(work_mem_decay=0.2)
        memory.push(0.0, 0.0, 0.5)
        memory.push(1.0, 0.0, 0.25)
        expected = 0.999 * 0.25 + decayed(0.2, 1) * 0.5
        assert memory.expected_food_value() == pytest.approx(expected)

    def test_clear(self):
        memory = SpatialMemory()
        memory.push(0.0, 0.0, 1.0)
        memory.clear()
        assert len(memory) == 0
        assert memory.expected_food_value() == 0.0


class TestMemoryVectors:
    """Test attraction and deterrence vectors."""

    def test_attraction_towards_past_food(self):
        """Pull is utility * strength / distance along the unit vector."""
        memory = SpatialMemory()
        memory.push(10.0, 0.0, 1.0)
        memory.push(0.0, 0.0, 0.0)
        ax, ay = memory.attraction_vector(0.0, 0.0, weight=2.0)
        assert ax == pytest.approx(2.0 * decayed(0.1, 1) / 10.0)
        assert ay == pytest.approx(0.0)

    def test_current_position_excluded(self):
        """The age-0 record never pulls."""
        memory = SpatialMemory()
        memory.push(5.0, 5.0, 1.0)
        assert memory.attraction_vector(0.0, 0.0) == (0.0, 0.0)

    def test_coincident_position_negligible(self):
        """A past record at the current position contributes (almost) nothing."""
        memory = SpatialMemory()
        memory.push(3.0, 3.0, 1.0)
        memory.push(3.0, 3.0, 1.0)
        ax, ay = memory.attraction_vector(3.0, 3.0)
        assert math.isfinite(ax) and math.isfinite(ay)
        assert abs(ax) < 1e-30 and abs(ay) < 1e-30

    def test_deterrence_from_recent_positions(self):
        """Deterrence points at past positions and is subtracted."""
        memory = SpatialMemory(work_mem_decay=0.2)
        memory.push(1.0, 0.0, 0.0)
        memory.push(0.0, 0.0, 0.0)
        dx, dy = memory.deterrence_vector(0.0, 0.0, inertia_const=0.001)
        assert dx == pytest.approx(0.001 * decayed(0.2, 1))
        assert dy == pytest.approx(0.0)

        vx, vy = memory.memory_vector(0.0, 0.0, weight=1.0, inertia_const=0.001)
        assert vx < 0
        assert vy == pytest.approx(0.0)

    def test_attraction_wraps_on_torus(self):
        """A record across the border pulls the short way round."""
        memory = SpatialMemory(extent=(100, 100))
        memory.push(95.0, 50.0, 1.0)
        memory.push(5.0, 50.0, 0.0)
        ax, _ = memory.attraction_vector(5.0, 50.0)
        assert ax < 0
        assert ax == pytest.approx(-decayed(0.1, 1) / 10.0)

    def test_record_one_extent_away_pulls_the_same(self):
        """On a torus a record at x + width is the same place as one at x."""
        pulls = []
        for past_x in (15.0, 115.0):
            memory = SpatialMemory(extent=(100, 100))
            memory.push(past_x, 50.0, 1.0)
            memory.push(5.0, 50.0, 0.0)
            pulls.append(memory.attraction_vector(5.0, 50.0))
        assert pulls[1] == pytest.approx(pulls[0])
        assert pulls[0][0] == pytest.approx(decayed(0.1, 1) / 10.0)

    def test_two_patches_depleted_patch_repels(self):
        """
        After depleting patch A, the attraction points away from A towards B.

        Patch B (east) was visited first and held food; the later visits to
        patch A (west) found only the residual.
        """
        memory = SpatialMemory(memory_max=120)
        memory.push(30.0, 50.0, 1.0)                     # patch B
        for x, y in [(18.5, 50.0), (18.0, 50.0), (19.0, 49.0), (19.0, 51.0), (19.0, 50.0)]:
            memory.push(x, y, 0.01)                      # patch A, depleted
        memory.push(20.0, 50.0, 0.01)                    # here

        ax, ay = memory.attraction_vector(20.0, 50.0, weight=1.0)
        assert ax > 0
        assert abs(math.degrees(math.atan2(ay, ax))) < 10.0

    def test_two_patches_full_patch_attracts(self):
        """Had A still held food, the closer patch would dominate."""
        memory = SpatialMemory(memory_max=120)
        memory.push(30.0, 50.0, 1.0)
        for x, y in [(18.5, 50.0), (18.0, 50.0), (19.0, 49.0), (19.0, 51.0), (19.0, 50.0)]:
            memory.push(x, y, 1.0)
        memory.push(20.0, 50.0, 1.0)

        ax, _ = memory.attraction_vector(20.0, 50.0, weight=1.0)
        assert ax < 0
