"""Tests for food depletion and regrowth."""

import numpy as np
import pytest

from porpsim.landscape import FoodField, create_landscape_from_arrays


@pytest.fixture
def landscape():
    """4x4 grid with food in the left half only."""
    food_prob = np.zeros((4, 4))
    food_prob[:, :2] = 0.5
    return create_landscape_from_arrays(np.full((4, 4), 10.0), food_prob=food_prob)


class TestFoodField:
    """Test the food field."""

    def test_initial_levels(self, landscape):
        """Cells with food probability start full, others empty."""
        food = FoodField(landscape, max_food=2.0)
        assert food.level(0.5, 0.5) == 2.0
        assert food.level(3.5, 0.5) == 0.0
        assert food.total() == pytest.approx(16.0)
        assert food.food_cells.sum() == 8

    def test_invalid_arguments(self, landscape):
        with pytest.raises(ValueError):
            FoodField(landscape, max_food=0.0)
        with pytest.raises(ValueError):
            FoodField(landscape, growth_rate=-0.1)

    def test_level_outside_grid(self, landscape):
        food = FoodField(landscape)
        assert food.level(-1.0, 2.0) == 0.0
        assert food.eat(-1.0, 2.0) == 0.0

    def test_eat_leaves_residual(self, landscape):
        """Eating empties the cell down to 0.01."""
        food = FoodField(landscape, max_food=1.0)
        eaten = food.eat(1.2, 3.7)
        assert eaten == pytest.approx(0.99)
        assert food.level(1.2, 3.7) == pytest.approx(0.01)

    def test_eat_empty_cell(self, landscape):
        food = FoodField(landscape)
        assert food.eat(3.5, 3.5) == 0.0
        assert food.level(3.5, 3.5) == 0.0

    def test_set_level_clipped(self, landscape):
        food = FoodField(landscape, max_food=1.0)
        food.set_level(0.5, 0.5, 5.0)
        assert food.level(0.5, 0.5) == 1.0
        food.set_level(0.5, 0.5, -1.0)
        assert food.level(0.5, 0.5) == 0.0
        food.set_level(3.5, 0.5, 0.7)
        assert food.level(3.5, 0.5) == 0.0

    def test_levels_read_only(self, landscape):
        food = FoodField(landscape)
        with pytest.raises(ValueError):
            food.levels[0, 0] = 0.3

    def test_grow_matches_logistic_steps(self, landscape):
        """One growth event is 48 compounded logistic half-hour steps."""
        food = FoodField(landscape, max_food=1.0, growth_rate=0.1)
        food.eat(0.5, 0.5)

        expected = 0.01
        for _ in range(48):
            expected = min(expected + 0.1 * expected * (1 - expected), 1.0)

        food.grow()
        assert food.level(0.5, 0.5) == pytest.approx(expected)
        assert food.level(1.5, 0.5) == 1.0

    def test_grow_from_zero(self, landscape):
        """Emptied cells are raised to the residual before growing."""
        food = FoodField(landscape, max_food=1.0, growth_rate=0.1)
        food.set_level(0.5, 0.5, 0.0)
        food.grow()
        assert food.level(0.5, 0.5) > 0.01

    def test_depletion_recovers(self, landscape):
        """Repeated growth brings a depleted cell back to the ceiling."""
        food = FoodField(landscape, max_food=1.0, growth_rate=0.1)
        food.eat(0.5, 0.5)
        for _ in range(10):
            food.grow()
        assert food.level(0.5, 0.5) == pytest.approx(1.0, abs=1e-3)
        assert np.all(food.levels <= 1.0)

    def test_non_food_cells_never_grow(self, landscape):
        food = FoodField(landscape)
        for _ in range(3):
            food.grow()
        assert food.level(3.5, 3.5) == 0.0

    def test_depleted_fraction(self, landscape):
        food = FoodField(landscape)
        assert food.depleted_fraction() == 0.0
        food.eat(0.5, 0.5)
        food.eat(1.5, 1.5)
        assert food.depleted_fraction() == pytest.approx(2 / 8)
