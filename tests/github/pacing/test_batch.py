"""Unit tests for hour-sized batch planning."""

from datetime import timedelta

import pytest

from star_history.github.pacing.batch import BatchPlan, create_batches, estimate_batch


class TestEstimateBatch:
    """Tests for estimate_batch()."""

    def test_reference_sizing(self) -> None:
        """4000 calls/hour at 40 calls/repo gives 100 repos per batch."""
        plan = estimate_batch(250, 4000, 40)

        assert plan.items_per_hour == 100
        assert plan.items_per_batch == [100, 100, 50]
        assert plan.total_batches == 3
        assert plan.total_items == 250

    def test_exact_multiple(self) -> None:
        assert estimate_batch(300, 4000, 40).items_per_batch == [100, 100, 100]

    def test_zero_items(self) -> None:
        plan = estimate_batch(0, 4000, 40)

        assert plan.items_per_batch == []
        assert plan.total_batches == 0
        assert plan.estimated_duration == timedelta(0)

    def test_tiny_budget_still_moves(self) -> None:
        """A budget smaller than one item's cost still processes one per hour."""
        plan = estimate_batch(3, 10, 40)

        assert plan.items_per_hour == 1
        assert plan.items_per_batch == [1, 1, 1]

    @pytest.mark.parametrize(("calls", "per_item"), [(0, 40), (4000, 0), (-1, 40)])
    def test_rejects_non_positive_budget(self, calls: int, per_item: int) -> None:
        with pytest.raises(ValueError):
            estimate_batch(10, calls, per_item)


class TestBatchPlan:
    """Tests for BatchPlan estimates."""

    def test_estimates(self) -> None:
        plan = BatchPlan(items_per_hour=100, items_per_batch=[100, 100, 50])

        assert plan.estimated_calls(40) == 10_000
        assert plan.estimated_duration == timedelta(hours=3)


class TestCreateBatches:
    """Tests for create_batches()."""

    def test_follows_plan_sizes(self) -> None:
        items = list(range(250))
        batches = create_batches(items, estimate_batch(250, 4000, 40))

        assert [len(b) for b in batches] == [100, 100, 50]
        assert [x for b in batches for x in b] == items

    def test_extra_items_form_final_batch(self) -> None:
        plan = BatchPlan(items_per_hour=2, items_per_batch=[2])

        assert create_batches(["a", "b", "c"], plan) == [["a", "b"], ["c"]]

    def test_empty(self) -> None:
        assert create_batches([], estimate_batch(0, 4000, 40)) == []
