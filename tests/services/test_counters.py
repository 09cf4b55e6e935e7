import threading
import pytest

from db.manager import DatabaseManager
from services.counters import CounterService


class TestCounterService:
    """Tests for CounterService."""

    def test_first_allocation_starts_at_zero(self, services):
        start_id = services.counters.allocate("Expenses", 3)

        assert start_id == 0

    def test_counter_skips_one_id_per_batch(self, services):
        services.counters.allocate("Expenses", 3)

        counter = services.counters.find("Expenses")

        assert counter.kind == "Expenses"
        assert counter.seq == 4

    def test_consecutive_batches(self, services):
        first = services.counters.allocate("Expenses", 3)
        second = services.counters.allocate("Expenses", 2)

        assert first == 0
        assert second == 4
        assert services.counters.find("Expenses").seq == 7

    def test_kinds_are_independent(self, services):
        services.counters.allocate("Expenses", 5)

        assert services.counters.allocate("Incomes", 1) == 0
        assert services.counters.find("Incomes").seq == 2
        assert services.counters.find("Expenses").seq == 6

    def test_continues_from_existing_counter(self, services, test_db):
        test_db.execute("INSERT INTO counters (kind, seq) VALUES ('Incomes', 120)")
        test_db.commit()

        assert services.counters.allocate("Incomes", 2) == 120
        assert services.counters.find("Incomes").seq == 123

    def test_find_missing_counter(self, services):
        assert services.counters.find("Expenses") is None

    def test_find_all(self, services):
        services.counters.allocate("Incomes", 1)
        services.counters.allocate("Expenses", 1)

        counters = services.counters.find_all()

        assert [c.kind for c in counters] == ["Expenses", "Incomes"]

    def test_unknown_kind(self, services):
        with pytest.raises(ValueError, match="Unknown counter kind"):
            services.counters.allocate("Transfers", 1)

    @pytest.mark.parametrize("count", [0, -1, 1.5, True])
    def test_invalid_count(self, services, count):
        with pytest.raises(ValueError, match="positive integer"):
            services.counters.allocate("Expenses", count)

        assert services.counters.find("Expenses") is None

    def test_allocate_in_rolls_back_with_caller(self, services, test_db):
        services.counters.allocate("Expenses", 1)

        services.counters.allocate_in(test_db, "Expenses", 10)
        test_db.rollback()

        assert services.counters.find("Expenses").seq == 2


class TestConcurrentAllocation:
    """Allocations from separate connections never hand out the same IDs."""

    def test_no_overlapping_ranges(self, test_config):
        db_manager = DatabaseManager(test_config)
        db_manager.migrate()
        counters = CounterService(db_manager)

        ranges = []
        lock = threading.Lock()
        errors = []

        def worker():
            try:
                for _ in range(10):
                    start = counters.allocate("Expenses", 3)
                    with lock:
                        ranges.append(set(range(start, start + 3)))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(ranges) == 40
        all_ids = set().union(*ranges)
        assert len(all_ids) == 40 * 3
        assert counters.find("Expenses").seq == 40 * 4
