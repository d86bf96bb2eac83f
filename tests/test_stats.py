import threading

from hulk.core.stats import StatsAggregator


class TestStatsAggregator:
    def test_record_outcome_keeps_totals_consistent(self):
        stats = StatsAggregator()
        stats.record_outcome(True)
        stats.record_outcome(False)
        stats.record_outcome(True)

        state = stats.snapshot()
        assert state.total_requests == 3
        assert state.success_count == 2
        assert state.failure_count == 1
        assert state.current_tick_count == 3
        assert state.end_time is None

    def test_roll_tick_resets_current_counter(self):
        stats = StatsAggregator()
        for _ in range(4):
            stats.record_outcome(True)

        sample = stats.roll_tick(1)
        assert sample.elapsed_seconds == 1
        assert sample.requests_per_second == 4

        stats.record_outcome(False)
        stats.roll_tick(2)
        state = stats.snapshot()
        assert state.current_tick_count == 0
        assert [s.requests_per_second for s in state.history] == [4, 1]
        assert stats.last_elapsed == 2

    def test_history_is_bounded_and_evicts_oldest(self):
        stats = StatsAggregator(history_capacity=120)
        for second in range(1, 131):
            stats.roll_tick(second)

        history = stats.snapshot().history
        assert len(history) == 120
        assert history[0].elapsed_seconds == 11
        assert history[-1].elapsed_seconds == 130

    def test_history_elapsed_never_decreases(self):
        stats = StatsAggregator()
        stats.roll_tick(3)
        stats.roll_tick(2)
        elapsed = [s.elapsed_seconds for s in stats.snapshot().history]
        assert elapsed == [3, 3]

    def test_snapshot_is_a_copy(self):
        stats = StatsAggregator()
        stats.roll_tick(1)
        state = stats.snapshot()
        stats.roll_tick(2)
        assert len(state.history) == 1

    def test_concurrent_updates_are_not_lost(self):
        stats = StatsAggregator()
        snapshots = []

        def worker(success):
            for _ in range(2000):
                stats.record_outcome(success)

        def reader():
            for _ in range(200):
                snapshots.append(stats.snapshot())

        threads = [threading.Thread(target=worker, args=(i % 2 == 0,)) for i in range(8)]
        threads.append(threading.Thread(target=reader))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = stats.snapshot()
        assert state.total_requests == 16000
        assert state.success_count == 8000
        assert state.failure_count == 8000
        for snap in snapshots:
            assert snap.total_requests == snap.success_count + snap.failure_count

    def test_mark_finished_stamps_end_time(self):
        stats = StatsAggregator()
        stats.mark_finished()
        assert stats.snapshot().end_time is not None
