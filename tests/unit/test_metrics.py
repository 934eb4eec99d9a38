"""Metrics Aggregator 단위 테스트."""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given
from hypothesis import strategies as st

from keycloak_loadgen.metrics import (
    CreationCounters,
    MetricsAggregator,
    take_report_snapshot,
    track_latency,
)

latencies = st.lists(
    st.floats(min_value=0.0, max_value=60.0, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=200,
)
status_codes = st.lists(st.sampled_from([400, 401, 403, 404, 409, 500, 502, 503]), max_size=200)


class TestMetricsAggregator:
    """지연 시간/오류 집계 테스트."""

    def test_empty_snapshot(self):
        """기록이 없으면 평균은 0."""
        # Arrange
        metrics = MetricsAggregator()

        # Act
        snapshot = metrics.snapshot()

        # Assert
        assert snapshot.total_requests == 0
        assert snapshot.average_latency == 0.0
        assert snapshot.peak_latency == 0.0
        assert snapshot.total_errors == 0
        assert snapshot.error_counts == {}

    def test_record_latency(self):
        """평균과 최대 지연 시간 계산."""
        # Arrange
        metrics = MetricsAggregator()

        # Act
        for latency in (0.1, 0.3, 0.2):
            metrics.record_latency(latency)
        snapshot = metrics.snapshot()

        # Assert
        assert snapshot.total_requests == 3
        assert snapshot.total_latency == pytest.approx(0.6)
        assert snapshot.average_latency == pytest.approx(0.2)
        assert snapshot.peak_latency == pytest.approx(0.3)

    def test_record_error(self):
        """상태 코드별 오류 수와 전체 오류 수."""
        # Arrange
        metrics = MetricsAggregator()

        # Act
        metrics.record_error(500)
        metrics.record_error(500)
        metrics.record_error(503)
        snapshot = metrics.snapshot()

        # Assert
        assert snapshot.error_counts == {500: 2, 503: 1}
        assert snapshot.total_errors == 3

    def test_errors_do_not_count_as_requests(self):
        """오류 기록은 요청 수에 영향을 주지 않는다."""
        metrics = MetricsAggregator()

        metrics.record_error(500)

        assert metrics.snapshot().total_requests == 0

    def test_snapshot_is_detached_copy(self):
        """스냅샷 이후의 기록은 이전 스냅샷에 반영되지 않는다."""
        # Arrange
        metrics = MetricsAggregator()
        metrics.record_error(500)
        snapshot = metrics.snapshot()

        # Act
        metrics.record_error(500)

        # Assert
        assert snapshot.error_counts == {500: 1}

    @given(samples=latencies)
    def test_average_and_peak_property(self, samples):
        """평균 == 합/개수, 최대 == max."""
        metrics = MetricsAggregator()

        for sample in samples:
            metrics.record_latency(sample)
        snapshot = metrics.snapshot()

        assert snapshot.total_requests == len(samples)
        assert snapshot.average_latency == pytest.approx(sum(samples) / len(samples))
        assert snapshot.peak_latency == max(samples)

    @given(codes=status_codes)
    def test_error_conservation_property(self, codes):
        """전체 오류 수 == 코드별 오류 수의 합, 코드별 수 == 호출 횟수."""
        metrics = MetricsAggregator()

        for code in codes:
            metrics.record_error(code)
        snapshot = metrics.snapshot()

        assert snapshot.total_errors == len(codes)
        assert snapshot.total_errors == sum(snapshot.error_counts.values())
        assert snapshot.error_counts == dict(Counter(codes))


class TestConcurrentWriters:
    """동시 기록 시 업데이트 손실이 없는지 테스트."""

    def test_concurrent_writers_lose_no_updates(self):
        """여러 스레드의 기록 합계가 보존된다."""
        # Arrange
        metrics = MetricsAggregator()
        counters = CreationCounters()
        writers = 8
        iterations = 2000

        def writer(worker_id: int) -> None:
            code = 500 if worker_id % 2 == 0 else 503
            for _ in range(iterations):
                metrics.record_latency(0.001)
                metrics.record_error(code)
                counters.increment_users()

        # Act
        with ThreadPoolExecutor(max_workers=writers) as executor:
            list(executor.map(writer, range(writers)))
        report = take_report_snapshot(metrics, counters)

        # Assert
        assert report.metrics.total_requests == writers * iterations
        assert report.metrics.total_errors == writers * iterations
        assert report.metrics.error_counts == {
            500: (writers // 2) * iterations,
            503: (writers // 2) * iterations,
        }
        assert report.metrics.total_latency == pytest.approx(writers * iterations * 0.001)
        assert report.counters.total_users_created == writers * iterations


class TestCreationCounters:
    """생성 카운터 테스트."""

    def test_increment(self):
        """그룹/사용자 카운터는 독립적으로 증가한다."""
        # Arrange
        counters = CreationCounters()

        # Act
        counters.increment_groups()
        for _ in range(3):
            counters.increment_users()

        # Assert
        snapshot = counters.snapshot()
        assert snapshot.total_groups_created == 1
        assert snapshot.total_users_created == 3


class TestReportSnapshot:
    """합성 스냅샷 테스트."""

    def test_composite_snapshot(self):
        """메트릭과 카운터를 함께 읽는다."""
        # Arrange
        metrics = MetricsAggregator()
        counters = CreationCounters()
        metrics.record_latency(0.5)
        metrics.record_error(500)
        counters.increment_groups()

        # Act
        report = take_report_snapshot(metrics, counters)

        # Assert
        assert report.metrics.total_requests == 1
        assert report.metrics.error_counts == {500: 1}
        assert report.counters.total_groups_created == 1

    def test_locks_released_after_snapshot(self):
        """스냅샷 후 두 잠금이 모두 해제된다."""
        metrics = MetricsAggregator()
        counters = CreationCounters()

        take_report_snapshot(metrics, counters)

        assert not metrics.lock.locked()
        assert not counters.lock.locked()


@pytest.mark.asyncio
class TestTrackLatency:
    """지연 시간 측정 컨텍스트 매니저 테스트."""

    async def test_records_successful_call(self):
        """성공한 호출의 지연 시간을 기록한다."""
        metrics = MetricsAggregator()

        async with track_latency(metrics):
            pass

        assert metrics.snapshot().total_requests == 1

    async def test_records_failed_call(self):
        """실패한 호출도 지연 시간을 기록하고 예외는 그대로 전파한다."""
        metrics = MetricsAggregator()

        with pytest.raises(RuntimeError):
            async with track_latency(metrics):
                raise RuntimeError("boom")

        snapshot = metrics.snapshot()
        assert snapshot.total_requests == 1
        assert snapshot.total_errors == 0

    def test_snapshot_unlocked_under_caller_lock(self):
        """호출자가 잠금을 쥔 상태에서 읽어도 교착되지 않는다."""
        # Arrange
        metrics = MetricsAggregator()
        counters = CreationCounters()
        metrics.record_latency(0.2)
        counters.increment_users()

        # Act
        with metrics.lock, counters.lock:
            metrics_view = metrics.snapshot_unlocked()
            counts_view = counters.snapshot_unlocked()

        # Assert
        assert metrics_view.total_requests == 1
        assert counts_view.total_users_created == 1
