"""지연 시간, 오류, 생성 카운터 집계 모듈.

메트릭과 생성 카운터는 서로 다른 잠금 영역을 가진다. 두 값을 함께 읽을 때는
항상 메트릭 잠금을 먼저, 카운터 잠금을 나중에 획득한다.
"""

import threading
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from keycloak_loadgen.models import CreationCounts, MetricsSnapshot, ReportSnapshot


class MetricsAggregator:
    """요청 수, 지연 시간, 상태 코드별 오류 수를 누적하는 스레드 안전 집계기.

    모든 필드는 하나의 잠금으로 보호되므로 지연 시간 필드와 오류 필드가
    서로 어긋난 중간 상태로 관측되지 않습니다.

    Example:
        >>> metrics = MetricsAggregator()
        >>> metrics.record_latency(0.120)
        >>> metrics.record_error(500)
        >>> metrics.snapshot().total_errors
        1
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self._total_requests = 0
        self._total_latency = 0.0
        self._peak_latency = 0.0
        self._error_counts: dict[int, int] = {}
        self._total_errors = 0

    def record_latency(self, latency: float) -> None:
        """요청 하나의 지연 시간(초)을 기록한다."""
        with self.lock:
            self._total_requests += 1
            self._total_latency += latency
            self._peak_latency = max(self._peak_latency, latency)

    def record_error(self, status_code: int) -> None:
        """상태 코드별 오류를 하나 기록한다."""
        with self.lock:
            self._error_counts[status_code] = self._error_counts.get(status_code, 0) + 1
            self._total_errors += 1

    def snapshot(self) -> MetricsSnapshot:
        """현재 메트릭의 일관된 스냅샷을 반환한다."""
        with self.lock:
            return self.snapshot_unlocked()

    def snapshot_unlocked(self) -> MetricsSnapshot:
        """잠금 없이 스냅샷을 만든다. 호출자가 `lock`을 보유하고 있어야 한다."""
        average = self._total_latency / self._total_requests if self._total_requests else 0.0
        return MetricsSnapshot(
            total_requests=self._total_requests,
            total_latency=self._total_latency,
            peak_latency=self._peak_latency,
            average_latency=average,
            error_counts=dict(self._error_counts),
            total_errors=self._total_errors,
        )


class CreationCounters:
    """생성된 그룹과 사용자 수를 세는 단조 증가 카운터."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self._groups = 0
        self._users = 0

    def increment_groups(self) -> None:
        with self.lock:
            self._groups += 1

    def increment_users(self) -> None:
        with self.lock:
            self._users += 1

    def snapshot(self) -> CreationCounts:
        with self.lock:
            return self.snapshot_unlocked()

    def snapshot_unlocked(self) -> CreationCounts:
        """잠금 없이 카운트를 읽는다. 호출자가 `lock`을 보유하고 있어야 한다."""
        return CreationCounts(total_groups_created=self._groups, total_users_created=self._users)


def take_report_snapshot(metrics: MetricsAggregator, counters: CreationCounters) -> ReportSnapshot:
    """두 잠금을 모두 보유한 상태에서 합성 스냅샷을 만든다.

    잠금 순서는 메트릭 → 카운터로 고정된다.

    Args:
        metrics: 지연 시간/오류 집계기
        counters: 생성 카운터

    Returns:
        메트릭과 카운터가 같은 시점을 가리키는 스냅샷
    """
    with metrics.lock, counters.lock:
        return ReportSnapshot(
            metrics=metrics.snapshot_unlocked(),
            counters=counters.snapshot_unlocked(),
        )


@asynccontextmanager
async def track_latency(metrics: MetricsAggregator) -> AsyncIterator[None]:
    """블록 실행 시간을 측정해 집계기에 기록한다.

    블록이 예외로 끝나도 왕복 시간은 기록된다.

    Usage:
        async with track_latency(metrics):
            group_id = await client.create_group(token, realm, name)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        metrics.record_latency(time.perf_counter() - start)
