"""사이클마다 누적 메트릭을 출력하는 리포터."""

from keycloak_loadgen.logging import get_logger
from keycloak_loadgen.metrics import CreationCounters, MetricsAggregator, take_report_snapshot
from keycloak_loadgen.models import ReportSnapshot

logger = get_logger(__name__)


def format_latency(seconds: float) -> str:
    """지연 시간을 밀리초 문자열로 표시한다 (예: 12.345ms)."""
    return f"{seconds * 1000:.3f}ms"


def render_report(snapshot: ReportSnapshot) -> list[str]:
    """스냅샷을 사람이 읽을 수 있는 줄 목록으로 변환한다.

    상태 코드별 오류 줄은 상태 코드 오름차순으로 정렬된다.
    """
    metrics = snapshot.metrics
    counters = snapshot.counters
    lines = [
        f"Total groups created: {counters.total_groups_created}",
        f"Total users created: {counters.total_users_created}",
        f"Average Latency: {format_latency(metrics.average_latency)}",
        f"Peak Latency: {format_latency(metrics.peak_latency)}",
        f"Total Errors: {metrics.total_errors}",
    ]
    lines.extend(
        f"HTTP {code} Errors: {count}" for code, count in sorted(metrics.error_counts.items())
    )
    return lines


class MetricsReporter:
    """집계기와 카운터의 합성 스냅샷을 로그 스트림에 출력한다."""

    def __init__(self, metrics: MetricsAggregator, counters: CreationCounters) -> None:
        self._metrics = metrics
        self._counters = counters

    def report(self, snapshot: ReportSnapshot | None = None) -> ReportSnapshot:
        """스냅샷을 한 블록으로 출력하고 출력한 스냅샷을 반환한다.

        snapshot이 주어지지 않으면 두 잠금을 모두 잡고 현재 값을 읽는다.
        """
        if snapshot is None:
            snapshot = take_report_snapshot(self._metrics, self._counters)
        for line in render_report(snapshot):
            logger.info(line)
        return snapshot
