"""부하 생성 외부 루프.

매 사이클마다 임대를 확인하고, 워크로드 드라이버로 한 사이클을 실행한 뒤,
누적 메트릭을 출력한다. 자격 증명을 더 이상 확보할 수 없으면 마지막 메트릭을
출력하고 루프를 종료한다.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog

from keycloak_loadgen.config import PacingSettings
from keycloak_loadgen.exceptions import CredentialLeaseLostError, GroupCreationError
from keycloak_loadgen.lease import CredentialLeaseManager, utc_now
from keycloak_loadgen.logging import get_logger
from keycloak_loadgen.reporter import MetricsReporter
from keycloak_loadgen.workload import WorkloadDriver

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_LEASE_LOST = 1


class LoadgenRunner:
    """사이클 루프를 실행하는 러너.

    Args:
        lease_manager: 자격 증명 임대 관리자
        driver: 워크로드 드라이버
        reporter: 메트릭 리포터
        pacing: 대기 시간 설정
        sleep: 대기 함수 (기본값: asyncio.sleep)
        clock: 현재 시각 함수 (기본값: UTC now)
    """

    def __init__(
        self,
        lease_manager: CredentialLeaseManager,
        driver: WorkloadDriver,
        reporter: MetricsReporter,
        pacing: PacingSettings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._lease_manager = lease_manager
        self._driver = driver
        self._reporter = reporter
        self._pacing = pacing
        self._sleep = sleep
        self._clock = clock

    async def run(self, max_cycles: int | None = None) -> int:
        """루프를 실행하고 종료 코드를 반환한다.

        Args:
            max_cycles: 실행할 최대 사이클 수 (None이면 무한 반복)

        Returns:
            EXIT_OK (max_cycles 도달) 또는 EXIT_LEASE_LOST (자격 증명 상실)
        """
        try:
            lease = await self._lease_manager.acquire(self._clock())
        except CredentialLeaseLostError:
            return EXIT_LEASE_LOST

        cycle = 0
        while max_cycles is None or cycle < max_cycles:
            cycle += 1
            with structlog.contextvars.bound_contextvars(cycle=cycle):
                started = time.perf_counter()
                try:
                    lease = await self._lease_manager.ensure_valid(self._clock(), lease)
                    result = await self._driver.run_cycle(lease)
                except GroupCreationError as e:
                    logger.error("cycle_aborted", error=e.message, status_code=e.status_code)
                except CredentialLeaseLostError as e:
                    logger.critical("credential_lease_lost", error=e.message)
                    self._reporter.report()
                    return EXIT_LEASE_LOST
                else:
                    lease = result.lease
                    logger.info(
                        "cycle_completed",
                        group_name=result.group_name,
                        subgroups_created=result.subgroups_created,
                        subgroups_failed=result.subgroups_failed,
                        users_created=result.users_created,
                        users_failed=result.users_failed,
                        duration_seconds=round(time.perf_counter() - started, 3),
                    )

                self._reporter.report()

            if self._pacing.cycle_pause_seconds:
                await self._sleep(self._pacing.cycle_pause_seconds)

        return EXIT_OK
