"""워크로드 드라이버.

한 사이클은 루트 그룹 하나를 만들고, 그 아래 하위 그룹 10개를 만들며,
하위 그룹마다 사용자 10명을 배정한다. 모든 원격 호출의 지연 시간은
성공 여부와 관계없이 집계기에 기록된다.

오류 처리:
- 루트 그룹 생성 실패: GroupCreationError로 사이클을 중단한다 (오류 메트릭에는 기록하지 않음)
- 하위 그룹/사용자 생성 실패: 고정 상태 코드로 기록하고 다음 엔티티로 넘어간다
- 자격 증명 상실: CredentialLeaseLostError가 그대로 전파된다
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Protocol

from pydantic import BaseModel

from keycloak_loadgen.config import PacingSettings
from keycloak_loadgen.constants import ErrorClassification, WorkloadShape
from keycloak_loadgen.exceptions import GroupCreationError, LoadgenError
from keycloak_loadgen.lease import CredentialLeaseManager, utc_now
from keycloak_loadgen.logging import get_logger
from keycloak_loadgen.metrics import CreationCounters, MetricsAggregator, track_latency
from keycloak_loadgen.models import CredentialLease, UserRepresentation
from keycloak_loadgen.naming import NameGenerator, TimestampNameGenerator, subgroup_name, subgroup_path

logger = get_logger(__name__)


class GroupAdminAPI(Protocol):
    """엔티티 생성 API (KeycloakAdminClient가 구현)."""

    async def create_group(self, token: str, realm: str, name: str) -> str: ...

    async def create_child_group(self, token: str, realm: str, parent_id: str, name: str) -> str: ...

    async def create_user(self, token: str, realm: str, user: UserRepresentation) -> str: ...


class CycleResult(BaseModel):
    """한 사이클의 실행 결과.

    Attributes:
        lease: 사이클 종료 시점의 (갱신되었을 수 있는) 임대
        group_name: 생성된 루트 그룹 이름
        subgroups_created: 생성에 성공한 하위 그룹 수
        subgroups_failed: 생성에 실패한 하위 그룹 수
        users_created: 생성에 성공한 사용자 수
        users_failed: 생성에 실패한 사용자 수
    """

    lease: CredentialLease
    group_name: str
    subgroups_created: int = 0
    subgroups_failed: int = 0
    users_created: int = 0
    users_failed: int = 0


class WorkloadDriver:
    """그룹 → 하위 그룹 → 사용자 생성 사이클을 실행하는 드라이버.

    Args:
        api: 엔티티 생성 API
        lease_manager: 배치 사이의 임대 재확인에 쓰는 관리자
        metrics: 지연 시간/오류 집계기
        counters: 생성 카운터
        realm: 대상 렐름
        pacing: 대기 시간 설정
        names: 이름 생성기 (기본값: Unix 시각 기반)
        sleep: 대기 함수 (기본값: asyncio.sleep)
        clock: 현재 시각 함수 (기본값: UTC now)
    """

    def __init__(
        self,
        api: GroupAdminAPI,
        lease_manager: CredentialLeaseManager,
        metrics: MetricsAggregator,
        counters: CreationCounters,
        realm: str,
        pacing: PacingSettings,
        names: NameGenerator | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._api = api
        self._lease_manager = lease_manager
        self._metrics = metrics
        self._counters = counters
        self._realm = realm
        self._pacing = pacing
        self._names = names or TimestampNameGenerator()
        self._sleep = sleep
        self._clock = clock

    async def run_cycle(self, lease: CredentialLease) -> CycleResult:
        """한 사이클을 실행한다.

        Args:
            lease: 사이클 시작 시점의 유효한 임대

        Returns:
            사이클 실행 결과

        Raises:
            GroupCreationError: 루트 그룹 생성에 실패한 경우
            CredentialLeaseLostError: 배치 사이 임대 갱신이 불가능한 경우
        """
        group_name = self._names.group_name()
        group_id = await self._create_root_group(lease, group_name)

        logger.info("group_created", group_name=group_name, group_id=group_id)
        self._counters.increment_groups()

        result = CycleResult(lease=lease, group_name=group_name)
        for index in range(1, WorkloadShape.SUBGROUPS_PER_GROUP + 1):
            name = subgroup_name(group_name, index)
            try:
                async with track_latency(self._metrics):
                    child_id = await self._api.create_child_group(
                        result.lease.access_token, self._realm, group_id, name
                    )
            except LoadgenError as e:
                logger.warning(
                    "subgroup_creation_failed",
                    subgroup_name=name,
                    error=e.message,
                    status_code=e.status_code,
                )
                self._metrics.record_error(ErrorClassification.CREATION_FAILURE_STATUS)
                result.subgroups_failed += 1
                continue

            logger.info("subgroup_created", subgroup_name=name, subgroup_id=child_id)
            result.subgroups_created += 1

            await self._sleep(self._pacing.subgroup_pause_seconds)

            created, failed = await self._create_users(result.lease, subgroup_path(group_name, index))
            result.users_created += created
            result.users_failed += failed

            await self._sleep(self._pacing.batch_pause_seconds)

            # 배치가 수 분에 걸치므로 다음 하위 그룹 전에 임대를 다시 확인한다
            result.lease = await self._lease_manager.ensure_valid(self._clock(), result.lease)

        return result

    async def _create_root_group(self, lease: CredentialLease, group_name: str) -> str:
        try:
            async with track_latency(self._metrics):
                return await self._api.create_group(lease.access_token, self._realm, group_name)
        except GroupCreationError:
            raise
        except LoadgenError as e:
            raise GroupCreationError(
                f"그룹 생성 실패 {group_name}: {e.message}", status_code=e.status_code
            ) from e

    async def _create_users(self, lease: CredentialLease, group_path: str) -> tuple[int, int]:
        """하위 그룹에 사용자를 배정하며 생성하고 (성공 수, 실패 수)를 반환한다."""
        created = failed = 0
        for index in range(1, WorkloadShape.USERS_PER_SUBGROUP + 1):
            user = UserRepresentation(
                username=self._names.user_name(index),
                enabled=True,
                groups=[group_path],
            )
            try:
                async with track_latency(self._metrics):
                    user_id = await self._api.create_user(lease.access_token, self._realm, user)
            except LoadgenError as e:
                logger.warning(
                    "user_creation_failed",
                    username=user.username,
                    error=e.message,
                    status_code=e.status_code,
                )
                self._metrics.record_error(ErrorClassification.CREATION_FAILURE_STATUS)
                failed += 1
                continue

            logger.info("user_created", username=user.username, user_id=user_id)
            self._counters.increment_users()
            created += 1

        return created, failed
