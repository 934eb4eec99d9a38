"""keycloak-loadgen: Keycloak Admin API 부하 생성 및 메트릭 수집 도구.

그룹, 하위 그룹, 사용자를 계속 생성하면서 요청 지연 시간과 오류 통계를
집계하고 사이클마다 누적 메트릭을 출력합니다.

주요 구성 요소:
    - KeycloakAdminClient: Keycloak Admin REST API 비동기 클라이언트
    - CredentialLeaseManager: 액세스 토큰 만료 전 갱신/재인증
    - MetricsAggregator, CreationCounters: 스레드 안전 메트릭 집계
    - WorkloadDriver: 그룹 → 하위 그룹 → 사용자 생성 사이클
    - MetricsReporter: 사이클별 메트릭 출력
    - LoadgenRunner: 외부 루프

Example:
    >>> import asyncio
    >>> from keycloak_loadgen import KeycloakSettings, PacingSettings
    >>> from keycloak_loadgen.__main__ import run_loadgen
    >>> asyncio.run(run_loadgen(KeycloakSettings(), PacingSettings(), max_cycles=1))
"""

from keycloak_loadgen.client import KeycloakAdminClient
from keycloak_loadgen.config import KeycloakSettings, LoggingSettings, PacingSettings
from keycloak_loadgen.exceptions import (
    CredentialLeaseLostError,
    EntityCreationError,
    GroupCreationError,
    LoadgenError,
)
from keycloak_loadgen.lease import CredentialLeaseManager
from keycloak_loadgen.metrics import CreationCounters, MetricsAggregator, take_report_snapshot
from keycloak_loadgen.reporter import MetricsReporter
from keycloak_loadgen.runner import LoadgenRunner
from keycloak_loadgen.workload import WorkloadDriver

__all__ = [
    "KeycloakAdminClient",
    "KeycloakSettings",
    "LoggingSettings",
    "PacingSettings",
    "CredentialLeaseManager",
    "MetricsAggregator",
    "CreationCounters",
    "take_report_snapshot",
    "WorkloadDriver",
    "MetricsReporter",
    "LoadgenRunner",
    "LoadgenError",
    "EntityCreationError",
    "GroupCreationError",
    "CredentialLeaseLostError",
]
