"""keycloak-loadgen 진입점.

설정은 환경 변수(KEYCLOAK_*, LOADGEN_*)와 .env 파일에서 읽는다.

Usage:
    KEYCLOAK_SERVER_URL=http://192.168.0.66:8080 python -m keycloak_loadgen
"""

import asyncio
import sys

from keycloak_loadgen.client import KeycloakAdminClient
from keycloak_loadgen.config import KeycloakSettings, LoggingSettings, PacingSettings
from keycloak_loadgen.lease import CredentialLeaseManager
from keycloak_loadgen.logging import configure_logging, get_logger
from keycloak_loadgen.metrics import CreationCounters, MetricsAggregator
from keycloak_loadgen.reporter import MetricsReporter
from keycloak_loadgen.runner import LoadgenRunner
from keycloak_loadgen.workload import WorkloadDriver

logger = get_logger(__name__)

EXIT_INTERRUPTED = 130


async def run_loadgen(
    keycloak: KeycloakSettings,
    pacing: PacingSettings,
    max_cycles: int | None = None,
) -> int:
    """컴포넌트를 조립하고 러너를 실행한다."""
    metrics = MetricsAggregator()
    counters = CreationCounters()

    async with KeycloakAdminClient(keycloak.server_url, timeout=keycloak.request_timeout) as client:
        lease_manager = CredentialLeaseManager(client, keycloak)
        driver = WorkloadDriver(client, lease_manager, metrics, counters, keycloak.realm, pacing)
        runner = LoadgenRunner(lease_manager, driver, MetricsReporter(metrics, counters), pacing)

        logger.info("loadgen_started", server_url=keycloak.server_url, realm=keycloak.realm)
        return await runner.run(max_cycles)


def main() -> None:
    configure_logging(LoggingSettings())
    try:
        exit_code = asyncio.run(run_loadgen(KeycloakSettings(), PacingSettings()))
    except KeyboardInterrupt:
        logger.info("loadgen_interrupted")
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
