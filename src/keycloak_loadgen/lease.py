"""자격 증명 임대(lease) 관리 모듈.

액세스 토큰이 만료되기 전에 리프레시 토큰으로 갱신하고, 갱신에 실패하면
고정된 관리자 자격 증명으로 다시 로그인합니다. 재로그인까지 실패하면
CredentialLeaseLostError를 발생시키며 호출자는 프로세스를 종료해야 합니다.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol

from keycloak_loadgen.config import KeycloakSettings
from keycloak_loadgen.constants import LeasePolicy
from keycloak_loadgen.exceptions import CredentialLeaseLostError, LoadgenError
from keycloak_loadgen.logging import get_logger
from keycloak_loadgen.models import CredentialLease, TokenResponse

logger = get_logger(__name__)


class TokenIssuer(Protocol):
    """토큰 발급 API (KeycloakAdminClient가 구현)."""

    async def authenticate(self, username: str, password: str, realm: str) -> TokenResponse: ...

    async def refresh(
        self, refresh_token: str, client_id: str, client_secret: str, realm: str
    ) -> TokenResponse: ...


def utc_now() -> datetime:
    return datetime.now(UTC)


class CredentialLeaseManager:
    """자격 증명 임대를 확보하고 만료 전에 갱신하는 관리자.

    Args:
        issuer: 토큰 발급 API
        settings: 관리자 자격 증명과 렐름 설정
        refresh_margin: 만료 몇 초 전부터 갱신할지 (기본값: 5분)

    Example:
        >>> manager = CredentialLeaseManager(client, KeycloakSettings())
        >>> lease = await manager.acquire(utc_now())
        >>> lease = await manager.ensure_valid(utc_now(), lease)
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        settings: KeycloakSettings,
        refresh_margin: timedelta = timedelta(seconds=LeasePolicy.REFRESH_MARGIN_SECONDS),
    ) -> None:
        self._issuer = issuer
        self._settings = settings
        self.refresh_margin = refresh_margin

    async def acquire(self, now: datetime) -> CredentialLease:
        """관리자 로그인으로 최초 임대를 확보한다.

        Raises:
            CredentialLeaseLostError: 로그인에 실패한 경우
        """
        try:
            token = await self._login()
        except LoadgenError as e:
            logger.critical("login_failed", error=e.message, status_code=e.status_code)
            raise CredentialLeaseLostError(f"관리자 로그인 실패: {e.message}") from e

        logger.info("login_succeeded", realm=self._settings.realm, expires_in=token.expires_in)
        return CredentialLease.from_token(token, now)

    async def ensure_valid(self, now: datetime, lease: CredentialLease) -> CredentialLease:
        """임대가 곧 만료되면 갱신하고, 아니면 그대로 반환한다.

        now < expires_at - refresh_margin이면 네트워크 호출 없이 같은 임대를 반환한다.
        그렇지 않으면 토큰 갱신을 시도하고, 실패하면 재로그인한다.

        Args:
            now: 현재 시각
            lease: 현재 임대

        Returns:
            유효한 임대 (갱신된 경우 expires_at == now + expires_in)

        Raises:
            CredentialLeaseLostError: 갱신과 재로그인이 모두 실패한 경우
        """
        if not lease.needs_renewal(now, self.refresh_margin):
            return lease

        logger.info("token_refreshing", expires_at=lease.expires_at.isoformat())
        try:
            token = await self._issuer.refresh(
                lease.refresh_token,
                self._settings.client_id,
                self._settings.client_secret,
                self._settings.realm,
            )
        except LoadgenError as refresh_error:
            logger.warning(
                "token_refresh_failed",
                error=refresh_error.message,
                status_code=refresh_error.status_code,
            )
            try:
                token = await self._login()
            except LoadgenError as e:
                logger.critical("reauthentication_failed", error=e.message, status_code=e.status_code)
                raise CredentialLeaseLostError(f"재인증 실패: {e.message}") from e
            logger.info("reauthenticated", realm=self._settings.realm)

        return CredentialLease.from_token(token, now)

    async def _login(self) -> TokenResponse:
        return await self._issuer.authenticate(
            self._settings.admin_username,
            self._settings.admin_password,
            self._settings.realm,
        )
