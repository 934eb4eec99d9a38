"""Keycloak Admin API HTTP 클라이언트 모듈.

관리자 인증, 토큰 갱신, 그룹/하위 그룹/사용자 생성을 위한
비동기 HTTP 클라이언트를 제공합니다.
"""

from types import TracebackType
from typing import Any

import httpx

from keycloak_loadgen.constants import GrantType, KeycloakDefaults
from keycloak_loadgen.exceptions import (
    AuthenticationError,
    EntityCreationError,
    GroupCreationError,
    IdentityProviderUnavailableError,
    TokenRefreshError,
)
from keycloak_loadgen.logging import get_logger
from keycloak_loadgen.models import GroupRepresentation, TokenResponse, UserRepresentation

logger = get_logger(__name__)


class KeycloakAdminClient:
    """Keycloak Admin REST API 비동기 HTTP 클라이언트.

    Args:
        base_url: Keycloak 기본 URL
        timeout: HTTP 요청 타임아웃 (초 단위, 기본값: 30.0)
        transport: 테스트용 httpx 전송 계층 (기본값: 실제 네트워크)

    Example:
        >>> async with KeycloakAdminClient(base_url="http://keycloak:8080") as client:
        ...     token = await client.authenticate("admin", "admin", "master")
        ...     group_id = await client.create_group(token.access_token, "master", "Group-1")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """내부 httpx.AsyncClient 인스턴스를 반환합니다.

        클라이언트가 아직 생성되지 않은 경우 자동으로 생성합니다.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self) -> "KeycloakAdminClient":
        """비동기 컨텍스트 매니저 진입."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """비동기 컨텍스트 매니저 종료 시 HTTP 클라이언트를 닫습니다."""
        await self.close()

    async def close(self) -> None:
        """HTTP 클라이언트 연결을 닫습니다."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """요청을 보내고 전송 계층 오류를 IdentityProviderUnavailableError로 변환한다."""
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.ConnectError as e:
            raise IdentityProviderUnavailableError("Keycloak에 연결할 수 없습니다") from e
        except httpx.TimeoutException as e:
            raise IdentityProviderUnavailableError("Keycloak 요청 시간이 초과되었습니다") from e
        except httpx.TransportError as e:
            raise IdentityProviderUnavailableError(f"Keycloak 요청 전송 실패: {e}") from e
        except httpx.RequestError as e:
            # 응답 본문 디코딩 실패, 리다이렉트 초과 등
            raise IdentityProviderUnavailableError(f"Keycloak 응답 처리 실패: {e}") from e

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _created_id(response: httpx.Response) -> str:
        """201 응답의 Location 헤더 마지막 경로 세그먼트에서 생성된 ID를 꺼낸다."""
        location = response.headers.get("Location", "")
        entity_id = location.rstrip("/").rsplit("/", 1)[-1]
        if not entity_id:
            raise EntityCreationError(
                "생성 응답에 Location 헤더가 없습니다", status_code=response.status_code
            )
        return entity_id

    async def _request_token(
        self,
        realm: str,
        form: dict[str, str],
        error_cls: type[AuthenticationError],
        action: str,
    ) -> TokenResponse:
        """토큰 엔드포인트를 호출하고 응답 본문을 TokenResponse로 검증한다."""
        response = await self._send(
            "POST",
            f"/realms/{realm}/protocol/openid-connect/token",
            data=form,
        )
        if response.is_error:
            raise error_cls(f"{action} 실패: HTTP {response.status_code}", status_code=response.status_code)

        try:
            token = TokenResponse.model_validate(response.json())
        except ValueError as e:
            raise error_cls(
                f"{action} 응답을 해석할 수 없습니다", status_code=response.status_code
            ) from e

        logger.debug("token_issued", action=action, expires_in=token.expires_in)
        return token

    async def authenticate(self, username: str, password: str, realm: str) -> TokenResponse:
        """관리자 자격 증명으로 로그인하여 토큰을 발급받습니다.

        Args:
            username: 관리자 사용자명
            password: 관리자 비밀번호
            realm: 인증할 렐름

        Returns:
            토큰 응답

        Raises:
            AuthenticationError: Keycloak이 로그인을 거부한 경우
            IdentityProviderUnavailableError: Keycloak에 연결할 수 없는 경우
        """
        return await self._request_token(
            realm,
            {
                "grant_type": GrantType.PASSWORD,
                "client_id": KeycloakDefaults.CLIENT_ID,
                "username": username,
                "password": password,
            },
            AuthenticationError,
            "관리자 로그인",
        )

    async def refresh(
        self, refresh_token: str, client_id: str, client_secret: str, realm: str
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰을 발급받습니다.

        Args:
            refresh_token: 리프레시 토큰
            client_id: 토큰을 발급받은 클라이언트 ID
            client_secret: 클라이언트 시크릿 (공개 클라이언트면 빈 문자열)
            realm: 렐름

        Returns:
            토큰 응답

        Raises:
            TokenRefreshError: Keycloak이 갱신을 거부한 경우
            IdentityProviderUnavailableError: Keycloak에 연결할 수 없는 경우
        """
        form = {
            "grant_type": GrantType.REFRESH_TOKEN,
            "client_id": client_id,
            "refresh_token": refresh_token,
        }
        if client_secret:
            form["client_secret"] = client_secret

        return await self._request_token(realm, form, TokenRefreshError, "토큰 갱신")

    async def create_group(self, token: str, realm: str, name: str) -> str:
        """최상위 그룹을 생성하고 그룹 ID를 반환합니다.

        Raises:
            GroupCreationError: 그룹 생성이 거부된 경우
        """
        response = await self._send(
            "POST",
            f"/admin/realms/{realm}/groups",
            json=GroupRepresentation(name=name).model_dump(),
            headers=self._auth_headers(token),
        )
        if response.is_error:
            raise GroupCreationError(
                f"그룹 생성 실패 {name}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return self._created_id(response)

    async def create_child_group(self, token: str, realm: str, parent_id: str, name: str) -> str:
        """parent_id 그룹 아래에 하위 그룹을 생성하고 ID를 반환합니다.

        Raises:
            EntityCreationError: 하위 그룹 생성이 거부된 경우
        """
        response = await self._send(
            "POST",
            f"/admin/realms/{realm}/groups/{parent_id}/children",
            json=GroupRepresentation(name=name).model_dump(),
            headers=self._auth_headers(token),
        )
        if response.is_error:
            raise EntityCreationError(
                f"하위 그룹 생성 실패 {name}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return self._created_id(response)

    async def create_user(self, token: str, realm: str, user: UserRepresentation) -> str:
        """사용자를 생성하고 사용자 ID를 반환합니다.

        Raises:
            EntityCreationError: 사용자 생성이 거부된 경우
        """
        response = await self._send(
            "POST",
            f"/admin/realms/{realm}/users",
            json=user.model_dump(),
            headers=self._auth_headers(token),
        )
        if response.is_error:
            raise EntityCreationError(
                f"사용자 생성 실패 {user.username}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return self._created_id(response)
