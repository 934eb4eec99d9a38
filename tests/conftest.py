"""pytest fixtures."""

import itertools
from datetime import UTC, datetime, timedelta

import pytest

from keycloak_loadgen.config import KeycloakSettings, PacingSettings
from keycloak_loadgen.exceptions import (
    AuthenticationError,
    EntityCreationError,
    GroupCreationError,
    TokenRefreshError,
)
from keycloak_loadgen.lease import CredentialLeaseManager
from keycloak_loadgen.metrics import CreationCounters, MetricsAggregator
from keycloak_loadgen.models import CredentialLease, TokenResponse, UserRepresentation

START_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """수동으로 진행시키는 시계."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeKeycloakAPI:
    """호출을 기록하는 인메모리 Keycloak Admin API.

    fail_* 속성에 이름을 넣으면 해당 엔티티 생성이 실패한다.
    """

    def __init__(self, expires_in: int = 3600) -> None:
        self.expires_in = expires_in
        self.calls: list[tuple] = []
        self.fail_group = False
        self.fail_subgroups: set[str] = set()
        self.fail_users: set[str] = set()
        self.fail_refresh = False
        self.fail_authenticate = False
        self._tokens = itertools.count(1)
        self._ids = itertools.count(1)
        self.users: list[UserRepresentation] = []

    def _issue(self) -> TokenResponse:
        n = next(self._tokens)
        return TokenResponse(
            access_token=f"access-{n}",
            refresh_token=f"refresh-{n}",
            expires_in=self.expires_in,
        )

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def authenticate(self, username: str, password: str, realm: str) -> TokenResponse:
        self.calls.append(("authenticate", username, password, realm))
        if self.fail_authenticate:
            raise AuthenticationError()
        return self._issue()

    async def refresh(
        self, refresh_token: str, client_id: str, client_secret: str, realm: str
    ) -> TokenResponse:
        self.calls.append(("refresh", refresh_token, client_id, client_secret, realm))
        if self.fail_refresh:
            raise TokenRefreshError()
        return self._issue()

    async def create_group(self, token: str, realm: str, name: str) -> str:
        self.calls.append(("create_group", token, realm, name))
        if self.fail_group:
            raise GroupCreationError(f"그룹 생성 실패 {name}: HTTP 409", status_code=409)
        return f"group-{next(self._ids)}"

    async def create_child_group(self, token: str, realm: str, parent_id: str, name: str) -> str:
        self.calls.append(("create_child_group", token, realm, parent_id, name))
        if name in self.fail_subgroups:
            raise EntityCreationError(f"하위 그룹 생성 실패 {name}: HTTP 409", status_code=409)
        return f"subgroup-{next(self._ids)}"

    async def create_user(self, token: str, realm: str, user: UserRepresentation) -> str:
        self.calls.append(("create_user", token, realm, user.username))
        if user.username in self.fail_users:
            raise EntityCreationError(f"사용자 생성 실패 {user.username}: HTTP 409", status_code=409)
        self.users.append(user)
        return f"user-{next(self._ids)}"


class RecordingSleep:
    """대기 시간을 기록만 하고 즉시 반환하는 sleep."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.durations: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.durations.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds)


@pytest.fixture
def keycloak_settings() -> KeycloakSettings:
    """테스트용 Keycloak 설정."""
    return KeycloakSettings(
        server_url="http://keycloak.test",
        admin_username="admin",
        admin_password="admin",
        realm="master",
    )


@pytest.fixture
def default_pacing() -> PacingSettings:
    """기본 페이싱 값 (0.5초 / 300초)."""
    return PacingSettings(subgroup_pause_seconds=0.5, batch_pause_seconds=300, cycle_pause_seconds=0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep(clock: FakeClock) -> RecordingSleep:
    """대기할 때마다 clock을 그만큼 진행시키는 sleep."""
    return RecordingSleep(clock)


@pytest.fixture
def fake_api() -> FakeKeycloakAPI:
    return FakeKeycloakAPI()


@pytest.fixture
def metrics() -> MetricsAggregator:
    return MetricsAggregator()


@pytest.fixture
def counters() -> CreationCounters:
    return CreationCounters()


@pytest.fixture
def lease_manager(fake_api: FakeKeycloakAPI, keycloak_settings: KeycloakSettings) -> CredentialLeaseManager:
    return CredentialLeaseManager(fake_api, keycloak_settings)


@pytest.fixture
def valid_lease(clock: FakeClock) -> CredentialLease:
    """한 시간 뒤 만료되는 임대."""
    return CredentialLease(
        access_token="access-0",
        refresh_token="refresh-0",
        expires_at=clock.now + timedelta(hours=1),
    )
