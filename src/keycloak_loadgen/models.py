"""로드 제너레이터 데이터 모델 모듈.

토큰 응답, 자격 증명 임대, Keycloak 엔티티 표현, 메트릭 스냅샷 등의
Pydantic 모델을 정의합니다.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """OpenID Connect 토큰 엔드포인트 응답 모델.

    Attributes:
        access_token: 액세스 토큰
        refresh_token: 리프레시 토큰
        expires_in: 액세스 토큰 유효 기간 (초)
        refresh_expires_in: 리프레시 토큰 유효 기간 (초)
        token_type: 토큰 유형 (보통 Bearer)
    """

    access_token: str
    refresh_token: str = ""
    expires_in: int
    refresh_expires_in: int = 0
    token_type: str = "Bearer"

    model_config = ConfigDict(extra="ignore")


class CredentialLease(BaseModel):
    """현재 보유 중인 자격 증명 임대.

    갱신이나 재인증 시 통째로 교체되며 부분적으로 수정되지 않습니다.
    expires_at은 항상 현재 access_token의 만료 시각을 나타냅니다.

    Attributes:
        access_token: 액세스 토큰
        refresh_token: 리프레시 토큰
        expires_at: 액세스 토큰 만료 시각
    """

    access_token: str
    refresh_token: str
    expires_at: datetime

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_token(cls, token: TokenResponse, now: datetime) -> "CredentialLease":
        """토큰 응답으로부터 now + expires_in에 만료되는 임대를 만든다."""
        return cls(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=now + timedelta(seconds=token.expires_in),
        )

    def needs_renewal(self, now: datetime, margin: timedelta) -> bool:
        """만료 margin 이내에 들어왔는지 여부를 반환한다."""
        return now >= self.expires_at - margin


class GroupRepresentation(BaseModel):
    """Keycloak 그룹 생성 요청 본문."""

    name: str


class UserRepresentation(BaseModel):
    """Keycloak 사용자 생성 요청 본문.

    Attributes:
        username: 사용자명
        enabled: 계정 활성 상태
        groups: 소속 그룹의 전체 경로 목록 (예: /Group-1/Group-1-subgroup-1)
    """

    username: str
    enabled: bool = True
    groups: list[str] = Field(default_factory=list)


class MetricsSnapshot(BaseModel):
    """지연 시간 및 오류 메트릭 스냅샷.

    Attributes:
        total_requests: 지연 시간이 기록된 전체 요청 수
        total_latency: 누적 지연 시간 (초)
        peak_latency: 최대 지연 시간 (초)
        average_latency: 평균 지연 시간 (초, 요청이 없으면 0)
        error_counts: 상태 코드별 오류 수
        total_errors: 전체 오류 수
    """

    total_requests: int = 0
    total_latency: float = 0.0
    peak_latency: float = 0.0
    average_latency: float = 0.0
    error_counts: dict[int, int] = Field(default_factory=dict)
    total_errors: int = 0

    model_config = ConfigDict(frozen=True)


class CreationCounts(BaseModel):
    """생성된 엔티티 누적 카운터 스냅샷."""

    total_groups_created: int = 0
    total_users_created: int = 0

    model_config = ConfigDict(frozen=True)


class ReportSnapshot(BaseModel):
    """메트릭과 생성 카운터를 함께 잠근 상태에서 얻은 합성 스냅샷."""

    metrics: MetricsSnapshot
    counters: CreationCounts

    model_config = ConfigDict(frozen=True)
