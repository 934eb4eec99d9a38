"""로드 제너레이터 설정."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from keycloak_loadgen.constants import KeycloakDefaults


class KeycloakSettings(BaseSettings):
    """Keycloak 서버 및 관리자 자격 증명 설정."""

    server_url: str = Field(
        default=KeycloakDefaults.SERVER_URL, description="Keycloak base URL"
    )
    admin_username: str = KeycloakDefaults.ADMIN_USERNAME
    admin_password: str = KeycloakDefaults.ADMIN_PASSWORD
    realm: str = KeycloakDefaults.REALM

    # 토큰 갱신에 사용하는 클라이언트
    client_id: str = KeycloakDefaults.CLIENT_ID
    client_secret: str = ""

    request_timeout: float = Field(default=30.0, description="HTTP request timeout (seconds)")

    model_config = SettingsConfigDict(
        env_prefix="KEYCLOAK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("server_url")
    @classmethod
    def _normalize_server_url(cls, value: str) -> str:
        """http(s) 스킴을 강제하고 끝의 슬래시를 제거한다."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Keycloak server_url must use http or https: {value}")
        return value.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value


class PacingSettings(BaseSettings):
    """
    부하 페이싱 설정

    하위 그룹 생성 후의 짧은 대기와 사용자 배치 후의 긴 대기를 정의한다.
    테스트에서는 모든 값을 0으로 주입한다.
    """

    # 하위 그룹 생성 직후 대기 (초)
    subgroup_pause_seconds: float = Field(
        default=0.5, description="Pause after each subgroup is created (seconds)"
    )

    # 사용자 10명 생성 후 대기 (초)
    batch_pause_seconds: float = Field(
        default=300.0, description="Pause after each batch of users (seconds)"
    )

    # 사이클 사이 대기 (초)
    cycle_pause_seconds: float = Field(
        default=0.0, description="Pause between cycles (seconds)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOADGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("subgroup_pause_seconds", "batch_pause_seconds", "cycle_pause_seconds")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("pause durations must not be negative")
        return value

    @classmethod
    def disabled(cls) -> "PacingSettings":
        """모든 대기를 0으로 설정한 인스턴스를 반환한다."""
        return cls(subgroup_pause_seconds=0, batch_pause_seconds=0, cycle_pause_seconds=0)


class LoggingSettings(BaseSettings):
    """로깅 설정."""

    env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Root log level")
    app_name: str = Field(default="keycloak-loadgen", description="Value of the app field on every entry")
    sensitive_fields: list[str] = Field(
        default=["password", "token", "secret", "authorization"],
        description="Key fragments whose values are masked in log entries",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOADGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level
