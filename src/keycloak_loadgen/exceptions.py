"""로드 제너레이터 예외 클래스 모듈.

Keycloak Admin API 호출과 자격 증명 임대(lease) 관리 과정에서 발생할 수 있는
예외를 정의합니다. 각 예외는 대응하는 HTTP 상태 코드를 가집니다.
"""


class LoadgenError(Exception):
    """로드 제너레이터 기본 예외 클래스.

    모든 로드 제너레이터 예외의 부모 클래스입니다.

    Attributes:
        message: 오류 메시지
        status_code: HTTP 상태 코드
    """

    def __init__(
        self, message: str = "로드 제너레이터 오류가 발생했습니다", status_code: int = 500
    ) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class IdentityProviderError(LoadgenError):
    """Keycloak이 오류 응답을 반환한 경우 발생합니다.

    status_code에는 Keycloak이 실제로 반환한 HTTP 상태 코드가 담깁니다.
    """


class IdentityProviderUnavailableError(LoadgenError):
    """Keycloak 불가 예외 (HTTP 503).

    Keycloak에 연결할 수 없거나 요청 시간이 초과된 경우 발생합니다.
    """

    def __init__(self, message: str = "Keycloak에 연결할 수 없습니다") -> None:
        super().__init__(message=message, status_code=503)


class AuthenticationError(IdentityProviderError):
    """관리자 로그인 실패 예외 (HTTP 401)."""

    def __init__(self, message: str = "관리자 인증에 실패했습니다", status_code: int = 401) -> None:
        super().__init__(message=message, status_code=status_code)


class TokenRefreshError(AuthenticationError):
    """리프레시 토큰으로 액세스 토큰을 갱신하지 못한 경우 발생합니다."""

    def __init__(self, message: str = "토큰 갱신에 실패했습니다", status_code: int = 401) -> None:
        super().__init__(message=message, status_code=status_code)


class EntityCreationError(IdentityProviderError):
    """그룹, 하위 그룹 또는 사용자 생성 실패 예외."""


class GroupCreationError(EntityCreationError):
    """루트 그룹 생성 실패 예외.

    사이클 전체를 중단시키는 유일한 생성 오류입니다.
    """


class CredentialLeaseLostError(LoadgenError):
    """자격 증명 임대 상실 예외 (치명적).

    토큰 갱신과 재인증이 모두 실패하여 더 이상 작업을 진행할 수 없는 경우
    발생합니다. 러너는 이 예외를 받으면 루프를 종료해야 합니다.
    """

    def __init__(self, message: str = "유효한 자격 증명을 확보할 수 없습니다") -> None:
        super().__init__(message=message, status_code=401)
