"""그룹 및 사용자 이름 생성기.

기본 생성기는 초 단위 현재 시각으로 이름을 만든다. 같은 초 안에 사이클이
두 번 시작되면 이름이 충돌할 수 있으므로 고유성은 보장되지 않는다.
"""

import itertools
import time
from collections.abc import Callable
from typing import Protocol

from keycloak_loadgen.constants import WorkloadShape


class NameGenerator(Protocol):
    """워크로드 엔티티 이름 생성 인터페이스."""

    def group_name(self) -> str: ...

    def user_name(self, index: int) -> str: ...


def subgroup_name(group_name: str, index: int) -> str:
    """하위 그룹 이름 (``<group>-subgroup-<index>``)."""
    return f"{group_name}-{WorkloadShape.SUBGROUP_NAME_INFIX}-{index}"


def subgroup_path(group_name: str, index: int) -> str:
    """사용자 배정에 쓰는 하위 그룹 전체 경로 (``/<group>/<subgroup>``)."""
    return f"/{group_name}/{subgroup_name(group_name, index)}"


class TimestampNameGenerator:
    """Unix 초 단위 시각을 이용한 이름 생성기."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def group_name(self) -> str:
        return f"{WorkloadShape.GROUP_NAME_PREFIX}-{int(self._clock())}"

    def user_name(self, index: int) -> str:
        return f"{WorkloadShape.USER_NAME_PREFIX}-{int(self._clock())}-{index}"


class SequentialNameGenerator:
    """단조 증가 시퀀스를 이용한 이름 생성기.

    실행 속도와 관계없이 이름이 겹치지 않는다.
    """

    def __init__(self, start: int = 1) -> None:
        self._sequence = itertools.count(start)

    def group_name(self) -> str:
        return f"{WorkloadShape.GROUP_NAME_PREFIX}-{next(self._sequence)}"

    def user_name(self, index: int) -> str:
        return f"{WorkloadShape.USER_NAME_PREFIX}-{next(self._sequence)}-{index}"
