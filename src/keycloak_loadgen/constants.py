"""Load generator constants.

Workload shape, credential lease policy and error classification are fixed
values rather than configuration, so every harness run produces the same
entity tree per cycle.
"""

from enum import StrEnum

# ===== Workload Shape =====


class WorkloadShape:
    """Fixed entity tree created by one cycle."""

    SUBGROUPS_PER_GROUP = 10
    """Number of child groups created under each root group"""

    USERS_PER_SUBGROUP = 10
    """Number of users assigned to each child group"""

    GROUP_NAME_PREFIX = "Group"
    """Root group name prefix (``Group-<unix seconds>``)"""

    USER_NAME_PREFIX = "User"
    """Username prefix (``User-<unix seconds>-<index>``)"""

    SUBGROUP_NAME_INFIX = "subgroup"
    """Child group name infix (``<group>-subgroup-<index>``)"""


# ===== Credential Lease =====


class LeasePolicy:
    """Access token renewal policy."""

    REFRESH_MARGIN_SECONDS = 300  # 5 minutes
    """Renew the lease once it is within this many seconds of expiring"""


# ===== Error Classification =====


class ErrorClassification:
    """Status codes recorded in the error metrics."""

    CREATION_FAILURE_STATUS = 500
    """Generic code recorded for every subgroup/user creation failure"""


# ===== Keycloak Defaults =====


class KeycloakDefaults:
    """Fixed admin credentials used by the harness."""

    SERVER_URL = "http://localhost:8080"
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "admin"
    REALM = "master"
    CLIENT_ID = "admin-cli"


class GrantType(StrEnum):
    """OpenID Connect token endpoint grant types."""

    PASSWORD = "password"
    REFRESH_TOKEN = "refresh_token"
