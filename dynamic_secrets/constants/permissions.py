"""
Project permission vocabulary (single source of truth).

Actions and subjects used when checking what an actor may do inside a
project; rules in ``services.permissions`` are expressed in these terms.
"""
from __future__ import annotations

import enum


class ProjectPermissionActions(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


class ProjectPermissionSub(str, enum.Enum):
    SECRETS = "secrets"
    SECRET_FOLDERS = "secret-folders"
    DYNAMIC_SECRETS = "dynamic-secrets"
    PROJECT = "project"


# condition keys carried by secret-scoped subjects
CONDITION_ENVIRONMENT = "environment"
CONDITION_SECRET_PATH = "secret_path"
