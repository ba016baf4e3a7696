from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Mapping

from dynamic_secrets.constants.permissions import (
    CONDITION_ENVIRONMENT,
    CONDITION_SECRET_PATH,
    ProjectPermissionActions,
    ProjectPermissionSub,
)
from dynamic_secrets.core.exceptions import ForbiddenError


@dataclass(frozen=True)
class SubjectRef:
    """A subject type plus the attributes rules are matched against."""

    type: ProjectPermissionSub
    conditions: Mapping[str, Any]


def subject(sub: ProjectPermissionSub | str, **conditions: Any) -> SubjectRef:
    return SubjectRef(type=ProjectPermissionSub(sub), conditions=conditions)


@dataclass(frozen=True)
class PermissionRule:
    action: ProjectPermissionActions
    subject: ProjectPermissionSub
    environment: str = "*"
    secret_path: str = "/**"
    inverted: bool = False

    def matches(self, action: ProjectPermissionActions, ref: SubjectRef) -> bool:
        if self.action != action or self.subject != ref.type:
            return False
        environment = ref.conditions.get(CONDITION_ENVIRONMENT)
        if environment is not None and not fnmatch.fnmatchcase(str(environment), self.environment):
            return False
        secret_path = ref.conditions.get(CONDITION_SECRET_PATH)
        if secret_path is not None and not _match_path(str(secret_path), self.secret_path):
            return False
        return True


@lru_cache(maxsize=256)
def _compile_path_pattern(pattern: str) -> re.Pattern[str]:
    """``**`` spans segments, ``*`` and ``?`` stay inside one segment."""
    parts = []
    for token in re.split(r"(\*\*|\*|\?)", pattern):
        if token == "**":
            parts.append(".*")
        elif token == "*":
            parts.append("[^/]*")
        elif token == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(token))
    return re.compile("".join(parts))


def _match_path(path: str, pattern: str) -> bool:
    # "/**" also covers the root itself
    if pattern.endswith("/**") and path.rstrip("/") == pattern[:-3].rstrip("/"):
        return True
    return _compile_path_pattern(pattern).fullmatch(path) is not None


class ProjectPermission:
    """Evaluated rule set of one actor in one project.

    An inverted (deny) rule wins over any allow rule that also matches.
    """

    def __init__(self, rules: Iterable[PermissionRule]) -> None:
        self.rules = tuple(rules)

    def can(self, action: ProjectPermissionActions | str, ref: SubjectRef) -> bool:
        action = ProjectPermissionActions(action)
        matched = [rule for rule in self.rules if rule.matches(action, ref)]
        if any(rule.inverted for rule in matched):
            return False
        return any(not rule.inverted for rule in matched)

    def throw_unless_can(self, action: ProjectPermissionActions | str, ref: SubjectRef) -> None:
        if not self.can(action, ref):
            action_value = ProjectPermissionActions(action).value
            raise ForbiddenError(f"You are not allowed to {action_value} on {ref.type.value}")
