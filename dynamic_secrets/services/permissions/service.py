from __future__ import annotations

from typing import Iterable

from dynamic_secrets.services.permissions.permission import PermissionRule, ProjectPermission


class StaticPermissionService:
    """Permission lookup over a fixed rule table keyed by ``(actor_id, project_id)``.

    Actors without an entry get an empty rule set, which denies everything.
    """

    def __init__(self) -> None:
        self._rules: dict[tuple[str, str], list[PermissionRule]] = {}

    def grant(self, actor_id: str, project_id: str, rules: Iterable[PermissionRule]) -> None:
        self._rules.setdefault((actor_id, project_id), []).extend(rules)

    async def get_project_permission(
        self,
        actor: str,
        actor_id: str,
        project_id: str,
        actor_auth_method: str | None = None,
        actor_org_id: str | None = None,
    ) -> ProjectPermission:
        return ProjectPermission(self._rules.get((actor_id, project_id), ()))
