from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from dynamic_secrets.utils.path_utils import normalize_secret_path

__all__ = ["Folder", "InMemoryFolderResolver", "normalize_secret_path"]


@dataclass(frozen=True)
class Folder:
    project_id: str
    environment: str
    path: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class InMemoryFolderResolver:
    """Folder lookup by ``(project_id, environment, path)``."""

    def __init__(self) -> None:
        self._folders: dict[tuple[str, str, str], Folder] = {}

    def add(self, project_id: str, environment: str, path: str) -> Folder:
        key = (project_id, environment, normalize_secret_path(path))
        folder = self._folders.get(key)
        if folder is None:
            folder = Folder(project_id=project_id, environment=environment, path=key[2])
            self._folders[key] = folder
        return folder

    async def find_by_secret_path(self, project_id: str, environment: str, path: str) -> Folder | None:
        return self._folders.get((project_id, environment, normalize_secret_path(path)))
