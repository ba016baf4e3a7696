from .permission import PermissionRule, ProjectPermission, SubjectRef, subject
from .service import StaticPermissionService

__all__ = [
    "PermissionRule",
    "ProjectPermission",
    "StaticPermissionService",
    "SubjectRef",
    "subject",
]
