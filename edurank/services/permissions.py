"""Role-based permission decisions.

Plain functions over the authenticated principal. Nothing here touches the
database; endpoints call the ``ensure_*`` helpers to turn a negative
decision into a ``PermissionDeniedError``.
"""

import enum
from typing import TYPE_CHECKING

from edurank.core.exceptions import PermissionDeniedError
from edurank.core.subjects import ALL_CLASSES, ClassLevel, parse_class_level
from edurank.models.user import Role

if TYPE_CHECKING:
    from edurank.core.dependencies import CurrentUserContext


class ColumnPermission(str, enum.Enum):
    """Access level on one subject column of a class."""

    EDIT = "EDIT"
    READ = "READ"


def get_column_permission(
    user: "CurrentUserContext | None",
    class_level: ClassLevel | str,
    subject: str,
) -> ColumnPermission:
    """Decide whether ``user`` may write marks for ``subject`` in ``class_level``."""
    if user is None:
        return ColumnPermission.READ

    level = parse_class_level(class_level).value

    if user.role == Role.ADMIN:
        return ColumnPermission.EDIT

    # Class incharges have full access to their own class
    if user.role == Role.CLASS_INCHARGE and user.assigned_class == level:
        return ColumnPermission.EDIT

    # Subject assignments grant access per class
    if subject.strip().lower() in user.teaching_assignments.get(level, ()):
        return ColumnPermission.EDIT

    return ColumnPermission.READ


def can_edit_subject(
    user: "CurrentUserContext | None",
    class_level: ClassLevel | str,
    subject: str,
) -> bool:
    return get_column_permission(user, class_level, subject) == ColumnPermission.EDIT


def can_perform_admin_action(user: "CurrentUserContext | None", class_level: ClassLevel | str) -> bool:
    """Whether ``user`` may create, edit or delete student records of a class."""
    if user is None:
        return False
    if user.role == Role.ADMIN:
        return True
    return user.role == Role.CLASS_INCHARGE and user.assigned_class == parse_class_level(class_level).value


def accessible_classes(user: "CurrentUserContext | None") -> list[str]:
    """Class levels whose result sheets ``user`` may open, in class order."""
    if user is None:
        return []
    if user.role == Role.ADMIN:
        return [level.value for level in ALL_CLASSES]

    allowed = set(user.teaching_assignments)
    if user.assigned_class:
        allowed.add(user.assigned_class)
    return [level.value for level in ALL_CLASSES if level.value in allowed]


def is_view_restricted(user: "CurrentUserContext | None") -> bool:
    """Class incharges and students are pinned to their own class."""
    return user is not None and user.role in (Role.CLASS_INCHARGE, Role.STUDENT)


def ensure_class_access(user: "CurrentUserContext", class_level: ClassLevel | str) -> None:
    level = parse_class_level(class_level).value
    if level not in accessible_classes(user):
        raise PermissionDeniedError(f"No access to class {level}", class_level=level)


def ensure_admin_action(user: "CurrentUserContext", class_level: ClassLevel | str) -> None:
    level = parse_class_level(class_level).value
    if not can_perform_admin_action(user, level):
        raise PermissionDeniedError(
            f"Only the administrator or the class incharge can manage class {level}",
            class_level=level,
        )


def ensure_subject_edit(user: "CurrentUserContext", class_level: ClassLevel | str, subject: str) -> None:
    level = parse_class_level(class_level).value
    if not can_edit_subject(user, level, subject):
        raise PermissionDeniedError(
            f"Read-only access to {subject} in class {level}",
            class_level=level,
            subject=subject,
        )
