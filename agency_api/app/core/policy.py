"""
Role-based authorization policy.

The functions in this module decide whether an actor may perform an
operation on a resource.  They are pure: the caller loads the resource
(raising ``NotFoundError`` when it is absent) and passes it in, and a
check either returns ``None`` (allow) or raises ``ForbiddenError``
with a reason string that is returned to the client verbatim.

Three roles exist:

* ``admin`` may do everything and is the only role that can assign
  employees to projects and approve or reject service requests.
* ``employee`` works on the projects they are assigned to and may
  change only the status and progress of those projects.
* ``client`` owns projects and service requests and sees nothing else.

Role dispatch always handles all three members of ``Role``; an
unexpected value raises instead of silently falling through.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, NoReturn, Optional

from .errors import ForbiddenError


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    CLIENT = "client"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a service operation."""

    user_id: str
    role: Role
    email: str = ""

    @classmethod
    def from_user(cls, current_user: Mapping[str, Any]) -> "Actor":
        """Build an actor from the payload returned by ``get_current_user``."""
        return cls(
            user_id=current_user["user_id"],
            role=Role(current_user["role"]),
            email=current_user.get("email") or "",
        )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class ProjectScope:
    """Implicit filter applied to project listings before pagination.

    ``None`` fields do not restrict the listing.
    """

    client_id: Optional[str] = None
    employee_id: Optional[str] = None


EMPLOYEE_PROJECT_FIELDS = frozenset({"status", "progress"})
CLIENT_PROJECT_FIELDS = frozenset({"description", "progress"})
EMPLOYEE_PROTECTED_PROFILE_FIELDS = frozenset({"role", "department", "salary"})
CLIENT_PROTECTED_PROFILE_FIELDS = frozenset({"role", "company"})


def _unknown_role(role: Any) -> NoReturn:
    raise ValueError(f"Unknown role: {role!r}")


def _deny(reason: str) -> NoReturn:
    raise ForbiddenError(reason)


def is_assigned(actor: Actor, project: Any) -> bool:
    return actor.user_id in project.employee_ids


def is_owner(actor: Actor, project: Any) -> bool:
    return project.client_id == actor.user_id


def require_admin(actor: Actor, reason: str = "admin access required") -> None:
    if not actor.is_admin:
        _deny(reason)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def check_project_access(actor: Actor, project: Any) -> None:
    """Read access to a project (also used for progress updates and messaging)."""
    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.EMPLOYEE:
        if not is_assigned(actor, project):
            _deny("employee not assigned to this project")
        return
    if actor.role is Role.CLIENT:
        if not is_owner(actor, project):
            _deny("client can only access their own projects")
        return
    _unknown_role(actor.role)


def check_project_update(actor: Actor, project: Any, fields: Iterable[str]) -> None:
    """Decide whether ``actor`` may change ``fields`` of ``project``.

    Employees are limited to status and progress on assigned projects.
    Clients may touch description and progress of their own projects
    but never the status or the name.
    """
    fields = set(fields)
    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.EMPLOYEE:
        check_project_access(actor, project)
        if fields - EMPLOYEE_PROJECT_FIELDS:
            _deny("employees can only update project status and progress")
        return
    if actor.role is Role.CLIENT:
        check_project_access(actor, project)
        if "status" in fields:
            _deny("clients cannot update project status")
        if fields - CLIENT_PROJECT_FIELDS:
            _deny("clients cannot rename projects")
        return
    _unknown_role(actor.role)


def check_assign_employees(actor: Actor) -> None:
    require_admin(actor, "only admins can assign employees to projects")


def project_scope(actor: Actor) -> ProjectScope:
    """Return the implicit project filter for a role-scoped listing."""
    if actor.role is Role.ADMIN:
        return ProjectScope()
    if actor.role is Role.EMPLOYEE:
        return ProjectScope(employee_id=actor.user_id)
    if actor.role is Role.CLIENT:
        return ProjectScope(client_id=actor.user_id)
    _unknown_role(actor.role)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

def check_message_delete(actor: Actor, message: Any, project: Any) -> None:
    """Non-admins delete only their own messages in projects they can access."""
    if actor.role is Role.ADMIN:
        return
    if actor.role in (Role.EMPLOYEE, Role.CLIENT):
        if message.sender_id != actor.user_id:
            _deny("can only delete own messages")
        check_project_access(actor, project)
        return
    _unknown_role(actor.role)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def check_user_read(actor: Actor, user_id: str) -> None:
    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.EMPLOYEE:
        if user_id != actor.user_id:
            _deny("employees can only view their own profile")
        return
    if actor.role is Role.CLIENT:
        if user_id != actor.user_id:
            _deny("clients can only view their own profile")
        return
    _unknown_role(actor.role)


def check_user_update(actor: Actor, user_id: str, fields: Iterable[str]) -> None:
    fields = set(fields)
    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.EMPLOYEE:
        if user_id != actor.user_id:
            _deny("employees can only update their own profile")
        if fields & EMPLOYEE_PROTECTED_PROFILE_FIELDS:
            _deny("employees cannot modify role, department, or salary")
        return
    if actor.role is Role.CLIENT:
        if user_id != actor.user_id:
            _deny("clients can only update their own profile")
        if fields & CLIENT_PROTECTED_PROFILE_FIELDS:
            _deny("clients cannot modify role or company")
        return
    _unknown_role(actor.role)


# ---------------------------------------------------------------------------
# Service requests
# ---------------------------------------------------------------------------

def check_request_create(actor: Actor) -> None:
    if actor.role is not Role.CLIENT:
        _deny("only clients can create service requests")


def check_request_access(actor: Actor, request: Any) -> None:
    if actor.role in (Role.ADMIN, Role.EMPLOYEE):
        return
    if actor.role is Role.CLIENT:
        if request.client_id != actor.user_id:
            _deny("client can only access their own service requests")
        return
    _unknown_role(actor.role)


def check_request_update(actor: Actor) -> None:
    if actor.role in (Role.ADMIN, Role.EMPLOYEE):
        return
    if actor.role is Role.CLIENT:
        _deny("clients cannot update service requests")
    _unknown_role(actor.role)


def check_request_decision(actor: Actor) -> None:
    require_admin(actor, "only admins can approve or reject service requests")


def request_scope(actor: Actor) -> Optional[str]:
    """Client id that a service request listing is restricted to, if any."""
    if actor.role in (Role.ADMIN, Role.EMPLOYEE):
        return None
    if actor.role is Role.CLIENT:
        return actor.user_id
    _unknown_role(actor.role)
