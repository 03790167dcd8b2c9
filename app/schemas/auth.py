from pydantic import BaseModel
import enum


class UserRole(str, enum.Enum):
    """
    Roles carried in the access token issued by the identity service.

    Hierarchy (most to least permissions):
    - ADMIN: runs periods, generation and lifecycle transitions
    - EXECUTIVE / MANAGER: maintain overrides and exclusions, read evaluations
    - EMPLOYEE: self-service (own self-evaluation, evaluations assigned to them)
    """
    ADMIN = "ADMIN"
    EXECUTIVE = "EXECUTIVE"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class CurrentUser(BaseModel):
    """Identity context for one request. ``id`` is the employee id of the caller."""
    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        """Check if user is a manager (any level)."""
        return self.role in (UserRole.ADMIN, UserRole.EXECUTIVE, UserRole.MANAGER)
