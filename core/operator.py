"""
Operator context passed into business services.

Services never read the current user from ambient state; views build an
Operator from the authenticated request and hand it over explicitly.
"""
from dataclasses import dataclass
from typing import Optional


ROLE_ADMIN = 'admin'
ROLE_SALESPERSON = 'salesperson'


@dataclass(frozen=True)
class Operator:
    """Identity and role of whoever is performing an operation."""
    user_id: Optional[int]
    name: str = ''
    role: str = ROLE_SALESPERSON

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user) -> 'Operator':
        if user is None or not getattr(user, 'is_authenticated', False):
            return ANONYMOUS
        return cls(
            user_id=user.pk,
            name=user.full_name or user.get_username(),
            role=user.role,
        )

    @classmethod
    def from_request(cls, request) -> 'Operator':
        return cls.from_user(getattr(request, 'user', None))


ANONYMOUS = Operator(user_id=None, name='anonymous')
