"""BizDesk Core Auth Models.

User model for Flask-Login authentication.
"""
from flask_login import UserMixin

ROLE_ADMIN = 'admin'
ROLE_MANAGER = 'manager'
ROLE_USER = 'user'


class User(UserMixin):
    """User class for Flask-Login."""

    def __init__(self, user_data):
        self.id = user_data['id']
        self.email = user_data['email']
        self.name = user_data.get('name')
        self.role = user_data.get('role') or ROLE_USER
        self.is_active_user = user_data.get('is_active', True)

    @property
    def is_active(self):
        return self.is_active_user

    def has_role(self, *roles) -> bool:
        """Check whether the user holds one of the given roles."""
        return self.role in roles
