"""User Repository - read access to the users table for session loading."""
from typing import Optional, Dict, Any

from core.base_repository import BaseRepository


class UserRepository(BaseRepository):

    def get_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get a user by ID."""
        return self.query_one('''
            SELECT id, email, name, role, is_active
            FROM users
            WHERE id = %s
        ''', (user_id,))
