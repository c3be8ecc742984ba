import os
import logging
from supabase import create_client, Client
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class SupabaseAuth:
    """Supabase Authentication Service"""

    def __init__(self, url=None, key=None):
        self.url = url or os.getenv('SUPABASE_URL', '')
        self.key = key or os.getenv('SUPABASE_ANON_KEY', '')

        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment")

        self.client: Client = create_client(self.url, self.key)

    def verify_token(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Verify Supabase access token and get user info"""
        try:
            response = self.client.auth.get_user(access_token)
            return response.user.model_dump() if response and response.user else None
        except Exception as e:
            logger.warning(f"Token verification failed: {e}")
            return None

    @staticmethod
    def session_from_user(supabase_user: Dict[str, Any]) -> Dict[str, Any]:
        """Extract the identity fields we care about from a Supabase user"""
        metadata = supabase_user.get('user_metadata') or {}
        app_metadata = supabase_user.get('app_metadata') or {}
        return {
            'id': str(supabase_user.get('id')),
            'email': supabase_user.get('email'),
            'name': metadata.get('full_name', ''),
            'avatar': metadata.get('avatar_url', ''),
            'provider': app_metadata.get('provider', 'email'),
            'email_confirmed': supabase_user.get('email_confirmed_at') is not None
        }


# Global instance
supabase_auth = None


def get_supabase_auth() -> Optional[SupabaseAuth]:
    """Get or create Supabase auth instance"""
    global supabase_auth
    if supabase_auth is None:
        try:
            supabase_auth = SupabaseAuth()
        except ValueError as e:
            logger.warning(f"Supabase not configured: {e}")
            return None
    return supabase_auth
