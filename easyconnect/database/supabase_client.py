from supabase import create_client, Client
from easyconnect.config import settings


class SupabaseClient:
    _client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared client for table queries; never signed in as a user"""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def new_session_client(cls) -> Client:
        """Throwaway client for one sign-in/up/out, so user sessions stay off the shared one"""
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def reset_client(cls):
        cls._client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
