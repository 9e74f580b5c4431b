"""
Supabase clients.

Handlers and the training poller write the user_tunes / user_headshots
ledgers on the caller's behalf, so they use the service-role client when a
service key is configured and the anon client (subject to RLS) otherwise.
"""
import logging
from typing import Callable, Optional

from supabase import create_client, Client
from headshots.config.settings import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _anon: Optional[Client] = None
    _service: Optional[Client] = None

    @staticmethod
    def _create(key: Optional[str]) -> Client:
        if not settings.supabase_url or not key:
            raise RuntimeError("SUPABASE_URL and a Supabase key must be configured")
        return create_client(settings.supabase_url, key)

    @classmethod
    def get_anon_client(cls) -> Client:
        if cls._anon is None:
            cls._anon = cls._create(settings.supabase_key)
        return cls._anon

    @classmethod
    def get_service_client(cls) -> Client:
        if cls._service is None:
            if settings.supabase_service_role_key:
                cls._service = cls._create(settings.supabase_service_role_key)
            else:
                logger.warning("SUPABASE_SERVICE_ROLE_KEY not set; ledger writes go through the anon key")
                cls._service = cls.get_anon_client()
        return cls._service

    @classmethod
    def create_auth_client(cls) -> Client:
        """
        A new anon client for one sign-up or sign-in.

        A client that signs in rewrites its own Authorization header to the
        user's JWT, so this one is discarded after the call and the shared
        clients never carry a user session.
        """
        return cls._create(settings.supabase_key)


def get_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_auth_client_factory() -> Callable[[], Client]:
    return SupabaseClient.create_auth_client
