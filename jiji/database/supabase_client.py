from dataclasses import dataclass
from typing import Optional
import logging

from supabase import create_client, Client
from jiji.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendAvailability:
    """Which Supabase capabilities are configured for this process."""

    database: bool = False  # URL + anon key: search, auth verification, storage
    admin: bool = False  # URL + service role key: query logging

    @property
    def mock_mode(self) -> bool:
        return not self.database

    @property
    def mode(self) -> str:
        return "mock" if self.mock_mode else "live"


class SupabaseClients:
    """Anonymous and service-role client handles, built once at startup and injected."""

    def __init__(self, client: Optional[Client] = None, admin_client: Optional[Client] = None):
        self.client = client
        self.admin_client = admin_client
        self.availability = BackendAvailability(
            database=client is not None,
            admin=admin_client is not None,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClients":
        client = None
        admin_client = None

        if settings.supabase_url and settings.supabase_anon_key:
            client = create_client(settings.supabase_url, settings.supabase_anon_key)
        else:
            logger.warning("Supabase credentials not configured. Resource search will return empty results.")

        if settings.supabase_url and settings.supabase_service_role_key:
            # service_role key bypasses RLS
            admin_client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        else:
            logger.warning("Supabase service role key not configured. Queries will not be logged.")

        return cls(client=client, admin_client=admin_client)
