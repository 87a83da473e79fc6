import logging
from typing import List, Optional

from fastapi import BackgroundTasks

from jiji.database.supabase_client import SupabaseClients
from jiji.modules.queries.schemas import SavedQuery

logger = logging.getLogger(__name__)


class QueryService:
    def __init__(self, clients: SupabaseClients, history_limit: int = 20):
        self.client = clients.client
        self.admin_client = clients.admin_client
        self.availability = clients.availability
        self.history_limit = history_limit

    def save_query(
        self,
        user_id: Optional[str],
        query_text: str,
        answer_text: str,
        resource_ids: List[str],
    ) -> Optional[SavedQuery]:
        """Insert one queries row with the service_role client. Never raises."""
        if not self.availability.admin:
            logger.warning("Supabase admin not configured, skipping query save")
            return None
        try:
            result = self.admin_client.table("queries").insert({
                "user_id": user_id,
                "query_text": query_text,
                "answer_text": answer_text,
                "resources_returned": resource_ids,
            }).execute()
            if not result.data:
                logger.error("Failed to save query: no row returned")
                return None
            saved = SavedQuery(**result.data[0])
            logger.info(f"Query saved successfully: {saved.id}")
            return saved
        except Exception as e:
            logger.error(f"Failed to save query: {e}")
            return None

    def schedule_save(
        self,
        background_tasks: BackgroundTasks,
        user_id: Optional[str],
        query_text: str,
        answer_text: str,
        resource_ids: List[str],
    ) -> None:
        """
        Detached write: runs after the response has been sent.
        Best effort only. The client may see the response before the row exists,
        and a failed insert is logged by save_query, never reported to the client.
        """
        background_tasks.add_task(self.save_query, user_id, query_text, answer_text, resource_ids)

    def get_user_queries(self, user_id: str, limit: Optional[int] = None) -> List[SavedQuery]:
        """Query history for a user, newest first"""
        if self.availability.mock_mode:
            logger.warning("Supabase not configured, returning empty history")
            return []
        try:
            result = self.client.table("queries")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit or self.history_limit)\
                .execute()
            return [SavedQuery(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Failed to fetch user queries: {e}")
            return []
