import logging
import re
from typing import Dict, List, Optional

from supabase import Client

from jiji.database.supabase_client import BackendAvailability
from jiji.modules.resources.schemas import ResourceResponse, ResourceRow
from jiji.modules.storage.service import StorageService

logger = logging.getLogger(__name__)

RESOURCE_COLUMNS = "id, title, description, type, file_url, storage_path, tags, created_at"
MAX_KEYWORDS = 20

# PostgREST reserves , . : ( ) and " inside filter expressions; ilike treats _ as a wildcard
_UNSAFE_CHARS = re.compile(r"[^\w\s-]|_")


def sanitize_term(query: str) -> str:
    """Query text reduced to words, hyphens and single spaces"""
    return " ".join(_UNSAFE_CHARS.sub(" ", query).split())


def extract_keywords(query: str) -> List[str]:
    """Lower-cased words plus adjacent word pairs, e.g. "neural network", for tag matching"""
    words = sanitize_term(query).lower().split()
    candidates = words + [f"{a} {b}" for a, b in zip(words, words[1:])]
    keywords: List[str] = []
    for candidate in candidates:
        if candidate not in keywords:
            keywords.append(candidate)
    return keywords[:MAX_KEYWORDS]


class ResourceService:
    def __init__(
        self,
        supabase: Optional[Client],
        availability: BackendAvailability,
        storage: StorageService,
        limit: int = 5,
    ):
        self.supabase = supabase
        self.availability = availability
        self.storage = storage
        self.limit = limit

    def search_resources(self, query: str) -> List[ResourceResponse]:
        """Resources whose title/description contain the query or whose tags overlap its keywords"""
        if self.availability.mock_mode:
            logger.debug("Supabase not configured, returning no resources")
            return []

        try:
            term = sanitize_term(query)
            keywords = extract_keywords(query)
            rows: Dict[str, ResourceRow] = {}
            if term:
                for row in self._search_text(term):
                    rows.setdefault(row.id, row)
            if keywords and len(rows) < self.limit:
                for row in self._search_tags(keywords):
                    rows.setdefault(row.id, row)
            resources = [r for r in (self.to_response(row) for row in rows.values()) if r]
            logger.info(f"Found {len(resources[:self.limit])} resource(s) for query")
            return resources[:self.limit]
        except Exception as e:
            logger.error(f"Error searching resources: {e}")
            return []

    def _search_text(self, term: str) -> List[ResourceRow]:
        result = self.supabase.table("resources")\
            .select(RESOURCE_COLUMNS)\
            .or_(f"title.ilike.*{term}*,description.ilike.*{term}*")\
            .order("created_at", desc=True)\
            .limit(self.limit)\
            .execute()
        return [ResourceRow(**row) for row in result.data or []]

    def _search_tags(self, keywords: List[str]) -> List[ResourceRow]:
        result = self.supabase.table("resources")\
            .select(RESOURCE_COLUMNS)\
            .overlaps("tags", keywords)\
            .order("created_at", desc=True)\
            .limit(self.limit)\
            .execute()
        return [ResourceRow(**row) for row in result.data or []]

    def to_response(self, row: ResourceRow) -> Optional[ResourceResponse]:
        """Public shape of a resource; rows without any file location are dropped"""
        url = row.file_url
        if not url and row.storage_path:
            url = self.storage.get_public_url(row.storage_path)
        if not url:
            logger.debug(f"Resource {row.id} has no file location, skipping")
            return None
        return ResourceResponse(id=row.id, title=row.title, type=row.type, url=url)
