from pydantic import BaseModel
from typing import List, Optional


class SavedQuery(BaseModel):
    id: str
    user_id: Optional[str] = None
    query_text: str
    answer_text: Optional[str] = None
    resources_returned: Optional[List[str]] = None
    created_at: str
