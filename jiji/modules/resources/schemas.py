from pydantic import BaseModel
from typing import List, Literal, Optional

ResourceType = Literal["ppt", "video"]


class ResourceRow(BaseModel):
    """A row of the resources table as returned by PostgREST"""
    id: str
    title: str
    description: Optional[str] = None
    type: ResourceType
    file_url: Optional[str] = None
    storage_path: Optional[str] = None
    tags: Optional[List[str]] = None
    created_at: Optional[str] = None


class ResourceResponse(BaseModel):
    id: str
    title: str
    type: ResourceType
    url: str
