from pydantic import BaseModel
from typing import Literal

FileType = Literal["ppt", "video", "other"]


class StorageFile(BaseModel):
    name: str
    path: str
    url: str
    size: int = 0
    type: FileType
    created_at: str
