from pydantic import BaseModel, StringConstraints
from typing import Annotated, List

from jiji.modules.resources.schemas import ResourceResponse

MAX_QUERY_LENGTH = 1000

# Trimmed before the length check, so whitespace-only input is too short
QueryText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_QUERY_LENGTH)]


class AskJijiRequest(BaseModel):
    query: QueryText


class AskJijiData(BaseModel):
    answer: str
    resources: List[ResourceResponse]
