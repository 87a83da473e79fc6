from fastapi import APIRouter, BackgroundTasks, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from typing import Any
import logging

from jiji.core.dependencies import enforce_rate_limit, get_availability, get_current_user, get_query_service, get_resource_service
from jiji.core.schemas import ApiResponse, ValidationErrorResponse
from jiji.database.supabase_client import BackendAvailability
from jiji.modules.ask_jiji.schemas import AskJijiData, AskJijiRequest
from jiji.modules.ask_jiji.service import generate_mock_answer
from jiji.modules.auth.schemas import AuthenticatedUser
from jiji.modules.queries.service import QueryService
from jiji.modules.resources.service import ResourceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ask-jiji", tags=["ask-jiji"], dependencies=[Depends(enforce_rate_limit)])


def get_ask_request(body: Any = Body(None)) -> AskJijiRequest:
    """Validate the request body; a missing or null body counts as `{}` so errors name `query`"""
    try:
        return AskJijiRequest.model_validate(body if body is not None else {})
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False), body=body)


@router.post(
    "",
    response_model=ApiResponse[AskJijiData],
    response_model_exclude_none=True,
    responses={400: {"model": ValidationErrorResponse}, 401: {"model": ApiResponse}},
)
def ask_jiji(
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser = Depends(get_current_user),
    body: AskJijiRequest = Depends(get_ask_request),
    availability: BackendAvailability = Depends(get_availability),
    resource_service: ResourceService = Depends(get_resource_service),
    query_service: QueryService = Depends(get_query_service),
):
    """Answer a learning question and link matching resources"""
    logger.info(f"Processing ask-jiji request for user {user.id}")

    answer = generate_mock_answer(body.query)
    resources = resource_service.search_resources(body.query)

    # The mock identity has no profiles row to reference
    user_id = None if availability.mock_mode else user.id
    query_service.schedule_save(
        background_tasks,
        user_id=user_id,
        query_text=body.query,
        answer_text=answer,
        resource_ids=[r.id for r in resources],
    )

    logger.info(f"Ask-jiji request completed with {len(resources)} resource(s)")
    return ApiResponse(data=AskJijiData(answer=answer, resources=resources))
