"""
Core dependencies: injected Supabase handles, services and route protection
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from limits import parse
from slowapi.util import get_remote_address
from typing import Optional
import logging

from jiji.config.settings import Settings
from jiji.core.exceptions import RateLimitedError
from jiji.database.supabase_client import BackendAvailability, SupabaseClients
from jiji.modules.auth.schemas import AuthenticatedUser
from jiji.modules.auth.service import AuthService
from jiji.modules.queries.service import QueryService
from jiji.modules.resources.service import ResourceService
from jiji.modules.storage.service import StorageService

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is allowed through to mock mode
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clients(request: Request) -> SupabaseClients:
    return request.app.state.clients


def get_availability(clients: SupabaseClients = Depends(get_clients)) -> BackendAvailability:
    return clients.availability


def get_auth_service(clients: SupabaseClients = Depends(get_clients)) -> AuthService:
    return AuthService(clients.client, clients.availability)


def get_storage_service(
    clients: SupabaseClients = Depends(get_clients),
    settings: Settings = Depends(get_settings),
) -> StorageService:
    return StorageService(clients.client, clients.availability, bucket=settings.storage_bucket)


def get_resource_service(
    clients: SupabaseClients = Depends(get_clients),
    settings: Settings = Depends(get_settings),
    storage: StorageService = Depends(get_storage_service),
) -> ResourceService:
    return ResourceService(clients.client, clients.availability, storage=storage, limit=settings.search_result_limit)


def get_query_service(
    clients: SupabaseClients = Depends(get_clients),
    settings: Settings = Depends(get_settings),
) -> QueryService:
    return QueryService(clients, history_limit=settings.history_limit)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """Resolve the caller from the bearer token and attach it to the request"""
    token = credentials.credentials if credentials else None
    user = auth_service.authenticate(token)
    request.state.user = user
    return user


def enforce_rate_limit(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """Count the request against `settings.rate_limit` for the caller's address"""
    limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    limit = parse(settings.rate_limit)
    if not limiter.limiter.hit(limit, request.url.path, get_remote_address(request)):
        logger.warning(f"Rate limit {settings.rate_limit} hit by {get_remote_address(request)} on {request.url.path}")
        raise RateLimitedError(str(limit))
