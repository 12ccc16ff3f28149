"""
Core dependencies for resolving the acting principal
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from textpost.core.principal import PasswordPrincipal, Principal, ProviderPrincipal
from textpost.database.supabase_client import get_supabase
from textpost.modules.auth.service import AuthService
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False: password principals send no Authorization header
optional_bearer = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_bearer_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_bearer),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[ProviderPrincipal]:
    """Verify the bearer token with Supabase Auth when one is sent; None otherwise"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_current_principal(
    principal: Optional[ProviderPrincipal] = Depends(get_bearer_principal)
) -> ProviderPrincipal:
    """Require a Supabase Auth session"""
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return principal


def resolve_principal(bearer: Optional[ProviderPrincipal], username: Optional[str]) -> Principal:
    """A verified bearer token wins over a username in the request body"""
    if bearer is not None:
        return bearer
    if username:
        return PasswordPrincipal(username=username)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="username is required"
    )
