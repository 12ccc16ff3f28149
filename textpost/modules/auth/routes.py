from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from textpost.config import Settings
from textpost.core.dependencies import get_auth_service, get_current_principal
from textpost.core.principal import ProviderPrincipal
from textpost.modules.auth.schemas import (
    RegisterRequest, RegisterResponse, LoginRequest, LoginResponse,
    EmailCredentialsRequest, SignupResponse, TokenResponse, MeResponse, OAuthUrlResponse
)
from textpost.modules.auth.service import AuthService


def create_router(settings: Settings, limiter: Limiter) -> APIRouter:
    """Auth routes; credential endpoints are throttled by `settings.auth_rate_limit`"""
    router = APIRouter(tags=["auth"])
    auth_limit = limiter.limit(settings.auth_rate_limit)

    @router.post("/register", response_model=RegisterResponse)
    @auth_limit
    async def register(
        request: Request,
        register_data: RegisterRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """Register a username/password identity"""
        return service.register(register_data)

    @router.post("/login", response_model=LoginResponse)
    @auth_limit
    async def login(
        request: Request,
        login_data: LoginRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """Check username/password and return the identity"""
        return service.login(login_data)

    @router.post("/auth/signup", response_model=SignupResponse, status_code=201)
    @auth_limit
    async def signup(
        request: Request,
        signup_data: EmailCredentialsRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """Register an email identity with Supabase Auth"""
        return service.signup(signup_data)

    @router.post("/auth/session", response_model=TokenResponse)
    @auth_limit
    async def create_session(
        request: Request,
        login_data: EmailCredentialsRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """Sign in with Supabase Auth and get an access token"""
        return service.sign_in(login_data)

    @router.get("/auth/me", response_model=MeResponse)
    async def me(principal: ProviderPrincipal = Depends(get_current_principal)):
        return MeResponse(id=principal.user_id, email=principal.email, provider=principal.provider)

    @router.get("/auth/oauth/{provider}", response_model=OAuthUrlResponse)
    async def oauth_start(
        provider: str,
        service: AuthService = Depends(get_auth_service)
    ):
        """Authorization URL for an OAuth provider; the provider redirects back to /auth/callback"""
        return service.oauth_url(provider, settings.oauth_redirect_url)

    return router
