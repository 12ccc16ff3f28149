import logging
from supabase import Client
from textpost.core.errors import backend_error
from textpost.core.principal import ProviderPrincipal
from textpost.modules.auth.passwords import hash_password, verify_password
from textpost.modules.auth.schemas import (
    RegisterRequest, RegisterResponse, LoginRequest, LoginResponse,
    EmailCredentialsRequest, SignupResponse, TokenResponse, OAuthUrlResponse
)
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create a password-owned identity in the users table"""
        try:
            self.supabase.table("users").insert({
                "username": register_data.username,
                "password_hash": hash_password(register_data.password)
            }).execute()
        except Exception as e:
            raise backend_error(e, "Register", conflict_detail="Username already exists")

        logger.info(f"Registered user {register_data.username}")
        return RegisterResponse()

    def login(self, login_data: LoginRequest) -> LoginResponse:
        """Check a username/password pair against the stored bcrypt hash"""
        try:
            result = self.supabase.table("users")\
                .select("username, password_hash")\
                .eq("username", login_data.username)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise backend_error(e, "Login")

        user = result.data[0] if result.data else None
        if not user or not verify_password(login_data.password, user.get("password_hash") or ""):
            raise HTTPException(status_code=401, detail="Invalid username or password")

        return LoginResponse(username=user["username"])

    def signup(self, signup_data: EmailCredentialsRequest) -> SignupResponse:
        """Register a provider-owned identity with Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": signup_data.email,
                "password": signup_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Sign-up failed: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        return SignupResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or signup_data.email,
            message="User registered successfully"
        )

    def sign_in(self, login_data: EmailCredentialsRequest) -> TokenResponse:
        """Authenticate with Supabase Auth and hand the session token to the caller"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Sign-in failed: {error_message}")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> ProviderPrincipal:
        """Resolve a Supabase Auth access token to a principal"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info(f"Rejected access token: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        return ProviderPrincipal(user_id=user.id, email=user.email)

    def oauth_url(self, provider: str, redirect_to: str) -> OAuthUrlResponse:
        """Ask Supabase Auth for the provider's authorization URL"""
        try:
            response = self.supabase.auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": redirect_to}
            })
        except Exception as e:
            error_message = str(e)
            if "provider" in error_message.lower():
                raise HTTPException(status_code=400, detail=f"Unsupported OAuth provider: {provider}")
            logger.error(f"OAuth start failed: {error_message}")
            raise HTTPException(status_code=500, detail=error_message)

        return OAuthUrlResponse(provider=provider, url=response.url)
