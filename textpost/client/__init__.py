from textpost.client.api import ApiError, Post, TextPostClient
from textpost.client.session import AuthState, ClientSession, InvalidTransition, View
from textpost.client.storage import IdentityStore, StoredIdentity

__all__ = [
    "ApiError",
    "AuthState",
    "ClientSession",
    "IdentityStore",
    "InvalidTransition",
    "Post",
    "StoredIdentity",
    "TextPostClient",
    "View",
]
