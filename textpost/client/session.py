"""
Client-side session state.

    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED
                                           |- VIEWING
                                           |- COMPOSING
                                           '- EDITING(post_id)

Every transition is triggered by a method call. Entering AUTHENTICATED and
every successful mutation refetch the whole feed. Request errors land in
`error` until dismissed; feed refresh failures are only logged and leave the
previous feed in place.
"""

import logging
from enum import Enum
from typing import List, Optional

from textpost.client.api import ApiError, Post, TextPostClient
from textpost.client.storage import IdentityStore, StoredIdentity

logger = logging.getLogger(__name__)

REGISTERED_NOTICE = "Registration successful! Please log in."


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class View(str, Enum):
    VIEWING = "viewing"
    COMPOSING = "composing"
    EDITING = "editing"


class InvalidTransition(Exception):
    pass


class ClientSession:
    def __init__(self, client: TextPostClient, store: IdentityStore):
        self.client = client
        self.store = store
        self.state = AuthState.UNAUTHENTICATED
        self.view = View.VIEWING
        self.editing_post_id: Optional[int] = None
        self.identity: Optional[str] = None
        self.posts: List[Post] = []
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.restore()

    @property
    def uses_token(self) -> bool:
        return bool(self.client.access_token)

    def _require(self, state: AuthState) -> None:
        if self.state != state:
            raise InvalidTransition(f"expected {state.value}, session is {self.state.value}")

    def _fail(self, e: ApiError) -> bool:
        self.error = e.message
        return False

    def _enter_authenticated(self, identity: StoredIdentity) -> None:
        self.identity = identity.display_name
        self.client.access_token = identity.access_token
        self.state = AuthState.AUTHENTICATED
        self.view = View.VIEWING
        self.editing_post_id = None
        self.refresh_feed()

    def restore(self) -> bool:
        """Pick up a previously persisted identity"""
        stored = self.store.load()
        if stored is None:
            return False
        logger.debug(f"Restored session for {stored.display_name}")
        self._enter_authenticated(stored)
        return True

    def dismiss_error(self) -> None:
        self.error = None
        self.notice = None

    def register(self, username: str, password: str) -> bool:
        self._require(AuthState.UNAUTHENTICATED)
        self.dismiss_error()
        try:
            self.client.register(username, password)
        except ApiError as e:
            return self._fail(e)
        self.notice = REGISTERED_NOTICE
        return True

    def login(self, username: str, password: str) -> bool:
        self._require(AuthState.UNAUTHENTICATED)
        self.dismiss_error()
        self.state = AuthState.AUTHENTICATING
        try:
            confirmed = self.client.login(username, password)
        except ApiError as e:
            self.state = AuthState.UNAUTHENTICATED
            return self._fail(e)
        identity = StoredIdentity(display_name=confirmed)
        self.store.save(identity)
        self._enter_authenticated(identity)
        return True

    def login_with_email(self, email: str, password: str) -> bool:
        """Sign in through Supabase Auth; the access token is kept alongside the identity"""
        self._require(AuthState.UNAUTHENTICATED)
        self.dismiss_error()
        self.state = AuthState.AUTHENTICATING
        try:
            token = self.client.sign_in_email(email, password)
        except ApiError as e:
            self.state = AuthState.UNAUTHENTICATED
            return self._fail(e)
        identity = StoredIdentity(display_name=token["email"], access_token=token["access_token"])
        self.store.save(identity)
        self._enter_authenticated(identity)
        return True

    def logout(self) -> None:
        self.store.clear()
        self.client.access_token = None
        self.state = AuthState.UNAUTHENTICATED
        self.view = View.VIEWING
        self.editing_post_id = None
        self.identity = None
        self.posts = []
        self.dismiss_error()

    def refresh_feed(self) -> bool:
        try:
            self.posts = self.client.list_posts()
        except ApiError as e:
            logger.warning(f"Failed to fetch posts: {e}")
            return False
        return True

    def can_modify(self, post: Post) -> bool:
        """Edit/delete is only offered on the session's own posts"""
        if self.state != AuthState.AUTHENTICATED or not self.identity:
            return False
        if self.uses_token:
            return post.email == self.identity
        return post.username == self.identity

    def find_post(self, post_id: int) -> Optional[Post]:
        return next((p for p in self.posts if p.id == post_id), None)

    def start_compose(self) -> None:
        self._require(AuthState.AUTHENTICATED)
        self.view = View.COMPOSING
        self.editing_post_id = None

    def submit_post(self, content: str) -> bool:
        self._require(AuthState.AUTHENTICATED)
        content = content.strip()
        if not content:
            return False
        try:
            self.client.create_post(content, username=self.identity)
        except ApiError as e:
            return self._fail(e)
        self.view = View.VIEWING
        self.refresh_feed()
        return True

    def start_edit(self, post_id: int) -> bool:
        self._require(AuthState.AUTHENTICATED)
        post = self.find_post(post_id)
        if post is None or not self.can_modify(post):
            self.error = "You can only edit your own posts"
            return False
        self.view = View.EDITING
        self.editing_post_id = post_id
        return True

    def cancel(self) -> None:
        self.view = View.VIEWING
        self.editing_post_id = None

    def submit_edit(self, content: str) -> bool:
        self._require(AuthState.AUTHENTICATED)
        if self.view != View.EDITING or self.editing_post_id is None:
            raise InvalidTransition("not editing a post")
        content = content.strip()
        if not content:
            return False
        try:
            self.client.update_post(self.editing_post_id, content, username=self.identity)
        except ApiError as e:
            return self._fail(e)
        self.cancel()
        self.refresh_feed()
        return True

    def delete_post(self, post_id: int) -> bool:
        self._require(AuthState.AUTHENTICATED)
        post = self.find_post(post_id)
        if post is None or not self.can_modify(post):
            self.error = "You can only delete your own posts"
            return False
        try:
            self.client.delete_post(post_id, username=self.identity)
        except ApiError as e:
            return self._fail(e)
        if self.editing_post_id == post_id:
            self.cancel()
        self.refresh_feed()
        return True
