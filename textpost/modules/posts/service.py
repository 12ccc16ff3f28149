import logging
from supabase import Client
from textpost.core.errors import backend_error
from textpost.core.principal import Principal
from textpost.modules.posts.schemas import PostResponse
from typing import List
from fastapi import HTTPException

logger = logging.getLogger(__name__)

NOT_FOUND_OR_UNAUTHORIZED = "Post not found or unauthorized"


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _owned(self, query, post_id: int, principal: Principal):
        """Scope a query to one post and its author"""
        query = query.eq("id", post_id)
        for column, value in principal.owner_filter().items():
            query = query.eq(column, value)
        return query

    def list_posts(self) -> List[PostResponse]:
        """The whole feed, newest first"""
        try:
            result = self.supabase.table("posts")\
                .select("*")\
                .order("created_at", desc=True)\
                .order("id", desc=True)\
                .execute()
        except Exception as e:
            raise backend_error(e, "List posts")
        return [PostResponse(**post) for post in result.data or []]

    def create_post(self, content: str, principal: Principal) -> PostResponse:
        try:
            result = self.supabase.table("posts").insert({
                **principal.author_fields(),
                "content": content
            }).execute()
        except Exception as e:
            raise backend_error(e, "Create post")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create post")

        post = PostResponse(**result.data[0])
        logger.info(f"Post {post.id} created by {principal.display_name}")
        return post

    def update_post(self, post_id: int, content: str, principal: Principal) -> PostResponse:
        """Change the content of a post owned by the principal"""
        try:
            query = self.supabase.table("posts").update({"content": content})
            result = self._owned(query, post_id, principal).execute()
        except Exception as e:
            raise backend_error(e, "Update post")

        if not result.data:
            raise HTTPException(status_code=404, detail=NOT_FOUND_OR_UNAUTHORIZED)

        return PostResponse(**result.data[0])

    def delete_post(self, post_id: int, principal: Principal) -> bool:
        try:
            result = self._owned(self.supabase.table("posts").delete(), post_id, principal).execute()
        except Exception as e:
            raise backend_error(e, "Delete post")

        if not result.data:
            raise HTTPException(status_code=404, detail=NOT_FOUND_OR_UNAUTHORIZED)

        logger.info(f"Post {post_id} deleted by {principal.display_name}")
        return True
