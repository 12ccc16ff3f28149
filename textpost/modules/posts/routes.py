from fastapi import APIRouter, Body, Depends
from textpost.database.supabase_client import get_supabase
from textpost.core.dependencies import get_bearer_principal, resolve_principal
from textpost.core.principal import ProviderPrincipal
from textpost.modules.posts.schemas import (
    PostCreate, PostUpdate, PostOwner, PostResponse, DeleteResponse
)
from textpost.modules.posts.service import PostService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(supabase: Client = Depends(get_supabase)) -> PostService:
    return PostService(supabase)


@router.get("", response_model=List[PostResponse])
async def list_posts(service: PostService = Depends(get_post_service)):
    """All posts, newest first, no pagination"""
    return service.list_posts()


@router.post("", response_model=PostResponse)
async def create_post(
    post_data: PostCreate,
    bearer: Optional[ProviderPrincipal] = Depends(get_bearer_principal),
    service: PostService = Depends(get_post_service)
):
    principal = resolve_principal(bearer, post_data.username)
    return service.create_post(post_data.content, principal)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    bearer: Optional[ProviderPrincipal] = Depends(get_bearer_principal),
    service: PostService = Depends(get_post_service)
):
    """Update content of a post the caller owns"""
    principal = resolve_principal(bearer, post_data.username)
    return service.update_post(post_id, post_data.content, principal)


@router.delete("/{post_id}", response_model=DeleteResponse)
async def delete_post(
    post_id: int,
    owner: Optional[PostOwner] = Body(default=None),
    bearer: Optional[ProviderPrincipal] = Depends(get_bearer_principal),
    service: PostService = Depends(get_post_service)
):
    """Delete a post the caller owns"""
    principal = resolve_principal(bearer, owner.username if owner else None)
    service.delete_post(post_id, principal)
    return DeleteResponse()
