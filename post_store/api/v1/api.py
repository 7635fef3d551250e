from fastapi import APIRouter

from post_store.api.v1.routers import posts_router

router = APIRouter(prefix="/api/v1")
router.include_router(posts_router.router, prefix="/posts", tags=["posts"])
