from post_store.services.post_service import PostService


def post_service() -> PostService:
    return PostService()
