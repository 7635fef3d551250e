import pytest
from fastapi.testclient import TestClient

from post_store.repositories.post_repository import PostRepository
from post_store.services.post_service import PostService
from post_store.services.publisher_service import PublisherService
from post_store.services.validation_service import ValidationService


@pytest.fixture
def post_repository(content_root) -> PostRepository:
    return PostRepository()


@pytest.fixture
def post_service(content_root) -> PostService:
    return PostService()


@pytest.fixture
def publisher_service(content_root) -> PublisherService:
    return PublisherService()


@pytest.fixture
def validation_service() -> ValidationService:
    return ValidationService()


@pytest.fixture
def test_client(content_root) -> TestClient:
    from post_store.http_handler import app

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def lambda_context():
    class LambdaContext:
        function_name = "post-store"
        function_version = "$LATEST"
        memory_limit_in_mb = 128
        invoked_function_arn = (
            "arn:aws:lambda:eu-central-1:123456789012:function:post-store"
        )
        aws_request_id = "52fdfc07-2182-154f-163f-5f0f9a621d72"
        log_group_name = "/aws/lambda/post-store"
        log_stream_name = "2025/06/02/[$LATEST]abcdef"

    return LambdaContext()
