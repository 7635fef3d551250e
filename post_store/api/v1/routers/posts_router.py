import datetime
from typing import Annotated

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit
from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.exceptions import RequestValidationError

from post_store import deps, settings
from post_store.models.post import ScanReport, ValidationResult
from post_store.models.response import Page
from post_store.models.response import Post as PostResponse
from post_store.schemas.post import PostFilter, ValidatePost
from post_store.services.post_service import PostService

logger = Logger(utc=True)
metrics = Metrics(namespace="PostStore", service=settings.app_name)
router = APIRouter()


@router.get(
    "",
    response_model=Page,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def get_posts(
    post_filter: Annotated[PostFilter, Query()],
    post_service: PostService = Depends(deps.post_service),
) -> Page:
    metrics.add_metric(name="GetPosts", unit=MetricUnit.Count, value=1)
    return post_service.list_posts(post_filter)


@router.get("/archive", status_code=status.HTTP_200_OK)
async def get_archive(
    post_service: PostService = Depends(deps.post_service),
) -> dict[str, int]:
    return post_service.get_archive()


@router.get("/categories", status_code=status.HTTP_200_OK)
async def get_categories(
    post_service: PostService = Depends(deps.post_service),
) -> dict[str, int]:
    return post_service.get_categories()


@router.get("/tags", status_code=status.HTTP_200_OK)
async def get_tags(
    post_service: PostService = Depends(deps.post_service),
) -> dict[str, int]:
    return post_service.get_tags()


@router.get("/report", response_model=ScanReport, status_code=status.HTTP_200_OK)
async def get_report(
    post_service: PostService = Depends(deps.post_service),
) -> ScanReport:
    return post_service.get_report()


@router.post(
    "/validate", response_model=ValidationResult, status_code=status.HTTP_200_OK
)
async def validate_post(
    model: ValidatePost,
    post_service: PostService = Depends(deps.post_service),
) -> ValidationResult:
    metrics.add_metric(name="ValidatePost", unit=MetricUnit.Count, value=1)
    result = post_service.validate_post(model.content, model.path)
    if not result.valid:
        logger.info(f"Validation failed {model.path=} {result.errors=}")
    return result


@router.get(
    "/{year}/{month}/{day}/{slug}",
    response_model=PostResponse,
    status_code=status.HTTP_200_OK,
)
async def get_post_by_date_and_slug(
    slug: str,
    year: int = Path(ge=1),
    month: int = Path(ge=1, le=12),
    day: int = Path(ge=1, le=31),
    post_service: PostService = Depends(deps.post_service),
) -> PostResponse:
    try:
        date = datetime.date(year, month, day)
    except ValueError as exc:
        raise RequestValidationError(
            [{"loc": ("path", "day"), "msg": str(exc), "type": "value_error"}]
        ) from exc
    metrics.add_metric(name="GetPostByDateAndSlug", unit=MetricUnit.Count, value=1)
    return post_service.get_post(date, slug)
