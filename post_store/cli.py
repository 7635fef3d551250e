import datetime
import logging
import sys
from argparse import ArgumentParser

from pydantic import ValidationError

from post_store.exceptions import PostValidationException, PublishException
from post_store.schemas.post import PostFilter
from post_store.services.post_service import PostService
from post_store.services.publisher_service import PublisherService

logging.basicConfig(format="%(message)s", level=logging.INFO)
logger = logging.getLogger(__name__)

parser = ArgumentParser(description="Validate, list and export blog posts")
subparsers = parser.add_subparsers(dest="command", required=True)

validate_parser = subparsers.add_parser("validate", help="check post metadata")
validate_parser.add_argument(
    "paths", nargs="*", help="files to check, defaults to the whole content root"
)

list_parser = subparsers.add_parser("list", help="list published posts")
list_parser.add_argument("--category", type=str, help="only posts in this category")
list_parser.add_argument("--tag", type=str, help="only posts with this tag")
list_parser.add_argument(
    "--since", type=datetime.date.fromisoformat, help="first day, YYYY-MM-DD"
)
list_parser.add_argument(
    "--until", type=datetime.date.fromisoformat, help="last day, YYYY-MM-DD"
)

subparsers.add_parser("export", help="write published posts to the drop target")


def validate(paths: list[str]) -> int:
    post_service = PostService()
    if not paths:
        report = post_service.get_report()
        for path, errors in report.invalid.items():
            for error in errors:
                logger.error(f"{path}: {error}")
        for post_path, sources in report.duplicates.items():
            logger.error(f"{post_path}: duplicate key in {', '.join(sources)}")
        logger.info(
            f"{report.total} posts, {report.published} published, "
            f"{len(report.invalid)} invalid, {len(report.duplicates)} duplicate keys"
        )
        return 1 if report.invalid or report.duplicates else 0

    failed = 0
    for path in paths:
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"{path}: unreadable file: {e}")
            failed += 1
            continue
        result = post_service.validate_post(content, path)
        for error in result.errors:
            logger.error(f"{path}: {error}")
        failed += 0 if result.valid else 1
    logger.info(f"{len(paths) - failed} of {len(paths)} files are valid")
    return 1 if failed else 0


def list_posts(post_filter: PostFilter) -> int:
    page = PostService().list_posts(post_filter)
    for post in page.posts:
        logger.info(f"{post.post_path}\t{post.title}")
    return 0


def export() -> int:
    try:
        paths = PublisherService().publish_all()
    except (PostValidationException, PublishException) as e:
        logger.error(f"Export failed: {e.detail}")
        return 1
    for path in paths:
        logger.info(f"Wrote {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parser.parse_args(argv)
    match args.command:
        case "validate":
            return validate(args.paths)
        case "list":
            try:
                post_filter = PostFilter(
                    category=args.category,
                    tag=args.tag,
                    date_from=args.since,
                    date_to=args.until,
                )
            except ValidationError as e:
                parser.error(str(e))
            return list_posts(post_filter)
        case "export":
            return export()


if __name__ == "__main__":
    sys.exit(main())
