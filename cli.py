import argparse
import asyncio
import os
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from feedrank.config import load_settings
from feedrank.errors import FeedError
from feedrank.logging_config import LOG_FORMATS, configure_logging
from feedrank.main import build_service

console = Console()


def render_posts(title: str, posts: list) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Strength", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Posted", style="dim")
    table.add_column("URL")
    table.add_column("Tags", style="magenta")

    for i, post in enumerate(posts, 1):
        strength = post.get("strength")
        posted = datetime.fromtimestamp(post["created_at"], tz=timezone.utc)
        table.add_row(
            str(i),
            f"{strength:.3f}" if strength is not None else "-",
            post.get("source_title") or str(post["sid"]),
            posted.strftime("%Y-%m-%d %H:%M"),
            post["main_url"],
            ", ".join(t["tag"] for t in post.get("tags", [])),
        )
    return table


async def main(args):
    overrides = {"database_url": args.db} if args.db else None
    settings = load_settings(overrides)
    service = build_service(settings)

    if args.command == "init-db":
        service.store.create_schema()
        console.print(f"[green]Schema ready at {settings.database_url}[/]")
        return

    try:
        if args.command == "tags":
            posts = await service.tags(args.tag, offset=args.offset, limit=args.limit)
            title = f"Posts tagged {', '.join(sorted(set(args.tag)))}"
        elif args.command == "trending":
            posts = await service.trending()
            title = "Trending"
        elif args.command == "top":
            posts = await service.top(args.age)
            title = f"Top posts ({args.age or settings.top_age_hours}h)"
        else:
            posts = await service.announcements(args.age)
            title = f"Announcements ({args.age or settings.announcements_age_hours}h)"
    except FeedError as e:
        console.print(f"[red]Error: {e}[/]")
        return 1

    if not posts:
        console.print("[yellow]No posts found.[/]")
        return 0
    console.print(render_posts(title, posts))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ranked feeds of aggregated posts")
    parser.add_argument("--db", help="SQLAlchemy database URL")
    parser.add_argument("--log-level", help="WARNING by default; serve uses the log_level setting")
    parser.add_argument("--log-format", choices=LOG_FORMATS)
    sub = parser.add_subparsers(dest="command", required=True)

    tags = sub.add_parser("tags", help="Posts carrying any of the given tags")
    tags.add_argument("tag", nargs="+")
    tags.add_argument("--offset", type=int, default=0)
    tags.add_argument("--limit", type=int, default=None)

    sub.add_parser("trending", help="Score with time decay")

    top = sub.add_parser("top", help="Top posts over a window")
    top.add_argument("--age", type=int, default=None, help="Window in hours")

    ann = sub.add_parser("announcements", help="Latest announcement posts")
    ann.add_argument("--age", type=int, default=None, help="Window in hours")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    sub.add_parser("init-db", help="Create the tables")
    return parser


def serve(args) -> None:
    import uvicorn

    # the app factory reads its settings from the environment
    passed = {
        "DATABASE_URL": args.db,
        "LOG_LEVEL": args.log_level,
        "LOG_FORMAT": args.log_format,
    }
    for key, value in passed.items():
        if value:
            os.environ[f"FEEDRANK_{key}"] = value
    uvicorn.run("feedrank.main:create_app", factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    args = build_parser().parse_args()
    if args.command == "serve":
        serve(args)
    else:
        log_format = args.log_format or load_settings().log_format
        configure_logging(args.log_level or "WARNING", log_format)
        raise SystemExit(asyncio.run(main(args)) or 0)
