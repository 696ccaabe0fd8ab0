import argparse
import asyncio
import logging
import sys
from pathlib import Path

from linkshelf.adapters.static_page import StaticPageMetadata
from linkshelf.app_shell.config import ClientSettings, load_settings
from linkshelf.app_shell.context import ServiceContext
from linkshelf.app_shell.dispatcher import (
    BeginEdit,
    BulkDelete,
    CapturePage,
    ChangePage,
    ClearCredential,
    DeleteLink,
    EditDraft,
    Reload,
    SaveEdit,
    SetCredential,
    SetFilter,
    SetSort,
)
from linkshelf.components import tags as tag_index
from linkshelf.components.feed import render_rss
from linkshelf.domain.entities import LinkId

logger = logging.getLogger("cli")


def _parse_id(raw: str) -> LinkId:
    return int(raw) if raw.isdigit() else raw


async def handle_login(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    result = await ctx.dispatcher.dispatch(SetCredential(args.key))
    return result.success


async def handle_logout(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    result = await ctx.dispatcher.dispatch(ClearCredential(), render=False)
    print(result.message)
    return result.success


async def handle_list(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    dispatch = ctx.dispatcher.dispatch
    result = await dispatch(Reload(search=args.search), render=False)
    for tag in args.tag or []:
        await dispatch(SetFilter(tag), render=False)
    await dispatch(SetSort(args.sort), render=False)
    await dispatch(ChangePage(args.page), render=False)
    ctx.dispatcher.show(result)
    return result.success


async def handle_add(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    await ctx.dispatcher.dispatch(Reload(), render=False)
    ctx.dispatcher.page_provider = StaticPageMetadata(
        url=args.url, title=args.title or "", description=args.description or ""
    )
    result = await ctx.dispatcher.dispatch(CapturePage(notes=args.notes, tags=args.tags))
    return result.success


async def handle_edit(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    dispatch = ctx.dispatcher.dispatch
    link_id = _parse_id(args.id)
    await dispatch(Reload(), render=False)

    changes = {
        name: getattr(args, name)
        for name in ("url", "title", "description", "notes")
        if getattr(args, name) is not None
    }
    if args.tags is not None:
        changes["tags"] = [tag.strip() for tag in args.tags.split(",") if tag.strip()]

    result = await dispatch(BeginEdit(link_id), render=False)
    if result.success:
        result = await dispatch(EditDraft(link_id, changes), render=False)
    if result.success:
        result = await dispatch(SaveEdit(link_id), render=False)
    print(result.message if result.success else f"Error: {result.message}")
    return result.success


async def handle_delete(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    dispatch = ctx.dispatcher.dispatch
    ids = [_parse_id(raw) for raw in args.ids]
    await dispatch(Reload(), render=False)
    if len(ids) == 1:
        result = await dispatch(DeleteLink(ids[0]), render=False)
    else:
        result = await dispatch(BulkDelete(tuple(ids)), render=False)
    print(result.message if result.success else f"Error: {result.message}")
    return result.success


async def handle_tags(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    await ctx.dispatcher.dispatch(Reload(), render=False)
    for tag in tag_index.compute(ctx.engine.links, ctx.engine.vocabulary):
        print(tag)
    return True


async def handle_feed_url(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    result = await ctx.engine.rss_feed_url()
    print(result.message if result.success else f"Error: {result.message}")
    return result.success


async def handle_rss(ctx: ServiceContext, args: argparse.Namespace) -> bool:
    await ctx.dispatcher.dispatch(Reload(), render=False)
    sys.stdout.write(render_rss(ctx.engine.links, site_url=ctx.settings.api_base_url))
    return True


HANDLERS = {
    "login": handle_login,
    "logout": handle_logout,
    "list": handle_list,
    "add": handle_add,
    "edit": handle_edit,
    "delete": handle_delete,
    "tags": handle_tags,
    "feed-url": handle_feed_url,
    "rss": handle_rss,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="linkshelf - personal link collection")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # login / logout
    login_parser = subparsers.add_parser("login", help="Validate and store an API key")
    login_parser.add_argument("key", help="API key")
    subparsers.add_parser("logout", help="Forget the stored API key")

    # list
    list_parser = subparsers.add_parser("list", help="Show saved links")
    list_parser.add_argument("--tag", action="append", help="Only links with this tag (repeatable)")
    list_parser.add_argument("--sort", choices=["newest", "oldest"], default="newest")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--search", help="Server-side search text")

    # add
    add_parser = subparsers.add_parser("add", help="Save a link")
    add_parser.add_argument("url")
    add_parser.add_argument("--title")
    add_parser.add_argument("--description")
    add_parser.add_argument("--notes")
    add_parser.add_argument("--tags", help="Comma-separated tags")

    # edit
    edit_parser = subparsers.add_parser("edit", help="Edit a saved link")
    edit_parser.add_argument("id")
    edit_parser.add_argument("--url")
    edit_parser.add_argument("--title")
    edit_parser.add_argument("--description")
    edit_parser.add_argument("--notes")
    edit_parser.add_argument("--tags", help="Comma-separated tags (replaces existing)")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete one or more links")
    delete_parser.add_argument("ids", nargs="+")

    subparsers.add_parser("tags", help="List known tags")
    subparsers.add_parser("feed-url", help="Show the account's RSS feed URL")
    subparsers.add_parser("rss", help="Render the collection as RSS")

    return parser


async def run(settings: ClientSettings, args: argparse.Namespace) -> bool:
    ctx = ServiceContext.create(settings)
    try:
        return await HANDLERS[args.command](ctx, args)
    finally:
        await ctx.aclose()


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        stream=sys.stderr,
    )
    logger.debug(f"Using API at {settings.api_base_url}")

    ok = asyncio.run(run(settings, args))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
