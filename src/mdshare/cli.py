"""
mdshare command-line client

Terminal front-end of the client engine. Every subcommand builds a
``ClientContext`` around a ``ConsoleView`` and runs one session flow.

Usage:
    $ mdshare new notes.md
    $ mdshare view 3f2a...            # prints markdown
    $ mdshare view 3f2a... --html     # prints rendered HTML
    $ mdshare edit 42 notes.md        # writes the note, then autosaves edits
    $ mdshare push 42 notes.md        # one manual save of the file contents
    $ mdshare expire 42 1d
    $ mdshare history --remove 42
    $ mdshare open "http://localhost:8000/?view=3f2a..."
    $ mdshare theme --toggle
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mdshare.client.context import ClientContext, create_client
from mdshare.client.render import render_markdown
from mdshare.client.state import SaveStatus
from mdshare.client.view import ConsoleView
from mdshare.client.watch import FileWatcher
from mdshare.schemas.notes import EXPIRATION_OPTIONS

logger = logging.getLogger("mdshare")

# Same layout as the server logs; the client never loads server settings
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_new(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Create a note from a file and print its links."""
    text = Path(args.file).read_text(encoding="utf-8")
    await ctx.controller.new_note()
    ctx.coordinator.handle_content_change(text)
    created = await ctx.coordinator.save_new_note()
    if created is None:
        return EXIT_FAILURE
    print(ctx.coordinator.share_url(created.unique_id))
    print(ctx.coordinator.edit_url(created.id))
    return EXIT_OK


async def cmd_view(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Print a shared note as markdown or HTML."""
    if not await ctx.controller.load_for_view(args.unique_id):
        return EXIT_FAILURE
    content = ctx.store.snapshot().content
    print(render_markdown(content) if args.html else content)
    return EXIT_OK


async def cmd_edit(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Write an owned note to FILE, then autosave every change made to FILE."""
    if not await ctx.controller.open_edit_link(args.note_id):
        return EXIT_FAILURE

    path = Path(args.file)
    path.write_text(ctx.store.snapshot().content, encoding="utf-8")
    logger.info("Note %s written to %s", args.note_id, path)

    watcher = FileWatcher(path, ctx.coordinator, poll_interval=args.poll_interval)
    watcher.prime()
    print(f"Watching {path} (Ctrl+C to stop)", file=sys.stderr)
    try:
        await watcher.run()
    finally:
        await ctx.coordinator.flush()
    return EXIT_OK


async def cmd_push(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Save the contents of FILE to an owned note, without debounce."""
    if not await ctx.controller.open_edit_link(args.note_id):
        return EXIT_FAILURE
    text = Path(args.file).read_text(encoding="utf-8")
    ctx.coordinator.handle_content_change(text)
    await ctx.coordinator.trigger_manual_save()
    return EXIT_OK if ctx.store.snapshot().save_status == SaveStatus.SAVED else EXIT_FAILURE


async def cmd_expire(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Set the expiry of an owned note."""
    if not await ctx.controller.open_edit_link(args.note_id):
        return EXIT_FAILURE
    ok = await ctx.controller.update_expiration(args.option)
    return EXIT_OK if ok else EXIT_FAILURE


async def cmd_history(ctx: ClientContext, args: argparse.Namespace) -> int:
    """List, prune or clear the recent-notes history."""
    if args.clear:
        return EXIT_OK if ctx.controller.clear_history() else EXIT_FAILURE
    if args.remove:
        ref = args.remove
        if ref.isdigit():
            ctx.controller.remove_from_history(int(ref))
        else:
            ctx.controller.remove_from_history(None, ref)
        return EXIT_OK

    notes = ctx.history.notes
    if not notes:
        print("No recent notes.")
    for note in notes:
        marker = "view" if note.view_only else "edit"
        print(f"[{marker}] {note.title}  {ctx.controller.recent_note_link(note)}")
    return EXIT_OK


async def cmd_open(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Route a pasted share or edit link and print the note."""
    await ctx.controller.open_link(args.link)
    state = ctx.store.snapshot()
    if state.is_new_note:
        return EXIT_FAILURE
    print(state.content)
    return EXIT_OK


async def cmd_theme(ctx: ClientContext, args: argparse.Namespace) -> int:
    """Show (or toggle) the persisted theme."""
    theme = ctx.store.snapshot().theme
    if args.toggle:
        theme = ctx.controller.toggle_theme()
    print(theme)
    return EXIT_OK


COMMANDS = {
    "new": cmd_new,
    "view": cmd_view,
    "edit": cmd_edit,
    "push": cmd_push,
    "expire": cmd_expire,
    "history": cmd_history,
    "open": cmd_open,
    "theme": cmd_theme,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdshare", description="Share markdown notes from the terminal"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log client activity"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Create a note from a file")
    p.add_argument("file")

    p = sub.add_parser("view", help="Print a shared note")
    p.add_argument("unique_id")
    p.add_argument("--html", action="store_true", help="Render to HTML")

    p = sub.add_parser("edit", help="Edit an owned note through a local file")
    p.add_argument("note_id", type=int)
    p.add_argument("file")
    p.add_argument(
        "--poll-interval", type=float, default=0.25, help="Seconds between checks"
    )

    p = sub.add_parser("push", help="Save a file to an owned note once")
    p.add_argument("note_id", type=int)
    p.add_argument("file")

    p = sub.add_parser("expire", help="Set the expiry of an owned note")
    p.add_argument("note_id", type=int)
    p.add_argument("option", choices=EXPIRATION_OPTIONS)

    p = sub.add_parser("history", help="Show the recent-notes history")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--remove", metavar="ID", help="Note id or unique id")
    group.add_argument("--clear", action="store_true")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    p = sub.add_parser("open", help="Open a share or edit link")
    p.add_argument("link")

    p = sub.add_parser("theme", help="Show or toggle the theme")
    p.add_argument("--toggle", action="store_true")

    return parser


async def run(args: argparse.Namespace, ctx: ClientContext | None = None) -> int:
    """Run one subcommand; the context is closed (and flushed) afterwards."""
    if ctx is None:
        view = ConsoleView(assume_yes=getattr(args, "yes", False))
        ctx = create_client(view)
    async with ctx:
        # Stored theme and history first, so commands extend the saved list
        ctx.store.initialize_theme(ctx.cache)
        ctx.history.load()
        return await COMMANDS[args.command](ctx, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    except OSError as e:
        logger.error("%s", e)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
