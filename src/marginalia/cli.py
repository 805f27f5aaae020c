"""CLI for marginalia - document-synced outline notes."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.documents import kind_for
from .adapters.prompts import ScriptedPrompter
from .core.controller import SyncController
from .core.errors import MarginaliaError
from .core.utils import line_to_offset
from .runtime import Runtime, build_runtime, describe_view, open_notebook, open_session


def _parse_click(text: str) -> tuple[float, float]:
    top, _, left = text.partition(",")
    return float(top), float(left or 0.0)


def _document_state(args: argparse.Namespace) -> dict[str, Any]:
    kind = args.kind or kind_for(args.document)
    state: dict[str, Any] = {"selection": args.selection}
    if kind == "reflow":
        state["chapter"] = args.page
        state["start"] = args.top
        state["end"] = min(1.0, args.top + args.span)
    else:
        state["page"] = args.page
    return state


def _start(args: argparse.Namespace, rt: Runtime) -> SyncController:
    notebook = open_notebook(args.notes)
    clicks = [_parse_click(c) for c in getattr(args, "click", None) or []]
    answers = [args.title] if getattr(args, "title", None) is not None else []
    prompter = ScriptedPrompter(clicks=clicks, answers=answers)
    controller = open_session(
        rt,
        notebook,
        args.document,
        kind=args.kind,
        prompter=prompter,
        **_document_state(args),
    )
    if getattr(args, "line", None):
        controller.panel.cursor = line_to_offset(notebook.text, args.line)
    return controller


def _finish(controller: SyncController) -> None:
    controller.session.notebook.save()
    controller.kill()


def cmd_view(args: argparse.Namespace, rt: Runtime) -> int:
    """Show which notes annotate the current view."""
    controller = _start(args, rt)
    info = controller.last_view_info or controller.view_info()
    data = describe_view(controller, info)
    _finish(controller)

    if args.json:
        print(json.dumps(data, indent=2))
        return 0
    print(data["count"])
    for note in data["notes"]:
        print(f"{note['location'] or '-'}\t{note['title']}")
    return 0


def cmd_insert(args: argparse.Namespace, rt: Runtime) -> int:
    """Insert a note for the current location."""
    controller = _start(args, rt)
    if args.no_questions:
        controller.toggle_no_questions()
    if args.precise:
        node = controller.insert_precise_note()
    else:
        node = controller.insert_note(force_new=args.new)
    if node is None:
        controller.kill()
        print("Note insertion aborted", file=sys.stderr)
        return 1
    _finish(controller)
    if not args.quiet:
        print(json.dumps({"id": node.id, "title": node.title}) if args.json else node.title)
    return 0


def cmd_note(args: argparse.Namespace, rt: Runtime) -> int:
    """Jump to the previous, current or next note."""
    controller = _start(args, rt)
    try:
        move = {
            "prev": controller.prev_note,
            "current": controller.current_note,
            "next": controller.next_note,
        }[args.direction]
        node = move()
    finally:
        controller.kill()
    location = controller.adapter.pretty_print(node.location)
    if args.json:
        print(json.dumps({"id": node.id, "title": node.title, "location": location}))
    else:
        print(f"{location}\t{node.title}")
    return 0


def cmd_page(args: argparse.Namespace, rt: Runtime) -> int:
    """Jump to the previous or next page (or chapter) with notes."""
    controller = _start(args, rt)
    try:
        if args.direction == "current":
            controller.current_page()
            location = controller.adapter.approx_location()
        elif args.direction == "prev":
            location = controller.prev_page()
        else:
            location = controller.next_page()
        info = controller.last_view_info
    finally:
        controller.kill()
    if args.json:
        data = describe_view(controller, info) if info else {}
        data["location"] = controller.adapter.pretty_print(location)
        print(json.dumps(data, indent=2))
    else:
        print(controller.adapter.pretty_print(location))
    return 0


def cmd_set_start(args: argparse.Namespace, rt: Runtime) -> int:
    """Save (or clear) the location a session opens at."""
    controller = _start(args, rt)
    location = controller.set_start_location(clear=args.clear)
    _finish(controller)
    if not args.quiet and location is not None:
        print(controller.adapter.pretty_print(location))
    return 0


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install marginalia[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token = None
    if args.token == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
    elif args.token == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
    else:
        token = args.token

    app = create_app(rt, token=token)
    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def _add_session_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("notes", type=Path, help="Notes file (Markdown outline)")
    p.add_argument("document", help="Document the notes annotate")
    p.add_argument("--kind", choices=["paged", "reflow"], default=None,
                   help="Document kind (default: by extension)")
    p.add_argument("--page", type=int, default=1, help="Current page or chapter")
    p.add_argument("--top", type=float, default=0.0,
                   help="Start of the visible slice (reflowable documents)")
    p.add_argument("--span", type=float, default=0.1,
                   help="Size of the visible slice (reflowable documents)")
    p.add_argument("--selection", default=None, help="Text selected in the document")


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="marg", description="Keep outline notes in sync with a document"
    )
    parser.add_argument(
        "--version", action="version",
        version=f"marginalia {__version__} (python {platform.python_version()}, "
                f"platform {platform.system().lower()})",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Path to config file (default: search cwd/marginalia.toml, next to notes)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimize output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_view = subparsers.add_parser("view", help="Show the notes in view")
    _add_session_args(parser_view)

    parser_insert = subparsers.add_parser("insert", help="Insert a note at the current location")
    _add_session_args(parser_insert)
    parser_insert.add_argument("--title", default=None,
                               help="Existing note to merge into, or title of a new note")
    parser_insert.add_argument("--new", action="store_true", help="Always create a new note")
    parser_insert.add_argument("--precise", action="store_true",
                               help="Place the note at --click instead of the page top")
    parser_insert.add_argument("--click", action="append", metavar="TOP[,LEFT]",
                               help="Clicked spot, as fractions of the page")
    parser_insert.add_argument("--no-questions", action="store_true",
                               help="Toggle no-questions mode for this insertion")

    parser_note = subparsers.add_parser("note", help="Go to the previous, current or next note")
    parser_note.add_argument("direction", choices=["prev", "current", "next"])
    _add_session_args(parser_note)
    parser_note.add_argument("--line", type=int, default=None,
                             help="Cursor line in the notes file")

    parser_page = subparsers.add_parser("page", help="Go to the previous or next page with notes")
    parser_page.add_argument("direction", choices=["prev", "current", "next"])
    _add_session_args(parser_page)

    parser_start = subparsers.add_parser("set-start", help="Save the current location as start")
    _add_session_args(parser_start)
    parser_start.add_argument("--clear", action="store_true", help="Remove the start location")

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default="127.0.0.1", help="Host (default: 127.0.0.1)")
    parser_serve.add_argument("--port", type=int, default=8766, help="Port (default: 8766)")
    parser_serve.add_argument("--token", default="auto",
                              help="Bearer token, 'auto' to generate, 'none' to disable")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    rt = build_runtime(config_path=args.config, notes_path=getattr(args, "notes", None))

    handlers = {
        "view": cmd_view,
        "insert": cmd_insert,
        "note": cmd_note,
        "page": cmd_page,
        "set-start": cmd_set_start,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except (MarginaliaError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
