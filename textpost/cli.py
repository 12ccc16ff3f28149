#!/usr/bin/env python3
"""
TextPost command line.

`serve` runs the API server; the other commands drive a ClientSession
against a running server and keep the signed-in identity in a local file.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

# Configure logging
logging.basicConfig(
    level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

logger = logging.getLogger(__name__)


def serve(args: argparse.Namespace) -> int:
    import uvicorn
    from pydantic import ValidationError

    from textpost.config import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]).upper() for err in e.errors())
        print(f"Refusing to start: missing or invalid configuration ({missing})", file=sys.stderr)
        return 2

    uvicorn.run(
        "textpost.main:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _session(args: argparse.Namespace):
    from textpost.client import ClientSession, IdentityStore, TextPostClient

    client = TextPostClient(base_url=args.url)
    return ClientSession(client, IdentityStore(args.session_file))


def _report(session, ok: bool) -> int:
    if session.notice:
        print(session.notice)
    if not ok:
        print(f"Error: {session.error or 'request failed'}", file=sys.stderr)
        return 1
    return 0


def print_feed(session) -> None:
    if not session.posts:
        print("No posts yet.")
        return
    for post in session.posts:
        mine = " *" if session.can_modify(post) else ""
        print(f"[{post.id}] {post.author}{mine}  {post.created_at:%Y-%m-%d %H:%M}")
        print(f"    {post.content}")


def _require_login(session) -> bool:
    from textpost.client import AuthState

    if session.state != AuthState.AUTHENTICATED:
        print("Not logged in. Run `textpost login` first.", file=sys.stderr)
        return False
    return True


def cmd_register(args: argparse.Namespace) -> int:
    session = _session(args)
    if session.identity:
        session.logout()
    return _report(session, session.register(args.username, args.password))


def cmd_login(args: argparse.Namespace) -> int:
    session = _session(args)
    if session.identity:
        session.logout()
    if args.email:
        ok = session.login_with_email(args.username, args.password)
    else:
        ok = session.login(args.username, args.password)
    if ok:
        print(f"Logged in as {session.identity}")
    return _report(session, ok)


def cmd_logout(args: argparse.Namespace) -> int:
    _session(args).logout()
    print("Logged out")
    return 0


def cmd_feed(args: argparse.Namespace) -> int:
    session = _session(args)
    if not _require_login(session):
        return 1
    print_feed(session)
    return 0


def cmd_post(args: argparse.Namespace) -> int:
    session = _session(args)
    if not _require_login(session):
        return 1
    session.start_compose()
    ok = session.submit_post(" ".join(args.content))
    if ok:
        print_feed(session)
    return _report(session, ok)


def cmd_edit(args: argparse.Namespace) -> int:
    session = _session(args)
    if not _require_login(session):
        return 1
    ok = session.start_edit(args.post_id) and session.submit_edit(" ".join(args.content))
    if ok:
        print_feed(session)
    return _report(session, ok)


def cmd_delete(args: argparse.Namespace) -> int:
    session = _session(args)
    if not _require_login(session):
        return 1
    ok = session.delete_post(args.post_id)
    if ok:
        print_feed(session)
    return _report(session, ok)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="textpost", description="TextPost server and client")
    parser.add_argument("--url", default=os.environ.get("TEXTPOST_URL", "http://localhost:3000"), help="API base URL")
    parser.add_argument("--session-file", default=None, help="Where the signed-in identity is kept")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.set_defaults(func=serve)

    for name, func, help_text in (
        ("register", cmd_register, "Create a username/password account"),
        ("login", cmd_login, "Log in and remember the identity"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("username", help="Username (or email with --email)")
        p.add_argument("password")
        if name == "login":
            p.add_argument("--email", action="store_true", help="Sign in with Supabase Auth email/password")
        p.set_defaults(func=func)

    sub.add_parser("logout", help="Forget the stored identity").set_defaults(func=cmd_logout)
    sub.add_parser("feed", help="Show all posts, newest first").set_defaults(func=cmd_feed)

    p = sub.add_parser("post", help="Publish a post")
    p.add_argument("content", nargs="+")
    p.set_defaults(func=cmd_post)

    p = sub.add_parser("edit", help="Change the content of one of your posts")
    p.add_argument("post_id", type=int)
    p.add_argument("content", nargs="+")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete one of your posts")
    p.add_argument("post_id", type=int)
    p.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
