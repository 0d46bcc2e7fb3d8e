"""CLI entry point: python -m digest."""

import argparse
import sys

from .config import Settings, run_setup
from .errors import ConfigError, DigestError
from .log import log, set_verbose


def cmd_run(args, settings: Settings):
    from .runner import build_runner

    runner = build_runner(settings)

    if args.room:
        outcome = runner.preview(args.room)
        if not outcome.found:
            print(f"\n  {args.room}: no new article found.")
        else:
            a = outcome.article
            print(f"\n  {args.room}: [{outcome.stage}] {outcome.label}")
            print(f"  {a.title}\n  {a.url}  (stocks: {a.stock_count})")
        if outcome.pruned:
            print(f"  Removed exhausted interest(s): {', '.join(outcome.pruned)}")
        return outcome

    report = runner.run(dry_run=args.dry_run)
    print(f"\n{report.summary()}")
    return report


def cmd_register(args, settings: Settings):
    from .providers.chatwork import ChatworkClient
    from .providers.qiita import QiitaSearch
    from .providers.supabase import SupabaseStore
    from .registration import Registrar

    settings.require()
    chat = None if args.quiet else ChatworkClient(settings.chatwork_token, timeout=settings.request_timeout)
    registrar = Registrar(
        QiitaSearch(settings.qiita_token, timeout=settings.request_timeout),
        SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout),
        chat,
    )
    result = registrar.register(args.room, args.message)

    if result.registered:
        print(f"\n  {result.message}")
    for word, reason in result.skipped.items():
        print(f"  skipped {word}: {reason}")
    return result


def cmd_save(args, settings: Settings):
    from .providers.chatwork import ChatworkClient
    from .providers.supabase import SupabaseStore
    from .saving import save_article

    settings.require()
    body = save_article(
        ChatworkClient(settings.chatwork_token, timeout=settings.request_timeout),
        SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout),
        args.room,
        args.message_id,
    )
    print(f"\n  Saved:\n{body}")


def cmd_serve(args, settings: Settings):
    from .web import create_app

    port = args.port or settings.port
    log(f"Serving on {args.host}:{port}")
    create_app(settings).run(host=args.host, port=port)


def main():
    parser = argparse.ArgumentParser(
        description="Qiita Room Digest — one fresh article per Chatwork room",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    # run
    p_run = sub.add_parser("run", help="Deliver one new article to every registered room")
    p_run.add_argument("--dry-run", action="store_true", help="Select only, post nothing")
    p_run.add_argument("--room", default=None, help="Preview the pick for a single room (no posting)")
    p_run.add_argument("--pages", type=int, default=None, help="Search pages per stage")

    # register
    p_reg = sub.add_parser("register", help="Register interests from a message")
    p_reg.add_argument("--room", required=True)
    p_reg.add_argument("--message", required=True, help='e.g. "Go, cursor rules、Rust"')
    p_reg.add_argument("--quiet", action="store_true", help="Do not post a confirmation to the room")

    # save
    p_save = sub.add_parser("save", help="Save a posted article message")
    p_save.add_argument("--room", required=True)
    p_save.add_argument("--message-id", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Run the HTTP endpoints")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=None)

    # setup
    sub.add_parser("setup", help="Interactive key setup")

    args = parser.parse_args()

    if args.verbose:
        set_verbose(True)

    if not args.cmd:
        parser.print_help()
        return

    if args.cmd == "setup":
        run_setup()

    settings = Settings.from_env()
    if getattr(args, "pages", None):
        settings.page_budget = args.pages

    handlers = {
        "run": cmd_run,
        "register": cmd_register,
        "save": cmd_save,
        "serve": cmd_serve,
    }
    try:
        handlers[args.cmd](args, settings)
    except ConfigError as e:
        print(f"  {e}")
        sys.exit(1)
    except DigestError as e:
        print(f"  Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
