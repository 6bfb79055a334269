"""Terminal front end for a running webhook viewer API (``hookview`` command)."""

from __future__ import annotations

import argparse
import logging

import polars as pl

from hookview.client import API_URL, HookviewAPIError, HookviewClient, WebhookNotFoundError
from hookview.formatting import format_bytes, format_timestamp, pretty_body, truncate_id

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _summary_frame(records: list[dict]) -> pl.DataFrame:
    rows = [
        {
            "id": truncate_id(record.get("id")),
            "received": format_timestamp(record.get("receivedAt")),
            "method": record.get("method", ""),
            "path": record.get("path", ""),
            "source ip": record.get("sourceIp") or "-",
            "body": format_bytes(len((record.get("rawBody") or "").encode("utf-8"))),
        }
        for record in records
    ]
    return pl.DataFrame(rows, schema=["id", "received", "method", "path", "source ip", "body"])


def cmd_list(client: HookviewClient, args: argparse.Namespace) -> int:
    payload = client.list_webhooks(
        date=args.date,
        page=args.page,
        limit=args.limit,
        method=args.method,
        source_ip=args.source_ip,
        search=args.search,
        conversation_id=args.conversation_id,
    )
    records = payload.get("data", [])
    total = payload.get("total", 0)
    if not records:
        print(f"No webhooks on page {args.page} ({total} matching)")
        return 0

    with pl.Config(
        tbl_rows=len(records),
        tbl_cols=-1,
        tbl_width_chars=200,
        tbl_hide_dataframe_shape=True,
        fmt_str_lengths=60,
    ):
        print(_summary_frame(records))
    first = (args.page - 1) * args.limit + 1
    print(f"Showing {first}-{first + len(records) - 1} of {total}")
    return 0


def cmd_show(client: HookviewClient, args: argparse.Namespace) -> int:
    record = client.get_webhook(args.webhook_id)
    print(f"Id:           {record['id']}")
    print(f"Received:     {format_timestamp(record.get('receivedAt'))}")
    print(f"Request:      {record.get('method')} {record.get('path')}")
    print(f"Source IP:    {record.get('sourceIp') or '-'}")
    print(f"Content-Type: {record.get('contentType') or '-'}")

    if record.get("headers"):
        print("\nHeaders:")
        for name, value in record["headers"].items():
            print(f"  {name}: {value}")
    if record.get("queryParameters"):
        print("\nQuery parameters:")
        for name, value in record["queryParameters"].items():
            print(f"  {name}={value}")

    print("\nBody:")
    print(pretty_body(record.get("rawBody")) or "(empty)")
    return 0


def cmd_delete(client: HookviewClient, args: argparse.Namespace) -> int:
    client.delete_webhook(args.webhook_id)
    print(f"Deleted webhook {args.webhook_id}")
    return 0


def cmd_dates(client: HookviewClient, args: argparse.Namespace) -> int:
    dates = client.get_dates()
    if not dates:
        print("No dates found")
    for date in dates:
        print(date)
    return 0


def cmd_stats(client: HookviewClient, args: argparse.Namespace) -> int:
    stats = client.get_stats()
    print(f"Total webhooks: {stats.get('total', 0)}")

    print("\nBy method:")
    for method, count in sorted(stats.get("byMethod", {}).items(), key=lambda kv: -kv[1]):
        print(f"  {method:<8} {count}")

    print("\nBy date:")
    for date, count in sorted(stats.get("byDate", {}).items(), reverse=True):
        print(f"  {date}  {count}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from hookview.settings import AppSettings

    settings = AppSettings.from_env()
    logging.getLogger().setLevel(settings.log_level)
    uvicorn.run(
        "hookview.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookview", description="Browse captured webhook requests"
    )
    parser.add_argument("--api-url", default=None, help=f"API base URL (default {API_URL})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List webhooks, newest first")
    p_list.add_argument("--date", help="Date folder YYYY-MM-DD")
    p_list.add_argument("--page", type=int, default=1)
    p_list.add_argument("--limit", type=int, default=10)
    p_list.add_argument("--method", help="HTTP method, case-insensitive")
    p_list.add_argument("--source-ip", dest="source_ip")
    p_list.add_argument("--search", help="Substring over id, path, body and headers")
    p_list.add_argument("--conversation-id", dest="conversation_id")

    p_show = sub.add_parser("show", help="Show a single webhook")
    p_show.add_argument("webhook_id")

    p_delete = sub.add_parser("delete", help="Delete a webhook")
    p_delete.add_argument("webhook_id")

    sub.add_parser("dates", help="List date folders in storage")
    sub.add_parser("stats", help="Counts by method and date")

    p_serve = sub.add_parser("serve", help="Run the API server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.add_argument("--reload", action="store_true")
    return parser


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "delete": cmd_delete,
    "dates": cmd_dates,
    "stats": cmd_stats,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    if args.command == "serve":
        return cmd_serve(args)

    client = HookviewClient(api_url=args.api_url) if args.api_url else HookviewClient.from_env()
    try:
        return COMMANDS[args.command](client, args)
    except WebhookNotFoundError:
        logger.error(f"Webhook not found: {args.webhook_id}")
        return 1
    except HookviewAPIError as e:
        logger.error(f"API request failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
