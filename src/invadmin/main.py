from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from invadmin.application.container import build_container
from invadmin.config import ApiSettings, get_app_paths
from invadmin.domain.errors import AppError
from invadmin.domain.models import Pagination
from invadmin.logging_config import setup_logging
from invadmin.repositories.resources import RESOURCES
from invadmin.services.catalog_service import Notice
from invadmin.services.reporting_service import SORT_KEYS, sort_stocks

log = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="invadmin", description="Inventory admin API tools")
    sub = p.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List one page of a resource")
    ls.add_argument("resource", choices=sorted(RESOURCES))
    ls.add_argument("--page", type=int, default=1)
    ls.add_argument("--limit", type=int, default=None)
    ls.add_argument("--keyword", default="")

    ex = sub.add_parser("export-stocks", help="Export the first page of stocks to Excel")
    ex.add_argument("path", nargs="?", default=None)
    ex.add_argument("--limit", type=int, default=100)
    ex.add_argument("--sort", choices=sorted(SORT_KEYS), default="stock_date")
    ex.add_argument("--direction", choices=["asc", "desc"], default="desc")

    rp = sub.add_parser("report", help="Print a report as JSON")
    rp.add_argument("kind", choices=["dashboard", "inventory", "employees", "sales"])
    return p


def _print_notice(notice: Notice) -> None:
    if notice.level == "error":
        print(notice.message, file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    try:
        container = build_container(ApiSettings.from_env())

        if args.command == "list":
            ctl = container.controller(args.resource, notify=_print_notice)
            if args.limit:
                ctl.pagination = Pagination.build(1, args.limit, 0)
            ctl.keyword = args.keyword.strip()
            if not ctl.fetch(args.page):
                return 1
            for item in ctl.items:
                name = getattr(item, "name", None) or getattr(item, "product_name", None) or ""
                print(f"{item.id}\t{name}\t{item.status}")
            pg = ctl.pagination
            print(f"page {pg.current_page}/{pg.last_page} ({pg.total_items} items)")

        elif args.command == "export-stocks":
            ctl = container.controller("stocks", notify=_print_notice)
            ctl.pagination = Pagination.build(1, args.limit, 0)
            if not ctl.fetch(1):
                return 1
            target = Path(args.path) if args.path else paths.exports_dir / "stocks.xlsx"
            rows = sort_stocks(ctl.items, args.sort, args.direction)
            container.reporting.export_stocks_excel(str(target), rows)
            print(target)

        elif args.command == "report":
            if args.kind == "dashboard":
                data = container.reporting.fetch_dashboard()
            else:
                data = container.reporting.fetch_report(args.kind)
            print(json.dumps(data, ensure_ascii=False, indent=2))

    except AppError as e:
        log.error("command_failed command=%s error=%s", args.command, e)
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
