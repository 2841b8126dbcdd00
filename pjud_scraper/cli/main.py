"""Command-line interface for the PJUD case scraper."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from pjud_scraper.lib.config import Config
from pjud_scraper.lib.errors import QueryValueError
from pjud_scraper.lib.errors import ScrapeError
from pjud_scraper.lib.logging_config import get_logger, setup_logging
from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.models.scrape_result import ScrapeResult
from pjud_scraper.services.batch_service import BatchService
from pjud_scraper.services.case_scraper_service import CaseScraperService
from pjud_scraper.services.portal_layout import layout_for

logger = get_logger()

QUERY_ARGS = ("competencia", "corte", "tribunal", "libro", "rol", "ano")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Look up a case on the PJUD virtual judicial office",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage examples:

1. Single case:
   pjud-scraper --competencia Civil --corte "C.A. de Santiago" \\
       --tribunal "5° Juzgado Civil de Santiago" --libro C --rol 2011 --ano 2022

2. Several cases in parallel (JSON list of objects with the same fields):
   pjud-scraper --batch cases.json --output results.json
        """,
    )
    parser.add_argument("--competencia", help="Jurisdiction category (e.g. Civil)")
    parser.add_argument("--corte", help="Court of appeals")
    parser.add_argument("--tribunal", help="Lower court")
    parser.add_argument("--libro", help="Docket book/type code (e.g. C)")
    parser.add_argument("--rol", help="Docket number")
    parser.add_argument("--ano", help="Filing year")
    parser.add_argument("--batch", type=str, help="JSON file with a list of queries")
    parser.add_argument(
        "--layout",
        choices=["9", "10"],
        default=None,
        help="History table layout (default: config, 9 cells)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Run browser in headless mode (default: config)",
    )
    parser.add_argument("--no-headless", action="store_false", dest="headless", help="Show browser window")
    parser.add_argument("--output", type=str, help="Write the result as JSON to this file")
    parser.add_argument("--log-file", type=str, help="Write a copy of the progress lines to this file")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: config)")
    return parser


def _query_from_args(args: argparse.Namespace) -> CaseQuery:
    return CaseQuery(
        competencia=args.competencia,
        corte=args.corte,
        tribunal=args.tribunal,
        libro_tipo=args.libro,
        rol=args.rol,
        ano=args.ano,
    )


def load_batch(path: Path) -> list[CaseQuery]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Batch file must contain a JSON list of queries")
    for n, item in enumerate(data, 1):
        if not isinstance(item, dict):
            raise ValueError(f"Batch item {n} must be a JSON object, got {type(item).__name__}")
    return [CaseQuery.from_dict(item) for item in data]


def print_result(result: ScrapeResult) -> None:
    if result.is_empty:
        print("No records found.")
        return
    print("\nHistory:")
    print(f"{'Folio':<8} {'Etapa':<20} {'Trámite':<20} {'Fecha':<12} {'Foja':<6} Descripción / PDF")
    for e in result.history:
        print(f"{e.folio:<8} {e.stage[:20]:<20} {e.step[:20]:<20} {e.date:<12} {e.page:<6} {e.description}")
        if e.document_url:
            print(f"{'':<70} {e.document_url}")
    print("\nUnresolved writings:")
    if not result.unresolved_writings:
        print("  (none)")
    for w in result.unresolved_writings:
        print(f"  - {w.content}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level or Config.get_log_level(), log_file=Config.get_log_file())

    given = [name for name in QUERY_ARGS if getattr(args, name)]
    if args.batch and given:
        parser.error("Cannot combine --batch with single-case arguments")
    if not args.batch and len(given) != len(QUERY_ARGS):
        missing = ", ".join(f"--{name}" for name in QUERY_ARGS if name not in given)
        parser.error(f"Missing arguments: {missing}")

    layout = layout_for(args.layout) if args.layout else None
    lines: list[str] = []

    def make_scraper() -> CaseScraperService:
        return CaseScraperService(headless=args.headless, layout=layout)

    try:
        if args.batch:
            queries = load_batch(Path(args.batch))
            outcomes = BatchService(scraper_factory=make_scraper).run(queries, on_log=lines.append)
            payload = []
            for outcome in outcomes:
                print(f"\n=== {outcome.query.label} ({outcome.query.tribunal}) ===")
                if outcome.ok:
                    print_result(outcome.result)
                else:
                    print(f"Failed: {outcome.error}")
                payload.append(
                    {
                        "query": outcome.query.to_dict(),
                        "result": outcome.result.to_dict() if outcome.ok else None,
                        "error": None if outcome.ok else str(outcome.error),
                    }
                )
            exit_code = 0 if all(o.ok for o in outcomes) else 1
        else:
            query = _query_from_args(args)
            result = make_scraper().scrape(query, on_log=lines.append)
            print_result(result)
            payload = result.to_dict()
            exit_code = 0

        if args.output:
            out = Path(args.output)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            logger.info(f"Result written to {out}")

    except KeyboardInterrupt:
        print("\nOperation interrupted by user")
        return 130
    except QueryValueError as e:
        print(f"\nInvalid query: {e}")
        exit_code = 2
    except (ValueError, OSError) as e:
        print(f"\nInvalid input: {e}")
        exit_code = 2
    except ScrapeError as e:
        print(f"\nScrape failed: {e}")
        exit_code = 1
    finally:
        if args.log_file and lines:
            log_copy = Path(args.log_file)
            log_copy.parent.mkdir(parents=True, exist_ok=True)
            log_copy.write_text("\n".join(lines) + "\n", encoding="utf-8")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
