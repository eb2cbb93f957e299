"""Entry point for the Note Risk Agent."""

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional, Sequence

import structlog
from pydantic import ValidationError

from .analyzer import NoteRiskAnalyzer
from .config import settings
from .exceptions import RiskAnalysisError
from .models import CallFeature, NoteTerms, ProtectionType, RiskAnalysisResult
from .price_feed import SyntheticPriceFeed, YahooPriceFeed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="note-risk",
        description="Score the downside risk of a structured note (0-100).",
    )
    parser.add_argument("assets", nargs="+", help="Underlying tickers, e.g. SPY QQQ")
    parser.add_argument("--rating", required=True, help="Issuer credit rating, e.g. A+")
    parser.add_argument("--months", type=float, required=True, help="Months to maturity")
    parser.add_argument(
        "--protection",
        choices=[p.value for p in ProtectionType],
        default=ProtectionType.SOFT_BARRIER.value,
    )
    parser.add_argument("--level", type=float, required=True, help="Protection level, %% of spot")
    parser.add_argument("--autocallable", action="store_true", help="Note is autocallable")
    parser.add_argument("--no-call", type=float, default=None, help="No-call period in months")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="History end date")
    parser.add_argument("--synthetic", action="store_true", help="Use generated prices (offline)")
    parser.add_argument("--seed", type=int, default=7, help="Seed for --synthetic")
    return parser


async def run(terms: NoteTerms, synthetic: bool, seed: int, as_of: Optional[date]) -> RiskAnalysisResult:
    if synthetic:
        return await NoteRiskAnalyzer(SyntheticPriceFeed(seed=seed)).analyze(terms, as_of)
    async with YahooPriceFeed() as feed:
        return await NoteRiskAnalyzer(feed).analyze(terms, as_of)


def configure_logging(level: str) -> None:
    """Route structlog events through stdlib logging on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    call_feature = CallFeature.AUTOCALLABLE if args.autocallable else CallFeature.NON_CALLABLE
    try:
        terms = NoteTerms(
            credit_rating=args.rating,
            maturity_months=args.months,
            call_feature=call_feature,
            no_call_period_months=args.no_call if args.autocallable else None,
            protection_type=ProtectionType(args.protection),
            protection_level=args.level,
            assets=args.assets,
        )
    except ValidationError as e:
        print(f"Invalid note terms: {e}", file=sys.stderr)
        return 2

    try:
        result = asyncio.run(run(terms, args.synthetic, args.seed, args.as_of))
    except RiskAnalysisError as e:
        print(e.message, file=sys.stderr)
        return 1

    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
