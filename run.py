"""Command-line entrypoint for the DeFi portfolio assistant.

Examples:
  python run.py health
  python run.py ask "Where is most of my value?" --portfolio portfolio.json
  python run.py risk --portfolio portfolio.json --strategies strategies.json
  python run.py compare --strategies strategies.json --preference "low risk"
  python run.py explain "impermanent loss"
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from termcolor import colored

from defi_advisor.client import QueryClient
from defi_advisor.config import load_config
from defi_advisor.llm.errors import QueryClientError
from defi_advisor.log import configure_logging


def _read_json(path: Optional[str], default: Any = None) -> Any:
    if not path:
        return default
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="DeFi portfolio assistant (LLM query client)")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="Probe the completion service")

    ask = sub.add_parser("ask", help="Ask a question about a portfolio")
    ask.add_argument("question")
    ask.add_argument("--portfolio", required=True, help="Portfolio JSON file")

    risk = sub.add_parser("risk", help="Structured risk analysis")
    risk.add_argument("--portfolio", required=True, help="Portfolio JSON file")
    risk.add_argument("--strategies", required=True, help="Strategies JSON file")

    cmp_ = sub.add_parser("compare", help="Compare strategies")
    cmp_.add_argument("--strategies", required=True, help="Strategies JSON file")
    cmp_.add_argument("--portfolio", default=None, help="Portfolio JSON file (optional)")
    cmp_.add_argument("--preference", default="", help='e.g. "low risk", "high yield"')

    explain = sub.add_parser("explain", help="Explain a DeFi concept")
    explain.add_argument("concept")
    explain.add_argument("--context", default="")
    return p


async def _amain() -> int:
    load_dotenv()
    args = _build_arg_parser().parse_args()

    cfg = load_config()
    configure_logging(cfg.logging)

    try:
        client = QueryClient(cfg.api_key, config=cfg.llm)
    except QueryClientError as e:
        print(colored(f"[ERROR] {e.message}", "red"))
        return 1

    async with client:
        try:
            if args.command == "health":
                ok = await client.health_check()
                print(colored("[OK] healthy", "green") if ok else colored("[FAIL] unhealthy", "red"))
                return 0 if ok else 1

            if args.command == "ask":
                print(await client.ask(args.question, _read_json(args.portfolio, {})))
            elif args.command == "risk":
                result = await client.analyze_risk(
                    _read_json(args.portfolio, {}), _read_json(args.strategies, [])
                )
                print(json.dumps(result.model_dump(mode="json"), indent=2))
            elif args.command == "compare":
                print(
                    await client.compare_strategies(
                        _read_json(args.strategies, []),
                        _read_json(args.portfolio, {}),
                        args.preference,
                    )
                )
            elif args.command == "explain":
                print(await client.explain_concept(args.concept, args.context))
        except QueryClientError as e:
            print(colored(f"[ERROR] {e.message}", "red"))
            return 1
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(_amain()))


if __name__ == "__main__":
    main()
