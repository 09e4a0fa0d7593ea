"""Run connectivity checks against the database and the AI provider."""

from __future__ import annotations

import asyncio
from typing import Iterable

from stylehub.integrations import IntegrationCheckResult, run_all_checks


def _format_result(result: IntegrationCheckResult) -> str:
    status = "✅" if result.success else "❌"
    return f"{status} {result.name}: {result.message}"


def print_results(results: Iterable[IntegrationCheckResult]) -> None:
    for result in results:
        print(_format_result(result))


def main() -> None:
    results = asyncio.run(run_all_checks())
    print_results(results)
    if not all(result.success for result in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
