#!/usr/bin/env python3
"""Standalone CLI to exercise DART Insight from the terminal.

Usage — run any of these from the project root:

  # Build the search index from OpenDART's CORPCODE.xml
  python dart_tools.py convert CORPCODE.xml data/companies.json

  # Search for a company
  python dart_tools.py search 삼성전자
  python dart_tools.py search 005930

  # Key accounts + headline metrics for a corp_code
  python dart_tools.py financials 00126380
  python dart_tools.py financials 00126380 2023 11012

  # Claude interpretation of the headline metrics
  python dart_tools.py analyze 00126380 2024

  # Parse a saved model answer without calling any API
  python dart_tools.py interpret answer.md

  # Configuration + connectivity check
  python dart_tools.py health
"""

from __future__ import annotations

import json
import sys
import os

# Ensure the src directory is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))


def _header(title: str):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def _print_analysis(result):
    print(f"  종합 분석:\n    {result.summary}\n")
    for title, items in (
        ("강점", result.strengths),
        ("약점", result.weaknesses),
        ("투자 조언", result.recommendations),
        ("위험 요소", result.risk_factors),
    ):
        print(f"  {title}:")
        for i, item in enumerate(items, 1):
            print(f"    {i}. {item}")
        print()
    print(f"  투자 전망:\n    {result.investment_outlook}")


def cmd_convert(xml_path: str, output_path: str = "data/companies.json"):
    """Convert CORPCODE.xml into companies.json."""
    _header(f"Convert: {xml_path} -> {output_path}")
    from dart_insight.corp_codes import convert_corp_codes
    companies = convert_corp_codes(xml_path, output_path)
    print(f"  Wrote {len(companies)} companies.")
    print("\n  Sample:")
    print(json.dumps([c.model_dump() for c in companies[:3]], ensure_ascii=False, indent=2))


def cmd_search(query: str):
    """Search the company directory."""
    _header(f"Search: {query}")
    from dart_insight.company_search import get_company_directory
    matches, total = get_company_directory().search(query, limit=10)
    if not matches:
        print("  No results found.")
        return
    for c in matches:
        print(f"  {c.corp_code}  {c.stock_code or '-':8s}  {c.corp_name}  {c.corp_eng_name}")
    print(f"\n  Total: {total} result(s)")


def _fetch(corp_code: str, year: str, reprt_code: str):
    from dart_insight.dart_client import get_dart_client
    data = get_dart_client().get_financial_data(corp_code, year, reprt_code)
    if not data.ok:
        print(f"  OpenDART error {data.status}: {data.message}")
        return None
    if not data.items:
        print("  No financial data for these conditions.")
        return None
    return data.items


def cmd_financials(corp_code: str, year: str = "2024", reprt_code: str = "11011"):
    """Fetch key accounts and show the headline metrics."""
    from dart_insight.financials import (
        format_korean_amount, get_report_name, key_metric_values, select_key_metrics,
    )
    _header(f"Financials: {corp_code} | {year} | {get_report_name(reprt_code)}")
    items = _fetch(corp_code, year, reprt_code)
    if items is None:
        return
    metrics = key_metric_values(select_key_metrics(items))
    for name, value in metrics.model_dump(by_alias=True).items():
        shown = format_korean_amount(int(value)) if value is not None else "N/A"
        print(f"  {name:18s}  {shown}")
    print(f"\n  Rows fetched: {len(items)}")


def cmd_analyze(corp_code: str, year: str = "2024", reprt_code: str = "11011"):
    """Fetch financials, then ask Claude for an interpretation."""
    from dart_insight.company_search import get_company_directory
    from dart_insight.financials import get_report_name, key_metric_values, select_key_metrics
    from dart_insight.models import AnalysisRequest
    from dart_insight.narrator import AnalysisError, analyze_financial_data
    company = get_company_directory().find_by_code(corp_code)
    company_name = company.corp_name if company else corp_code
    _header(f"AI analysis: {company_name} ({corp_code}) | {year}")
    items = _fetch(corp_code, year, reprt_code)
    if items is None:
        return
    req = AnalysisRequest(
        company_name=company_name,
        year=year,
        report_type=get_report_name(reprt_code),
        key_metrics=key_metric_values(select_key_metrics(items)),
    )
    try:
        result = analyze_financial_data(req)
    except AnalysisError as e:
        print(f"  [FAIL] {e}")
        return
    _print_analysis(result)


def cmd_interpret(path: str):
    """Run the interpreter over a saved model answer."""
    _header(f"Interpret: {path}")
    from dart_insight.interpreter import interpret
    with open(path, encoding="utf-8") as fh:
        _print_analysis(interpret(fh.read()))


def cmd_health():
    """Configuration and connectivity check."""
    _header("DART Insight Health Check")

    checks = []

    print("  [1/3] Configuration...")
    try:
        from dart_insight.config import get_config
        cfg = get_config()
        print(f"    OPENDART_API_KEY: {'set' if cfg.opendart_api_key else 'not set'}")
        print(f"    ANTHROPIC_API_KEY: {'set' if cfg.anthropic_api_key else 'not set'}")
        print(f"    MOCK_ANALYSIS: {cfg.mock_analysis}")
        checks.append(("Config", "PASS"))
    except Exception as e:
        print(f"    ERROR: {e}")
        checks.append(("Config", "FAIL"))

    print("\n  [2/3] Company directory...")
    from dart_insight.company_search import get_company_directory
    directory = get_company_directory()
    count = len(directory.companies)
    print(f"    {count} companies loaded from {directory.path}")
    checks.append(("Companies", "PASS" if count else "WARN"))

    print("\n  [3/3] Claude API...")
    from dart_insight.narrator import probe_models
    probe = probe_models()
    if probe["success"]:
        print(f"    {probe['message']}")
        checks.append(("Claude", "PASS"))
    else:
        print(f"    {probe['error']}")
        checks.append(("Claude", "FAIL"))

    print(f"\n  {'='*40}")
    print("  SUMMARY:")
    for name, status in checks:
        icon = {"PASS": "+", "FAIL": "X", "WARN": "!"}[status]
        print(f"    [{icon}] {name}: {status}")
    print()


COMMANDS = {
    "convert": (cmd_convert, "xml_path [output_path]"),
    "search": (cmd_search, "query"),
    "financials": (cmd_financials, "corp_code [year] [reprt_code]"),
    "analyze": (cmd_analyze, "corp_code [year] [reprt_code]"),
    "interpret": (cmd_interpret, "path"),
    "health": (cmd_health, ""),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help", "help"):
        print("\nDART Insight — Standalone Tool Runner")
        print("=" * 38)
        print("\nUsage: python dart_tools.py <command> [args]\n")
        print("Commands:")
        for cmd, (_, args) in COMMANDS.items():
            print(f"  {cmd:12s}  {args}")
        print()
        return

    cmd_name = sys.argv[1].lower()
    if cmd_name not in COMMANDS:
        print(f"Unknown command: {cmd_name}")
        print(f"Available: {', '.join(COMMANDS.keys())}")
        return

    fn, _ = COMMANDS[cmd_name]

    if cmd_name == "search":
        fn(" ".join(sys.argv[2:]) if len(sys.argv) > 2 else "삼성")
    elif cmd_name != "health" and len(sys.argv) < 3:
        print(f"Usage: python dart_tools.py {cmd_name} {COMMANDS[cmd_name][1]}")
    else:
        fn(*sys.argv[2:])


if __name__ == "__main__":
    main()
