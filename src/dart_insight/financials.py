"""Financial statement shaping for OpenDART key-account rows.

Turns the flat ``fnlttSinglAcnt`` list into what the dashboard needs:
  - categorised rows (assets / liabilities / equity / revenue / expenses / profit)
  - the six headline accounts (revenue, operating profit, net income,
    total assets, total liabilities, total equity)
  - Chart.js bar payloads for the balance sheet and income statement

Account names vary between filers (매출액 vs 수익(매출액), 당기순이익 vs
당기순손익 …), so each headline metric is matched by an ordered list of
name patterns, exact total-account names first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from dart_insight.models import FinancialItem, KeyMetricAccounts, KeyMetrics

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Report codes
# ═══════════════════════════════════════════════════════════════════════════

REPORT_NAMES: dict[str, str] = {
    "11011": "사업보고서",
    "11012": "반기보고서",
    "11013": "1분기보고서",
    "11014": "3분기보고서",
}

UNKNOWN_REPORT = "알 수 없는 보고서"


def get_report_name(reprt_code: str) -> str:
    """Korean report name for an OpenDART reprt_code."""
    return REPORT_NAMES.get(reprt_code, UNKNOWN_REPORT)


# ═══════════════════════════════════════════════════════════════════════════
#  Amounts
# ═══════════════════════════════════════════════════════════════════════════

def parse_amount(amount: str | None) -> int:
    """Parse a comma-grouped amount string.  Blank, "-" or junk → 0."""
    if not amount or amount.strip() == "-":
        return 0
    try:
        return int(amount.replace(",", "").strip())
    except ValueError:
        return 0


_KOREAN_UNITS = ("", "만", "억", "조")


def format_korean_amount(amount: int) -> str:
    """Spell out an amount in 만/억/조 groups, e.g. ``1억 2,345만 6,789원``."""
    if amount == 0:
        return "0원"

    sign = "-" if amount < 0 else ""
    remaining = abs(int(amount))
    parts: list[str] = []
    for i, unit in enumerate(_KOREAN_UNITS):
        if remaining == 0:
            break
        # Anything above 9,999조 stays in the 조 group
        last = i == len(_KOREAN_UNITS) - 1
        group = remaining if last else remaining % 10000
        if group:
            parts.append(f"{group:,}{unit}")
        remaining = 0 if last else remaining // 10000

    return sign + " ".join(reversed(parts)) + "원"


# ═══════════════════════════════════════════════════════════════════════════
#  Categorisation
# ═══════════════════════════════════════════════════════════════════════════

# category → (statement, account-name keywords)
_CATEGORIES: dict[str, tuple[str, tuple[str, ...]]] = {
    "assets":      ("BS", ("자산",)),
    "liabilities": ("BS", ("부채",)),
    "equity":      ("BS", ("자본",)),
    "revenue":     ("IS", ("매출", "수익")),
    "expenses":    ("IS", ("비용", "손실")),
    "profit":      ("IS", ("이익",)),
}


def _to_frame(items: list[FinancialItem]) -> pd.DataFrame:
    if not items:
        return pd.DataFrame(columns=list(FinancialItem.model_fields))
    return pd.DataFrame([item.model_dump() for item in items])


def _contains_any(names: pd.Series, keywords: tuple[str, ...]) -> pd.Series:
    mask = pd.Series(False, index=names.index)
    for kw in keywords:
        mask |= names.str.contains(kw, regex=False)
    return mask


def _records(df: pd.DataFrame) -> list[dict]:
    """DataFrame rows back to plain dicts, with NaN turned into None."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def categorize_financial_data(items: list[FinancialItem]) -> dict[str, list[dict]]:
    """Group rows by category.  A row may land in several categories."""
    df = _to_frame(items)
    result: dict[str, list[dict]] = {}
    for category, (statement, keywords) in _CATEGORIES.items():
        if df.empty:
            result[category] = []
            continue
        mask = (df["sj_div"] == statement) & _contains_any(df["account_nm"], keywords)
        result[category] = _records(df[mask])
    return result


# ═══════════════════════════════════════════════════════════════════════════
#  Headline metrics
# ═══════════════════════════════════════════════════════════════════════════

EXACT = "exact"
CONTAINS = "contains"


@dataclass(frozen=True)
class _MetricRule:
    statement: str
    # (EXACT | CONTAINS, account name), highest priority first
    patterns: tuple[tuple[str, str], ...]


KEY_METRIC_RULES: dict[str, _MetricRule] = {
    "total_assets": _MetricRule("BS", (
        (EXACT, "자산총계"), (CONTAINS, "자산총계"), (EXACT, "총자산"),
    )),
    "total_liabilities": _MetricRule("BS", (
        (EXACT, "부채총계"), (CONTAINS, "부채총계"), (EXACT, "총부채"),
    )),
    "total_equity": _MetricRule("BS", (
        (EXACT, "자본총계"), (CONTAINS, "자본총계"), (EXACT, "총자본"), (CONTAINS, "자본금"),
    )),
    "total_revenue": _MetricRule("IS", (
        (EXACT, "매출액"), (EXACT, "수익(매출액)"), (CONTAINS, "매출"), (CONTAINS, "수익"),
    )),
    "operating_profit": _MetricRule("IS", (
        (EXACT, "영업이익"), (CONTAINS, "영업이익"), (EXACT, "영업손익"),
    )),
    "net_income": _MetricRule("IS", (
        (EXACT, "당기순이익"), (CONTAINS, "당기순이익"), (EXACT, "순이익"),
        (CONTAINS, "순손익"), (EXACT, "당기순손익"), (CONTAINS, "당기순"),
    )),
}


def select_key_metrics(items: list[FinancialItem]) -> KeyMetricAccounts:
    """Pick each headline account.

    Patterns are tried in priority order; the first row in filing order
    matching the first productive pattern wins.  This keeps 자본금 (paid-in
    capital) from shadowing a 자본총계 row listed after it.
    """
    df = _to_frame(items)
    picked: dict[str, FinancialItem | None] = {}
    for name, rule in KEY_METRIC_RULES.items():
        picked[name] = None
        if df.empty:
            continue
        names = df.loc[df["sj_div"] == rule.statement, "account_nm"]
        for kind, text in rule.patterns:
            mask = names == text if kind == EXACT else names.str.contains(text, regex=False)
            hits = names.index[mask]
            if len(hits):
                picked[name] = items[hits[0]]
                break
    return KeyMetricAccounts(**picked)


def key_metric_values(accounts: KeyMetricAccounts) -> KeyMetrics:
    """Current-term amounts of the headline accounts."""
    values: dict[str, float | None] = {}
    for name in KEY_METRIC_RULES:
        item: FinancialItem | None = getattr(accounts, name)
        values[name] = parse_amount(item.thstrm_amount) if item is not None else None
    return KeyMetrics(**values)


# ═══════════════════════════════════════════════════════════════════════════
#  Chart payloads (Chart.js bar datasets)
# ═══════════════════════════════════════════════════════════════════════════

_BALANCE_SHEET_SERIES = (
    ("자산총계", "total_assets", "54, 162, 235"),
    ("부채총계", "total_liabilities", "255, 99, 132"),
    ("자본총계", "total_equity", "75, 192, 192"),
)

_INCOME_STATEMENT_SERIES = (
    ("매출액", "total_revenue", "153, 102, 255"),
    ("영업이익", "operating_profit", "255, 159, 64"),
    ("당기순이익", "net_income", "255, 205, 86"),
)


def _bar_chart(label: str, series: tuple, accounts: KeyMetricAccounts) -> dict:
    data = []
    for _, name, _ in series:
        item: FinancialItem | None = getattr(accounts, name)
        data.append(parse_amount(item.thstrm_amount) if item is not None else 0)
    return {
        "labels": [title for title, _, _ in series],
        "datasets": [{
            "label": label,
            "data": data,
            "backgroundColor": [f"rgba({rgb}, 0.8)" for _, _, rgb in series],
            "borderColor": [f"rgba({rgb}, 1)" for _, _, rgb in series],
            "borderWidth": 1,
        }],
    }


def build_chart_data(accounts: KeyMetricAccounts) -> dict:
    """Balance-sheet and income-statement bar charts.  Missing accounts plot as 0."""
    return {
        "balanceSheet": _bar_chart("재무상태표 (단위: 원)", _BALANCE_SHEET_SERIES, accounts),
        "incomeStatement": _bar_chart("손익계산서 (단위: 원)", _INCOME_STATEMENT_SERIES, accounts),
    }


# ═══════════════════════════════════════════════════════════════════════════
#  Snapshot
# ═══════════════════════════════════════════════════════════════════════════

def build_financial_snapshot(
    corp_code: str,
    bsns_year: str,
    reprt_code: str,
    items: list[FinancialItem],
) -> dict:
    """Everything the dashboard needs for one company/year/report."""
    income_rows = [item.account_nm for item in items if item.sj_div == "IS"]
    log.debug("Income statement accounts for %s/%s: %s", corp_code, bsns_year, income_rows)

    accounts = select_key_metrics(items)
    return {
        "corpCode": corp_code,
        "bsnsYear": bsns_year,
        "reprtCode": reprt_code,
        "reportName": get_report_name(reprt_code),
        "keyMetrics": accounts.model_dump(by_alias=True),
        "chartData": build_chart_data(accounts),
        "categorized": categorize_financial_data(items),
        "rawData": [item.model_dump() for item in items],
    }
