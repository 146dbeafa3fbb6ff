"""Pydantic models for API inputs and outputs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Company directory
# ---------------------------------------------------------------------------

class Company(BaseModel):
    corp_code: str
    corp_name: str
    corp_eng_name: str = ""
    stock_code: str = ""
    modify_date: str = ""


# ---------------------------------------------------------------------------
# OpenDART single-company key accounts (fnlttSinglAcnt)
# ---------------------------------------------------------------------------

class FinancialItem(BaseModel):
    """One account row.  Amounts are comma-grouped strings as OpenDART sends them."""
    rcept_no: str = ""
    bsns_year: str = ""
    stock_code: str = ""
    reprt_code: str = ""
    account_nm: str
    fs_div: str = ""             # CFS (consolidated) | OFS (separate)
    fs_nm: str = ""
    sj_div: str                  # BS (balance sheet) | IS (income statement)
    sj_nm: str = ""
    thstrm_nm: str = ""
    thstrm_dt: str = ""
    thstrm_amount: str = ""
    thstrm_add_amount: str | None = None
    frmtrm_nm: str | None = None
    frmtrm_dt: str | None = None
    frmtrm_amount: str | None = None
    frmtrm_add_amount: str | None = None
    bfefrmtrm_nm: str | None = None
    bfefrmtrm_dt: str | None = None
    bfefrmtrm_amount: str | None = None
    ord: str = ""
    currency: str = ""


class OpenDartResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    message: str = ""
    items: list[FinancialItem] | None = Field(default=None, alias="list")

    @property
    def ok(self) -> bool:
        return self.status == "000"


class KeyMetricAccounts(BaseModel):
    """The six headline accounts picked out of a statement, if reported."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_revenue: FinancialItem | None = None
    operating_profit: FinancialItem | None = None
    net_income: FinancialItem | None = None
    total_assets: FinancialItem | None = None
    total_liabilities: FinancialItem | None = None
    total_equity: FinancialItem | None = None


# ---------------------------------------------------------------------------
# AI analysis
# ---------------------------------------------------------------------------

class KeyMetrics(BaseModel):
    """Headline figures in KRW.  None means no data reported."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_revenue: float | None = None
    operating_profit: float | None = None
    net_income: float | None = None
    total_assets: float | None = None
    total_liabilities: float | None = None
    total_equity: float | None = None


class AnalysisRequest(BaseModel):
    """Body of POST /api/ai-analysis.

    Every field is optional at the schema level so the handler can answer
    missing data with its own 400 envelope instead of a 422.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    company_name: str | None = None
    year: str | None = None
    report_type: str | None = None
    key_metrics: KeyMetrics | None = None

    # Browsers often send the year as a number
    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, v):
        if isinstance(v, int):
            return str(v)
        return v


class AnalysisResult(BaseModel):
    """Structured interpretation of one model answer.

    Every field is always populated; see dart_insight.interpreter.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    summary: str
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]
    risk_factors: list[str]
    investment_outlook: str
