"""DART Insight — HTTP API for the financial dashboard.

Endpoints:
  - GET  /health              — service + configuration status
  - GET  /api/search          — company name / stock-code search
  - GET  /api/financial-data  — OpenDART key accounts, headline metrics, chart payloads
  - POST /api/ai-analysis     — Claude interpretation of headline metrics
  - GET  /api/test-ai         — probe which configured Claude model answers

Run:  python -m dart_insight.app
Open: http://localhost:{PORT}  (default 8000)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dart_insight.company_search import get_company_directory
from dart_insight.config import get_config
from dart_insight.dart_client import get_dart_client
from dart_insight.financials import build_financial_snapshot
from dart_insight.models import AnalysisRequest
from dart_insight.narrator import AnalysisError, analyze_financial_data, probe_models

log = logging.getLogger(__name__)

app = FastAPI(title="DART Insight")

# CORS for the browser dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# ═══════════════════════════════════════════════════════════════════════════
#  Health check
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
async def health():
    config = get_config()
    if config.mock_analysis:
        ai = "mock"
    else:
        ai = "configured" if config.anthropic_api_key else "missing"
    return {
        "status": "ok",
        "opendart": "configured" if config.opendart_api_key else "missing",
        "ai": ai,
    }


# ═══════════════════════════════════════════════════════════════════════════
#  Company search
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/api/search")
def search_companies(q: str | None = None, limit: int = 10):
    """Search companies by Korean/English name or stock code."""
    if not q or not q.strip():
        return _error("검색어를 입력해주세요.", 400)
    try:
        matches, total = get_company_directory().search(q, limit=max(limit, 0))
    except Exception:
        log.exception("Company search failed for %r", q)
        return _error("검색 중 오류가 발생했습니다.", 500)
    return {
        "success": True,
        "data": [c.model_dump() for c in matches],
        "total": total,
        "query": q,
    }


# ═══════════════════════════════════════════════════════════════════════════
#  Financial statements
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/api/financial-data")
def financial_data(
    corp_code: str | None = None,
    bsns_year: str | None = None,
    reprt_code: str | None = None,
):
    """Key accounts for one company/year/report, shaped for the dashboard."""
    if not corp_code:
        return _error("회사 고유번호(corp_code)가 필요합니다.", 400)

    config = get_config()
    bsns_year = bsns_year or config.default_bsns_year
    reprt_code = reprt_code or config.default_reprt_code

    try:
        data = get_dart_client().get_financial_data(corp_code, bsns_year, reprt_code)
        if not data.ok:
            return _error(data.message or "재무 데이터를 가져오는데 실패했습니다.", 400)
        if not data.items:
            return _error("해당 조건의 재무 데이터가 없습니다.", 404)
        snapshot = build_financial_snapshot(corp_code, bsns_year, reprt_code, data.items)
    except Exception:
        log.exception("Financial data failed for %s/%s/%s", corp_code, bsns_year, reprt_code)
        return _error("서버 오류가 발생했습니다.", 500)

    return {"success": True, "data": snapshot}


# ═══════════════════════════════════════════════════════════════════════════
#  AI analysis
# ═══════════════════════════════════════════════════════════════════════════

# (markers, user-facing message); first category whose marker appears wins
_ERROR_CATEGORIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("api key", "api_key", "api-key", "authentication"), "AI 서비스 인증에 실패했습니다."),
    (("quota", "credit balance", "rate limit", "rate_limit"), "AI 서비스 사용량이 초과되었습니다."),
    (("network", "connection", "timed out", "timeout"), "AI 서비스 연결에 실패했습니다."),
)


def user_facing_error(message: str) -> str:
    """Rewrite an upstream failure message into one the dashboard can show."""
    lowered = message.lower()
    for markers, friendly in _ERROR_CATEGORIES:
        if any(marker in lowered for marker in markers):
            return friendly
    return message or "AI 분석 중 오류가 발생했습니다."


@app.post("/api/ai-analysis")
def ai_analysis(req: AnalysisRequest):
    """Interpret headline metrics with Claude.  Always returns all six fields on success."""
    if not req.company_name or not req.year or req.key_metrics is None:
        log.info("AI analysis rejected: required fields missing")
        return _error("필수 데이터가 누락되었습니다.", 400)

    try:
        analysis = analyze_financial_data(req)
    except AnalysisError as exc:
        message = user_facing_error(str(exc))
        log.warning("AI analysis failed for %s: %s", req.company_name, message)
        return _error(message, 500)

    return {"success": True, "data": analysis.model_dump(by_alias=True)}


@app.get("/api/test-ai")
def test_ai():
    """Check which configured Claude model is reachable."""
    return probe_models()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    print(f"\n  DART Insight → http://localhost:{config.port}\n")
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level)
