"""Claude-powered financial interpretation.

Builds a Korean analysis prompt from headline figures, sends it to the
Anthropic Claude API and hands the raw answer to the interpreter, which
turns it into an AnalysisResult.

The six ``##`` headings in the prompt are a contract with
dart_insight.interpreter.HEADINGS; if the model ignores them the
interpreter falls back to positional parsing.
"""

from __future__ import annotations

import logging

from dart_insight.config import get_config
from dart_insight.interpreter import HEADINGS, interpret
from dart_insight.models import AnalysisRequest, AnalysisResult, KeyMetrics

log = logging.getLogger(__name__)

DEFAULT_REPORT_TYPE = "사업보고서"
NO_DATA = "정보없음"
PROBE_PROMPT = "Hello, this is a test."

_client = None


class AnalysisError(Exception):
    """The analysis could not be produced (configuration or upstream failure)."""


def _get_client():
    """Lazy-init the Anthropic client."""
    global _client
    if _client is not None:
        return _client

    config = get_config()
    if not config.anthropic_api_key:
        raise ValueError(
            "ANTHROPIC_API_KEY is not set. "
            "Add it to your .env file to enable AI analysis."
        )

    import anthropic
    _client = anthropic.Anthropic(api_key=config.anthropic_api_key)
    return _client


def format_korean_won(amount: float) -> str:
    """Round to the largest of 조/억/만 with one decimal, e.g. ``1.5조원``."""
    if amount == 0:
        return "0원"
    size = abs(amount)
    if size >= 1e12:
        return f"{amount / 1e12:.1f}조원"
    if size >= 1e8:
        return f"{amount / 1e8:.1f}억원"
    if size >= 1e4:
        return f"{amount / 1e4:.1f}만원"
    return f"{amount:,.0f}원"


def _fmt_metric(v: float | None) -> str:
    return format_korean_won(v) if v is not None else NO_DATA


def _build_metrics_section(m: KeyMetrics) -> str:
    rows = [
        ("매출액", m.total_revenue),
        ("영업이익", m.operating_profit),
        ("당기순이익", m.net_income),
        ("자산총계", m.total_assets),
        ("부채총계", m.total_liabilities),
        ("자본총계", m.total_equity),
    ]
    return "\n".join(f"- {label}: {_fmt_metric(v)}" for label, v in rows)


def build_analysis_prompt(req: AnalysisRequest) -> str:
    """Render the analysis prompt, headings included."""
    name = req.company_name
    report_type = req.report_type or DEFAULT_REPORT_TYPE
    metrics = req.key_metrics or KeyMetrics()
    h = HEADINGS

    return f"""당신은 전문 재무 분석가입니다. {name}의 {req.year}년 {report_type} 데이터를 분석해주세요.

재무 데이터:
{_build_metrics_section(metrics)}

다음 형식으로 정확히 분석해주세요:

## {h["summary"]}
{name}의 전반적인 재무 상태를 3-4문장으로 요약하세요.

## {h["strengths"]}
1. [첫 번째 강점을 한 문장으로]
2. [두 번째 강점을 한 문장으로]
3. [세 번째 강점을 한 문장으로]

## {h["weaknesses"]}
1. [첫 번째 약점을 한 문장으로]
2. [두 번째 약점을 한 문장으로]

## {h["recommendations"]}
1. [첫 번째 조언을 한 문장으로]
2. [두 번째 조언을 한 문장으로]
3. [세 번째 조언을 한 문장으로]

## {h["risk_factors"]}
1. [첫 번째 위험을 한 문장으로]
2. [두 번째 위험을 한 문장으로]

## {h["investment_outlook"]}
[긍정적/중립적/부정적] 전망과 그 이유를 2-3문장으로 설명하세요.

모든 내용을 한국어로, 구체적인 숫자를 포함하여 작성해주세요."""


def _response_text(response) -> str | None:
    """Join the text blocks of a Messages API response; None if there are none."""
    text_parts = []
    for block in response.content:
        if hasattr(block, "text"):
            text_parts.append(block.text)
    if not text_parts:
        return None
    return "\n".join(text_parts)


def analyze_financial_data(req: AnalysisRequest) -> AnalysisResult:
    """Ask Claude for an interpretation of *req* and parse the answer.

    Raises:
        AnalysisError: the API key is missing, the call failed, or the
            response carried no text at all.  Unusable text is not an
            error; the interpreter degrades it to placeholders.
    """
    config = get_config()
    if config.mock_analysis:
        from dart_insight.mock_analysis import mock_analysis
        log.info("Mock analysis for %s (%s)", req.company_name, req.year)
        return mock_analysis(req)

    prompt = build_analysis_prompt(req)
    log.info("AI analysis started: company=%s year=%s prompt_chars=%d",
             req.company_name, req.year, len(prompt))

    try:
        client = _get_client()
        response = client.messages.create(
            model=config.analysis_model,
            max_tokens=config.analysis_max_tokens,
            temperature=config.analysis_temperature,
            messages=[{"role": "user", "content": prompt}],
        )
    except Exception as exc:
        log.error("AI analysis call failed (%s): %s", type(exc).__name__, exc)
        raise AnalysisError(f"AI 분석 중 오류가 발생했습니다: {exc}") from exc

    text = _response_text(response)
    if text is None:
        raise AnalysisError("AI 분석 중 오류가 발생했습니다: 응답에 텍스트가 없습니다.")

    log.debug("Raw AI response (%d chars):\n%s", len(text), text)
    result = interpret(text)
    log.info("AI analysis finished for %s", req.company_name)
    return result


def probe_models(models: list[str] | None = None) -> dict:
    """Send a one-line prompt to each model in turn; report the first that answers."""
    tested = list(models or get_config().probe_models)
    try:
        client = _get_client()
    except ValueError as exc:
        return {"success": False, "error": str(exc), "testedModels": []}

    for model in tested:
        try:
            response = client.messages.create(
                model=model,
                max_tokens=64,
                messages=[{"role": "user", "content": PROBE_PROMPT}],
            )
        except Exception as exc:
            log.warning("Model probe failed for %s: %s", model, exc)
            continue
        text = _response_text(response) or ""
        return {
            "success": True,
            "workingModel": model,
            "testResponse": text,
            "message": f"{model} 모델이 정상적으로 작동합니다.",
        }

    return {
        "success": False,
        "error": "모든 모델에서 오류가 발생했습니다.",
        "testedModels": tested,
    }
