"""Tests for prompt building, the Claude call and model probing."""

import pytest

from conftest import FakeClaude, text_response
from dart_insight import narrator
from dart_insight.interpreter import HEADINGS, STRUCTURED_PLACEHOLDERS, TOO_SHORT_SUMMARY
from dart_insight.models import AnalysisRequest, KeyMetrics
from dart_insight.narrator import (
    AnalysisError,
    analyze_financial_data,
    build_analysis_prompt,
    format_korean_won,
    probe_models,
)


REQUEST = AnalysisRequest(
    company_name="삼성전자",
    year="2023",
    key_metrics=KeyMetrics(
        total_revenue=258_935_494_000_000,
        operating_profit=6_566_976_000_000,
        net_income=15_487_100_000_000,
        total_assets=455_905_980_000_000,
        total_liabilities=92_228_115_000_000,
    ),
)

ANSWER = (
    "## 종합 분석\n매출은 소폭 감소했지만 재무 구조는 매우 안정적입니다.\n"
    "## 강점\n1. 자산총계가 455조원을 넘습니다.\n2. 부채비율이 낮습니다.\n"
    "## 약점\n1. 영업이익률이 하락했습니다.\n"
    "## 투자 조언\n1. 반도체 업황 회복을 확인하세요.\n"
    "## 위험 요소\n1. 메모리 가격 변동성이 큽니다.\n"
    "## 투자 전망\n중립적 전망입니다."
)


@pytest.mark.parametrize("amount,expected", [
    (0, "0원"),
    (1_500_000_000_000, "1.5조원"),
    (250_000_000, "2.5억원"),
    (35_000, "3.5만원"),
    (9_999, "9,999원"),
    (-2_000_000_000_000, "-2.0조원"),
])
def test_format_korean_won(amount, expected):
    assert format_korean_won(amount) == expected


def test_prompt_contains_every_heading_and_figures():
    prompt = build_analysis_prompt(REQUEST)
    for title in HEADINGS.values():
        assert f"## {title}" in prompt
    assert "삼성전자의 2023년 사업보고서" in prompt
    assert "- 매출액: 258.9조원" in prompt
    # Missing figures are spelled out, not shown as 0원
    assert "- 자본총계: 정보없음" in prompt


def test_prompt_uses_given_report_type():
    req = REQUEST.model_copy(update={"report_type": "반기보고서"})
    assert "2023년 반기보고서" in build_analysis_prompt(req)


def test_analyze_parses_model_answer(settings, monkeypatch):
    settings(anthropic_api_key="test-key", analysis_model="claude-test")
    fake = FakeClaude(text_response(ANSWER))
    monkeypatch.setattr(narrator, "_get_client", lambda: fake)

    result = analyze_financial_data(REQUEST)

    assert result.summary == "매출은 소폭 감소했지만 재무 구조는 매우 안정적입니다."
    assert result.strengths == ["자산총계가 455조원을 넘습니다.", "부채비율이 낮습니다."]
    assert result.investment_outlook == "중립적 전망입니다."
    call = fake.calls[0]
    assert call["model"] == "claude-test"
    assert call["messages"][0]["content"] == build_analysis_prompt(REQUEST)


def test_analyze_joins_text_blocks(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    split = ANSWER.index("## 약점")
    fake = FakeClaude(text_response(ANSWER[:split], ANSWER[split:]))
    monkeypatch.setattr(narrator, "_get_client", lambda: fake)

    # Blocks are joined with a newline; the headings still parse
    assert analyze_financial_data(REQUEST).strengths[0] == "자산총계가 455조원을 넘습니다."


def test_analyze_short_answer_is_not_an_error(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    monkeypatch.setattr(narrator, "_get_client", lambda: FakeClaude(text_response("")))

    result = analyze_financial_data(REQUEST)
    assert result.summary == TOO_SHORT_SUMMARY
    assert result.weaknesses == [STRUCTURED_PLACEHOLDERS["weaknesses"]]


def test_analyze_wraps_api_failures(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    monkeypatch.setattr(narrator, "_get_client", lambda: FakeClaude(RuntimeError("Connection reset")))

    with pytest.raises(AnalysisError, match="Connection reset"):
        analyze_financial_data(REQUEST)


def test_analyze_without_api_key(settings):
    settings(anthropic_api_key="")
    with pytest.raises(AnalysisError, match="ANTHROPIC_API_KEY"):
        analyze_financial_data(REQUEST)


def test_analyze_response_without_text_blocks(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    monkeypatch.setattr(narrator, "_get_client", lambda: FakeClaude(text_response()))

    with pytest.raises(AnalysisError):
        analyze_financial_data(REQUEST)


def test_analyze_mock_mode_skips_claude(settings, monkeypatch):
    settings(mock_analysis=True)

    def _no_client():
        raise AssertionError("Claude must not be called in mock mode")

    monkeypatch.setattr(narrator, "_get_client", _no_client)
    result = analyze_financial_data(REQUEST)
    assert result.summary.startswith("삼성전자은(는) 대기업 규모의 회사로")


# --- Model probe ---


def test_probe_reports_first_working_model(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    fake = FakeClaude(RuntimeError("model not found"), text_response("Hello!"))
    monkeypatch.setattr(narrator, "_get_client", lambda: fake)

    result = probe_models(["model-a", "model-b", "model-c"])

    assert result == {
        "success": True,
        "workingModel": "model-b",
        "testResponse": "Hello!",
        "message": "model-b 모델이 정상적으로 작동합니다.",
    }
    assert [c["model"] for c in fake.calls] == ["model-a", "model-b"]


def test_probe_all_models_fail(settings, monkeypatch):
    settings(anthropic_api_key="test-key")
    fake = FakeClaude(RuntimeError("a"), RuntimeError("b"))
    monkeypatch.setattr(narrator, "_get_client", lambda: fake)

    result = probe_models(["model-a", "model-b"])
    assert result["success"] is False
    assert result["error"] == "모든 모델에서 오류가 발생했습니다."
    assert result["testedModels"] == ["model-a", "model-b"]


def test_probe_without_api_key(settings):
    settings(anthropic_api_key="")
    result = probe_models()
    assert result["success"] is False
    assert "ANTHROPIC_API_KEY" in result["error"]
    assert result["testedModels"] == []


def test_probe_uses_configured_models(settings, monkeypatch):
    settings(anthropic_api_key="test-key", probe_models=["only-model"])
    fake = FakeClaude(text_response("hi"))
    monkeypatch.setattr(narrator, "_get_client", lambda: fake)

    assert probe_models()["workingModel"] == "only-model"
