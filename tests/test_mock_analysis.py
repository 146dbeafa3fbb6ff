"""Tests for the offline template analysis."""

from dart_insight.mock_analysis import mock_analysis
from dart_insight.models import AnalysisRequest, KeyMetrics


def _request(**metrics):
    return AnalysisRequest(company_name="테스트", year="2023", key_metrics=KeyMetrics(**metrics))


def test_large_profitable_company():
    result = mock_analysis(_request(
        total_revenue=5_000_000_000_000,
        operating_profit=400_000_000_000,
        net_income=300_000_000_000,
        total_assets=8_000_000_000_000,
        total_liabilities=2_000_000_000_000,
        total_equity=6_000_000_000_000,
    ))
    assert "대기업 규모" in result.summary
    assert "5.0조원" in result.summary
    assert result.strengths[1] == "총자산 8.0조원으로 탄탄한 자산 기반 보유"
    assert result.weaknesses[1] == "부채 관리 지속 모니터링"
    assert result.risk_factors[2] == "대규모 부채로 인한 금리 상승 리스크"
    assert "투자 전망은 긍정적입니다" in result.investment_outlook


def test_small_loss_making_company_with_heavy_leverage():
    result = mock_analysis(_request(
        total_revenue=50_000_000_000,
        operating_profit=-1_000_000_000,
        net_income=-2_000_000_000,
        total_assets=100_000_000_000,
        total_liabilities=80_000_000_000,
        total_equity=20_000_000_000,
    ))
    assert "중소기업 규모" in result.summary
    assert result.weaknesses[0] == "당기순손실 발생으로 수익성 개선 필요"
    assert result.weaknesses[1] == "부채비율이 높아 재무 레버리지 관리 필요"
    assert result.recommendations[3] == "부채 구조 최적화를 통한 재무 건전성 개선"
    assert "투자 전망은 중립적입니다" in result.investment_outlook


def test_missing_metrics_still_fill_every_field():
    result = mock_analysis(_request())
    assert result.summary
    assert result.strengths[1] == "안정적인 자산 구조 유지"
    assert result.weaknesses[0] == "수익성 지표 모니터링 필요"
    for items in (result.strengths, result.weaknesses, result.recommendations, result.risk_factors):
        assert items and all(items)
    assert result.investment_outlook
