"""Template analysis used when MOCK_ANALYSIS is enabled.

Works without any external API — pure rule-based generation from the
headline figures, so the dashboard can be demoed offline.
"""

from __future__ import annotations

from dart_insight.models import AnalysisRequest, AnalysisResult, KeyMetrics
from dart_insight.narrator import format_korean_won

LARGE_COMPANY_REVENUE = 1_000_000_000_000     # 1조원
MEDIUM_COMPANY_REVENUE = 100_000_000_000      # 1000억원
HEAVY_DEBT = 500_000_000_000                  # 5000억원


def _positive(v: float | None) -> bool:
    return v is not None and v > 0


def _ratio(a: float | None, b: float | None) -> float | None:
    if a is None or not b:
        return None
    return a / b


def mock_analysis(req: AnalysisRequest) -> AnalysisResult:
    name = req.company_name
    m = req.key_metrics or KeyMetrics()

    revenue = m.total_revenue or 0
    is_large = revenue > LARGE_COMPANY_REVENUE
    is_medium = revenue > MEDIUM_COMPANY_REVENUE
    size = "대기업" if is_large else "중견기업" if is_medium else "중소기업"
    profitable = _positive(m.net_income)

    summary = (
        f"{name}은(는) {size} 규모의 회사로, {req.year}년 재무 성과를 종합적으로 분석한 결과 "
        f"안정적인 재무 구조를 보여주고 있습니다. 매출액은 {format_korean_won(revenue)}을 "
        f"기록했으며, 전반적으로 {'수익성이 양호한' if profitable else '개선이 필요한'} 상태입니다. "
        f"투자자 관점에서 볼 때 {'안정적인 투자처' if is_large else '성장 가능성이 있는 기업'}로 평가됩니다."
    )

    strengths = [
        f"매출액 {format_korean_won(revenue)} 달성으로 시장에서의 경쟁력 확보",
        f"총자산 {format_korean_won(m.total_assets)}으로 탄탄한 자산 기반 보유"
        if m.total_assets else "안정적인 자산 구조 유지",
        "영업이익 흑자 달성으로 본업 경쟁력 입증"
        if _positive(m.operating_profit) else "지속적인 사업 운영 능력",
        "양호한 자본 구조로 재무 안정성 확보"
        if _positive(m.total_equity) else "기본적인 재무 건전성 유지",
        f"{name}만의 고유한 사업 모델과 시장 지위 확보",
    ]

    debt_to_equity = _ratio(m.total_liabilities, m.total_equity)
    weaknesses = [
        "당기순손실 발생으로 수익성 개선 필요"
        if m.net_income is not None and m.net_income < 0 else "수익성 지표 모니터링 필요",
        "부채비율이 높아 재무 레버리지 관리 필요"
        if debt_to_equity is not None and debt_to_equity > 1 else "부채 관리 지속 모니터링",
        "시장 변화에 따른 리스크 관리 체계 강화 필요",
        "경쟁사 대비 차별화 전략 지속 발전 필요",
    ]

    debt_to_assets = _ratio(m.total_liabilities, m.total_assets)
    recommendations = [
        "영업이익률 개선을 통한 수익성 극대화 추진"
        if _positive(m.operating_profit) else "영업 효율성 개선을 통한 수익성 확보",
        "신규 사업 영역 발굴을 통한 성장 동력 확보",
        "디지털 전환 투자를 통한 경쟁력 강화",
        "부채 구조 최적화를 통한 재무 건전성 개선"
        if debt_to_assets is not None and debt_to_assets > 0.6 else "현재의 건전한 재무 구조 유지",
        "ESG 경영 강화를 통한 지속가능한 성장 기반 구축",
    ]

    risk_factors = [
        "경제 침체 및 시장 변동성에 따른 매출 감소 리스크",
        "원자재 가격 상승 및 인플레이션 압력",
        "대규모 부채로 인한 금리 상승 리스크"
        if m.total_liabilities is not None and m.total_liabilities > HEAVY_DEBT
        else "금리 변동에 따른 재무비용 증가 가능성",
        "업계 경쟁 심화 및 신규 진입자 위협",
        "규제 변화 및 정책 리스크",
    ]

    stance = "긍정적" if profitable and _positive(m.operating_profit) else "중립적"
    detail = (
        "대기업으로서의 안정성과 시장 지배력을 바탕으로 꾸준한 수익 창출이 기대됩니다."
        if is_large else
        "중장기적으로 성장 가능성이 있으나, 시장 상황과 경영진의 전략 실행력을 지켜볼 필요가 있습니다."
    )
    outlook = (
        f"{name}의 투자 전망은 {stance}입니다. {detail} "
        "투자 시에는 업계 동향과 회사의 전략적 방향성을 면밀히 검토한 후 결정하시기 바랍니다."
    )

    return AnalysisResult(
        summary=summary,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        risk_factors=risk_factors,
        investment_outlook=outlook,
    )
