"""Narrative response interpreter — free-form model answer → AnalysisResult.

The analysis prompt (see dart_insight.narrator) asks the model to answer
under six fixed ``##`` headings.  Models mostly comply, but not always, so
interpretation runs in two tiers:

  1.  Structured extraction.
        - pass 1 locates every heading line and slices the span between a
          canonical heading and the next heading (text order, not canonical
          order; the first occurrence of a heading wins)
        - pass 2 post-processes each span: string fields are trimmed,
          list fields keep only ``1.``-style numbered lines
  2.  Positional fallback, used only when tier 1 recovered no summary,
      no strengths and no weaknesses.  "Meaningful" lines are dealt out to
      the six fields by fixed index ranges.

Every field travels as ``Extracted(value)`` or ``Fallback()`` until
``materialize`` substitutes the placeholder sentence for the tier that
produced it, so callers never see an empty field.  ``interpret`` is pure
and never raises.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from typing import Union

from dart_insight.models import AnalysisResult

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Canonical headings: must match the prompt character for character
# ═══════════════════════════════════════════════════════════════════════════

HEADINGS: dict[str, str] = {
    "summary":            "종합 분석",
    "strengths":          "강점",
    "weaknesses":         "약점",
    "recommendations":    "투자 조언",
    "risk_factors":       "위험 요소",
    "investment_outlook": "투자 전망",
}

_FIELD_BY_TITLE: dict[str, str] = {title: name for name, title in HEADINGS.items()}

STRING_FIELDS = ("summary", "investment_outlook")
LIST_FIELDS = ("strengths", "weaknesses", "recommendations", "risk_factors")

# Any heading line of level 2 or deeper closes the section before it
_HEADING_RE = re.compile(r"^[ \t]*#{2,}[ \t]+(.*?)[ \t]*$", re.MULTILINE)

# "1." / "12." list markers
_NUMBERED_RE = re.compile(r"^\d+\.\s*")

# ═══════════════════════════════════════════════════════════════════════════
#  Thresholds
# ═══════════════════════════════════════════════════════════════════════════

# Responses this short (after trimming) are not worth parsing
MIN_RESPONSE_LENGTH = 20

# Fallback tier: a line must be longer than this to count
MIN_LINE_LENGTH = 20

# Lines carrying these are prompt echo / markup, not analysis
_NOISE_MARKERS = ("**", "[", "SUMMARY", "STRENGTHS")

# Fallback tier: (field, start, stop) slices over the meaningful lines
_FALLBACK_SLOTS: tuple[tuple[str, int, int], ...] = (
    ("strengths",       1, 4),
    ("weaknesses",      4, 6),
    ("recommendations", 6, 9),
    ("risk_factors",    9, 11),
)
_OUTLOOK_START = 11

SUMMARY_PREFIX_CHARS = 500
OUTLOOK_PREFIX_CHARS = 300
OUTLOOK_CATCH_ALL_LABEL = "전체 AI 분석 결과: "

# ═══════════════════════════════════════════════════════════════════════════
#  Placeholders
# ═══════════════════════════════════════════════════════════════════════════

TOO_SHORT_SUMMARY = "AI 응답이 비어있거나 너무 짧습니다. 다시 시도해보세요."

STRUCTURED_PLACEHOLDERS: dict[str, str] = {
    "summary":            "분석 결과를 처리하는 중입니다.",
    "strengths":          "재무 강점을 분석하는 중입니다.",
    "weaknesses":         "주의사항을 분석하는 중입니다.",
    "recommendations":    "투자 가이드를 준비하는 중입니다.",
    "risk_factors":       "위험 요소를 평가하는 중입니다.",
    "investment_outlook": "투자 전망을 분석하는 중입니다.",
}

FALLBACK_PLACEHOLDERS: dict[str, str] = {
    "summary":            STRUCTURED_PLACEHOLDERS["summary"],
    "strengths":          "AI 분석이 완료되었으나 형식 변환 중입니다. 전체 내용을 종합 분석에서 확인하세요.",
    "weaknesses":         "상세 분석을 위해 새로고침 후 다시 시도해보세요.",
    "recommendations":    "투자 결정 전 추가적인 재무 분석을 권장합니다.",
    "risk_factors":       "일반적인 시장 리스크와 업종별 위험 요소를 고려하세요.",
    "investment_outlook": STRUCTURED_PLACEHOLDERS["investment_outlook"],
}

SHORT_RESPONSE_PLACEHOLDERS: dict[str, str] = {
    **STRUCTURED_PLACEHOLDERS,
    "summary": TOO_SHORT_SUMMARY,
}


# ═══════════════════════════════════════════════════════════════════════════
#  Field outcomes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Extracted:
    """Content recovered from the response (a string, or a tuple of items)."""
    value: Union[str, tuple[str, ...]]


@dataclass(frozen=True)
class Fallback:
    """Nothing usable was found for the field."""


Outcome = Union[Extracted, Fallback]


@dataclass(frozen=True)
class SectionOutcomes:
    summary: Outcome = field(default_factory=Fallback)
    strengths: Outcome = field(default_factory=Fallback)
    weaknesses: Outcome = field(default_factory=Fallback)
    recommendations: Outcome = field(default_factory=Fallback)
    risk_factors: Outcome = field(default_factory=Fallback)
    investment_outlook: Outcome = field(default_factory=Fallback)

    def has_core_sections(self) -> bool:
        """True unless summary, strengths and weaknesses all came up empty."""
        return any(
            isinstance(outcome, Extracted)
            for outcome in (self.summary, self.strengths, self.weaknesses)
        )


def _text_outcome(value: str) -> Outcome:
    return Extracted(value) if value else Fallback()


def _items_outcome(items: list[str]) -> Outcome:
    return Extracted(tuple(items)) if items else Fallback()


# ═══════════════════════════════════════════════════════════════════════════
#  Tier 1: structured extraction
# ═══════════════════════════════════════════════════════════════════════════

def locate_sections(text: str) -> dict[str, str]:
    """Map field name → raw span text for each canonical heading present.

    A span runs from the end of its heading line to the start of the next
    ``##`` (or deeper) heading line, or to the end of the text.
    """
    headings = list(_HEADING_RE.finditer(text))
    spans: dict[str, str] = {}
    for i, match in enumerate(headings):
        name = _FIELD_BY_TITLE.get(match.group(1).strip())
        if name is None or name in spans:
            continue
        end = headings[i + 1].start() if i + 1 < len(headings) else len(text)
        spans[name] = text[match.end():end]
    return spans


def numbered_items(span: str) -> list[str]:
    """Return the numbered lines of *span* with their markers removed."""
    items: list[str] = []
    for line in span.splitlines():
        line = line.strip()
        marker = _NUMBERED_RE.match(line)
        if marker is None:
            continue
        item = line[marker.end():].strip()
        if item:
            items.append(item)
    return items


def extract_structured(text: str) -> SectionOutcomes:
    """Tier 1: read the six headed sections."""
    spans = locate_sections(text)
    outcomes: dict[str, Outcome] = {}
    for name in STRING_FIELDS:
        outcomes[name] = _text_outcome(spans.get(name, "").strip())
    for name in LIST_FIELDS:
        outcomes[name] = _items_outcome(numbered_items(spans.get(name, "")))

    log.debug(
        "Structured parse: sections=%s strengths=%d weaknesses=%d",
        sorted(spans),
        len(outcomes["strengths"].value) if isinstance(outcomes["strengths"], Extracted) else 0,
        len(outcomes["weaknesses"].value) if isinstance(outcomes["weaknesses"], Extracted) else 0,
    )
    return SectionOutcomes(**outcomes)


# ═══════════════════════════════════════════════════════════════════════════
#  Tier 2: positional fallback
# ═══════════════════════════════════════════════════════════════════════════

def meaningful_lines(text: str) -> list[str]:
    """Non-empty lines long enough to be prose and free of markup noise."""
    lines = []
    for line in text.splitlines():
        line = line.strip()
        if len(line) <= MIN_LINE_LENGTH:
            continue
        if any(marker in line for marker in _NOISE_MARKERS):
            continue
        lines.append(line)
    return lines


def _catch_all_outlook(raw: str) -> str:
    if len(raw) > OUTLOOK_PREFIX_CHARS:
        return OUTLOOK_CATCH_ALL_LABEL + raw[:OUTLOOK_PREFIX_CHARS].replace("**", "") + "..."
    return OUTLOOK_CATCH_ALL_LABEL + raw.replace("**", "")


def extract_fallback(text: str) -> SectionOutcomes:
    """Tier 2: deal meaningful lines out to the fields by position."""
    raw = text.strip()
    lines = meaningful_lines(raw)

    if lines:
        summary = lines[0]
    else:
        summary = raw[:SUMMARY_PREFIX_CHARS].replace("**", "").strip()

    outcomes: dict[str, Outcome] = {"summary": _text_outcome(summary)}
    for name, start, stop in _FALLBACK_SLOTS:
        outcomes[name] = _items_outcome(lines[start:stop])

    if len(lines) > _OUTLOOK_START:
        outlook = " ".join(lines[_OUTLOOK_START:])
    else:
        outlook = _catch_all_outlook(raw)
    outcomes["investment_outlook"] = _text_outcome(outlook)

    log.debug("Fallback parse: %d meaningful lines", len(lines))
    return SectionOutcomes(**outcomes)


# ═══════════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════════

def materialize(outcomes: SectionOutcomes, placeholders: dict[str, str]) -> AnalysisResult:
    """Build the result, substituting *placeholders* for every Fallback."""
    values: dict[str, str | list[str]] = {}
    for f in fields(outcomes):
        outcome = getattr(outcomes, f.name)
        if f.name in LIST_FIELDS:
            if isinstance(outcome, Extracted):
                values[f.name] = list(outcome.value)
            else:
                values[f.name] = [placeholders[f.name]]
        else:
            values[f.name] = outcome.value if isinstance(outcome, Extracted) else placeholders[f.name]
    return AnalysisResult(**values)


def interpret(text: str) -> AnalysisResult:
    """Convert one model answer into a fully populated AnalysisResult."""
    text = text or ""
    if len(text.strip()) <= MIN_RESPONSE_LENGTH:
        log.warning("Model response empty or too short (%d chars)", len(text))
        return materialize(SectionOutcomes(), SHORT_RESPONSE_PLACEHOLDERS)

    outcomes = extract_structured(text)
    if outcomes.has_core_sections():
        return materialize(outcomes, STRUCTURED_PLACEHOLDERS)

    log.warning("No canonical headings recognised, using positional fallback")
    return materialize(extract_fallback(text), FALLBACK_PLACEHOLDERS)
