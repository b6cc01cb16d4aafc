"""Nursing-impact classifier.

score_notice() is a pure function of a notice's text, industry code, and
headcount. Checks run in a fixed order and each one that contributes appends
an audit tag to `signals`:

1. healthcare gate (+30): NAICS 62 prefix or employer-context keywords
2. nursing-keyword density: +10 per distinct keyword, capped at +40
3. care setting: NAICS prefix first, else first matching keyword category;
   +10 when a setting is identified for a relevant notice
4. role mix and specialties (relevant notices only)
5. magnitude: +10 at 200+ affected workers, else +5 at 50+

The total is clamped to [0, 100]. Labels: Likely >= 80, Possible >= 50,
otherwise Unclear.
"""

from typing import Dict, List, Optional

from app.domain.models import CareSetting, ImpactLabel, NormalizedNotice, NursingImpact, RoleMix

from .keywords import (
    CARE_SETTING_KEYWORDS,
    EMPLOYER_CONTEXT_KEYWORDS,
    HEALTHCARE_NAICS_PREFIX,
    NAICS_CARE_SETTINGS,
    NURSING_KEYWORDS,
    OCCUPATIONAL_KEYWORDS,
    ROLE_KEYWORDS,
    SPECIALTY_KEYWORDS,
    find_keywords,
)

HEALTHCARE_GATE_POINTS = 30
KEYWORD_POINTS = 10
KEYWORD_POINTS_CAP = 40
CARE_SETTING_POINTS = 10
LARGE_EVENT_THRESHOLD = 200
LARGE_EVENT_POINTS = 10
MEDIUM_EVENT_THRESHOLD = 50
MEDIUM_EVENT_POINTS = 5

LIKELY_THRESHOLD = 80
POSSIBLE_THRESHOLD = 50

ROLE_BASELINE: Dict[str, int] = {"rn": 30, "lpn": 30, "cna": 30}
ROLE_KEYWORD_INCREMENT = 15
SETTING_ROLE_INCREMENTS: Dict[str, Dict[str, int]] = {
    CareSetting.ACUTE.value: {"rn": 30},
    CareSetting.SNF.value: {"cna": 25, "lpn": 15},
    CareSetting.OUTPATIENT.value: {"rn": 20, "lpn": 10},
    CareSetting.HOME.value: {"rn": 20, "cna": 10},
    CareSetting.BEHAVIORAL.value: {"rn": 20, "lpn": 5},
}
ROLE_ORDER = ("rn", "lpn", "cna")


def notice_text(notice: NormalizedNotice) -> str:
    """Concatenated employer name, reason, and raw text, lowercased."""
    parts = [notice.employer_name, notice.reason, notice.raw_text]
    return " ".join(part for part in parts if part).lower()


def infer_care_setting(industry_code: Optional[str], text: str) -> str:
    """Infer the care setting.

    A NAICS prefix wins outright; otherwise the first keyword category (acute,
    snf, outpatient, home, behavioral, occupational) with any match is used.
    """
    code = (industry_code or "").strip()
    for prefix, setting in NAICS_CARE_SETTINGS:
        if code.startswith(prefix):
            return setting
    for setting, keywords in CARE_SETTING_KEYWORDS:
        if find_keywords(text, keywords):
            return setting
    return CareSetting.UNKNOWN.value


def normalize_percentages(weights: Dict[str, int]) -> Dict[str, int]:
    """Scale integer weights to percentages that sum to exactly 100.

    Uses largest-remainder rounding; ties go to the earlier role in RN, LPN,
    CNA order.
    """
    total = sum(weights[role] for role in ROLE_ORDER)
    if total <= 0:
        return {"rn": 34, "lpn": 33, "cna": 33}

    shares: Dict[str, int] = {}
    remainders = []
    for position, role in enumerate(ROLE_ORDER):
        quotient, remainder = divmod(weights[role] * 100, total)
        shares[role] = quotient
        remainders.append((-remainder, position, role))

    leftover = 100 - sum(shares.values())
    for _, _, role in sorted(remainders)[:leftover]:
        shares[role] += 1
    return shares


def infer_role_mix(text: str, care_setting: str) -> RoleMix:
    """Estimate the RN/LPN/CNA split from role keywords and care setting."""
    if care_setting == CareSetting.OCCUPATIONAL.value:
        return RoleMix(rn=100, lpn=0, cna=0)

    weights = dict(ROLE_BASELINE)
    for role, keywords in ROLE_KEYWORDS:
        weights[role] += ROLE_KEYWORD_INCREMENT * len(find_keywords(text, keywords))
    for role, increment in SETTING_ROLE_INCREMENTS.get(care_setting, {}).items():
        weights[role] += increment

    return RoleMix(**normalize_percentages(weights))


def detect_specialties(text: str) -> List[str]:
    """All specialties with at least one matching keyword, in table order."""
    return [name for name, keywords in SPECIALTY_KEYWORDS if find_keywords(text, keywords)]


def label_for_score(score: int) -> ImpactLabel:
    if score >= LIKELY_THRESHOLD:
        return ImpactLabel.LIKELY
    if score >= POSSIBLE_THRESHOLD:
        return ImpactLabel.POSSIBLE
    return ImpactLabel.UNCLEAR


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def score_notice(notice: NormalizedNotice) -> NursingImpact:
    """Compute the nursing-impact assessment for a notice.

    Args:
        notice: Normalized notice (its existing impact, if any, is ignored)

    Returns:
        NursingImpact with score, label, and audit signals
    """
    text = notice_text(notice)
    industry = (notice.industry_code or "").strip()
    signals: List[str] = []
    score = 0

    healthcare = False
    if industry.startswith(HEALTHCARE_NAICS_PREFIX):
        signals.append(f"naics:{industry}")
        healthcare = True
    if any(keyword in text for keyword in EMPLOYER_CONTEXT_KEYWORDS):
        signals.append("employer_text_healthcare")
        healthcare = True
    if healthcare:
        score += HEALTHCARE_GATE_POINTS

    keywords_found = find_keywords(text, NURSING_KEYWORDS)
    if keywords_found:
        score += min(KEYWORD_POINTS_CAP, KEYWORD_POINTS * len(keywords_found))
        signals.append("nursing_keywords")

    occupational = find_keywords(text, OCCUPATIONAL_KEYWORDS)
    if occupational:
        signals.append("occupational_health_terms")

    relevant = healthcare or bool(keywords_found) or bool(occupational)

    care_setting = infer_care_setting(industry, text)
    role_mix: Optional[RoleMix] = None
    specialties: List[str] = []
    if relevant:
        if care_setting != CareSetting.UNKNOWN.value:
            score += CARE_SETTING_POINTS
            signals.append(f"care_setting:{care_setting}")
        role_mix = infer_role_mix(text, care_setting)
        specialties = detect_specialties(text)
        if specialties:
            signals.append("specialties")

    employees = notice.employees_affected
    if employees is not None:
        if employees >= LARGE_EVENT_THRESHOLD:
            score += LARGE_EVENT_POINTS
            signals.append("large_event_200plus")
        elif employees >= MEDIUM_EVENT_THRESHOLD:
            score += MEDIUM_EVENT_POINTS
            signals.append("medium_event_50plus")

    score = max(0, min(100, score))

    return NursingImpact(
        score=score,
        label=label_for_score(score),
        signals=_dedupe(signals),
        keywords_found=keywords_found,
        role_mix=role_mix,
        care_setting=care_setting,
        specialties=specialties,
    )


def apply_impact(notice: NormalizedNotice) -> NormalizedNotice:
    """Return a copy of the notice with its impact recomputed."""
    return notice.model_copy(update={"impact": score_notice(notice)})
