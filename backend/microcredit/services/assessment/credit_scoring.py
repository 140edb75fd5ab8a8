"""
Credit Score Aggregator (A-Score)

Combines four 0-100 component scores into one weighted creditworthiness
score and a risk zone:

    score = round(character * 0.25 + capacity * 0.30
                  + literacy * 0.25 + engagement * 0.20)

Missing components default to 50. The zone recommendation is
informational; approval decisions are made outside this core.
"""
import logging
from typing import Dict, Mapping, Optional, Union

from ...models.assessment import AScore, CreditScoreComponents, RiskZone, ZoneRecommendation
from .numeric import clamp_score, round_half_up

logger = logging.getLogger(__name__)


WEIGHTS: Dict[str, float] = {
    "character": 0.25,   # Psychometric character assessment
    "capacity": 0.30,    # RPC capacity score
    "literacy": 0.25,    # Financial literacy progress
    "engagement": 0.20,  # WhatsApp engagement
}

DEFAULT_COMPONENT_SCORE = 50

# Lower bound of each zone; anything below C is D
ZONE_THRESHOLDS = (
    (RiskZone.A, 70),
    (RiskZone.B, 55),
    (RiskZone.C, 40),
)

ZONE_RECOMMENDATIONS: Dict[RiskZone, ZoneRecommendation] = {
    RiskZone.A: ZoneRecommendation("auto_approve", "Layak pinjaman, proses otomatis"),
    RiskZone.B: ZoneRecommendation("approve_conditions", "Layak dengan limit lebih rendah"),
    RiskZone.C: ZoneRecommendation("approve_coaching", "Perlu pendampingan intensif"),
    RiskZone.D: ZoneRecommendation("reject", "Belum memenuhi syarat, tingkatkan literasi"),
}


def calculate_a_score(
    components: Union[CreditScoreComponents, Mapping[str, Optional[float]]],
) -> AScore:
    if not isinstance(components, CreditScoreComponents):
        components = CreditScoreComponents(**{k: components.get(k) for k in WEIGHTS})

    resolved = CreditScoreComponents(
        character=clamp_score(components.character, DEFAULT_COMPONENT_SCORE),
        capacity=clamp_score(components.capacity, DEFAULT_COMPONENT_SCORE),
        literacy=clamp_score(components.literacy, DEFAULT_COMPONENT_SCORE),
        engagement=clamp_score(components.engagement, DEFAULT_COMPONENT_SCORE),
    )

    weighted = sum(getattr(resolved, name) * weight for name, weight in WEIGHTS.items())
    score = round_half_up(weighted)
    zone = get_risk_zone(score)

    logger.info(f"A-Score computed: {score} (zone {zone.value})")

    return AScore(
        score=score,
        zone=zone,
        components=resolved,
        recommendation=get_zone_recommendation(zone),
    )


def get_risk_zone(score: float) -> RiskZone:
    for zone, threshold in ZONE_THRESHOLDS:
        if score >= threshold:
            return zone
    return RiskZone.D


def get_zone_recommendation(zone: RiskZone) -> ZoneRecommendation:
    return ZONE_RECOMMENDATIONS.get(zone, ZONE_RECOMMENDATIONS[RiskZone.D])
