"""
Derived wall-motion metrics: WMSI, abnormal-segment grouping, coronary
territory inference, WMSI -> LVEF pocket estimate, WMSI/LVEF coherence and
suggested ECG leads.

All functions are pure over a MotilityState snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .segments import (
    SEGMENT_IDS,
    SEGMENTS,
    Artery,
    PatternCategory,
    PatternId,
    SegmentLevel,
    Severity,
    segment_level,
)
from .store import MotilityState

# Segments whose involvement points to a septal (V1-V2) infarct in DA territory
_SEPTAL_SEGMENTS = frozenset({2, 3, 8, 9})


@dataclass
class AbnormalSegments:
    hypokinetic: list[int] = field(default_factory=list)
    akinetic: list[int] = field(default_factory=list)
    dyskinetic: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.hypokinetic) + len(self.akinetic) + len(self.dyskinetic)

    def all_ids(self) -> list[int]:
        return sorted(self.hypokinetic + self.akinetic + self.dyskinetic)

    def by_severity(self, level: Severity) -> list[int]:
        return {
            Severity.HYPOKINETIC: self.hypokinetic,
            Severity.AKINETIC: self.akinetic,
            Severity.DYSKINETIC: self.dyskinetic,
        }.get(level, [])


@dataclass
class TierCounts:
    hypokinetic: int = 0
    akinetic: int = 0
    dyskinetic: int = 0

    @property
    def total(self) -> int:
        return self.hypokinetic + self.akinetic + self.dyskinetic


@dataclass
class EjectionFractionEstimate:
    minimum: int
    maximum: int
    range_label: str
    category: str


@dataclass
class CoherenceCheck:
    consistent: bool
    message: Optional[str] = None


@dataclass
class MotilitySummary:
    wmsi: float
    abnormal: AbnormalSegments
    estimated_ef: EjectionFractionEstimate
    dominant_territory: Optional[Artery]
    ecg_correlation: Optional[str]
    coherence: CoherenceCheck


def compute_wmsi(state: MotilityState) -> float:
    """Mean score over all 17 segments, rounded to 2 decimals (1.00-4.00)."""
    total = sum(int(state.severity(sid)) for sid in SEGMENT_IDS)
    return round(total / len(SEGMENT_IDS), 2)


def format_wmsi(wmsi: float) -> str:
    return f"{wmsi:.2f}"


def group_abnormal(state: MotilityState) -> AbnormalSegments:
    """Partition non-normal segments by tier, ascending segment id."""
    groups = AbnormalSegments()
    for sid in SEGMENT_IDS:
        level = state.severity(sid)
        if level == Severity.HYPOKINETIC:
            groups.hypokinetic.append(sid)
        elif level == Severity.AKINETIC:
            groups.akinetic.append(sid)
        elif level == Severity.DYSKINETIC:
            groups.dyskinetic.append(sid)
    return groups


def territory_tier_counts(state: MotilityState) -> dict[Artery, TierCounts]:
    counts = {artery: TierCounts() for artery in Artery}
    abnormal = group_abnormal(state)
    for sid in abnormal.hypokinetic:
        counts[SEGMENTS[sid].artery].hypokinetic += 1
    for sid in abnormal.akinetic:
        counts[SEGMENTS[sid].artery].akinetic += 1
    for sid in abnormal.dyskinetic:
        counts[SEGMENTS[sid].artery].dyskinetic += 1
    return counts


def territory_counts(state: MotilityState) -> dict[Artery, int]:
    return {artery: tiers.total for artery, tiers in territory_tier_counts(state).items()}


def dominant_territory(state: MotilityState) -> Optional[Artery]:
    """Artery with the most abnormal segments.

    Ties resolve to the first artery in DA, CD, Cx order.
    """
    counts = territory_counts(state)
    best = max(counts.values())
    if best == 0:
        return None
    for artery in Artery:
        if counts[artery] == best:
            return artery
    return None


def estimate_ejection_fraction(wmsi: float) -> EjectionFractionEstimate:
    """Approximate LVEF band from WMSI.

    A bedside rule of thumb, not a formula: the bands are reference values
    shown next to the measured LVEF, never a substitute for it.
    """
    if wmsi == 1.0:
        return EjectionFractionEstimate(55, 65, "55-65%", "normal")
    elif wmsi <= 1.2:
        return EjectionFractionEstimate(45, 55, "45-55%", "levemente reducida")
    elif wmsi <= 1.5:
        return EjectionFractionEstimate(35, 45, "35-45%", "moderadamente reducida")
    elif wmsi <= 2.0:
        return EjectionFractionEstimate(25, 30, "25-30%", "severamente reducida")
    return EjectionFractionEstimate(0, 25, "<25%", "muy deprimida")


def check_coherence(wmsi: float, measured_ef: Optional[float]) -> CoherenceCheck:
    """Soft warning when regional and global function disagree."""
    if measured_ef is None:
        return CoherenceCheck(consistent=True)

    if wmsi > 1.5 and measured_ef > 55:
        return CoherenceCheck(
            consistent=False,
            message=(
                "WMSI elevado (>1.5) con FEy conservada (>55%). Revisar coherencia "
                "entre motilidad regional y función global."
            ),
        )
    if wmsi == 1.0 and measured_ef < 50:
        return CoherenceCheck(
            consistent=False,
            message=(
                "WMSI normal pero FEy deprimida (<50%). Considerar disfunción global "
                "sin alteraciones regionales."
            ),
        )
    return CoherenceCheck(consistent=True)


_PATTERN_ECG: dict[PatternId, str] = {
    PatternId.BCRI: "QRS ancho (>120ms), patrón de BCRI (V1-V2 QS, V6 R empastada).",
    PatternId.BCRD: "QRS ancho (>120ms), patrón de BCRD (V1-V2 rSR').",
    PatternId.PACEMAKER: "Espiga de marcapasos, QRS ancho con imagen de BCRI.",
}

_TAKOTSUBO_ECG = "T negativas profundas en precordiales (V1-V6), QT prolongado."

_TERRITORY_ECG: dict[Artery, str] = {
    Artery.CD: "DII, DIII, aVF (Inferior). Considerar V3R-V4R si hay compromiso de VD.",
    Artery.CX: "DI, aVL, V5-V6 (Lateral).",
}


def ecg_correlation(state: MotilityState) -> Optional[str]:
    """Suggested ECG leads for the current pattern or dominant territory."""
    pattern = state.pattern
    if pattern is not None:
        if pattern.category == PatternCategory.TAKOTSUBO:
            return _TAKOTSUBO_ECG
        if pattern.id in _PATTERN_ECG:
            return _PATTERN_ECG[pattern.id]

    territory = dominant_territory(state)
    if territory is None:
        return None

    if territory == Artery.DA:
        involved = group_abnormal(state).all_ids()
        has_apical = any(segment_level(sid) == SegmentLevel.APICAL for sid in involved)
        has_septal = any(sid in _SEPTAL_SEGMENTS for sid in involved)
        if has_septal and not has_apical:
            return "V1-V2 (Septal)."
        if has_apical:
            return "V1-V4, posiblemente V5-V6 (Anterior extenso/Apical)."
        return "V1-V4 (Anterior)."

    return _TERRITORY_ECG[territory]


def segment_names_by_tier(state: MotilityState) -> dict[Severity, list[str]]:
    """Anatomical names per abnormal tier, akinetic first (compact preview)."""
    abnormal = group_abnormal(state)
    names: dict[Severity, list[str]] = {}
    for level in (Severity.AKINETIC, Severity.HYPOKINETIC, Severity.DYSKINETIC):
        ids = abnormal.by_severity(level)
        if ids:
            names[level] = [SEGMENTS[sid].name for sid in ids]
    return names


def summarize(state: MotilityState, measured_ef: Optional[float] = None) -> MotilitySummary:
    wmsi = compute_wmsi(state)
    return MotilitySummary(
        wmsi=wmsi,
        abnormal=group_abnormal(state),
        estimated_ef=estimate_ejection_fraction(wmsi),
        dominant_territory=dominant_territory(state),
        ecg_correlation=ecg_correlation(state),
        coherence=check_coherence(wmsi, measured_ef),
    )
