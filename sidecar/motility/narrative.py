"""
Natural-language wall-motion text.

generate_findings() builds the detailed paragraph placed in the left-ventricle
section of the report; generate_conclusion() builds the one-sentence
diagnostic phrase merged into the conclusions list. Both return "" when every
segment is normal.
"""

from __future__ import annotations

from conclusions.text_format import join_spanish

from .metrics import (
    AbnormalSegments,
    compute_wmsi,
    format_wmsi,
    group_abnormal,
    territory_tier_counts,
)
from .segments import (
    Artery,
    Pattern,
    PatternCategory,
    PatternId,
    SegmentLevel,
    Severity,
    segment_level,
    segment_wall,
)
from .store import MotilityState

FINDINGS_PREFIX = "Se observan trastornos segmentarios de la motilidad parietal"

# Diffuse wording only applies once the pattern really covers most of the ventricle
DIFFUSE_MIN_SEGMENTS = 12

_TIER_NOUNS: dict[Severity, str] = {
    Severity.AKINETIC: "aquinesia",
    Severity.HYPOKINETIC: "hipoquinesia",
    Severity.DYSKINETIC: "disquinesia",
}

# Fixed reporting order: akinetic before hypokinetic
_TIER_ORDER = (Severity.AKINETIC, Severity.HYPOKINETIC, Severity.DYSKINETIC)

_LEVEL_ORDER = {SegmentLevel.BASAL: 0, SegmentLevel.MID: 1, SegmentLevel.APICAL: 2}

_DYSSYNCHRONY_FINDINGS: dict[PatternId, str] = {
    PatternId.BCRI: (
        "Se observa alteración del patrón de contracción ventricular compatible con "
        "disincronía mecánica, caracterizada por movimiento septal anómalo (septal "
        "flash), en el contexto de bloqueo completo de rama izquierda"
    ),
    PatternId.BCRD: (
        "Motilidad parietal del ventrículo izquierdo conservada. Se observa asincronía "
        "leve del septum, en relación a bloqueo completo de rama derecha"
    ),
    PatternId.PACEMAKER: (
        "Se observa patrón de contracción disincrónico del ventrículo izquierdo, con "
        "movimiento septal paradójico, en relación a estimulación ventricular por "
        "marcapasos"
    ),
    PatternId.POST_SURGERY: (
        "Se observa movimiento septal anómalo, probablemente relacionado a antecedente "
        "de cirugía cardíaca"
    ),
}

_DIFFUSE_QUALIFIERS: dict[PatternId, str] = {
    PatternId.DILATED_CM: "global difusa que no respeta un territorio coronario específico",
    PatternId.HYPERTENSIVE_CM: "con predominio basal y medio ventricular",
}

# Canned conclusions that bypass territory logic, keyed by pattern id
_PATTERN_CONCLUSIONS: dict[PatternId, str] = {
    PatternId.DILATED_CM: "Patrón de hipoquinesia global, sugestivo de miocardiopatía dilatada.",
    PatternId.POST_SURGERY: "Movimiento septal anómalo en relación a antecedentes quirúrgicos.",
    PatternId.BCRI: (
        "Patrón de contracción disincrónico con movimiento septal paradójico, "
        "en relación a BCRI."
    ),
    PatternId.PACEMAKER: "Disincronía mecánica secundaria a estimulación ventricular por marcapasos.",
    PatternId.BCRD: "Asincronía septal leve en relación a BCRD.",
}

# Second-level lookup: per category, pattern id -> sentence
_CATEGORY_CONCLUSIONS: dict[PatternCategory, dict[PatternId, str]] = {
    PatternCategory.COMBINED: {
        PatternId.DA_CX: "Patrón sugestivo de afectación combinada DA–Cx.",
        PatternId.DA_CD_WRAP: "Patrón compatible con DA envolvente.",
        PatternId.CX_CD: "Patrón sugestivo de afectación combinada Cx–CD.",
        PatternId.MULTIVESSEL: "Patrón sugestivo de enfermedad coronaria multivaso.",
        PatternId.LEFT_MAIN: "Patrón sugestivo de afectación del Tronco de CI.",
        PatternId.DA_DISTAL: "Patrón sugestivo de lesión de DA distal.",
    },
    PatternCategory.CARDIOMYOPATHY: {
        PatternId.HYPERTENSIVE_CM: "Patrón sugestivo de cardiopatía hipertensiva.",
        PatternId.CHAGAS: "Patrón sugestivo de miocardiopatía chagásica.",
    },
}

# Every pattern of these categories shares one sentence
_CATEGORY_DEFAULT_CONCLUSIONS: dict[PatternCategory, str] = {
    PatternCategory.TAKOTSUBO: "Patrón sugestivo de Miocardiopatía por Estrés (Takotsubo).",
}

_TERRITORY_TIER_LABELS: dict[Severity, str] = {
    Severity.AKINETIC: "Aquinesia",
    Severity.HYPOKINETIC: "Hipoquinesia",
    Severity.DYSKINETIC: "Discinesia",
}


# --- Findings ---


def _tiers_present(abnormal: AbnormalSegments) -> list[Severity]:
    return [level for level in _TIER_ORDER if abnormal.by_severity(level)]


def _diffuse_findings(pattern: Pattern, abnormal: AbnormalSegments, wmsi: str) -> str:
    severity_text = " y ".join(_TIER_NOUNS[level] for level in _tiers_present(abnormal))
    qualifier = _DIFFUSE_QUALIFIERS.get(pattern.id, "difusa")
    return f"{FINDINGS_PREFIX}: {severity_text} {qualifier} (WMSI: {wmsi}).\n"


def _dyssynchrony_findings(pattern: Pattern, wmsi: str) -> str:
    description = _DYSSYNCHRONY_FINDINGS.get(pattern.id, pattern.description)
    return f"{description} (WMSI: {wmsi}).\n"


def _describe_wall(wall: str, levels: list[SegmentLevel]) -> str:
    unique = sorted(set(levels), key=_LEVEL_ORDER.__getitem__)
    levels_text = join_spanish(level.value for level in unique)
    if wall == "apical" and unique == [SegmentLevel.APICAL]:
        return "nivel apical"
    return f"pared {wall} ({levels_text})"


def _wall_clauses(abnormal: AbnormalSegments) -> list[str]:
    clauses: list[str] = []
    for level in _TIER_ORDER:
        walls: dict[str, list[SegmentLevel]] = {}
        for sid in abnormal.by_severity(level):
            walls.setdefault(segment_wall(sid), []).append(segment_level(sid))
        if not walls:
            continue
        descriptions = [_describe_wall(wall, levels) for wall, levels in walls.items()]
        clauses.append(f"{_TIER_NOUNS[level]} de {join_spanish(descriptions)}")
    return clauses


def generate_findings(state: MotilityState) -> str:
    """Detailed wall-motion paragraph, newline-terminated, or "" if all normal."""
    abnormal = group_abnormal(state)
    if abnormal.total == 0:
        return ""

    wmsi = format_wmsi(compute_wmsi(state))
    pattern = state.pattern

    if pattern is not None and pattern.is_diffuse and abnormal.total >= DIFFUSE_MIN_SEGMENTS:
        return _diffuse_findings(pattern, abnormal, wmsi)

    if pattern is not None and pattern.category == PatternCategory.DYSSYNCHRONY:
        return _dyssynchrony_findings(pattern, wmsi)

    clauses = "; ".join(_wall_clauses(abnormal))
    return f"{FINDINGS_PREFIX}, con {clauses} (WMSI: {wmsi}).\n"


# --- Conclusion ---


def _pattern_conclusion(pattern: Pattern) -> str | None:
    if pattern.id in _PATTERN_CONCLUSIONS:
        return _PATTERN_CONCLUSIONS[pattern.id]
    by_id = _CATEGORY_CONCLUSIONS.get(pattern.category, {})
    if pattern.id in by_id:
        return by_id[pattern.id]
    return _CATEGORY_DEFAULT_CONCLUSIONS.get(pattern.category)


def generate_conclusion(state: MotilityState) -> str:
    """Short diagnostic sentence for the conclusions list, or "" if all normal.

    With a single affected territory the severity tiers are not spelled out;
    with several, each territory lists its tiers.
    """
    if group_abnormal(state).total == 0:
        return ""

    pattern = state.pattern
    if pattern is not None:
        canned = _pattern_conclusion(pattern)
        if canned is not None:
            return canned

    counts = territory_tier_counts(state)
    affected = [artery for artery in Artery if counts[artery].total > 0]

    if len(affected) == 1:
        return f"Trastornos de la motilidad Segmentaria en Territorio {affected[0].value}."

    parts = []
    for artery in affected:
        tiers = counts[artery]
        present = {
            Severity.AKINETIC: tiers.akinetic,
            Severity.HYPOKINETIC: tiers.hypokinetic,
            Severity.DYSKINETIC: tiers.dyskinetic,
        }
        labels = [_TERRITORY_TIER_LABELS[level] for level in _TIER_ORDER if present[level]]
        parts.append(" e ".join(labels) + f" en territorio de {artery.value}")
    return ", ".join(parts) + "."
