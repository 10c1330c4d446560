"""
17-segment AHA/ASE left-ventricular model: segments, coronary territories,
motility states and the library of named clinical patterns.

Source: Cerqueira MD, et al. "Standardized Myocardial Segmentation and
        Nomenclature for Tomographic Imaging of the Heart." Circulation
        2002;105:539-542.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum


class UnknownSegmentError(LookupError):
    """Raised when a segment id outside 1-17 is requested."""


class UnknownPatternError(LookupError):
    """Raised when a pattern name is not part of the library."""


class Severity(IntEnum):
    """Motility state. The ordinal doubles as the WMSI score."""

    NORMAL = 1
    HYPOKINETIC = 2
    AKINETIC = 3
    DYSKINETIC = 4

    def next(self) -> Severity:
        return Severity(self.value % 4 + 1)


class Artery(str, Enum):
    DA = "DA"
    CD = "CD"
    CX = "Cx"


class SegmentLevel(str, Enum):
    BASAL = "basal"
    MID = "media"
    APICAL = "apical"


class PatternCategory(str, Enum):
    ISCHEMIC = "ischemic"
    TAKOTSUBO = "takotsubo"
    CARDIOMYOPATHY = "cardiomyopathy"
    COMBINED = "combined"
    DYSSYNCHRONY = "dyssynchrony"
    SPECIAL = "special"


class PatternId(str, Enum):
    ISCHEMIC_DA = "ischemic_da"
    ISCHEMIC_CD = "ischemic_cd"
    ISCHEMIC_CX = "ischemic_cx"
    ISCHEMIC_MULTIVESSEL = "ischemic_multivessel"
    TAKOTSUBO_APICAL = "takotsubo_apical"
    TAKOTSUBO_MID = "takotsubo_mid"
    TAKOTSUBO_INVERTED = "takotsubo_inverted"
    TAKOTSUBO_FOCAL = "takotsubo_focal"
    DILATED_CM = "dilated_cm"
    HYPERTENSIVE_CM = "hypertensive_cm"
    CHAGAS = "chagas"
    DA_CX = "da_cx"
    DA_CD_WRAP = "da_cd_wrap"
    CX_CD = "cx_cd"
    MULTIVESSEL = "multivessel"
    LEFT_MAIN = "left_main"
    DA_DISTAL = "da_distal"
    BCRI = "bcri"
    BCRD = "bcrd"
    PACEMAKER = "pacemaker"
    POST_SURGERY = "post_surgery"
    ANEURYSM_ANTERIOR = "aneurysm_anterior"
    ANEURYSM_APICAL = "aneurysm_apical"
    ANEURYSM_INFERIOR = "aneurysm_inferior"


# Sentinel stored as the active pattern when none is selected
NO_PATTERN = "none"

SEGMENT_IDS: tuple[int, ...] = tuple(range(1, 18))


@dataclass(frozen=True)
class Segment:
    id: int
    name: str
    short_name: str
    artery: Artery
    views: tuple[str, ...]


@dataclass(frozen=True)
class SeverityInfo:
    label: str
    short_label: str
    color: str


@dataclass(frozen=True)
class Territory:
    artery: Artery
    name: str
    segments: frozenset[int]


@dataclass(frozen=True)
class Pattern:
    id: PatternId
    name: str
    description: str
    affected_segments: frozenset[int]
    default_severity: Severity
    category: PatternCategory
    is_diffuse: bool = False


def _segment(id: int, name: str, short_name: str, artery: Artery, *views: str) -> Segment:
    return Segment(id=id, name=name, short_name=short_name, artery=artery, views=views)


SEGMENTS: dict[int, Segment] = {
    # Basal (1-6)
    1: _segment(1, "Basal Anterior", "1-BsAnt", Artery.DA, "A4C", "PSAX"),
    2: _segment(2, "Basal Anteroseptal", "2-BsAntSep", Artery.DA, "A4C", "PSAX"),
    3: _segment(3, "Basal Inferoseptal", "3-BsInfSep", Artery.CD, "A3C", "PSAX"),
    4: _segment(4, "Basal Inferior", "4-BsInf", Artery.CD, "A2C", "PSAX"),
    5: _segment(5, "Basal Inferolateral", "5-BsInfLat", Artery.CX, "A2C", "PSAX"),
    6: _segment(6, "Basal Anterolateral", "6-BsAntLat", Artery.CX, "A3C", "PSAX"),
    # Mid (7-12)
    7: _segment(7, "Medio Anterior", "7-MdAnt", Artery.DA, "A4C", "PSAX"),
    8: _segment(8, "Medio Anteroseptal", "8-MdAntSep", Artery.DA, "A4C", "PSAX"),
    9: _segment(9, "Medio Inferoseptal", "9-MdInfSep", Artery.CD, "A3C", "PSAX"),
    10: _segment(10, "Medio Inferior", "10-MdInf", Artery.CD, "A2C", "PSAX"),
    11: _segment(11, "Medio Inferolateral", "11-MdInfLat", Artery.CX, "A2C", "PSAX"),
    12: _segment(12, "Medio Anterolateral", "12-MdAntLat", Artery.CX, "A3C", "PSAX"),
    # Apical (13-16)
    13: _segment(13, "Apical Anterior", "13-ApAnt", Artery.DA, "A4C"),
    14: _segment(14, "Apical Septal", "14-ApSep", Artery.DA, "A4C"),
    15: _segment(15, "Apical Inferior", "15-ApInf", Artery.CD, "A2C"),
    16: _segment(16, "Apical Lateral", "16-ApLat", Artery.CX, "A2C"),
    # Apex (17)
    17: _segment(17, "Apex", "17-Apex", Artery.DA, "A4C", "A2C", "A3C"),
}

SEVERITIES: dict[Severity, SeverityInfo] = {
    Severity.NORMAL: SeverityInfo("Normocinesia", "Normal", "#10b981"),
    Severity.HYPOKINETIC: SeverityInfo("Hipoquinesia", "Hipo", "#fbbf24"),
    Severity.AKINETIC: SeverityInfo("Aquinesia", "A", "#ef4444"),
    Severity.DYSKINETIC: SeverityInfo("Disquinesia", "Dis", "#a855f7"),
}

TERRITORIES: dict[Artery, Territory] = {
    Artery.DA: Territory(
        Artery.DA, "Descendente Anterior (DA)", frozenset({1, 2, 7, 8, 13, 14, 17})
    ),
    Artery.CD: Territory(
        Artery.CD, "Coronaria Derecha (CD)", frozenset({3, 4, 9, 10, 15})
    ),
    Artery.CX: Territory(
        Artery.CX, "Circunfleja (Cx)", frozenset({5, 6, 11, 12, 16})
    ),
}


def _pattern(
    id: PatternId,
    name: str,
    description: str,
    segments: set[int],
    category: PatternCategory,
    severity: Severity = Severity.HYPOKINETIC,
    is_diffuse: bool = False,
) -> Pattern:
    return Pattern(
        id=id,
        name=name,
        description=description,
        affected_segments=frozenset(segments),
        default_severity=severity,
        category=category,
        is_diffuse=is_diffuse,
    )


_ALL_BUT_APEX = set(range(1, 17))

PATTERNS: dict[PatternId, Pattern] = {
    p.id: p
    for p in (
        # --- Territorial ischemia ---
        _pattern(
            PatternId.ISCHEMIC_DA, "Isquémico DA",
            "Patrón isquémico territorial en descendente anterior",
            {1, 2, 7, 8, 13, 14, 17}, PatternCategory.ISCHEMIC,
        ),
        _pattern(
            PatternId.ISCHEMIC_CD, "Isquémico CD",
            "Patrón isquémico territorial en coronaria derecha",
            {3, 4, 9, 10, 15}, PatternCategory.ISCHEMIC,
        ),
        _pattern(
            PatternId.ISCHEMIC_CX, "Isquémico Cx",
            "Patrón isquémico territorial en circunfleja",
            {5, 6, 11, 12, 16}, PatternCategory.ISCHEMIC,
        ),
        _pattern(
            PatternId.ISCHEMIC_MULTIVESSEL, "Isquemia Multivaso",
            "Patrón isquémico de múltiples territorios",
            {1, 2, 4, 7, 8, 10, 13, 14, 15, 17}, PatternCategory.ISCHEMIC,
        ),
        # --- Takotsubo variants ---
        _pattern(
            PatternId.TAKOTSUBO_APICAL, "Takotsubo Apical",
            "Patrón apical clásico (capuchón apical)",
            {13, 14, 15, 16, 17}, PatternCategory.TAKOTSUBO,
        ),
        _pattern(
            PatternId.TAKOTSUBO_MID, "Takotsubo Medioventricular",
            "Patrón medioventricular (rosquilla)",
            {7, 8, 9, 10, 11, 12}, PatternCategory.TAKOTSUBO,
        ),
        _pattern(
            PatternId.TAKOTSUBO_INVERTED, "Takotsubo Invertido",
            "Patrón basal (invertido)",
            {1, 2, 3, 4, 5, 6}, PatternCategory.TAKOTSUBO,
        ),
        _pattern(
            PatternId.TAKOTSUBO_FOCAL, "Takotsubo Focal",
            "Patrón focal anterolateral",
            {6, 12}, PatternCategory.TAKOTSUBO,
        ),
        # --- Cardiomyopathies ---
        _pattern(
            PatternId.DILATED_CM, "Miocardiopatía Dilatada",
            "Hipoquinesia difusa global",
            _ALL_BUT_APEX, PatternCategory.CARDIOMYOPATHY, is_diffuse=True,
        ),
        _pattern(
            PatternId.HYPERTENSIVE_CM, "Cardiopatía Hipertensiva",
            "Compromiso basal predominante",
            set(range(1, 13)), PatternCategory.CARDIOMYOPATHY, is_diffuse=True,
        ),
        _pattern(
            PatternId.CHAGAS, "Chagas",
            "Patrón típico: aneurisma apical + compromiso inferobasal",
            {4, 10, 17}, PatternCategory.CARDIOMYOPATHY,
        ),
        # --- Combined territories ---
        _pattern(
            PatternId.DA_CX, "DA + Cx (Anterolateral ext)",
            "Compromiso anterior y anterolateral",
            {1, 6, 7, 12, 13, 16, 17}, PatternCategory.COMBINED,
        ),
        _pattern(
            PatternId.DA_CD_WRAP, "DA envolvente (Wrap-around)",
            "Compromiso anterior con extensión inferior apical",
            {1, 2, 7, 8, 13, 14, 15, 17}, PatternCategory.COMBINED,
        ),
        _pattern(
            PatternId.CX_CD, "Cx + CD (Inferolateral)",
            "Compromiso inferior e inferolateral",
            {4, 5, 10, 11, 15}, PatternCategory.COMBINED,
        ),
        _pattern(
            PatternId.MULTIVESSEL, "Multivaso (DA+Cx+CD)",
            "Compromiso multiterritorial difuso",
            _ALL_BUT_APEX, PatternCategory.COMBINED,
        ),
        _pattern(
            PatternId.LEFT_MAIN, "Tronco CI",
            "Compromiso extenso anterior y lateral (bases)",
            {1, 2, 5, 6, 7, 8, 11, 12, 13, 14}, PatternCategory.COMBINED,
        ),
        _pattern(
            PatternId.DA_DISTAL, "DA Distal / Apical pura",
            "Compromiso apical anterior y septal, bases preservadas",
            {13, 14, 15, 16, 17}, PatternCategory.COMBINED,
        ),
        # --- Electrical dyssynchrony ---
        _pattern(
            PatternId.BCRI, "BCRI / Disincronía",
            "Disincronía mecánica por bloqueo de rama izquierda",
            {2, 3, 8, 9, 14}, PatternCategory.DYSSYNCHRONY,
        ),
        _pattern(
            PatternId.BCRD, "BCRD (Rama Derecha)",
            "Asincronía septal leve por bloqueo de rama derecha",
            {2, 8}, PatternCategory.DYSSYNCHRONY, severity=Severity.NORMAL,
        ),
        _pattern(
            PatternId.PACEMAKER, "Marcapasos (MCP)",
            "Disincronía por estimulación ventricular",
            {2, 3, 8, 9, 14}, PatternCategory.DYSSYNCHRONY,
        ),
        _pattern(
            PatternId.POST_SURGERY, "Post Cirugía Cardíaca",
            "Movimiento septal anómalo post-quirúrgico",
            {2, 3, 8, 9, 14}, PatternCategory.DYSSYNCHRONY,
        ),
        # --- Aneurysms ---
        _pattern(
            PatternId.ANEURYSM_ANTERIOR, "Aneurisma Anterior",
            "Disquinesia de pared anterior",
            {1, 7, 13}, PatternCategory.SPECIAL, severity=Severity.DYSKINETIC,
        ),
        _pattern(
            PatternId.ANEURYSM_APICAL, "Aneurisma Apical",
            "Disquinesia/aquinesia apical",
            {13, 14, 15, 16, 17}, PatternCategory.SPECIAL, severity=Severity.DYSKINETIC,
        ),
        _pattern(
            PatternId.ANEURYSM_INFERIOR, "Aneurisma Inferior",
            "Disquinesia de pared inferior",
            {4, 10, 15}, PatternCategory.SPECIAL, severity=Severity.DYSKINETIC,
        ),
    )
}


def segment_info(segment_id: int) -> Segment:
    try:
        return SEGMENTS[segment_id]
    except KeyError:
        raise UnknownSegmentError(f"Unknown segment id: {segment_id!r}") from None


def severity_info(level: int) -> SeverityInfo:
    try:
        return SEVERITIES[Severity(level)]
    except ValueError:
        raise LookupError(f"Unknown motility state: {level!r}") from None


def pattern_info(name: str | PatternId) -> Pattern:
    """Look up a pattern by its identifier (e.g. 'dilated_cm')."""
    try:
        return PATTERNS[PatternId(name)]
    except ValueError:
        raise UnknownPatternError(f"Unknown motility pattern: {name!r}") from None


def territory_segments(artery: str | Artery) -> frozenset[int]:
    try:
        return TERRITORIES[Artery(artery)].segments
    except ValueError:
        raise LookupError(f"Unknown coronary territory: {artery!r}") from None


def segments_for_view(view: str) -> list[Segment]:
    """Segments visible in an echocardiographic view (A4C, A2C, A3C, PSAX)."""
    return [seg for seg in SEGMENTS.values() if view in seg.views]


_LEVEL_PREFIX_RE = re.compile(r"^(Basal|Medio|Apical)\s+")


def segment_level(segment_id: int) -> SegmentLevel:
    name = segment_info(segment_id).name
    if name.startswith("Basal"):
        return SegmentLevel.BASAL
    if name.startswith("Medio"):
        return SegmentLevel.MID
    # Apical segments and the apex itself
    return SegmentLevel.APICAL


def segment_wall(segment_id: int) -> str:
    """Wall name without the level qualifier, lowercased ('Medio Anterior' -> 'anterior').

    The apex reduces to the wall 'apical'.
    """
    name = segment_info(segment_id).name
    return _LEVEL_PREFIX_RE.sub("", name).replace("Apex", "Apical").lower()
