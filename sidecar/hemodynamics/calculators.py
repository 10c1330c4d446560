"""
Geometric and hemodynamic formulas for transthoracic echo.

Source: Lang RM, et al. "Recommendations for Cardiac Chamber Quantification
        by Echocardiography in Adults." JASE 2015;28:1-39.

Every function returns 0 / None for missing or non-positive inputs instead of
raising, so partially filled studies still produce a report.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"


class LVGeometry(str, Enum):
    NORMAL = "Geometría Normal"
    CONCENTRIC_REMODELING = "Remodelado Concéntrico"
    CONCENTRIC_HYPERTROPHY = "Hipertrofia Concéntrica"
    ECCENTRIC_HYPERTROPHY = "Hipertrofia Excéntrica"
    INSUFFICIENT_DATA = "Datos insuficientes"


@dataclass
class ContinuityResult:
    lvot_area: float
    valve_area: float
    valve_area_index: float


@dataclass
class PisaResult:
    flow: float
    eroa: float
    regurgitant_volume: float


@dataclass
class ZScoreResult:
    expected: float
    z_score: float
    interpretation: str


@dataclass
class LAVolumeResult:
    volume: float
    volume_index: float
    classification: str


# LV mass index above which the ventricle is hypertrophied (g/m2)
_LV_MASS_INDEX_LIMIT = {Sex.MALE: 115.0, Sex.FEMALE: 95.0}
_RWT_LIMIT = 0.42
# LVEDD above which the ventricle is dilated (mm)
_LVEDD_LIMIT = {Sex.MALE: 59.0, Sex.FEMALE: 53.0}


def body_surface_area(weight_kg: Optional[float], height_cm: Optional[float]) -> float:
    """DuBois BSA in m2."""
    if not weight_kg or not height_cm:
        return 0.0
    return 0.007184 * math.pow(weight_kg, 0.425) * math.pow(height_cm, 0.725)


def lv_mass(lvedd_mm: Optional[float], pw_mm: Optional[float], ivs_mm: Optional[float]) -> float:
    """Devereux-corrected ASE cube formula, grams."""
    if not lvedd_mm or not pw_mm or not ivs_mm:
        return 0.0
    lvedd, pw, ivs = lvedd_mm / 10, pw_mm / 10, ivs_mm / 10
    return 0.8 * (1.04 * ((lvedd + pw + ivs) ** 3 - lvedd ** 3)) + 0.6


def relative_wall_thickness(
    pw_mm: Optional[float], ivs_mm: Optional[float], lvedd_mm: Optional[float]
) -> float:
    """RWT = 2 x PW / LVEDD."""
    if not pw_mm or not ivs_mm or not lvedd_mm:
        return 0.0
    return (2 * pw_mm) / lvedd_mm


def classify_lv_geometry(mass_index: float, rwt: float, sex: Sex | str) -> LVGeometry:
    if not mass_index or not rwt:
        return LVGeometry.INSUFFICIENT_DATA

    hypertrophy = mass_index > _LV_MASS_INDEX_LIMIT[_sex(sex)]
    concentric = rwt > _RWT_LIMIT

    if not hypertrophy and not concentric:
        return LVGeometry.NORMAL
    if not hypertrophy and concentric:
        return LVGeometry.CONCENTRIC_REMODELING
    if hypertrophy and concentric:
        return LVGeometry.CONCENTRIC_HYPERTROPHY
    return LVGeometry.ECCENTRIC_HYPERTROPHY


def is_lv_dilated(lvedd_mm: Optional[float], sex: Sex | str) -> bool:
    if not lvedd_mm:
        return False
    return lvedd_mm > _LVEDD_LIMIT[_sex(sex)]


def pulmonary_systolic_pressure(tr_velocity: Optional[float], rap: float = 5) -> int:
    """PSAP = 4 x TRVmax^2 + RAP (simplified Bernoulli), mmHg. 0 when not estimable."""
    if not tr_velocity or tr_velocity <= 0:
        return 0
    # Half-up rounding
    return math.floor(4 * tr_velocity ** 2 + rap + 0.5)


def classify_pulmonary_pressure(psap: Optional[float]) -> str:
    if not psap:
        return "No estimable"
    if psap < 36:
        return "Normal"
    if psap < 45:
        return "Levemente elevada"
    if psap < 60:
        return "Moderadamente elevada"
    return "Severamente elevada"


def indexed_diameter(diameter_mm: Optional[float], bsa: Optional[float]) -> Optional[float]:
    """Diameter indexed to BSA, cm/m2."""
    if not diameter_mm or not bsa:
        return None
    return diameter_mm / bsa / 10


def continuity_valve_area(
    lvot_diameter_mm: Optional[float],
    lvot_vti: Optional[float],
    aortic_vti: Optional[float],
    bsa: float = 1,
) -> Optional[ContinuityResult]:
    """Aortic valve area by the continuity equation, cm2."""
    if not lvot_diameter_mm or not lvot_vti or not aortic_vti:
        return None
    radius_cm = lvot_diameter_mm / 20
    lvot_area = math.pi * radius_cm ** 2
    ava = lvot_area * lvot_vti / aortic_vti
    return ContinuityResult(
        lvot_area=round(lvot_area, 2),
        valve_area=round(ava, 2),
        valve_area_index=round(ava / bsa, 2) if bsa and bsa > 0 else 0.0,
    )


def pisa(
    radius_mm: Optional[float],
    aliasing_velocity: Optional[float],
    mr_vmax: Optional[float],
    mr_vti: Optional[float],
) -> Optional[PisaResult]:
    """Proximal isovelocity surface area quantification of mitral regurgitation.

    Args:
        radius_mm: PISA radius
        aliasing_velocity: Nyquist limit, cm/s
        mr_vmax: peak MR velocity, m/s
        mr_vti: MR velocity-time integral, cm
    """
    if not radius_mm or not aliasing_velocity or not mr_vmax or not mr_vti:
        return None
    radius_cm = radius_mm / 10
    flow = 2 * math.pi * radius_cm ** 2 * aliasing_velocity
    eroa = flow / (mr_vmax * 100)
    return PisaResult(
        flow=round(flow, 1),
        eroa=round(eroa, 2),
        regurgitant_volume=round(eroa * mr_vti),
    )


def dimensionless_index(lvot_vti: Optional[float], aortic_vti: Optional[float]) -> Optional[float]:
    if not lvot_vti or not aortic_vti:
        return None
    return round(lvot_vti / aortic_vti, 2)


def aortic_root_z_score(root_mm: Optional[float], bsa: Optional[float]) -> Optional[ZScoreResult]:
    """Simplified nomogram (Campens 2014): expected = 15.2 * sqrt(BSA) + 4.3, SD 2.5 mm."""
    if not root_mm or not bsa:
        return None
    expected = 15.2 * math.sqrt(bsa) + 4.3
    z = (root_mm - expected) / 2.5
    if z < 2:
        interpretation = "Normal"
    elif z < 3:
        interpretation = "Levemente dilatada"
    elif z < 4:
        interpretation = "Moderadamente dilatada"
    else:
        interpretation = "Severamente dilatada"
    return ZScoreResult(
        expected=round(expected, 1), z_score=round(z, 2), interpretation=interpretation
    )


def la_volume_lanus(
    area_4c: Optional[float], length_mm: Optional[float], bsa: Optional[float]
) -> Optional[LAVolumeResult]:
    """Single-plane area-length LA volume: 0.85 x A^2 / L."""
    if not area_4c or not length_mm or not bsa:
        return None
    volume = 0.85 * area_4c ** 2 / (length_mm / 10)
    volume_index = volume / bsa
    if volume_index < 34:
        classification = "Normal"
    elif volume_index <= 41:
        classification = "Dilatación Leve"
    elif volume_index <= 48:
        classification = "Dilatación Moderada"
    else:
        classification = "Dilatación Severa"
    return LAVolumeResult(
        volume=round(volume, 1),
        volume_index=round(volume_index, 1),
        classification=classification,
    )


def _sex(sex: Sex | str) -> Sex:
    # Anything that is not explicitly male uses the female limits
    return Sex.MALE if str(getattr(sex, "value", sex)).upper() in ("M", "MALE") else Sex.FEMALE
