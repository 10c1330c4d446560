"""
LV diastolic function grading.

Source: Nagueh SF, et al. "Recommendations for the Evaluation of Left
        Ventricular Diastolic Function by Echocardiography." JASE 2016;29:277-314.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiastolicGrade(str, Enum):
    NORMAL = "Normal"
    GRADE_I = "I"
    GRADE_II = "II"
    GRADE_III = "III"
    INDETERMINATE = "Indeterminado"


class DiastolicSeverity(str, Enum):
    NEUTRAL = "neutral"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass
class DiastolicResult:
    grade: DiastolicGrade
    description: str
    severity: DiastolicSeverity


_GRADE_I = DiastolicResult(
    DiastolicGrade.GRADE_I,
    "Disfunción Diastólica Grado I (Relajación Prolongada). Presiones de llenado VI normales.",
    DiastolicSeverity.GREEN,
)


def classify_diastolic_function(
    e: Optional[float],
    a: Optional[float],
    e_prime: Optional[float],
    la_volume_index: Optional[float] = 28,
    tr_velocity: Optional[float] = 0,
    lvef: Optional[float] = 60,
    wall_motion: str = "normal",
) -> DiastolicResult:
    """Grade diastolic function from mitral inflow and tissue Doppler.

    Args:
        e, a: mitral E and A wave peak velocities (cm/s)
        e_prime: average e' (cm/s)
        la_volume_index: LA volume index (mL/m2)
        tr_velocity: peak TR velocity (m/s)
        lvef: ejection fraction (%)
        wall_motion: global wall-motion label; anything but 'normal' marks
            the heart as structurally diseased
    """
    if not e or not a or not e_prime:
        return DiastolicResult(
            DiastolicGrade.INDETERMINATE,
            "Esperando datos Doppler...",
            DiastolicSeverity.NEUTRAL,
        )

    e_over_e_prime = e / e_prime
    e_over_a = e / a
    lavi = 28 if la_volume_index is None else la_volume_index
    trv = tr_velocity or 0
    ef = 60 if lvef is None else lvef

    # Supernormal (athlete) vs restrictive filling
    if e_over_a > 2 and e_prime >= 10:
        return DiastolicResult(
            DiastolicGrade.NORMAL,
            "Función Diastólica Normal (Patrón de llenado vigoroso/Atleta). "
            "Presiones de llenado VI normales.",
            DiastolicSeverity.GREEN,
        )
    if e_over_a > 2 and e_prime < 10:
        return DiastolicResult(
            DiastolicGrade.GRADE_III,
            "Disfunción Diastólica Grado III (Patrón Restrictivo). "
            "Presiones de llenado VI elevadas.",
            DiastolicSeverity.RED,
        )

    diseased = ef < 50 or wall_motion != "normal"

    if not diseased:
        criteria = sum((e_prime < 9, e_over_e_prime > 14, lavi > 34, trv > 2.8))
        if criteria < 2:
            return DiastolicResult(
                DiastolicGrade.NORMAL,
                "Función Diastólica Normal. Presiones de llenado VI normales.",
                DiastolicSeverity.GREEN,
            )
        if criteria == 2:
            return DiastolicResult(
                DiastolicGrade.INDETERMINATE,
                "Función Diastólica Indeterminada (2/4 criterios alterados). "
                "Se requiere evaluación adicional.",
                DiastolicSeverity.YELLOW,
            )
        # 3+ criteria: grade as a diseased heart

    if e_over_a <= 0.8 and e <= 50:
        return _GRADE_I

    # Filling-pressure criteria; E/e' is always available at this point
    met = int(e_over_e_prime > 14)
    data_points = 1
    if trv > 0:
        data_points += 1
        met += int(trv > 2.8)
    if la_volume_index is not None:
        data_points += 1
        met += int(la_volume_index > 34)

    if data_points < 2:
        return DiastolicResult(
            DiastolicGrade.INDETERMINATE,
            "Función Diastólica Indeterminada. Datos insuficientes para clasificar.",
            DiastolicSeverity.YELLOW,
        )
    if met >= 2:
        return DiastolicResult(
            DiastolicGrade.GRADE_II,
            "Disfunción Diastólica Grado II (Pseudonormal). Presiones de llenado VI elevadas.",
            DiastolicSeverity.RED,
        )
    if met == 0 or (met == 1 and data_points == 3):
        return _GRADE_I
    return DiastolicResult(
        DiastolicGrade.INDETERMINATE,
        "Función Diastólica Indeterminada. Evaluación adicional requerida.",
        DiastolicSeverity.YELLOW,
    )
