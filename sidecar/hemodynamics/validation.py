"""
Clinical range validation for entered measurements and cross-field quality
control of a study before its report is signed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from report.builder import EchoStudy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClinicalRange:
    minimum: float
    maximum: float
    unit: str
    optimal: Optional[tuple[float, float]] = None


@dataclass
class FieldValidation:
    valid: bool
    message: str = ""
    warning: bool = False


class AlertLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class QualityAlert:
    level: AlertLevel
    message: str


# Keyed by EchoStudy field name
FIELD_RANGES: dict[str, ClinicalRange] = {
    "age": ClinicalRange(0, 120, "años"),
    "weight_kg": ClinicalRange(20, 300, "kg"),
    "height_cm": ClinicalRange(100, 250, "cm"),
    # Left ventricle
    "ivs_mm": ClinicalRange(5, 25, "mm", (7, 11)),
    "pw_mm": ClinicalRange(5, 25, "mm", (7, 11)),
    "lvedd_mm": ClinicalRange(30, 75, "mm", (42, 59)),
    "lvesd_mm": ClinicalRange(20, 60, "mm", (25, 40)),
    "ejection_fraction": ClinicalRange(10, 100, "%", (52, 72)),
    # Diastolic function
    "e_wave": ClinicalRange(20, 200, "cm/s", (50, 120)),
    "a_wave": ClinicalRange(10, 150, "cm/s", (30, 100)),
    "e_prime": ClinicalRange(3, 25, "cm/s", (8, 20)),
    # Left atrium
    "la_volume_index": ClinicalRange(10, 100, "ml/m²", (16, 34)),
    # Aorta
    "aortic_root_mm": ClinicalRange(20, 60, "mm", (27, 37)),
    "ascending_aorta_mm": ClinicalRange(20, 70, "mm", (27, 37)),
    # Right heart
    "tapse_mm": ClinicalRange(5, 40, "mm", (17, 27)),
    "tr_velocity": ClinicalRange(0.5, 5, "m/s", (1.5, 2.5)),
    "rap": ClinicalRange(0, 20, "mmHg", (5, 10)),
}


def validate_field(field: str, value: float) -> FieldValidation:
    """Check ``value`` against the absolute and optimal ranges of ``field``.

    Fields without a registered range are always valid.
    """
    rng = FIELD_RANGES.get(field)
    if rng is None:
        return FieldValidation(valid=True)

    if value < rng.minimum or value > rng.maximum:
        return FieldValidation(
            valid=False,
            message=f"Valor fuera de rango clínico ({rng.minimum:g}-{rng.maximum:g} {rng.unit})",
        )

    if rng.optimal is not None:
        low, high = rng.optimal
        if value < low or value > high:
            return FieldValidation(
                valid=True,
                message=f"Valor fuera del rango normal ({low:g}-{high:g} {rng.unit})",
                warning=True,
            )

    return FieldValidation(valid=True)


def validate_fields(values: dict[str, Optional[float]]) -> dict[str, FieldValidation]:
    """Validate every entered (non-None) value; empty fields are skipped."""
    return {
        field: validate_field(field, value)
        for field, value in values.items()
        if value is not None
    }


def _ef_warning(v: float) -> str:
    if v < 40:
        return "Disfunción sistólica severa"
    if v < 50:
        return "Disfunción sistólica leve-moderada"
    if v > 75:
        return "Considerar: estado hiperdinámico"
    return ""


def _la_warning(v: float) -> str:
    if v > 48:
        return "Dilatación AI severa"
    if v > 34:
        return "Dilatación AI"
    return ""


_CLINICAL_WARNINGS: dict[str, Callable[[float], str]] = {
    "ivs_mm": lambda v: "Hipertrofia septal severa" if v > 15 else "",
    "pw_mm": lambda v: "Hipertrofia parietal severa" if v > 15 else "",
    "lvedd_mm": lambda v: "Dilatación ventricular" if v > 59 else "",
    "ejection_fraction": _ef_warning,
    "e_prime": lambda v: "Relajación alterada" if v < 8 else "",
    "la_volume_index": _la_warning,
    "tapse_mm": lambda v: "Disfunción VD" if v < 16 else "",
    "aortic_root_mm": lambda v: "Dilatación aorta (considerar indexar)" if v > 40 else "",
    "ascending_aorta_mm": lambda v: "Dilatación aorta ascendente" if v > 40 else "",
}


def clinical_warning(field: str, value: float) -> str:
    """Short clinical hint shown beside a field, or ""."""
    warn = _CLINICAL_WARNINGS.get(field)
    return warn(value) if warn else ""


def run_quality_checks(study: EchoStudy) -> list[QualityAlert]:
    """Cross-field consistency rules over a complete study."""
    alerts: list[QualityAlert] = []
    ef = study.ejection_fraction
    normal_motion = study.wall_motion == "normal"

    if normal_motion and ef and ef < 50:
        alerts.append(QualityAlert(
            AlertLevel.ERROR,
            "Incongruencia: Motilidad conservada con FEy deprimida (<50%)",
        ))

    if study.aortic_stenosis == "severa" and study.aortic_valve_area and study.aortic_valve_area > 1.2:
        alerts.append(QualityAlert(
            AlertLevel.ERROR,
            "AVA > 1.2 cm² no es compatible con estenosis aórtica severa (debe ser < 1.0)",
        ))

    if study.lvesd_mm and study.lvedd_mm and study.lvesd_mm >= study.lvedd_mm:
        alerts.append(QualityAlert(
            AlertLevel.ERROR,
            "DSVI debe ser menor que DDVI. Verifique las mediciones.",
        ))

    if study.mitral_regurgitation == "severa" and not study.mr_eroa:
        alerts.append(QualityAlert(
            AlertLevel.WARNING,
            "Se recomienda cuantificar ORE en insuficiencia mitral severa",
        ))

    if ef and ef < 40 and normal_motion:
        alerts.append(QualityAlert(
            AlertLevel.WARNING,
            "FEy <40% sugiere revisar análisis de motilidad parietal",
        ))

    if study.aortic_stenosis in ("moderada", "severa") and not study.as_mean_gradient:
        alerts.append(QualityAlert(
            AlertLevel.INFO,
            "Se recomienda medir gradientes en estenosis aórtica moderada/severa",
        ))

    if study.mitral_regurgitation == "severa" and not study.mr_vena_contracta:
        alerts.append(QualityAlert(
            AlertLevel.INFO,
            "Considere medir vena contracta en IM severa",
        ))

    if alerts:
        logger.info(f"Quality control raised {len(alerts)} alert(s)")
    return alerts


def has_errors(alerts: list[QualityAlert]) -> bool:
    return any(alert.level == AlertLevel.ERROR for alert in alerts)
