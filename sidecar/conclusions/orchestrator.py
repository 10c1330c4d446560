"""
Composite diagnosis: the numbered CONCLUSIONES list of the echo report.

Sentences are produced in a fixed clinical order (rhythm, LV, diastolic
function, LA, mitral valve, aortic valve, aorta, right chambers, pulmonary
pressure, RV function). Each builder returns None when it has nothing to
report; skipped sentences do not consume a number.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from hemodynamics.calculators import LVGeometry, Sex, indexed_diameter
from hemodynamics.diastolic import DiastolicGrade

from .models import ChamberState, ConclusionInputs, DilationBand, ValveGrade
from .text_format import (
    append_clause,
    as_subordinate_clause,
    ensure_period,
    format_number,
    join_spanish,
    strip_trailing_period,
)

logger = logging.getLogger(__name__)

_DIASTOLIC_SENTENCES: dict[DiastolicGrade, str] = {
    DiastolicGrade.NORMAL: "Función Diastólica Normal. PFDVI Normales.",
    DiastolicGrade.GRADE_I: "Disfunción Diastólica Grado I. PFDVI normales.",
    DiastolicGrade.GRADE_II: "Disfunción Diastólica Grado II. PFDVI elevadas.",
    DiastolicGrade.GRADE_III: "Disfunción Diastólica Grado III. PFDVI severamente elevadas.",
    DiastolicGrade.INDETERMINATE: "Función Diastólica Indeterminada (datos insuficientes).",
}

# Upper limit of normal for BSA-indexed diameters (cm/m2)
_AORTIC_ROOT_LIMIT = {Sex.MALE: 2.15, Sex.FEMALE: 2.11}
_ASCENDING_AORTA_LIMIT = {Sex.MALE: 2.11, Sex.FEMALE: 2.03}

_BAND_ORDER = (DilationBand.MILD, DilationBand.MODERATE, DilationBand.SEVERE)

_MITRAL_LEADING_MORPHOLOGIES = ("Prolapso", "Flail")


def rhythm_sentence(inputs: ConclusionInputs) -> Optional[str]:
    if inputs.conduction and inputs.conduction.strip().lower() != "normal":
        return f"{inputs.rhythm} con {inputs.conduction}."
    return f"{inputs.rhythm}."


def _geometry_clause(inputs: ConclusionInputs) -> str:
    geometry = inputs.geometry
    if geometry is None or geometry == LVGeometry.INSUFFICIENT_DATA:
        return ""
    if geometry == LVGeometry.NORMAL:
        return (
            "Ventrículo izquierdo de diámetros y espesores conservados, "
            "con geometría ventricular normal"
        )
    text = f"Ventrículo izquierdo con {geometry.value.lower()}"
    if inputs.lv_dilated:
        text += " con dilatación ventricular"
    return text


def _systolic_sentence(ef: Optional[float]) -> str:
    if ef is None:
        return ""
    if ef >= 50:
        return "Función sistólica del VI conservada."
    if ef >= 40:
        return f"Función sistólica del VI levemente deprimida ({format_number(ef)}%)."
    return f"Función sistólica del VI severamente deprimida ({format_number(ef)}%)."


def left_ventricle_sentence(inputs: ConclusionInputs, motility_conclusion: str = "") -> Optional[str]:
    """Geometry, the merged wall-motion clause and systolic function."""
    head = _geometry_clause(inputs)
    if motility_conclusion.strip():
        head = append_clause(head, as_subordinate_clause(motility_conclusion))

    parts = [ensure_period(head) if head else "", _systolic_sentence(inputs.ejection_fraction)]
    sentence = " ".join(part for part in parts if part)
    return sentence or None


def diastolic_sentence(inputs: ConclusionInputs) -> Optional[str]:
    result = inputs.diastolic
    if result is None:
        return None
    return _DIASTOLIC_SENTENCES.get(result.grade, result.description)


def left_atrium_sentence(inputs: ConclusionInputs) -> Optional[str]:
    lavi = inputs.la_volume_index
    if lavi is None:
        return None
    if lavi > 48:
        return "Aurícula izquierda severamente dilatada."
    if lavi >= 42:
        return "Aurícula izquierda moderadamente dilatada."
    if lavi >= 34:
        return "Aurícula izquierda levemente dilatada."
    return "Aurícula izquierda de dimensiones conservadas."


def mitral_sentence(inputs: ConclusionInputs) -> Optional[str]:
    morphology = strip_trailing_period(inputs.mitral_morphology)
    regurgitation = inputs.mitral_regurgitation
    stenosis = inputs.mitral_stenosis

    if any(word in morphology for word in _MITRAL_LEADING_MORPHOLOGIES):
        if regurgitation != ValveGrade.NONE:
            return f"{morphology} con insuficiencia mitral {regurgitation.value}."
        return f"{morphology}."

    text = ""
    if regurgitation != ValveGrade.NONE:
        text = f"Insuficiencia mitral {regurgitation.value}"
    if stenosis != ValveGrade.NONE:
        text = append_clause(text, f"estenosis mitral {stenosis.value}")
    return f"{text}." if text else None


def aortic_valve_sentence(inputs: ConclusionInputs) -> Optional[str]:
    """Stenosis and regurgitation; an advanced AR grade replaces the manual one."""
    morphology = strip_trailing_period(inputs.aortic_morphology)
    stenosis = inputs.aortic_stenosis
    advanced = strip_trailing_period(inputs.aortic_regurgitation_advanced)

    if "Bicúspide" in morphology:
        text = morphology
        if stenosis != ValveGrade.NONE:
            text += f" con estenosis {stenosis.value}"
        if advanced:
            regurgitation = advanced.lower()
        elif inputs.aortic_regurgitation != ValveGrade.NONE:
            regurgitation = f"insuficiencia {inputs.aortic_regurgitation.value}"
        else:
            regurgitation = ""
        if regurgitation:
            if stenosis != ValveGrade.NONE:
                text = append_clause(text, regurgitation)
            else:
                text += f" con {regurgitation}"
        return ensure_period(text)

    parts = []
    if stenosis != ValveGrade.NONE:
        parts.append(f"Estenosis aórtica {stenosis.value}")
    if advanced:
        parts.append(advanced)
    elif inputs.aortic_regurgitation != ValveGrade.NONE:
        parts.append(f"Insuficiencia aórtica {inputs.aortic_regurgitation.value}")
    if not parts:
        return None
    return ensure_period(join_spanish(parts))


def dilation_band(indexed_cm_m2: float) -> DilationBand:
    if indexed_cm_m2 > 3.0:
        return DilationBand.SEVERE
    if indexed_cm_m2 >= 2.5:
        return DilationBand.MODERATE
    return DilationBand.MILD


def aortic_dilation_sentence(inputs: ConclusionInputs) -> Optional[str]:
    if not inputs.bsa:
        return None

    dilated: list[tuple[str, DilationBand]] = []
    for name, diameter, limits in (
        ("raíz aórtica", inputs.aortic_root_mm, _AORTIC_ROOT_LIMIT),
        ("aorta ascendente", inputs.ascending_aorta_mm, _ASCENDING_AORTA_LIMIT),
    ):
        indexed = indexed_diameter(diameter, inputs.bsa)
        if indexed is not None and indexed > limits[inputs.sex]:
            dilated.append((name, dilation_band(indexed)))

    if not dilated:
        return None
    worst = max((band for _, band in dilated), key=_BAND_ORDER.index)
    segments = join_spanish(name for name, _ in dilated)
    return f"Dilatación {worst.value} de {segments}."


def right_chambers_sentence(inputs: ConclusionInputs) -> Optional[str]:
    if inputs.ra_state != ChamberState.DILATED and inputs.rv_state != ChamberState.DILATED:
        return None

    text = ""
    area = inputs.ra_area_cm2
    if area and area > 18:
        text = f"aurícula derecha dilatada {'severa' if area > 25 else 'leve-moderada'}"

    diameter = inputs.rv_basal_mm
    if diameter and diameter > 41:
        if diameter > 50:
            band = "severa"
        elif diameter >= 46:
            band = "moderada"
        else:
            band = "leve"
        ventricle = f"ventrículo derecho dilatado {band}"
        text = append_clause(text, ventricle) if text else ventricle

    if not text:
        return None
    return f"Dilatación de cavidades derechas: {text}."


def pulmonary_hypertension_sentence(inputs: ConclusionInputs) -> Optional[str]:
    psap = inputs.psap
    if not psap:
        return None
    if psap <= 35:
        return "Grado de sospecha de Hipertensión pulmonar: Baja."
    if psap <= 45:
        return f"Grado de sospecha de Hipertensión pulmonar: Intermedia (PSAP {format_number(psap)} mmHg)."
    return f"Signos de Hipertensión pulmonar (PSAP {format_number(psap)} mmHg)."


def right_ventricle_function_sentence(inputs: ConclusionInputs) -> Optional[str]:
    if inputs.tapse_mm and inputs.tapse_mm < 16:
        return "Disfunción del ventrículo derecho."
    return None


_SENTENCE_BUILDERS: tuple[Callable[[ConclusionInputs], Optional[str]], ...] = (
    diastolic_sentence,
    left_atrium_sentence,
    mitral_sentence,
    aortic_valve_sentence,
    aortic_dilation_sentence,
    right_chambers_sentence,
    pulmonary_hypertension_sentence,
    right_ventricle_function_sentence,
)


def build_conclusions(inputs: ConclusionInputs, motility_conclusion: str = "") -> list[str]:
    """Ordered conclusion sentences, without numbering."""
    sentences = [
        rhythm_sentence(inputs),
        left_ventricle_sentence(inputs, motility_conclusion),
    ]
    sentences.extend(builder(inputs) for builder in _SENTENCE_BUILDERS)
    conclusions = [s for s in sentences if s]
    logger.debug(f"Built {len(conclusions)} conclusion sentences")
    return conclusions


def number_conclusions(conclusions: list[str]) -> str:
    return "".join(f"{i}. {sentence}\n" for i, sentence in enumerate(conclusions, start=1))


def render_conclusions(inputs: ConclusionInputs, motility_conclusion: str = "") -> str:
    """Numbered, newline-terminated conclusions block."""
    return number_conclusions(build_conclusions(inputs, motility_conclusion))
