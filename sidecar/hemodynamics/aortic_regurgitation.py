"""
Multiparametric aortic regurgitation grading.

Source: Zoghbi WA, et al. "Recommendations for Noninvasive Evaluation of
        Native Valvular Regurgitation." JASE 2017;30:303-371.

Any single severe criterion classifies the regurgitation as severe. Below
that, mild and moderate indicators are counted and a single moderate
indicator is enough to call it moderate.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from conclusions.text_format import format_number


class JetReach(str, Enum):
    LVOT = "tsvi"
    MITRAL = "mitral"
    APEX = "apex"


class ARSeverity(str, Enum):
    MILD = "Leve"
    MODERATE = "Moderada"
    SEVERE = "Severa"
    NOT_EVALUATED = "No evaluada"


class AorticRegurgitationData(BaseModel):
    """Quantitative AR parameters; 0 means not measured."""

    vena_contracta: float = Field(default=0, ge=0, description="cm")
    pressure_half_time: float = Field(default=0, ge=0, description="ms")
    jet_width: float = Field(default=0, ge=0, le=100, description="% of LVOT")
    regurgitant_volume: float = Field(default=0, ge=0, description="ml/beat")
    eroa: float = Field(default=0, ge=0, description="cm2")
    jet_reach: JetReach = JetReach.LVOT
    flow_reversal: bool = False

    def has_data(self) -> bool:
        return (
            self.vena_contracta > 0
            or self.pressure_half_time > 0
            or self.jet_width > 0
            or self.regurgitant_volume > 0
            or self.eroa > 0
            or self.flow_reversal
            or self.jet_reach != JetReach.LVOT
        )


# Typical values per grade, used to pre-fill the form from the simple selector
PRESETS: dict[ARSeverity, AorticRegurgitationData] = {
    ARSeverity.MILD: AorticRegurgitationData(
        vena_contracta=0.25,
        pressure_half_time=600,
        jet_width=20,
        regurgitant_volume=20,
        eroa=0.08,
        jet_reach=JetReach.LVOT,
    ),
    ARSeverity.MODERATE: AorticRegurgitationData(
        vena_contracta=0.45,
        pressure_half_time=350,
        jet_width=45,
        regurgitant_volume=45,
        eroa=0.20,
        jet_reach=JetReach.MITRAL,
    ),
    ARSeverity.SEVERE: AorticRegurgitationData(
        vena_contracta=0.70,
        pressure_half_time=180,
        jet_width=70,
        regurgitant_volume=70,
        eroa=0.40,
        jet_reach=JetReach.APEX,
        flow_reversal=True,
    ),
}

_REACH_TEXT: dict[JetReach, str] = {
    JetReach.LVOT: "tracto de salida del VI (subvalvular)",
    JetReach.MITRAL: "borde libre de la valva mitral",
    JetReach.APEX: "tercio medio/apical del ventrículo izquierdo",
}


def preset_for(grade: str) -> AorticRegurgitationData:
    """Preset for a simple-selector grade ('leve', 'moderada', 'severa'); empty data otherwise."""
    for severity, preset in PRESETS.items():
        if severity.value.lower() == grade.strip().lower():
            return preset.model_copy()
    return AorticRegurgitationData()


def _is_severe(data: AorticRegurgitationData) -> bool:
    return (
        data.vena_contracta > 0.6
        or 0 < data.pressure_half_time < 200
        or data.jet_width >= 65
        or data.jet_reach == JetReach.APEX
        or data.regurgitant_volume >= 60
        or data.eroa >= 0.30
        or data.flow_reversal
    )


def _has_mild_indicator(data: AorticRegurgitationData) -> bool:
    return (
        0 < data.vena_contracta < 0.3
        or data.pressure_half_time > 500
        or 0 < data.jet_width < 25
        or 0 < data.regurgitant_volume < 30
        or 0 < data.eroa < 0.10
    )


def determine_severity(data: AorticRegurgitationData) -> ARSeverity:
    if _is_severe(data):
        return ARSeverity.SEVERE

    if _has_mild_indicator(data):
        # (measured value, is it in the mild range)
        indicators = [
            (data.vena_contracta, data.vena_contracta < 0.3),
            (data.pressure_half_time, data.pressure_half_time > 500),
            (data.jet_width, data.jet_width < 25),
            (data.regurgitant_volume, data.regurgitant_volume < 30),
            (data.eroa, data.eroa < 0.10),
        ]
        mild = sum(1 for value, in_mild in indicators if value > 0 and in_mild)
        moderate = sum(1 for value, in_mild in indicators if value > 0 and not in_mild)
        if data.jet_reach == JetReach.MITRAL:
            moderate += 1
        elif data.jet_reach == JetReach.LVOT:
            mild += 1
        if moderate == 0 and mild > 0:
            return ARSeverity.MILD
        return ARSeverity.MODERATE

    if not data.has_data():
        return ARSeverity.NOT_EVALUATED
    return ARSeverity.MODERATE


def generate_findings(data: AorticRegurgitationData) -> str:
    """Descriptive paragraph for the valve section; never states a grade."""
    if not data.has_data():
        return ""

    report = f"Insuficiencia aórtica con jet que alcanza {_REACH_TEXT[data.jet_reach]}. "

    params = []
    if data.vena_contracta > 0:
        params.append(f"vena contracta {format_number(data.vena_contracta)} cm")
    if data.pressure_half_time > 0:
        params.append(f"PHT {format_number(data.pressure_half_time)} ms")
    if data.regurgitant_volume > 0:
        params.append(f"vol. regurgitante {format_number(data.regurgitant_volume)} ml/lat")
    if data.eroa > 0:
        params.append(f"EROA {format_number(data.eroa)} cm²")
    if data.jet_width > 0:
        params.append(f"ancho de jet/TSVI {format_number(data.jet_width)}%")
    if params:
        report += f"Parámetros cuantitativos: {', '.join(params)}. "

    if data.flow_reversal:
        report += "Se observa flujo reverso holodiastólico en aorta descendente supradiafragmática."

    return report


def generate_conclusion(data: AorticRegurgitationData) -> str:
    if not data.has_data():
        return ""
    return f"Insuficiencia Aórtica {determine_severity(data).value}."
