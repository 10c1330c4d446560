"""
Full echocardiogram report and dataset export.

build_report() lays out the descriptive sections (1-7) followed by the
numbered CONCLUSIONES. build_dataset_row() flattens the same study into one
tab-separated spreadsheet row.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from conclusions.models import ChamberState, ConclusionInputs, ValveGrade
from conclusions.orchestrator import render_conclusions
from conclusions.text_format import format_number, strip_trailing_period
from hemodynamics import aortic_regurgitation as ar
from hemodynamics.calculators import (
    LVGeometry,
    Sex,
    body_surface_area,
    classify_lv_geometry,
    indexed_diameter,
    is_lv_dilated,
    lv_mass,
    pulmonary_systolic_pressure,
    relative_wall_thickness,
)
from hemodynamics.diastolic import DiastolicResult, classify_diastolic_function
from hemodynamics.validation import AlertLevel, QualityAlert, has_errors, run_quality_checks
from motility import MotilityState, generate_conclusion, generate_findings

logger = logging.getLogger(__name__)

REPORT_TITLE = "ECOCARDIOGRAMA DOPPLER CARDÍACO"
MISSING = "-"


class QualityControlError(ValueError):
    """Raised by build_report() when quality control finds errors."""

    def __init__(self, alerts: list[QualityAlert]) -> None:
        self.alerts = alerts
        messages = "; ".join(a.message for a in alerts)
        super().__init__(f"Hay errores críticos en los datos ingresados: {messages}")


class EchoStudy(BaseModel):
    """Operator-entered measurements for one transthoracic study."""

    # Patient
    patient_id: str = ""
    age: Optional[int] = Field(default=None, ge=0)
    sex: Sex = Sex.MALE
    weight_kg: Optional[float] = Field(default=None, gt=0)
    height_cm: Optional[float] = Field(default=None, gt=0)
    poor_acoustic_window: bool = False

    # Rhythm
    rhythm: str = "Ritmo sinusal"
    conduction: Optional[str] = None

    # Left ventricle
    ivs_mm: Optional[float] = Field(default=None, ge=0)
    pw_mm: Optional[float] = Field(default=None, ge=0)
    lvedd_mm: Optional[float] = Field(default=None, ge=0)
    lvesd_mm: Optional[float] = Field(default=None, ge=0)
    ejection_fraction: Optional[float] = Field(default=None, ge=0, le=100)
    wall_motion: str = "normal"             # "normal" | "segmentaria" | ...

    # Diastolic function
    e_wave: Optional[float] = Field(default=None, ge=0)
    a_wave: Optional[float] = Field(default=None, ge=0)
    e_prime: Optional[float] = Field(default=None, ge=0)

    # Left atrium
    la_volume_index: Optional[float] = Field(default=None, ge=0)

    # Mitral valve
    mitral_morphology: str = "Válvula mitral de morfología y apertura conservadas"
    mitral_regurgitation: ValveGrade = ValveGrade.NONE
    mr_vena_contracta: Optional[float] = Field(default=None, ge=0)
    mr_eroa: Optional[float] = Field(default=None, ge=0)
    mr_regurgitant_volume: Optional[float] = Field(default=None, ge=0)
    mitral_stenosis: ValveGrade = ValveGrade.NONE
    ms_mean_gradient: Optional[float] = Field(default=None, ge=0)
    ms_area_pht: Optional[float] = Field(default=None, ge=0)

    # Aortic valve and aorta
    aortic_morphology: str = "Válvula aórtica trivalva de apertura conservada"
    aortic_stenosis: ValveGrade = ValveGrade.NONE
    as_vmax: Optional[float] = Field(default=None, ge=0)
    as_mean_gradient: Optional[float] = Field(default=None, ge=0)
    aortic_valve_area: Optional[float] = Field(default=None, ge=0)
    aortic_valve_area_index: Optional[float] = Field(default=None, ge=0)
    as_dimensionless_index: Optional[float] = Field(default=None, ge=0)
    aortic_regurgitation: ValveGrade = ValveGrade.NONE
    ar_details: ar.AorticRegurgitationData = Field(default_factory=ar.AorticRegurgitationData)
    aortic_root_mm: Optional[float] = Field(default=None, ge=0)
    ascending_aorta_mm: Optional[float] = Field(default=None, ge=0)

    # Right heart
    tapse_mm: Optional[float] = Field(default=None, ge=0)
    rv_s_prime: Optional[float] = Field(default=None, ge=0)
    ra_state: ChamberState = ChamberState.NORMAL
    rv_state: ChamberState = ChamberState.NORMAL
    ra_area_cm2: Optional[float] = Field(default=None, ge=0)
    rv_basal_mm: Optional[float] = Field(default=None, ge=0)
    paradoxical_septal_motion: bool = False
    pulmonary_trunk_dilated: bool = False
    short_pulmonary_acceleration: bool = False

    # Tricuspid
    tricuspid_regurgitation: ValveGrade = ValveGrade.NONE
    tr_velocity: Optional[float] = Field(default=None, ge=0)
    rap: float = Field(default=5, ge=0)


@dataclass
class DerivedMeasurements:
    bsa: float
    lv_mass: float
    lv_mass_index: float
    rwt: float
    geometry: Optional[LVGeometry]
    lv_dilated: bool
    diastolic: DiastolicResult
    psap: int
    e_over_a: Optional[float] = None
    e_over_e_prime: Optional[float] = None


def derive_measurements(study: EchoStudy) -> DerivedMeasurements:
    bsa = body_surface_area(study.weight_kg, study.height_cm)
    mass = lv_mass(study.lvedd_mm, study.pw_mm, study.ivs_mm)
    mass_index = mass / bsa if bsa > 0 else 0.0
    rwt = relative_wall_thickness(study.pw_mm, study.ivs_mm, study.lvedd_mm)
    geometry = classify_lv_geometry(mass_index, rwt, study.sex)

    diastolic = classify_diastolic_function(
        study.e_wave,
        study.a_wave,
        study.e_prime,
        la_volume_index=study.la_volume_index,
        tr_velocity=study.tr_velocity,
        lvef=study.ejection_fraction,
        wall_motion=study.wall_motion,
    )

    e_over_a = study.e_wave / study.a_wave if study.e_wave and study.a_wave else None
    e_over_e_prime = study.e_wave / study.e_prime if study.e_wave and study.e_prime else None

    return DerivedMeasurements(
        bsa=bsa,
        lv_mass=mass,
        lv_mass_index=mass_index,
        rwt=rwt,
        geometry=None if geometry == LVGeometry.INSUFFICIENT_DATA else geometry,
        lv_dilated=is_lv_dilated(study.lvedd_mm, study.sex),
        diastolic=diastolic,
        psap=pulmonary_systolic_pressure(study.tr_velocity, study.rap),
        e_over_a=e_over_a,
        e_over_e_prime=e_over_e_prime,
    )


def build_conclusion_inputs(study: EchoStudy, derived: DerivedMeasurements) -> ConclusionInputs:
    return ConclusionInputs(
        rhythm=study.rhythm,
        conduction=study.conduction,
        geometry=derived.geometry,
        lv_dilated=derived.lv_dilated,
        ejection_fraction=study.ejection_fraction,
        diastolic=derived.diastolic,
        la_volume_index=study.la_volume_index,
        mitral_morphology=study.mitral_morphology,
        mitral_regurgitation=study.mitral_regurgitation,
        mitral_stenosis=study.mitral_stenosis,
        aortic_morphology=study.aortic_morphology,
        aortic_stenosis=study.aortic_stenosis,
        aortic_regurgitation=study.aortic_regurgitation,
        aortic_regurgitation_advanced=ar.generate_conclusion(study.ar_details),
        bsa=derived.bsa or None,
        sex=study.sex,
        aortic_root_mm=study.aortic_root_mm,
        ascending_aorta_mm=study.ascending_aorta_mm,
        ra_state=study.ra_state,
        rv_state=study.rv_state,
        ra_area_cm2=study.ra_area_cm2,
        rv_basal_mm=study.rv_basal_mm,
        psap=derived.psap or None,
        tapse_mm=study.tapse_mm,
    )


def _fmt(value: Optional[float], fmt: str = "") -> str:
    if value is None:
        return MISSING
    return format(value, fmt) if fmt else format_number(value)


def _motility_enabled(study: EchoStudy) -> bool:
    return study.wall_motion != "normal"


# --- Report sections ---


def _header(study: EchoStudy, derived: DerivedMeasurements) -> str:
    text = f"{REPORT_TITLE}\n{'=' * 80}\n"
    if study.weight_kg and study.height_cm:
        text += (
            f"Datos Físicos: Peso {_fmt(study.weight_kg)} kg | Altura {_fmt(study.height_cm)} cm"
            f" | SC {derived.bsa:.2f} m².\n"
        )
    if study.poor_acoustic_window:
        text += "MALA VENTANA ACÚSTICA que limita la evaluación ecocardiográfica.\n"
    return text


def _left_ventricle(study: EchoStudy, derived: DerivedMeasurements, motility: MotilityState) -> str:
    text = "1. VENTRÍCULO IZQUIERDO\n"
    diameters = [
        f"SIV {_fmt(study.ivs_mm)} mm",
        f"PP {_fmt(study.pw_mm)} mm",
        f"DDVI {_fmt(study.lvedd_mm)} mm",
    ]
    if study.lvesd_mm:
        diameters.append(f"DSVI {_fmt(study.lvesd_mm)} mm")
    text += f"Diámetros: {' | '.join(diameters)}.\n"

    if derived.lv_mass_index > 0 and derived.rwt > 0:
        text += f"Masa VI Indexada: {derived.lv_mass_index:.0f} g/m². RWT: {derived.rwt:.2f}.\n"

    if study.ejection_fraction is not None:
        text += f"Función Sistólica: FEy {_fmt(study.ejection_fraction)}% (Simpson biplano).\n"

    if derived.e_over_a is not None and derived.e_over_e_prime is not None:
        text += (
            f"Evaluación Doppler Mitral y Tisular: Onda E {_fmt(study.e_wave)} cm/s, "
            f"Onda A {_fmt(study.a_wave)} cm/s (Relación E/A {derived.e_over_a:.2f}), "
            f"e' promedio {_fmt(study.e_prime)} cm/s "
            f"(Relación E/e' {derived.e_over_e_prime:.1f}).\n"
        )

    if _motility_enabled(study):
        text += generate_findings(motility)
    return text


def _left_atrium(study: EchoStudy) -> str:
    text = "2. AURÍCULA IZQUIERDA\n"
    if study.la_volume_index is not None:
        text += f"Volumen indexado: {_fmt(study.la_volume_index)} ml/m² (Referencia: <34 ml/m²).\n"
    return text


def _parameters_line(label: str, params: list[str]) -> str:
    return f"Parámetros de {label}: {', '.join(params)}.\n" if params else ""


def _mitral_valve(study: EchoStudy) -> str:
    text = f"3. VÁLVULA MITRAL\n{strip_trailing_period(study.mitral_morphology)}.\n"
    if study.mitral_regurgitation != ValveGrade.NONE:
        params = []
        if study.mr_vena_contracta:
            params.append(f"VC {_fmt(study.mr_vena_contracta)} mm")
        if study.mr_eroa:
            params.append(f"ORE {_fmt(study.mr_eroa)} cm²")
        if study.mr_regurgitant_volume:
            params.append(f"VR {_fmt(study.mr_regurgitant_volume)} ml")
        text += _parameters_line("insuficiencia", params)
    if study.mitral_stenosis != ValveGrade.NONE:
        params = []
        if study.ms_mean_gradient:
            params.append(f"Gradiente medio {_fmt(study.ms_mean_gradient)} mmHg")
        if study.ms_area_pht:
            params.append(f"Área {_fmt(study.ms_area_pht)} cm²")
        text += _parameters_line("estenosis", params)
    return text


def _aortic_valve(study: EchoStudy, derived: DerivedMeasurements) -> str:
    text = f"4. VÁLVULA Y RAÍZ AÓRTICA\n{strip_trailing_period(study.aortic_morphology)}.\n"

    if study.aortic_stenosis != ValveGrade.NONE:
        params = []
        if study.as_vmax:
            params.append(f"Vmax {_fmt(study.as_vmax)} m/s")
        if study.as_mean_gradient:
            params.append(f"Gradiente medio {_fmt(study.as_mean_gradient)} mmHg")
        if study.aortic_valve_area:
            params.append(f"Área {_fmt(study.aortic_valve_area)} cm²")
        if study.aortic_valve_area_index:
            params.append(f"AVA indexada {_fmt(study.aortic_valve_area_index)} cm²/m²")
        if study.as_dimensionless_index:
            params.append(f"Coef. adimensional {_fmt(study.as_dimensionless_index)}")
        text += _parameters_line("estenosis", params)

    findings = ar.generate_findings(study.ar_details)
    if findings:
        text += f"{findings}\n"
    elif study.aortic_regurgitation != ValveGrade.NONE:
        text += f"Insuficiencia Aórtica {study.aortic_regurgitation.value}.\n"

    segments = []
    for label, diameter in (
        ("Raíz aórtica", study.aortic_root_mm),
        ("Aorta ascendente", study.ascending_aorta_mm),
    ):
        if not diameter:
            continue
        line = f"{label}: {_fmt(diameter)} mm"
        indexed = indexed_diameter(diameter, derived.bsa)
        if indexed is not None:
            line += f" ({indexed:.2f} cm/m²)"
        segments.append(line)
    if segments:
        text += f"{' | '.join(segments)}.\n"
    return text


def _right_chambers(study: EchoStudy) -> str:
    text = "5. CAVIDADES DERECHAS\n"
    ra_dilated = study.ra_state == ChamberState.DILATED
    rv_dilated = study.rv_state == ChamberState.DILATED

    if ra_dilated and rv_dilated and study.ra_area_cm2 and study.rv_basal_mm:
        text += (
            f"AD Área {_fmt(study.ra_area_cm2)} cm² | "
            f"VD Diámetro basal {_fmt(study.rv_basal_mm)} mm.\n"
        )
    else:
        if ra_dilated and study.ra_area_cm2:
            text += f"AD Área: {_fmt(study.ra_area_cm2)} cm².\n"
        if rv_dilated and study.rv_basal_mm:
            text += f"VD Diámetro basal: {_fmt(study.rv_basal_mm)} mm.\n"

    if study.tapse_mm is not None:
        preserved = study.tapse_mm >= 17 and (not study.rv_s_prime or study.rv_s_prime >= 10)
        detail = f"TAPSE: {_fmt(study.tapse_mm)} mm"
        if study.rv_s_prime:
            detail += f", S' {_fmt(study.rv_s_prime)} cm/s"
        text += f"Función del VD {'conservada' if preserved else 'deprimida'} ({detail})."
        if not ra_dilated and not rv_dilated:
            text += " Dimensiones derechas conservadas."
        text += "\n"
    elif not ra_dilated and not rv_dilated:
        text += "Dimensiones derechas conservadas.\n"

    signs = []
    if study.paradoxical_septal_motion:
        signs.append("movimiento septal paradojal")
    if study.pulmonary_trunk_dilated:
        signs.append("dilatación del tronco pulmonar")
    if study.short_pulmonary_acceleration:
        signs.append("tiempo de aceleración pulmonar corto")
    if signs:
        text += f"Signos indirectos de HTP: {', '.join(signs)}.\n"
    return text


def _tricuspid_pulmonary(study: EchoStudy, derived: DerivedMeasurements) -> str:
    text = "6. VÁLVULAS TRICÚSPIDE Y PULMONAR\nMorfología y apertura conservada.\n"
    if study.tricuspid_regurgitation != ValveGrade.NONE:
        text += f"Insuficiencia tricuspídea {study.tricuspid_regurgitation.value}"
        if study.tr_velocity and study.tr_velocity >= 1.5:
            text += f" (Vmax IT {_fmt(study.tr_velocity)} m/s)"
            if derived.psap > 0:
                text += f" con PSAP estimada: {derived.psap} mmHg"
        text += ".\n"
    return text


def build_report(study: EchoStudy, motility: MotilityState, strict: bool = True) -> str:
    """Render the complete report text.

    The report is refused (QualityControlError) while quality control reports
    errors; pass ``strict=False`` to render it regardless.
    """
    if strict:
        alerts = run_quality_checks(study)
        if has_errors(alerts):
            raise QualityControlError([a for a in alerts if a.level == AlertLevel.ERROR])

    derived = derive_measurements(study)
    motility_conclusion = generate_conclusion(motility) if _motility_enabled(study) else ""

    sections = [
        _header(study, derived),
        _left_ventricle(study, derived, motility),
        _left_atrium(study),
        _mitral_valve(study),
        _aortic_valve(study, derived),
        _right_chambers(study),
        _tricuspid_pulmonary(study, derived),
        "7. PERICARDIO\nLibre, sin derrames.\n",
        "\nCONCLUSIONES\n",
        render_conclusions(build_conclusion_inputs(study, derived), motility_conclusion),
    ]
    report = "".join(sections)
    logger.info(f"Built echo report ({len(report)} chars)")
    return report


# --- Dataset export ---


def build_dataset_row(study: EchoStudy, motility: MotilityState, exam_date: date) -> str:
    """One tab-separated row for spreadsheet collection; "-" marks missing values."""
    derived = derive_measurements(study)
    details = study.ar_details
    motility_text = generate_conclusion(motility) if _motility_enabled(study) else ""

    def measured(value: Optional[float]) -> str:
        return _fmt(value) if value else MISSING

    row = [
        f"{exam_date.day}/{exam_date.month}/{exam_date.year}",
        study.patient_id or MISSING,
        MISSING if study.age is None else str(study.age),
        study.sex.value,
        f"{derived.bsa:.2f}" if derived.bsa else MISSING,
        study.rhythm,
        study.conduction or "normal",
        measured(study.lvedd_mm),
        f"{derived.lv_mass_index:.0f}" if derived.lv_mass_index > 0 else MISSING,
        derived.geometry.value if derived.geometry else MISSING,
        _fmt(study.ejection_fraction),
        study.wall_motion,
        derived.diastolic.description or "Indeterminado",
        _fmt(derived.e_over_e_prime, ".1f"),
        _fmt(derived.e_over_a, ".2f"),
        _fmt(study.la_volume_index),
        study.aortic_stenosis.value,
        MISSING,
        study.mitral_regurgitation.value,
        MISSING,
        _fmt(study.tapse_mm),
        str(derived.psap) if derived.psap else MISSING,
        # Aortic stenosis
        measured(study.as_vmax),
        measured(study.as_mean_gradient),
        measured(study.aortic_valve_area),
        measured(study.as_dimensionless_index),
        # Aortic regurgitation
        study.aortic_regurgitation.value,
        measured(details.vena_contracta),
        measured(details.pressure_half_time),
        measured(details.regurgitant_volume),
        measured(details.eroa),
        details.jet_reach.value,
        "Si" if details.flow_reversal else "No",
        # Mitral valve
        study.mitral_stenosis.value,
        measured(study.ms_mean_gradient),
        measured(study.mr_eroa),
        measured(study.mr_regurgitant_volume),
        # Wall motion
        motility_text or MISSING,
    ]

    buf = io.StringIO()
    csv.writer(buf, delimiter="\t", lineterminator="").writerow(row)
    return buf.getvalue()
