"""Tests for the full report text and the dataset row."""

from datetime import date

import pytest

from hemodynamics.calculators import LVGeometry
from hemodynamics.diastolic import DiastolicGrade
from motility import MotilityState
from motility.narrative import FINDINGS_PREFIX
from report import (
    EchoStudy,
    QualityControlError,
    build_conclusion_inputs,
    build_dataset_row,
    build_report,
    derive_measurements,
)


def _study(**overrides) -> EchoStudy:
    values = dict(
        patient_id="P-001",
        age=58,
        weight_kg=70,
        height_cm=170,
        ivs_mm=10,
        pw_mm=10,
        lvedd_mm=50,
        ejection_fraction=60,
        e_wave=80,
        a_wave=60,
        e_prime=12,
        la_volume_index=28,
        tapse_mm=20,
    )
    values.update(overrides)
    return EchoStudy(**values)


@pytest.fixture
def normal_motility():
    return MotilityState.from_mapping({})


@pytest.fixture
def anterior_akinesia():
    return MotilityState.from_mapping({1: 3, 7: 3, 13: 3})


class TestDerivedMeasurements:
    def test_normal_study(self):
        derived = derive_measurements(_study())
        assert derived.geometry == LVGeometry.NORMAL
        assert derived.rwt == pytest.approx(0.4)
        assert not derived.lv_dilated
        assert derived.diastolic.grade == DiastolicGrade.NORMAL
        assert derived.psap == 0
        assert derived.e_over_a == pytest.approx(80 / 60)

    def test_insufficient_geometry_is_none(self):
        derived = derive_measurements(_study(weight_kg=None))
        assert derived.bsa == 0.0
        assert derived.geometry is None

    def test_conclusion_inputs_drop_zero_values(self):
        study = _study(weight_kg=None)
        inputs = build_conclusion_inputs(study, derive_measurements(study))
        assert inputs.bsa is None
        assert inputs.psap is None
        assert inputs.aortic_regurgitation_advanced == ""

    def test_psap_from_tr_velocity(self):
        study = _study(tr_velocity=3.0, tricuspid_regurgitation="leve")
        derived = derive_measurements(study)
        assert derived.psap == 41
        assert build_conclusion_inputs(study, derived).psap == 41


class TestBuildReport:
    def test_layout(self, normal_motility):
        report = build_report(_study(), normal_motility)
        assert report.startswith("ECOCARDIOGRAMA DOPPLER CARDÍACO\n" + "=" * 80 + "\n")
        headings = [
            "1. VENTRÍCULO IZQUIERDO",
            "2. AURÍCULA IZQUIERDA",
            "3. VÁLVULA MITRAL",
            "4. VÁLVULA Y RAÍZ AÓRTICA",
            "5. CAVIDADES DERECHAS",
            "6. VÁLVULAS TRICÚSPIDE Y PULMONAR",
            "7. PERICARDIO",
            "CONCLUSIONES",
        ]
        positions = [report.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_measurement_lines(self, normal_motility):
        report = build_report(_study(), normal_motility)
        assert "Diámetros: SIV 10 mm | PP 10 mm | DDVI 50 mm.\n" in report
        assert "Función Sistólica: FEy 60% (Simpson biplano).\n" in report
        assert "(Relación E/A 1.33)" in report
        assert "(Relación E/e' 6.7)" in report
        assert "Volumen indexado: 28 ml/m² (Referencia: <34 ml/m²).\n" in report
        assert "Función del VD conservada (TAPSE: 20 mm). Dimensiones derechas conservadas.\n" in report
        assert "7. PERICARDIO\nLibre, sin derrames.\n" in report

    def test_conclusions(self, normal_motility):
        report = build_report(_study(), normal_motility)
        conclusions = report.split("\nCONCLUSIONES\n", 1)[1]
        assert conclusions == (
            "1. Ritmo sinusal.\n"
            "2. Ventrículo izquierdo de diámetros y espesores conservados, con geometría "
            "ventricular normal. Función sistólica del VI conservada.\n"
            "3. Función Diastólica Normal. PFDVI Normales.\n"
            "4. Aurícula izquierda de dimensiones conservadas.\n"
        )

    def test_segmental_motility(self, anterior_akinesia):
        report = build_report(_study(wall_motion="segmentaria"), anterior_akinesia)
        assert FINDINGS_PREFIX in report
        assert (
            "2. Ventrículo izquierdo de diámetros y espesores conservados, con geometría "
            "ventricular normal y trastornos de la motilidad Segmentaria en Territorio DA. "
            "Función sistólica del VI conservada.\n"
        ) in report
        assert "3. Disfunción Diastólica Grado I. PFDVI normales.\n" in report

    def test_normal_wall_motion_hides_motility(self, anterior_akinesia):
        report = build_report(_study(), anterior_akinesia)
        assert FINDINGS_PREFIX not in report
        assert "Territorio" not in report

    def test_valve_findings(self, normal_motility):
        study = _study(
            mitral_regurgitation="moderada",
            mr_eroa=0.3,
            aortic_stenosis="severa",
            as_mean_gradient=48,
            aortic_valve_area=0.8,
        )
        report = build_report(study, normal_motility)
        assert "Parámetros de insuficiencia: ORE 0.3 cm².\n" in report
        assert "Parámetros de estenosis: Gradiente medio 48 mmHg, Área 0.8 cm².\n" in report
        assert "5. Insuficiencia mitral moderada.\n" in report
        assert "6. Estenosis aórtica severa.\n" in report

    def test_advanced_regurgitation_grade(self, normal_motility):
        study = _study(ar_details={"vena_contracta": 0.7})
        report = build_report(study, normal_motility)
        assert "Parámetros cuantitativos: vena contracta 0.7 cm." in report
        assert "Insuficiencia Aórtica Severa.\n" in report

    def test_tricuspid_line(self, normal_motility):
        study = _study(tricuspid_regurgitation="leve", tr_velocity=3.0)
        report = build_report(study, normal_motility)
        assert "Insuficiencia tricuspídea leve (Vmax IT 3 m/s) con PSAP estimada: 41 mmHg.\n" in report
        assert "Grado de sospecha de Hipertensión pulmonar: Intermedia (PSAP 41 mmHg)." in report

    def test_poor_window_banner(self, normal_motility):
        report = build_report(_study(poor_acoustic_window=True), normal_motility)
        assert "MALA VENTANA ACÚSTICA" in report


class TestQualityGate:
    def test_errors_block_the_report(self, normal_motility):
        with pytest.raises(QualityControlError) as excinfo:
            build_report(_study(lvesd_mm=55), normal_motility)
        assert excinfo.value.alerts
        assert "DSVI debe ser menor que DDVI" in str(excinfo.value)

    def test_depressed_ef_with_normal_motion_is_refused(self, normal_motility):
        with pytest.raises(QualityControlError) as excinfo:
            build_report(_study(ejection_fraction=35), normal_motility)
        assert [a.message for a in excinfo.value.alerts] == [
            "Incongruencia: Motilidad conservada con FEy deprimida (<50%)"
        ]

    def test_warnings_do_not_block(self, normal_motility):
        study = _study(mitral_regurgitation="severa")
        assert "CONCLUSIONES" in build_report(study, normal_motility)

    def test_strict_off_renders_anyway(self, normal_motility):
        report = build_report(_study(lvesd_mm=55), normal_motility, strict=False)
        assert "CONCLUSIONES" in report

    def test_clean_study_passes(self, normal_motility):
        assert "CONCLUSIONES" in build_report(_study(lvesd_mm=32), normal_motility)


class TestDatasetRow:
    def test_columns(self, normal_motility):
        row = build_dataset_row(_study(), normal_motility, date(2026, 10, 17))
        columns = row.split("\t")
        assert len(columns) == 38
        assert columns[0] == "17/10/2026"
        assert columns[1] == "P-001"
        assert columns[2] == "58"
        assert columns[9] == "Geometría Normal"
        assert columns[13] == "6.7"
        assert columns[14] == "1.33"
        assert columns[21] == "-"
        assert columns[32] == "No"
        assert columns[37] == "-"

    def test_single_line(self, normal_motility):
        row = build_dataset_row(_study(), normal_motility, date(2026, 1, 5))
        assert "\n" not in row
        assert row.startswith("5/1/2026\t")

    def test_motility_column(self, anterior_akinesia):
        row = build_dataset_row(
            _study(wall_motion="segmentaria"), anterior_akinesia, date(2026, 10, 17)
        )
        assert row.split("\t")[-1] == "Trastornos de la motilidad Segmentaria en Territorio DA."
