"""Tests for clinical range validation and study quality control."""

import pytest

from hemodynamics.validation import (
    AlertLevel,
    clinical_warning,
    has_errors,
    run_quality_checks,
    validate_field,
    validate_fields,
)
from report.builder import EchoStudy


class TestValidateField:
    def test_out_of_clinical_range(self):
        result = validate_field("lvedd_mm", 80)
        assert not result.valid
        assert result.message == "Valor fuera de rango clínico (30-75 mm)"

    def test_outside_optimal_is_warning(self):
        result = validate_field("lvedd_mm", 62)
        assert result.valid
        assert result.warning
        assert result.message == "Valor fuera del rango normal (42-59 mm)"

    def test_normal_value(self):
        result = validate_field("lvedd_mm", 50)
        assert result.valid
        assert not result.warning
        assert result.message == ""

    def test_decimal_limits(self):
        assert validate_field("tr_velocity", 0.3).message == "Valor fuera de rango clínico (0.5-5 m/s)"

    def test_field_without_optimal_range(self):
        assert validate_field("age", 95).warning is False

    def test_unknown_field_is_valid(self):
        assert validate_field("no_such_field", -10).valid

    def test_validate_fields_skips_empty(self):
        results = validate_fields({"lvedd_mm": 80, "pw_mm": None})
        assert list(results) == ["lvedd_mm"]
        assert not results["lvedd_mm"].valid


class TestClinicalWarning:
    @pytest.mark.parametrize("field,value,expected", [
        ("ejection_fraction", 35, "Disfunción sistólica severa"),
        ("ejection_fraction", 45, "Disfunción sistólica leve-moderada"),
        ("ejection_fraction", 80, "Considerar: estado hiperdinámico"),
        ("ejection_fraction", 60, ""),
        ("la_volume_index", 50, "Dilatación AI severa"),
        ("la_volume_index", 40, "Dilatación AI"),
        ("tapse_mm", 14, "Disfunción VD"),
        ("tapse_mm", 20, ""),
        ("age", 99, ""),
    ])
    def test_warnings(self, field, value, expected):
        assert clinical_warning(field, value) == expected


class TestQualityChecks:
    def test_clean_study(self):
        study = EchoStudy(ejection_fraction=60, lvedd_mm=50, lvesd_mm=32)
        assert run_quality_checks(study) == []

    def test_depressed_ef_with_normal_motion(self):
        alerts = run_quality_checks(EchoStudy(ejection_fraction=45))
        assert [a.level for a in alerts] == [AlertLevel.ERROR]
        assert has_errors(alerts)

    def test_very_low_ef_adds_warning(self):
        alerts = run_quality_checks(EchoStudy(ejection_fraction=35))
        assert [a.level for a in alerts] == [AlertLevel.ERROR, AlertLevel.WARNING]

    def test_segmental_motion_with_low_ef_is_fine(self):
        study = EchoStudy(ejection_fraction=35, wall_motion="segmentaria")
        assert run_quality_checks(study) == []

    def test_systolic_diameter_not_smaller(self):
        alerts = run_quality_checks(EchoStudy(lvedd_mm=45, lvesd_mm=50))
        assert alerts[0].message.startswith("DSVI debe ser menor que DDVI")

    def test_severe_stenosis_with_large_area(self):
        study = EchoStudy(aortic_stenosis="severa", aortic_valve_area=1.5, as_mean_gradient=45)
        alerts = run_quality_checks(study)
        assert [a.level for a in alerts] == [AlertLevel.ERROR]

    def test_stenosis_without_gradient_is_info(self):
        alerts = run_quality_checks(EchoStudy(aortic_stenosis="moderada"))
        assert [a.level for a in alerts] == [AlertLevel.INFO]
        assert not has_errors(alerts)

    def test_severe_mr_without_quantification(self):
        alerts = run_quality_checks(EchoStudy(mitral_regurgitation="severa"))
        assert [a.level for a in alerts] == [AlertLevel.WARNING, AlertLevel.INFO]

    def test_severe_mr_quantified(self):
        study = EchoStudy(mitral_regurgitation="severa", mr_eroa=0.45, mr_vena_contracta=8)
        assert run_quality_checks(study) == []
