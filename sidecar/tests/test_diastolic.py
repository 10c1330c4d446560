"""Tests for the diastolic function algorithm."""

from hemodynamics.diastolic import (
    DiastolicGrade,
    DiastolicSeverity,
    classify_diastolic_function,
)


class TestMissingData:
    def test_waiting_for_doppler(self):
        result = classify_diastolic_function(None, 60, 10)
        assert result.grade == DiastolicGrade.INDETERMINATE
        assert result.severity == DiastolicSeverity.NEUTRAL
        assert result.description == "Esperando datos Doppler..."

    def test_zero_counts_as_missing(self):
        assert classify_diastolic_function(80, 0, 10).grade == DiastolicGrade.INDETERMINATE


class TestHighEARatio:
    def test_athlete_pattern(self):
        result = classify_diastolic_function(100, 40, 12)
        assert result.grade == DiastolicGrade.NORMAL
        assert "Atleta" in result.description

    def test_restrictive_pattern(self):
        result = classify_diastolic_function(100, 40, 7)
        assert result.grade == DiastolicGrade.GRADE_III
        assert result.severity == DiastolicSeverity.RED


class TestStructurallyNormalHeart:
    def test_normal(self):
        result = classify_diastolic_function(80, 60, 12, la_volume_index=28)
        assert result.grade == DiastolicGrade.NORMAL
        assert result.severity == DiastolicSeverity.GREEN

    def test_two_criteria_indeterminate(self):
        result = classify_diastolic_function(80, 60, 8, la_volume_index=40)
        assert result.grade == DiastolicGrade.INDETERMINATE
        assert "2/4" in result.description

    def test_three_criteria_graded_as_diseased(self):
        result = classify_diastolic_function(120, 100, 8, la_volume_index=40)
        assert result.grade == DiastolicGrade.GRADE_II


class TestDiseasedHeart:
    def test_impaired_relaxation(self):
        result = classify_diastolic_function(40, 80, 5, lvef=40)
        assert result.grade == DiastolicGrade.GRADE_I

    def test_wall_motion_marks_disease(self):
        result = classify_diastolic_function(
            70, 70, 6, la_volume_index=30, tr_velocity=2.5, wall_motion="segmentaria"
        )
        assert result.grade == DiastolicGrade.GRADE_I

    def test_insufficient_filling_pressure_data(self):
        result = classify_diastolic_function(
            70, 70, 6, la_volume_index=None, tr_velocity=None, lvef=35
        )
        assert result.grade == DiastolicGrade.INDETERMINATE
        assert "Datos insuficientes" in result.description

    def test_elevated_filling_pressure(self):
        result = classify_diastolic_function(90, 80, 5, la_volume_index=40, tr_velocity=3.0, lvef=35)
        assert result.grade == DiastolicGrade.GRADE_II
        assert result.severity == DiastolicSeverity.RED

    def test_single_criterion_of_two_is_indeterminate(self):
        result = classify_diastolic_function(70, 70, 6, la_volume_index=40, tr_velocity=0, lvef=35)
        assert result.grade == DiastolicGrade.INDETERMINATE
        assert result.severity == DiastolicSeverity.YELLOW
