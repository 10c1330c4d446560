"""Tests for multiparametric aortic regurgitation grading and text."""

import pytest
from pydantic import ValidationError

from hemodynamics.aortic_regurgitation import (
    PRESETS,
    ARSeverity,
    AorticRegurgitationData,
    JetReach,
    determine_severity,
    generate_conclusion,
    generate_findings,
    preset_for,
)


class TestSeverity:
    @pytest.mark.parametrize("grade", list(PRESETS))
    def test_presets_classify_as_their_grade(self, grade):
        assert determine_severity(PRESETS[grade]) == grade

    def test_empty_is_not_evaluated(self):
        assert determine_severity(AorticRegurgitationData()) == ARSeverity.NOT_EVALUATED

    @pytest.mark.parametrize("field,value", [
        ("vena_contracta", 0.65),
        ("pressure_half_time", 150),
        ("jet_width", 65),
        ("regurgitant_volume", 60),
        ("eroa", 0.30),
        ("jet_reach", JetReach.APEX),
        ("flow_reversal", True),
    ])
    def test_any_severe_criterion(self, field, value):
        data = AorticRegurgitationData(**{field: value})
        assert determine_severity(data) == ARSeverity.SEVERE

    def test_single_moderate_indicator_wins_over_mild(self):
        data = AorticRegurgitationData(vena_contracta=0.2, pressure_half_time=400)
        assert determine_severity(data) == ARSeverity.MODERATE

    def test_mild_reach_with_mild_values(self):
        data = AorticRegurgitationData(vena_contracta=0.2, eroa=0.05)
        assert determine_severity(data) == ARSeverity.MILD

    def test_every_value_mild(self):
        data = AorticRegurgitationData(pressure_half_time=600, jet_width=20, regurgitant_volume=20)
        assert determine_severity(data) == ARSeverity.MILD

    def test_one_intermediate_value_among_mild_ones(self):
        data = AorticRegurgitationData(pressure_half_time=600, jet_width=20, eroa=0.2)
        assert determine_severity(data) == ARSeverity.MODERATE

    def test_mitral_reach_alone_is_moderate(self):
        data = AorticRegurgitationData(jet_reach=JetReach.MITRAL)
        assert determine_severity(data) == ARSeverity.MODERATE

    def test_mild_values_with_mitral_reach(self):
        data = AorticRegurgitationData(vena_contracta=0.2, jet_reach="mitral")
        assert determine_severity(data) == ARSeverity.MODERATE

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            AorticRegurgitationData(eroa=-0.1)


class TestText:
    def test_empty_gives_no_text(self):
        data = AorticRegurgitationData()
        assert generate_findings(data) == ""
        assert generate_conclusion(data) == ""

    def test_findings_parameters(self):
        data = AorticRegurgitationData(
            vena_contracta=0.45, pressure_half_time=350, jet_reach=JetReach.MITRAL
        )
        assert generate_findings(data) == (
            "Insuficiencia aórtica con jet que alcanza borde libre de la valva mitral. "
            "Parámetros cuantitativos: vena contracta 0.45 cm, PHT 350 ms. "
        )

    def test_findings_flow_reversal(self):
        text = generate_findings(PRESETS[ARSeverity.SEVERE])
        assert "tercio medio/apical" in text
        assert "EROA 0.4 cm²" in text
        assert text.endswith("aorta descendente supradiafragmática.")

    def test_findings_never_state_grade(self):
        assert "Severa" not in generate_findings(PRESETS[ARSeverity.SEVERE])

    def test_conclusion(self):
        assert generate_conclusion(PRESETS[ARSeverity.SEVERE]) == "Insuficiencia Aórtica Severa."
        assert generate_conclusion(PRESETS[ARSeverity.MILD]) == "Insuficiencia Aórtica Leve."


class TestPresets:
    def test_preset_for_grade(self):
        assert preset_for("moderada") == PRESETS[ARSeverity.MODERATE]

    def test_preset_is_a_copy(self):
        preset = preset_for("Severa")
        preset.eroa = 0.9
        assert PRESETS[ARSeverity.SEVERE].eroa == 0.40

    def test_no_grade_clears(self):
        assert preset_for("no") == AorticRegurgitationData()
