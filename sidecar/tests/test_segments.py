"""Tests for the static 17-segment model and pattern library."""

import pytest

from motility.segments import (
    PATTERNS,
    SEGMENT_IDS,
    SEGMENTS,
    TERRITORIES,
    Artery,
    PatternCategory,
    PatternId,
    SegmentLevel,
    Severity,
    UnknownPatternError,
    UnknownSegmentError,
    pattern_info,
    segment_info,
    segment_level,
    segment_wall,
    segments_for_view,
    severity_info,
    territory_segments,
)


class TestSegments:
    def test_seventeen_segments(self):
        assert sorted(SEGMENTS) == list(range(1, 18))
        assert SEGMENT_IDS == tuple(range(1, 18))

    def test_segment_info(self):
        seg = segment_info(5)
        assert seg.name == "Basal Inferolateral"
        assert seg.artery == Artery.CX

    @pytest.mark.parametrize("bad", [0, 18, -1])
    def test_unknown_segment_raises(self, bad):
        with pytest.raises(UnknownSegmentError):
            segment_info(bad)

    def test_unknown_segment_is_lookup_error(self):
        with pytest.raises(LookupError):
            segment_info(99)

    def test_territories_partition_all_segments(self):
        covered = set()
        for territory in TERRITORIES.values():
            assert not covered & territory.segments
            covered |= territory.segments
        assert covered == set(SEGMENT_IDS)

    def test_territory_segments_by_name(self):
        assert territory_segments("Cx") == frozenset({5, 6, 11, 12, 16})
        assert 17 in territory_segments(Artery.DA)

    def test_unknown_territory(self):
        with pytest.raises(LookupError):
            territory_segments("LM")

    def test_apex_visible_in_all_apical_views(self):
        for view in ("A4C", "A2C", "A3C"):
            assert any(seg.id == 17 for seg in segments_for_view(view))
        assert all(seg.id != 17 for seg in segments_for_view("PSAX"))


class TestSegmentGeometry:
    @pytest.mark.parametrize("sid,level", [
        (1, SegmentLevel.BASAL),
        (7, SegmentLevel.MID),
        (13, SegmentLevel.APICAL),
        (17, SegmentLevel.APICAL),
    ])
    def test_level(self, sid, level):
        assert segment_level(sid) == level

    @pytest.mark.parametrize("sid,wall", [
        (1, "anterior"),
        (7, "anterior"),
        (13, "anterior"),
        (9, "inferoseptal"),
        (14, "septal"),
        (17, "apical"),
    ])
    def test_wall(self, sid, wall):
        assert segment_wall(sid) == wall


class TestSeverity:
    def test_cycle(self):
        assert Severity.NORMAL.next() == Severity.HYPOKINETIC
        assert Severity.HYPOKINETIC.next() == Severity.AKINETIC
        assert Severity.AKINETIC.next() == Severity.DYSKINETIC
        assert Severity.DYSKINETIC.next() == Severity.NORMAL

    def test_labels(self):
        assert severity_info(3).label == "Aquinesia"
        assert severity_info(Severity.NORMAL).short_label == "Normal"

    def test_unknown_severity(self):
        with pytest.raises(LookupError):
            severity_info(5)


class TestPatterns:
    def test_all_ids_registered(self):
        assert set(PATTERNS) == set(PatternId)

    def test_lookup_by_string(self):
        pattern = pattern_info("dilated_cm")
        assert pattern.is_diffuse
        assert pattern.affected_segments == frozenset(range(1, 17))
        assert pattern.category == PatternCategory.CARDIOMYOPATHY

    def test_unknown_pattern(self):
        with pytest.raises(UnknownPatternError):
            pattern_info("not_a_pattern")

    def test_none_is_not_a_pattern(self):
        with pytest.raises(UnknownPatternError):
            pattern_info("none")

    def test_aneurysms_are_dyskinetic(self):
        for pid in (PatternId.ANEURYSM_ANTERIOR, PatternId.ANEURYSM_APICAL, PatternId.ANEURYSM_INFERIOR):
            assert PATTERNS[pid].default_severity == Severity.DYSKINETIC

    def test_right_bundle_branch_block_keeps_segments_normal(self):
        assert PATTERNS[PatternId.BCRD].default_severity == Severity.NORMAL

    def test_only_two_diffuse_patterns(self):
        diffuse = {p.id for p in PATTERNS.values() if p.is_diffuse}
        assert diffuse == {PatternId.DILATED_CM, PatternId.HYPERTENSIVE_CM}
