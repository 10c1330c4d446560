"""Regional wall-motion (17-segment model) state, metrics and narrative text."""

from .segments import (
    NO_PATTERN,
    PATTERNS,
    SEGMENTS,
    Artery,
    PatternCategory,
    PatternId,
    Severity,
    UnknownPatternError,
    UnknownSegmentError,
    pattern_info,
    segment_info,
    severity_info,
    territory_segments,
)
from .store import ALL_SEGMENTS, MotilityState, MotilityStore
from .metrics import (
    check_coherence,
    compute_wmsi,
    dominant_territory,
    ecg_correlation,
    estimate_ejection_fraction,
    group_abnormal,
    summarize,
    territory_counts,
)
from .narrative import generate_conclusion, generate_findings
