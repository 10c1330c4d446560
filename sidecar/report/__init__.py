"""Echo report assembly and dataset export."""

from report.builder import (
    DerivedMeasurements,
    EchoStudy,
    QualityControlError,
    build_conclusion_inputs,
    build_dataset_row,
    build_report,
    derive_measurements,
)
