"""Echocardiographic calculators, diastolic grading, AR grading and quality control."""
