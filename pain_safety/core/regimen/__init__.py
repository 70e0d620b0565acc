"""
Regimen Layer

Medication list and patient covariate types, drug-class patterns and sig
parsing shared by the MME calculator and the safety rules.
"""
from .base import MedicationEntry, PatientContext, Route, Cyp2d6Phenotype
from .sig_parser import parse_frequency, infer_dose_from_name, parse_medication_line

__all__ = [
    "MedicationEntry",
    "PatientContext",
    "Route",
    "Cyp2d6Phenotype",
    "parse_frequency",
    "infer_dose_from_name",
    "parse_medication_line",
]
