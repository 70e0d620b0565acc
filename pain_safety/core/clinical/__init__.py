"""
Opioid Safety Rules

Scans a medication list against drug-class patterns and patient covariates
and produces severity-tagged findings.

Usage:
    from pain_safety.core.clinical import InteractionRuleEvaluator, SafetyFinding

    evaluator = InteractionRuleEvaluator()
    findings = evaluator.evaluate(medications, patient)
"""
from .engine import InteractionRuleEvaluator
from .base import SafetyFinding, Severity, Reference, RowHighlight

__all__ = [
    "InteractionRuleEvaluator",
    "SafetyFinding",
    "Severity",
    "Reference",
    "RowHighlight",
]
