"""
Core computation: regimen parsing, MME aggregation, safety rules, risk
scoring and report export. Pure and synchronous; no I/O except PDF output.
"""
