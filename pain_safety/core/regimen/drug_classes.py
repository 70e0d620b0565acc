"""
Drug-class patterns.

Medication names are free text ("Oxycodone HCl 5 MG Oral Tablet"), so class
membership is a case-insensitive substring regex over the name. Patterns are
module-level so they can be reviewed without reading rule logic.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Pattern

OPIOID = re.compile(
    r"(morphine|hydrocodone|oxycodone|hydromorphone|oxymorphone|codeine|"
    r"tramadol|tapentadol|fentanyl|methadone|buprenorphine)",
    re.IGNORECASE,
)
BENZODIAZEPINE = re.compile(
    r"(diazepam|lorazepam|clonazepam|alprazolam|temazepam|midazolam)",
    re.IGNORECASE,
)
Z_DRUG = re.compile(r"(zolpidem|zopiclone|eszopiclone|zaleplon)", re.IGNORECASE)
GABAPENTINOID = re.compile(r"(gabapentin|pregabalin)", re.IGNORECASE)

CYP3A4_INHIBITOR = re.compile(
    r"(ketoconazole|itraconazole|voriconazole|clarithromycin|erythromycin|"
    r"ritonavir|cobicistat|diltiazem|verapamil|grapefruit)",
    re.IGNORECASE,
)
CYP3A4_INDUCER = re.compile(
    r"(rifampin|rifampicin|carbamazepine|phenytoin|phenobarbital|"
    r"st\.?\s*john|nevirapine|efavirenz)",
    re.IGNORECASE,
)
CYP3A4_SUBSTRATE_OPIOID = re.compile(r"(oxycodone|fentanyl|methadone|hydrocodone)", re.IGNORECASE)
CYP2D6_PRODRUG_OPIOID = re.compile(r"(codeine|tramadol)", re.IGNORECASE)

METHADONE = re.compile(r"methadone", re.IGNORECASE)
QT_PROLONGING = re.compile(
    r"(amiodarone|sotalol|quinolone|ciprofloxacin|levofloxacin|ondansetron|"
    r"haloperidol|ziprasidone|citalopram)",
    re.IGNORECASE,
)

RENAL_METABOLITE_OPIOID = re.compile(r"(morphine|codeine)", re.IGNORECASE)
HEPATIC_OPIOID = re.compile(r"(oxycodone|hydrocodone|methadone)", re.IGNORECASE)

BUPRENORPHINE = re.compile(r"buprenorphine", re.IGNORECASE)


def is_member(pattern: Pattern[str], name: str) -> bool:
    return bool(name) and pattern.search(name) is not None


def members(pattern: Pattern[str], names: Iterable[str]) -> List[str]:
    """Names (in input order) that belong to the class."""
    return [n for n in names if is_member(pattern, n)]


def any_member(pattern: Pattern[str], names: Iterable[str]) -> bool:
    return any(is_member(pattern, n) for n in names)
