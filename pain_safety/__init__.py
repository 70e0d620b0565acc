"""
Pain Safety - opioid MME aggregation and interaction checks for the
Pain Management page.
"""
__version__ = "1.0.0"
