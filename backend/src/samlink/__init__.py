"""
samlink - CRM company to SAM.gov entity resolution

Resolves CRM company records to SAM.gov registry entities (by UEI) using
fuzzy name matching over a multi-strategy registry search, and classifies
each result as an automatic link, a review item, or no match.
"""

__version__ = "0.1.0"
