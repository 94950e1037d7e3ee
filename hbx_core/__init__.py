"""
Exchange core domain models.

Benefit coverage periods and sponsorships, the exchange date of record
and its daily rollover, and the people and organizations they serve.
"""

__version__ = "0.1.0"
