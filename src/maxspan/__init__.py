"""
MAXSPAN

SPAN risk-file and Bhav settlement-file reconciliation with scenario
arithmetic:
- Contract extraction from SPAN XML and settlement rows from Bhav tables
- Composite-key join into one contract table
- Portfolio aggregation across signed lot positions
- BOD/intraday SPAN snapshot merge by scenario-wise maximum
"""

__version__ = "0.1.0"
