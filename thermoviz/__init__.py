"""thermoviz — thermodynamic cycle analysis.

Computes state points, process legs and performance figures for the
standard air-standard and vapour cycles, and samples chart-ready PV, TS and
PH diagrams.
"""

__app_name__ = "thermoviz"
__version__ = "0.1.0"
