from __future__ import annotations

from .adapters import AnalysisResultAdapter, ReportAdapter
from .data_models import AnalysisKpis, BandSlice
from .reporter import Reporter

__all__ = [
    "Reporter",
    "ReportAdapter",
    "AnalysisResultAdapter",
    "AnalysisKpis",
    "BandSlice",
]
