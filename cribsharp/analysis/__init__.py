"""
Statistical analysis for the cribsharp engine.
"""

from cribsharp.analysis.statistics import (
    AnalysisType,
    ConfidenceInterval,
    StatisticalValidator,
    calculate_confidence_interval,
)

__all__ = [
    "AnalysisType",
    "ConfidenceInterval",
    "StatisticalValidator",
    "calculate_confidence_interval",
]
