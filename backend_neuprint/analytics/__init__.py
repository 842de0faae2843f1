"""
NeuPrint analytics engines.

Derives the report sections from raw features: rsl (FRI, level, cohort,
SRI), cff (indicators, pattern, final type), rc (structural control,
summary, distribution, observed signals) and rfs (role fit).
Modules: raw_features, fri, rsl_level, cohort, sri, cff_indicators,
cff_patterns, final_type, structural_control, rc_summary, rc_distribution,
observed_signals, style_summary, role_fit, report_contract, analytics_pipeline.
"""

from backend_neuprint.analytics.analytics_pipeline import (
    DerivationResult,
    derive_all,
    derive_with_diagnostics,
)
from backend_neuprint.analytics.options import DeriveOptions

__all__ = [
    "DeriveOptions",
    "DerivationResult",
    "derive_all",
    "derive_with_diagnostics",
]
