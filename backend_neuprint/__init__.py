"""
Backend NeuPrint: deterministic reasoning-analysis report backend.

Takes raw feature measurements extracted from a piece of written reasoning
(claims, transitions, revisions, hedges, ...) and derives the four-section
report: rsl (structure level), cff (cognitive fingerprint), rc (reasoning
control) and rfs (role fit). Every stage is a pure function of its inputs.
"""

__version__ = "0.1.0"
