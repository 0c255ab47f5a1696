"""Layer classification into flattenable branches."""

from blendfold.core.classify.classifier import LayerClassifier, Outcome, classify
from blendfold.core.classify.models import (
    BranchDescriptor,
    BranchEntry,
    BranchPattern,
    Diagnostic,
    DiagnosticSeverity,
)

__all__ = [
    "BranchDescriptor",
    "BranchEntry",
    "BranchPattern",
    "Diagnostic",
    "DiagnosticSeverity",
    "LayerClassifier",
    "Outcome",
    "classify",
]
