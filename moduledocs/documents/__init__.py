"""
Documents Layer - locate and select module documents.
"""

from moduledocs.documents.models import (
    DecisionNote,
    DocumentItem,
    DocumentKind,
    DocumentSource,
    MergeMode,
    SelectionRequest,
    SelectionResult,
)
from moduledocs.documents.resolver import SourceResolver
from moduledocs.documents.planner import SelectionPlanner, plan_documents

__all__ = [
    "DecisionNote",
    "DocumentItem",
    "DocumentKind",
    "DocumentSource",
    "MergeMode",
    "SelectionRequest",
    "SelectionResult",
    "SourceResolver",
    "SelectionPlanner",
    "plan_documents",
]
