from .applier import RefinementApplier
from .shape_analysis import describe_shape, group_by_shape, shape_flags, shape_signature
from .suggester import RefinementSuggester, dominant_reason

__all__ = [
    "RefinementApplier",
    "RefinementSuggester",
    "describe_shape",
    "dominant_reason",
    "group_by_shape",
    "shape_flags",
    "shape_signature",
]
