"""Record vectorization and linear scoring."""

from .vectorizer import FeatureVectorizer, parse_numeric
from .scorer import LinearScorer, ScoreResult, sigmoid

__all__ = [
    "FeatureVectorizer",
    "parse_numeric",
    "LinearScorer",
    "ScoreResult",
    "sigmoid",
]
