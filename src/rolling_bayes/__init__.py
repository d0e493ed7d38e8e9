"""rolling-bayes -- online naive Bayes classification with a bounded memory."""

__version__ = "0.1.0"

from .classifier import NaiveBayesClassifier
from .config import Settings, load_settings
from .features import FeatureExtractor, read_labelled_text
from .metrics import EvaluationReport, evaluate_prequential
from .models import Classification, FeatureProbabilitySource, StoreSnapshot
from .store import ANY_CATEGORY, DEFAULT_MEMORY_CAPACITY, CountingStore

__all__ = [
    # Core
    "NaiveBayesClassifier",
    "CountingStore",
    "Classification",
    "FeatureProbabilitySource",
    "StoreSnapshot",
    "DEFAULT_MEMORY_CAPACITY",
    "ANY_CATEGORY",
    # Feature extraction
    "FeatureExtractor",
    "read_labelled_text",
    # Evaluation
    "EvaluationReport",
    "evaluate_prequential",
    # Configuration
    "Settings",
    "load_settings",
]
