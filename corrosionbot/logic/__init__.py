"""Recommendation decision engine."""

from .environment import estimate_environment, environment_rank, is_severe
from .cycle_selector import select_cycle, match_area_family
from .reconciler import reconcile, parse_classifier_output
from .engine import CorrosionEngine, DefectClassifier, LLMVisionClassifier, resolve_environment
from .errors import CorrosionBotError, InvalidInput, UpstreamMalformed, UpstreamUnavailable

__all__ = [
    'estimate_environment',
    'environment_rank',
    'is_severe',
    'select_cycle',
    'match_area_family',
    'reconcile',
    'parse_classifier_output',
    'CorrosionEngine',
    'DefectClassifier',
    'LLMVisionClassifier',
    'resolve_environment',
    'CorrosionBotError',
    'InvalidInput',
    'UpstreamMalformed',
    'UpstreamUnavailable',
]
