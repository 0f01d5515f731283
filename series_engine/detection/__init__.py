# Detection module
from .enhancer import EnhancementTask
from .pattern import detect_series_by_pattern, clean_series_name
from .semantic import (
    SemanticDetector,
    SemanticDetectionError,
    SemanticDetectionResult,
    SemanticSeries,
    estimate_prompt_tokens,
)
