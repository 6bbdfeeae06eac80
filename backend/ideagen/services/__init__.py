from .context_builder import build_context
from .fallback_provider import get_fallback
from .feasibility_engine import process
from .normalizer import normalize
from .orchestrator import AIOrchestrator
from .pipeline import GenerationPipeline
from .response_formatter import format_response
from .safeguards import check_input_safety, check_output_safety

__all__ = [
    "normalize",
    "build_context",
    "AIOrchestrator",
    "process",
    "check_input_safety",
    "check_output_safety",
    "format_response",
    "get_fallback",
    "GenerationPipeline",
]
