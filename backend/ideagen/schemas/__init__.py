# Schemas package
from .request_schema import FeedbackRequest, GenerateRequest
from .profile_schema import BudgetProfile, LocationProfile, NormalizedProfile, ProfileMeta
from .context_schema import Context
from .output_schema import ErrorResponse, GenerationResponse
from .safety_schema import InputSafetyResult, SafetyIssue, SafetyVerdict

__all__ = [
    "GenerateRequest",
    "FeedbackRequest",
    "BudgetProfile",
    "LocationProfile",
    "ProfileMeta",
    "NormalizedProfile",
    "Context",
    "GenerationResponse",
    "ErrorResponse",
    "SafetyIssue",
    "SafetyVerdict",
    "InputSafetyResult",
]
