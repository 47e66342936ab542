from allocheck.validator.summary import ValidationSummary, summarize
from allocheck.validator.validator import Validator, validate_all, validate_snapshot

__all__ = ["ValidationSummary", "Validator", "summarize", "validate_all", "validate_snapshot"]
