"""
This module provides classes and functions for validating bags.
"""
from .base import (ALL, ERROR, WARN, REC, PROB, Validator, ValidationIssue,
                   ValidationResults)
from .bag import BagValidator, ValidationMode, validate_bag, validate
from ..exceptions import BagValidationError, BagError
