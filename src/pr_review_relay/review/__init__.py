"""
Review Classification

This module provides label routing and review state aggregation.
"""

from .matcher import RuleMatcher
from .state import reduce_review_state

__all__ = ['RuleMatcher', 'reduce_review_state']
