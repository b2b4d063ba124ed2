"""
Runtime: record instances, the match evaluator and the statement runner.
"""

from .values import RecordInstance, runtime_type_of, is_instance_of, conforms, display_value
from .evaluator import MatchResult, MatchResultTag, evaluate
