# Scoring stages module
from .rule_evaluator import RuleEvaluationStage
from .ai_intent import AIIntentStage
