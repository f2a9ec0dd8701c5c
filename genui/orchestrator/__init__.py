from genui.orchestrator.core import Engine
from genui.orchestrator.decision import DecisionStage, parse_decision_tags
from genui.orchestrator.hydration import HydrationStage
from genui.orchestrator.suggestions import SuggestionEngine

__all__ = [
    "DecisionStage",
    "Engine",
    "HydrationStage",
    "SuggestionEngine",
    "parse_decision_tags",
]
