"""
Classifier gate - Domain service deciding history inclusion, web augmentation and model choice.

Two binary classifiers run concurrently against a lightweight model. Each one fails
soft: a transport error or a payload violating the schema resolves to that
classifier's conservative default instead of surfacing to the user.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import ClassificationError
from ..interfaces.llm_client import LLMClient
from ..models.conversation import MessageRole, Turn


CONTEXT_INSTRUCTIONS = """You are a classifier that determines if a user query requires previous conversation context to answer properly.

Answer YES if the query:
- References something mentioned earlier (e.g., "what about that?", "can you explain more?", "the previous one")
- Uses pronouns that refer to previous context (e.g., "it", "that", "this", "those")
- Is a follow-up question or continuation of a topic
- Asks to modify, expand, or clarify a previous response
- Would be ambiguous or meaningless without context

Answer NO if the query:
- Is a completely new, standalone question
- Contains all necessary information to answer
- Is a greeting or simple statement
- Is self-contained and doesn't reference anything prior"""

ONLINE_INSTRUCTIONS = """You are a classifier that determines if a user query requires real-time or up-to-date information from the internet.

Answer YES if the query asks about:
- Current events, news, or recent happenings
- Live data (weather, stock prices, cryptocurrency prices, sports scores)
- Information that changes frequently and needs to be current
- Specific current dates, times, or schedules
- Recent releases, updates, or announcements

Answer NO if the query asks about:
- General knowledge, facts, or concepts
- Historical information
- Math problems or calculations
- Creative writing or brainstorming
- Code help or programming questions
- Personal advice or opinions
- Explanations of how things work"""


@dataclass(frozen=True)
class BinaryClassifier:
    """One yes/no question asked of the classifier model."""
    name: str
    decision_field: str
    description: str
    instructions: str
    default: bool

    def schema(self) -> Dict[str, Any]:
        """Strict two-field JSON schema: a boolean decision and a string reason."""
        return {
            "type": "object",
            "properties": {
                self.decision_field: {
                    "type": "boolean",
                    "description": self.description,
                },
                "reason": {
                    "type": "string",
                    "description": "Brief reason for the decision",
                },
            },
            "required": [self.decision_field, "reason"],
            "additionalProperties": False,
        }


CONTEXT_CLASSIFIER = BinaryClassifier(
    name="context_check",
    decision_field="needs_context",
    description="Whether the query requires previous conversation history",
    instructions=CONTEXT_INSTRUCTIONS,
    default=True,
)

ONLINE_CLASSIFIER = BinaryClassifier(
    name="online_check",
    decision_field="needs_online",
    description="Whether the query requires real-time internet data",
    instructions=ONLINE_INSTRUCTIONS,
    default=False,
)


@dataclass(frozen=True)
class ModelSelection:
    """Model identifiers the gate chooses between."""
    reasoning_model: str
    non_thinking_model: str
    classifier_model: str
    online_suffix: str = ":online"


@dataclass(frozen=True)
class GateDecision:
    include_history: bool
    use_web_augmentation: bool
    model: str


class ClassifierGate:
    """Decides per request what context and which model a completion gets."""

    def __init__(
        self,
        llm_client: LLMClient,
        models: ModelSelection,
        timeout_s: Optional[float] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._llm_client = llm_client
        self._models = models
        self._timeout_s = timeout_s
        self._logger = logger or logging.getLogger(__name__)

    async def decide(self, history: List[Turn], reasoning_enabled: bool) -> GateDecision:
        """Classify the newest user turn and pick the model for this exchange."""
        last_user = _last_user_turn(history)
        include_history = True
        use_web = False

        if last_user is not None:
            self._logger.info("[Classifiers] Running context and online classifiers in parallel...")
            include_history, use_web = await asyncio.gather(
                self._needs_context(last_user.content, len(history)),
                self.classify(ONLINE_CLASSIFIER, last_user.content),
            )
            self._logger.info(
                f"[Classifiers] Both classifiers complete. Context: {include_history}, Online: {use_web}"
            )

        model = self.select_model(reasoning_enabled, use_web)
        if use_web:
            self._logger.info(f"[Model] Using online-enabled model: {model}")
        return GateDecision(include_history=include_history, use_web_augmentation=use_web, model=model)

    def select_model(self, reasoning_enabled: bool, use_web_augmentation: bool = False) -> str:
        model = self._models.reasoning_model if reasoning_enabled else self._models.non_thinking_model
        if use_web_augmentation:
            model = f"{model}{self._models.online_suffix}"
        return model

    async def classify(self, classifier: BinaryClassifier, query: str) -> bool:
        """Ask one classifier; any failure resolves to ``classifier.default``."""
        try:
            call = self._llm_client.complete_structured(
                messages=[
                    {"role": MessageRole.SYSTEM.value, "content": classifier.instructions},
                    {"role": MessageRole.USER.value, "content": query},
                ],
                model=self._models.classifier_model,
                schema_name=classifier.name,
                schema=classifier.schema(),
            )
            if self._timeout_s:
                payload = await asyncio.wait_for(call, timeout=self._timeout_s)
            else:
                payload = await call
            decision = _decision_from(classifier, payload)
        except Exception as e:
            self._logger.error(f"Error in {classifier.name} classifier, defaulting to {classifier.default}: {e}")
            return classifier.default

        self._logger.info(
            f'[Classifier] Query: "{query[:50]}..." => {classifier.decision_field}: {decision} '
            f"({payload.get('reason', '')})"
        )
        return decision

    async def _needs_context(self, query: str, history_length: int) -> bool:
        # Fewer than two turns means there is nothing to trim
        if history_length < 2:
            return True
        return await self.classify(CONTEXT_CLASSIFIER, query)

    @staticmethod
    def outbound_turns(history: List[Turn], decision: GateDecision) -> List[Turn]:
        """Turns to send for this request; the session itself is never modified."""
        if decision.include_history or len(history) < 2:
            return list(history)
        last_user = _last_user_turn(history)
        return [last_user] if last_user is not None else list(history)


def _last_user_turn(history: List[Turn]) -> Optional[Turn]:
    for turn in reversed(history):
        if turn.role == MessageRole.USER:
            return turn
    return None


def _decision_from(classifier: BinaryClassifier, payload: Any) -> bool:
    if not isinstance(payload, dict):
        raise ClassificationError(classifier.name, f"expected an object, got {type(payload).__name__}")
    decision = payload.get(classifier.decision_field)
    if not isinstance(decision, bool):
        raise ClassificationError(classifier.name, f"'{classifier.decision_field}' is not a boolean")
    return decision
