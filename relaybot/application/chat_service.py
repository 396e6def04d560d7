"""
Chat service - Application service orchestrating one complete exchange.
Coordinates the session, classifier gate, stream consumer, renderer and multiplexer.
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..domain.errors import StreamTransportError
from ..domain.interfaces.llm_client import LLMClient, ReasoningOptions
from ..domain.interfaces.platform import DestinationChannel
from ..domain.models.conversation import MessageRole
from ..domain.models.stream import StreamSnapshot, Usage
from ..domain.services.classifier_gate import ClassifierGate
from ..domain.services.renderer import IncrementalRenderer, RenderConfig
from ..domain.services.session_service import SessionService
from ..domain.services.stream_consumer import StreamConsumer
from .finalizer import Finalizer
from .multiplexer import OutputMultiplexer


@dataclass
class ExchangeRequest:
    """One user prompt addressed to the bot."""
    user_id: str
    scope_id: str
    prompt: str
    reasoning_enabled: Optional[bool] = None
    user_label: str = ""


@dataclass
class ExchangeResult:
    success: bool
    content: str = ""
    reasoning: str = ""
    usage: Optional[Usage] = None
    model: str = ""
    message_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None


class ChatService:
    """Application service running prompt-to-delivery exchanges."""

    def __init__(
        self,
        llm_client: LLMClient,
        sessions: SessionService,
        gate: ClassifierGate,
        finalizer: Finalizer,
        system_prompt: str = "You are a helpful AI assistant.",
        render_config: Optional[RenderConfig] = None,
        reasoning_options: Optional[ReasoningOptions] = None,
        code_send_delay_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None
    ):
        self._llm_client = llm_client
        self._sessions = sessions
        self._gate = gate
        self._finalizer = finalizer
        self._system_prompt = system_prompt
        self._render_config = render_config or RenderConfig()
        self._reasoning_options = reasoning_options or ReasoningOptions()
        self._code_send_delay_s = code_send_delay_s
        self._clock = clock
        self._sleep = sleep
        self._now = now
        self._logger = logger or logging.getLogger(__name__)
        self._consumer = StreamConsumer(llm_client, logger=self._logger)

    @property
    def sessions(self) -> SessionService:
        return self._sessions

    async def close(self) -> None:
        await self._llm_client.close()

    def build_system_message(self) -> Dict[str, Any]:
        """System prompt stamped with the current date and time."""
        stamp = self._now().strftime("%m/%d/%Y, %I:%M:%S %p")
        return {
            "role": MessageRole.SYSTEM.value,
            "content": f"{self._system_prompt}\n\nCurrent Date and Time: {stamp}\n\n",
        }

    async def handle_exchange(self, request: ExchangeRequest, channel: DestinationChannel) -> ExchangeResult:
        """Stream a reply to ``request`` into ``channel``."""
        session = self._sessions.get_session(request.user_id, request.scope_id)
        reasoning_enabled = (
            request.reasoning_enabled if request.reasoning_enabled is not None else session.reasoning_enabled
        )
        session.add_user_turn(request.prompt)

        multiplexer = OutputMultiplexer(
            channel,
            owner_id=request.user_id,
            reasoning_enabled=reasoning_enabled,
            code_send_delay_s=self._code_send_delay_s,
            sleep=self._sleep,
            logger=self._logger,
        )
        if not await multiplexer.send_placeholder():
            return ExchangeResult(success=False, error="Initial reply could not be delivered")

        decision = await self._gate.decide(session.turns, reasoning_enabled)
        turns = ClassifierGate.outbound_turns(session.turns, decision)
        if len(turns) < len(session.turns):
            self._logger.info("[Context] Skipping history - query is standalone")

        messages = [self.build_system_message()] + [turn.to_dict() for turn in turns]
        renderer = IncrementalRenderer(
            reasoning_enabled=reasoning_enabled,
            config=self._render_config,
            clock=self._clock,
            logger=self._logger,
        )

        async def on_update(snapshot: StreamSnapshot) -> None:
            units = renderer.step(snapshot)
            if units:
                await multiplexer.apply(units)

        try:
            final = await self._consumer.consume(
                messages,
                decision.model,
                on_update,
                reasoning=self._reasoning_options if reasoning_enabled else None,
            )
        except Exception as e:
            if isinstance(e, StreamTransportError):
                self._logger.error(f"Error generating response: {e}")
            else:
                self._logger.exception(f"Unexpected error while delivering response: {e}")
            await multiplexer.report_error()
            return ExchangeResult(
                success=False,
                model=decision.model,
                message_ids=[m.id for m in multiplexer.sent],
                error=str(e),
            )

        self._finalizer.finalize(session, final, multiplexer.last_message, request.user_label or request.user_id)
        return ExchangeResult(
            success=True,
            content=final.content,
            reasoning=final.reasoning,
            usage=final.usage,
            model=decision.model,
            message_ids=[m.id for m in multiplexer.sent],
        )
