"""
Parse AI Analysis - Conversational Analysis Engine.

Sends assembled context plus the user message to Gemini. Without credentials,
or when anything on the model path fails, the deterministic heuristic
responder answers instead. There is no retry of the model call.
"""

import logging
import time
from functools import lru_cache
from typing import Any

from parseai.core.gemini import (
    ModelConfig,
    create_gemini_client,
    generate_chat,
    generate_text,
    is_configured,
)
from parseai.exceptions import ParseAIException
from parseai.modules.analysis.context import (
    build_document_context,
    build_history,
    build_system_prompt,
    gather_url_context,
)
from parseai.modules.analysis.heuristics import HeuristicResponder
from parseai.modules.analysis.schemas import AnalysisContext, AnalysisResponse
from parseai.modules.analysis.suggestions import extract_chart_suggestion
from parseai.modules.web.extractor import WebContentExtractor
from parseai.observability import get_metrics_store

logger = logging.getLogger(__name__)

ANALYSIS_PREVIEW_CHARS = 5000


class AnalysisEngine:
    """Model-backed chat with a heuristic fallback."""

    def __init__(
        self,
        config: ModelConfig,
        client: Any = None,
        extractor: WebContentExtractor | None = None,
        heuristics: HeuristicResponder | None = None,
    ):
        self.config = config
        self._client = client
        self._client_failed = False
        self.extractor = extractor
        self.heuristics = heuristics or HeuristicResponder()

    @property
    def is_configured(self) -> bool:
        return is_configured(self.config) and not self._client_failed

    def _get_client(self) -> Any:
        """Build the Gemini client on first configured use."""
        if self._client is None and not self._client_failed:
            try:
                self._client = create_gemini_client(self.config)
            except ParseAIException as e:
                logger.error(f"[ENGINE] Model client unavailable, using heuristics: {e.message}")
                self._client_failed = True
        return self._client

    def _fallback(self, user_message: str, context: AnalysisContext) -> AnalysisResponse:
        get_metrics_store().record_response("heuristic")
        return self.heuristics.respond(user_message, context)

    async def generate_response(
        self,
        user_message: str,
        context: AnalysisContext,
        newest_first: bool = False,
    ) -> AnalysisResponse:
        """
        Answer a chat message.

        Args:
            user_message: The new user message
            context: Attached documents and prior messages
            newest_first: True when context.previous_messages is newest first

        Returns:
            AnalysisResponse; never raises for a well-formed message
        """
        if not is_configured(self.config):
            return self._fallback(user_message, context)

        client = self._get_client()
        if client is None:
            return self._fallback(user_message, context)

        metrics = get_metrics_store()
        started = time.perf_counter()
        try:
            url_context = await gather_url_context(user_message, self.extractor)
            system_prompt = build_system_prompt(build_document_context(context.documents), url_context)
            history = build_history(context.previous_messages, newest_first=newest_first)

            text = await generate_chat(client, self.config, system_prompt, history, user_message)
        except Exception as e:
            logger.error(f"[ENGINE] Model path failed, falling back to heuristics: {e}")
            metrics.record_stage_error("model_call", getattr(e, "code", type(e).__name__))
            return self._fallback(user_message, context)
        finally:
            metrics.record_stage_latency("model_call", (time.perf_counter() - started) * 1000)

        cleaned, chart = extract_chart_suggestion(text)
        metrics.record_response("model")
        return AnalysisResponse(text=cleaned, chart=chart)

    async def analyze_document(self, content: str, document_name: str) -> str:
        """Short upload-time analysis of a freshly parsed document."""
        if not is_configured(self.config) or self._get_client() is None:
            word_count = len(content.split())
            return f"""Document "{document_name}" uploaded successfully.

**Quick Stats:**
- Words: ~{word_count:,}
- Ready for analysis

Ask me questions about this document or request visualizations!"""

        truncated = "\n... (truncated)" if len(content) > ANALYSIS_PREVIEW_CHARS else ""
        prompt = f"""Briefly analyze this document and provide key insights (2-3 paragraphs max):

Document: {document_name}
Content (first {ANALYSIS_PREVIEW_CHARS} chars):
{content[:ANALYSIS_PREVIEW_CHARS]}{truncated}"""

        try:
            return await generate_text(self._client, self.config, prompt)
        except ParseAIException as e:
            logger.error(f"[ENGINE] Document analysis failed: {e.message}")
            return f'Document "{document_name}" uploaded. Ready for analysis.'


@lru_cache
def get_engine() -> AnalysisEngine:
    """Application-wide engine, configured from settings on first use."""
    config = ModelConfig.from_settings()
    logger.info(f"[ENGINE] Model {'configured' if is_configured(config) else 'not configured (heuristic mode)'}")
    return AnalysisEngine(config)
