"""Narrative, fundamentals, summary, hype and verdict text generation.

Every generator absorbs its own failure and returns a fixed fallback, so a
broken or missing text backend never stops a scan.
"""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from dyor_scan.narrative import prompts
from dyor_scan.narrative.llm import TextService
from dyor_scan.scan.evidence import EvidenceRecord

logger = logging.getLogger(__name__)

NARRATIVE_FALLBACK = "Unable to extract narrative."
FUNDAMENTALS_FALLBACK = "Fundamentals data unavailable."
SUMMARY_FALLBACK = "Analysis in progress..."
HYPE_FALLBACK = "Hype analysis unavailable."
VERDICT_FALLBACK_REASONING = "Verdict unavailable."

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class NarrativeVerdict(BaseModel):
    verdict: Literal["CONFIRMED", "PARTIAL", "UNVERIFIED"] = "PARTIAL"
    reasoning: str = "Analysis completed"
    confidence: Literal["high", "medium", "low"] = "medium"
    red_flags: list[str] = Field(default_factory=list)

    @classmethod
    def fallback(cls) -> "NarrativeVerdict":
        return cls(verdict="PARTIAL", reasoning=VERDICT_FALLBACK_REASONING, confidence="low")


def parse_verdict(text: str) -> NarrativeVerdict:
    """Pull the JSON object out of a completion (code fences tolerated)."""
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        raise ValueError("No JSON object in verdict response")
    return NarrativeVerdict.model_validate_json(match.group(0))


class Narrator:
    def __init__(self, text_service: TextService) -> None:
        self.text_service = text_service

    async def _generate(self, label: str, prompt: str, max_tokens: int, fallback: str) -> str:
        try:
            text = await self.text_service.complete(prompt, max_tokens)
        except Exception as exc:
            logger.warning("%s generation failed: %s", label, exc)
            return fallback
        return text.strip() or fallback

    async def extract_narrative(self, evidence: EvidenceRecord) -> str:
        return await self._generate(
            "Narrative", prompts.narrative_prompt(evidence), 80, NARRATIVE_FALLBACK
        )

    async def generate_fundamentals(self, evidence: EvidenceRecord) -> str:
        return await self._generate(
            "Fundamentals", prompts.fundamentals_prompt(evidence), 100, FUNDAMENTALS_FALLBACK
        )

    async def generate_summary(self, evidence: EvidenceRecord, narrative: str) -> str:
        return await self._generate(
            "Summary", prompts.summary_prompt(evidence, narrative), 150, SUMMARY_FALLBACK
        )

    async def generate_hype(self, evidence: EvidenceRecord, narrative: str) -> str:
        return await self._generate(
            "Hype", prompts.hype_prompt(evidence, narrative), 120, HYPE_FALLBACK
        )

    async def classify_narrative(self, evidence: EvidenceRecord, narrative: str) -> NarrativeVerdict:
        """Provisional CONFIRMED / PARTIAL / UNVERIFIED call on the narrative claim."""
        try:
            text = await self.text_service.complete(prompts.verdict_prompt(evidence, narrative), 800)
            verdict = parse_verdict(text)
        except (ValidationError, ValueError) as exc:
            logger.warning("Verdict response unparseable: %s", exc)
            return NarrativeVerdict.fallback()
        except Exception as exc:
            logger.warning("Verdict generation failed: %s", exc)
            return NarrativeVerdict.fallback()

        logger.info("Verdict for %s: %s (%s)", evidence.symbol, verdict.verdict, verdict.confidence)
        return verdict
