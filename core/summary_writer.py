"""
summary_writer.py — Short written assessment of a profile using OpenAI.

Input:  report dict from report.py
Output: summary dict { headline, summary, strengths, growth_areas }

Strategy:
  - Single API call with structured JSON prompt
  - Request response_format=json_object for reliable parsing
  - Retry once on JSON parse failure
  - Fall back to a deterministic summary built from the report itself
"""

import hashlib
import json
import logging

from openai import OpenAI, APIError, APITimeoutError, RateLimitError

from config import (
    OPENAI_MODEL,
    OPENAI_MAX_TOKENS,
    OPENAI_TEMPERATURE,
    SUMMARY_PROMPT_TEMPLATE,
)
from core.aggregator import POSITIVE_ACKNOWLEDGMENT

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("headline", "summary", "strengths", "growth_areas")


def fallback_summary(report: dict) -> dict:
    """Template summary used when OpenAI is not configured or fails."""
    insight = report.get("insights", {})
    metrics = report.get("metrics", {})
    recs = [
        r["title"] for r in report.get("recommendations", [])
        if r["title"] != POSITIVE_ACKNOWLEDGMENT["title"]
    ]

    strengths = [a["title"] for a in report.get("achievements", [])]
    if insight.get("collaboration_level") in ("High", "Medium"):
        strengths.append(f"{insight['collaboration_level']} collaboration level")
    if insight.get("primary_language", "Various") != "Various":
        strengths.append(f"Focus on {insight['primary_language']}")

    return {
        "headline": f"{report.get('tier', 'Emerging')} developer with a score of {report.get('score', 0)}/100",
        "summary": (
            f"{report.get('username', 'This developer')} has {metrics.get('public_repos', 0)} public "
            f"repositories and {metrics.get('total_stars', 0)} stars in total. Coding frequency is "
            f"{insight.get('coding_frequency', 'Low').lower()} and project diversity is "
            f"{insight.get('project_diversity', 'Low').lower()}."
        ),
        "strengths": strengths or ["Getting started"],
        "growth_areas": recs or ["Keep up the great work"],
    }


class SummaryWriter:
    """Writes a profile assessment with OpenAI GPT."""

    def __init__(self, api_key: str):
        self.client = OpenAI(api_key=api_key)
        self._cache: dict[str, dict] = {}  # in-process cache keyed by report hash

    def _cache_key(self, report: dict) -> str:
        payload = json.dumps(report, sort_keys=True, default=str)
        return hashlib.md5(payload.encode()).hexdigest()

    def _build_prompt(self, report: dict) -> str:
        """Fill the prompt template with report values."""
        insight = report.get("insights", {})
        metrics = report.get("metrics", {})
        return SUMMARY_PROMPT_TEMPLATE.format(
            username=report.get("username", "unknown"),
            score=report.get("score", 0),
            tier=report.get("tier", "Emerging"),
            followers=metrics.get("followers", 0),
            repo_count=metrics.get("public_repos", 0),
            total_stars=metrics.get("total_stars", 0),
            primary_language=insight.get("primary_language", "Various"),
            coding_frequency=insight.get("coding_frequency", "Low"),
            collaboration_level=insight.get("collaboration_level", "Low"),
            project_diversity=insight.get("project_diversity", "Low"),
            achievements=", ".join(a["title"] for a in report.get("achievements", [])) or "none",
            recommendations=", ".join(r["title"] for r in report.get("recommendations", [])) or "none",
        )

    def _call_openai(self, prompt: str) -> dict:
        """Make the OpenAI API call and parse JSON response."""
        response = self.client.chat.completions.create(
            model=OPENAI_MODEL,
            max_tokens=OPENAI_MAX_TOKENS,
            temperature=OPENAI_TEMPERATURE,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "system",
                    "content": (
                        "You are an engineering mentor. "
                        "Always respond with valid JSON only."
                    ),
                },
                {"role": "user", "content": prompt},
            ],
        )
        return json.loads(response.choices[0].message.content)

    def generate(self, report: dict) -> tuple[dict, bool]:
        """
        Write the assessment.

        Returns:
            (summary_dict, is_fallback)
        """
        cache_key = self._cache_key(report)
        if cache_key in self._cache:
            logger.info("Summary cache hit.")
            return self._cache[cache_key], False

        prompt = self._build_prompt(report)

        for attempt in (1, 2):
            try:
                summary = self._call_openai(prompt)
                self._validate(summary)
            except (json.JSONDecodeError, KeyError, ValueError) as exc:
                logger.warning(f"OpenAI response parse error (attempt {attempt}): {exc}")
                continue
            except (APIError, APITimeoutError, RateLimitError) as exc:
                logger.error(f"OpenAI API error: {exc}. Using fallback.")
                break
            self._cache[cache_key] = summary
            logger.info(f"Summary generated on attempt {attempt}.")
            return summary, False

        return fallback_summary(report), True

    @staticmethod
    def _validate(summary: dict) -> None:
        """Raise ValueError if the response structure is invalid."""
        missing = [k for k in _REQUIRED_KEYS if k not in summary]
        if missing:
            raise ValueError(f"Summary missing keys: {missing}")
        for key in ("strengths", "growth_areas"):
            if not isinstance(summary[key], list):
                raise ValueError(f"Summary field '{key}' must be a list.")
