"""
LLM-backed text service.

Two jobs, one prompt each:
1. understand_request - turn a free-text request into labelled lines
   (Activity / How often / How long / When / Deadline / Urgency)
2. explain_schedule - write a short, friendly explanation of the chosen slots

The provider (anthropic, openai, gemini, ollama) comes from settings.
"""

import logging
from datetime import datetime
from typing import Any

import anthropic
import ollama
from google import genai
from openai import OpenAI

from .config import settings
from .extraction import extract_activity_name, extract_deadline
from .formatting import format_times_for_explanation

logger = logging.getLogger(__name__)


# =============================================================================
# Prompts
# =============================================================================

UNDERSTAND_PROMPT = """Extract scheduling info from this request:
"{message}"

Return just these lines:
Activity: [what they want to do]
How often: [how many times per week, e.g. "3 times"]
How long: [duration in minutes - if not specified, suggest a typical duration for this activity]
When: [preferred time of day: morning, afternoon, evening or flexible]
Deadline: [any deadline mentioned, or "none"]
Urgency: [high/medium/low based on the deadline or urgency words]

Deadline phrases look like "by Friday", "before my exam next week",
"need to finish by...", "deadline is...", "due on...".

Urgency levels:
- High: deadline within 1 week, words like "urgent", "ASAP", "immediately"
- Medium: deadline within 2-4 weeks, words like "soon", "quickly"
- Low: no deadline or a distant one, words like "eventually", "when I can"

Typical durations when none is given:
- Musical instruments: 30-45 minutes
- Exercise/yoga: 45-60 minutes
- Reading: 30-45 minutes
- Cooking: 60-90 minutes
- Art/painting: 60-90 minutes
"""

EXPLAIN_PROMPT = """Write a friendly, encouraging explanation for this schedule.

Activity: {activity}
Scheduled times: {times}
Activity details: {details}
{urgency_context}

Keep it warm and conversational (2-3 sentences): say why these times work,
give one quick tip for sticking with it, and mention urgency if it is high.

Example tone: "Great! I've scheduled your guitar practice for Monday, Wednesday, and Friday at 7pm. These evening sessions give you time to unwind after work while building consistent practice habits. Pro tip: keep your guitar visible so you're more likely to stick with it!"
"""


def urgency_context(urgency: str, activity_info: str) -> str:
    """Extra guidance for the explanation prompt, by urgency level."""
    if urgency == "high":
        deadline = extract_deadline(activity_info)
        deadline_line = f"Deadline: {deadline}" if deadline else ""
        return (
            f"IMPORTANT: This is HIGH URGENCY. {deadline_line}\n"
            "Mention the urgency and encourage them to stick to this intensive schedule.\n"
            "Be supportive but emphasize the importance of following through."
        )
    if urgency == "medium":
        return "This has medium urgency - mention that consistency will be key to meeting their goal."
    return "This is a regular hobby/goal - focus on building sustainable habits."


def simple_explanation(times: list[datetime], activity_name: str, urgency: str) -> str:
    """Canned explanation used when the provider is unavailable."""
    times_text = format_times_for_explanation(times)
    if urgency == "high":
        return (
            f"⚡ Urgent schedule created! I've scheduled {activity_name} for {times_text}. "
            "This intensive schedule will help you meet your deadline - stick with it!"
        )
    return (
        f"Perfect! I've scheduled {activity_name} for {times_text}. "
        "These consistent sessions will help you build great habits. You've got this! 🎯"
    )


# =============================================================================
# Text service
# =============================================================================

class TextService:
    """Single-turn completions against the configured LLM provider."""

    def __init__(self, provider: str | None = None, model: str | None = None):
        self.provider = provider or settings.llm_provider
        self.model = model or settings.model_name

        if self.provider == "anthropic":
            self.client = anthropic.Anthropic(api_key=settings.get_api_key(self.provider))
        elif self.provider == "openai":
            self.client = OpenAI(api_key=settings.get_api_key(self.provider))
        elif self.provider == "gemini":
            self.client = genai.Client(api_key=settings.get_api_key(self.provider))
        elif self.provider == "ollama":
            self.client = ollama.Client(host=settings.ollama_base_url)
            self.model = model or settings.ollama_model
        else:
            raise ValueError(f"Unknown provider: {self.provider}")

    def complete(self, prompt: str) -> str:
        """Send one user prompt and return the text of the reply."""
        if self.provider == "anthropic":
            response = self.client.messages.create(
                model=self.model,
                max_tokens=settings.llm_max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            return "\n".join(block.text for block in response.content if block.type == "text")
        elif self.provider == "openai":
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=settings.llm_max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.choices[0].message.content or ""
        elif self.provider == "gemini":
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
            )
            return response.text or ""
        elif self.provider == "ollama":
            response: Any = self.client.chat(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                options={"num_predict": settings.llm_max_tokens},
            )
            return response.message.content or ""
        else:
            raise ValueError(f"Provider {self.provider} not supported")

    def understand_request(self, user_message: str) -> str | None:
        """Structured request lines, or None when the provider call fails."""
        logger.info("Processing request: %s", user_message)
        try:
            result = self.complete(UNDERSTAND_PROMPT.format(message=user_message))
        except Exception as e:
            logger.error("Could not understand request: %s", e)
            return None

        logger.debug("Understood request as:\n%s", result)
        return result or None

    def explain_schedule(self, times: list[datetime], activity_info: str, urgency: str = "low") -> str:
        """Friendly explanation of the schedule; never raises."""
        logger.info("Explaining schedule for %d sessions", len(times))
        activity_name = extract_activity_name(activity_info)

        prompt = EXPLAIN_PROMPT.format(
            activity=activity_name,
            times=format_times_for_explanation(times),
            details=activity_info,
            urgency_context=urgency_context(urgency, activity_info),
        )
        try:
            explanation = self.complete(prompt)
        except Exception as e:
            logger.error("Error generating explanation: %s", e)
            explanation = ""

        return explanation or simple_explanation(times, activity_name, urgency)
