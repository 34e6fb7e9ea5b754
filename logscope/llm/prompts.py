"""
Prompt templates for LLM log entry analysis.
"""

from typing import Sequence

from logscope.models.log_entry import ParsedLogEntry


SYSTEM_PROMPT = """You are a cybersecurity expert analyzing log entries for potential threats and anomalies.

Respond ONLY with valid JSON in this exact format (no markdown, no extra text):
{
  "status": "normal|anomaly|suspicious",
  "confidence_score": 0.0-1.0,
  "explanation": "Brief explanation of the analysis",
  "threat_level": "low|medium|high|critical",
  "recommended_action": "What action should be taken"
}"""


ENTRY_PROMPT_TEMPLATE = """Analyze this cybersecurity log entry for potential threats:

Current Entry:
- Timestamp: {timestamp}
- IP Address: {ip_address}
- Event: {event_description}
- Raw Log: {raw_log_line}

Recent Context (last {context_size} events):
{recent_events}

Consider:
1. Is this event normal or suspicious?
2. Does it indicate a security threat?
3. What's the confidence level?
4. What action should be taken?

Provide analysis in JSON format."""


NO_CONTEXT = "(no earlier events in this batch)"


class PromptTemplates:
    """Container for prompt templates with helper methods."""

    SYSTEM = SYSTEM_PROMPT
    ENTRY = ENTRY_PROMPT_TEMPLATE

    @staticmethod
    def format_context(context: Sequence[ParsedLogEntry], window: int = 5) -> str:
        """One line per recent entry: '<timestamp>: <ip> - <description>'."""
        recent = list(context)[-window:] if window > 0 else []
        if not recent:
            return NO_CONTEXT
        return "\n".join(
            f"{e.timestamp}: {e.ip_address} - {e.event_description}" for e in recent
        )

    @staticmethod
    def format_entry_prompt(
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
        window: int = 5,
    ) -> str:
        """Format the analysis prompt for one entry."""
        return ENTRY_PROMPT_TEMPLATE.format(
            timestamp=entry.timestamp,
            ip_address=entry.ip_address,
            event_description=entry.event_description,
            raw_log_line=entry.raw_log_line,
            context_size=window,
            recent_events=PromptTemplates.format_context(context, window),
        )
