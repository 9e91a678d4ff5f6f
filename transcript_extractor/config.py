"""
Heuristic tuning for the transcript extractor

The thresholds and selectors below were tuned against one chat site's markup.
They are data, not logic: retune them per site without touching the
algorithms. Every numeric threshold can be overridden through the environment:
  - TRANSCRIPT_MIN_TURN_LENGTH: shortest primary content kept as a turn (default: 10)
  - TRANSCRIPT_HUMAN_SHORT_TEXT: text shorter than this counts towards human (default: 600)
  - TRANSCRIPT_AGENT_LONG_TEXT: text longer than this counts towards agent (default: 900)
  - TRANSCRIPT_TIE_BREAK_LENGTH: tied scores go human below this length (default: 800)
  - TRANSCRIPT_SHAPE_MIN_TEXT: content-shape candidates need this much text (default: 30)
  - TRANSCRIPT_SHAPE_MIN_WIDTH / TRANSCRIPT_SHAPE_MIN_HEIGHT: declared size floor (default: 200 / 20)
"""

import os
from dataclasses import dataclass
from typing import Tuple

TURN_SELECTORS = (
    ".ds-message",
    ".d29f3d7d.ds-message",
    'div[class*="fbb737a4"]',
    '[class*="message"]',
    '[role="article"]',
    "[data-message-id]",
    ".message",
    ".chat-message",
    ".conversation-message",
)

REASONING_SELECTORS = (
    ".ds-think-content",
    '[class*="think-content"]',
    '[data-testid="think-content"]',
    ".thinking-content",
    '[class*="thinking"]',
    ".thought-process",
)

REASONING_HEADER_SELECTORS = (
    "span._5255ff8",
    '[class*="think-title"]',
    '[class*="thought-title"]',
    ".thinking-header",
    '[class*="thinking-header"]',
)

REASONING_KEYWORDS = ("thinking", "thought", "reasoning", "analyzing")

TIMESTAMP_SELECTORS = (
    "time",
    '[class*="timestamp"]',
    '[class*="time"]',
    "[datetime]",
)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class HeuristicSettings:
    """Thresholds and selectors used by segmentation, classification and extraction"""
    min_turn_length: int = 10
    human_short_text: int = 600
    agent_long_text: int = 900
    tie_break_length: int = 800
    shape_min_text: int = 30
    shape_min_width: int = 200
    shape_min_height: int = 20
    default_reasoning_header: str = "Thinking Process"
    turn_selectors: Tuple[str, ...] = TURN_SELECTORS
    reasoning_selectors: Tuple[str, ...] = REASONING_SELECTORS
    reasoning_header_selectors: Tuple[str, ...] = REASONING_HEADER_SELECTORS
    reasoning_keywords: Tuple[str, ...] = REASONING_KEYWORDS
    timestamp_selectors: Tuple[str, ...] = TIMESTAMP_SELECTORS

    @classmethod
    def from_env(cls) -> "HeuristicSettings":
        """Defaults overridden by the TRANSCRIPT_* environment variables"""
        defaults = cls()
        return cls(
            min_turn_length=_env_int("TRANSCRIPT_MIN_TURN_LENGTH", defaults.min_turn_length),
            human_short_text=_env_int("TRANSCRIPT_HUMAN_SHORT_TEXT", defaults.human_short_text),
            agent_long_text=_env_int("TRANSCRIPT_AGENT_LONG_TEXT", defaults.agent_long_text),
            tie_break_length=_env_int("TRANSCRIPT_TIE_BREAK_LENGTH", defaults.tie_break_length),
            shape_min_text=_env_int("TRANSCRIPT_SHAPE_MIN_TEXT", defaults.shape_min_text),
            shape_min_width=_env_int("TRANSCRIPT_SHAPE_MIN_WIDTH", defaults.shape_min_width),
            shape_min_height=_env_int("TRANSCRIPT_SHAPE_MIN_HEIGHT", defaults.shape_min_height),
        )


DEFAULT_SETTINGS = HeuristicSettings()
