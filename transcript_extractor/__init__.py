"""
Extract structured conversation transcripts from saved chat pages
"""

from .config import DEFAULT_SETTINGS, HeuristicSettings
from .markdown import html_to_markdown, render
from .models import Role, RoleFilter, TranscriptMetadata, TranscriptRecord, TurnRecord
from .pipeline import extract_transcript, extract_transcript_from_html, filter_transcript
from .reasoning import ReasoningBlock, extract_reasoning
from .roles import classify_role
from .segmentation import segment

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SETTINGS",
    "HeuristicSettings",
    "ReasoningBlock",
    "Role",
    "RoleFilter",
    "TranscriptMetadata",
    "TranscriptRecord",
    "TurnRecord",
    "classify_role",
    "extract_reasoning",
    "extract_transcript",
    "extract_transcript_from_html",
    "filter_transcript",
    "html_to_markdown",
    "render",
    "segment",
]
