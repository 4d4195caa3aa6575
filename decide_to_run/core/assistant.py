"""
Decide to Run — Campaign Q&A Assistant.

Keyword-routed canned answers about campaign costs and fundraising. Each
reply carries a confidence tag and a couple of follow-up questions to offer
the user.
"""

from __future__ import annotations

import logging

from decide_to_run.data.models import AssistantReply

logger = logging.getLogger(__name__)

CONFIDENCE_LABELS = {
    "verified": "Verified",
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}

SUGGESTED_TOPICS = [
    "Campaign costs",
    "Fundraising strategies",
    "Filing requirements",
    "Hiring staff",
]

_COST_REPLY = AssistantReply(
    message=(
        "Campaign costs vary widely by office level. Federal House races: "
        "$800,000-$2,500,000. State legislative: $25,000-$400,000. Local races: "
        "$15,000-$50,000. Budget breakdown: 35-45% media, 25-30% staff, "
        "15-20% field operations."
    ),
    confidence="high",
    related_questions=[
        "How should I start fundraising?",
        "What are FEC contribution limits?",
    ],
)

_FUNDRAISING_REPLY = AssistantReply(
    message=(
        "Start fundraising 12-18 months before election for federal races. "
        "Individual contribution limits are $3,300 per election. Most campaigns "
        "spend 3-5 hours daily on call time. Set up ActBlue (Democrats) or "
        "WinRed (Republicans) immediately."
    ),
    confidence="verified",
    related_questions=[
        "When should I hire a finance director?",
        "What are reporting requirements?",
    ],
)

_DEFAULT_REPLY = AssistantReply(
    message=(
        "I can help with questions about campaign costs, fundraising, filing "
        "requirements, hiring staff, and strategy. What would you like to know?"
    ),
    confidence="medium",
    related_questions=[
        "How much will my campaign cost?",
        "When should I start fundraising?",
    ],
)


def confidence_label(level: str | None) -> str:
    """Display label for a confidence tag; unknown tags read as medium."""
    return CONFIDENCE_LABELS.get(level or "", CONFIDENCE_LABELS["medium"])


def topic_prompt(topic: str) -> str:
    """Turn a suggested topic button into a question."""
    return f"Tell me about {topic.lower()}"


def answer(message: str) -> AssistantReply:
    """Pick the canned reply for a question. Cost questions win over fundraising."""
    lower = message.lower()

    if "cost" in lower or "money" in lower:
        reply = _COST_REPLY
    elif "fundrais" in lower:
        reply = _FUNDRAISING_REPLY
    else:
        reply = _DEFAULT_REPLY

    logger.debug("Assistant routed %r to %s reply", message[:60], reply.confidence)
    # Fresh copy so callers can't mutate the canned tables
    return AssistantReply(
        message=reply.message,
        confidence=reply.confidence,
        related_questions=list(reply.related_questions),
    )
