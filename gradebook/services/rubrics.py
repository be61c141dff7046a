import json
import logging
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from gradebook.core.config.settings import get_settings
from gradebook.core.exceptions import ValidationFailed
from gradebook.models.user import User
from gradebook.services.credits import check_and_reset_credits, deduct_credits
from gradebook.services.gemini_client import GeminiClient, GeminiError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are an expert instructional designer.
Create a STANDARD, PROFESSIONAL grading rubric for the following assignment.

Assignment: {title}
Context: {description}
Maximum total points: {max_points}

Generate EXACTLY 4 standardized evaluation criteria whose points add up to {max_points}.
Use formal criteria names such as "Depth of Analysis", "Technical Quality",
"Structure and Organization", "Originality".

IMPORTANT: Reply ONLY with a valid JSON array. No markdown, no explanations.
Format:
[
  {{ "criteria": "Criterion name", "description": "What is evaluated in this context", "points": 25 }}
]
"""


class RubricItem(BaseModel):
    criteria: str
    description: str
    points: int


def fallback_rubric(max_points: int) -> List[Dict[str, Any]]:
    return [{
        "criteria": "General Evaluation",
        "description": "Overall quality of the submitted work.",
        "points": max_points,
    }]

def parse_rubric(text: str) -> List[Dict[str, Any]]:
    cleaned = text.replace("```json", "").replace("```", "").strip()
    items = json.loads(cleaned or "[]")
    if not isinstance(items, list) or not items:
        raise ValueError("Rubric must be a non-empty JSON array")
    return [RubricItem.model_validate(item).model_dump() for item in items]

def get_ai_client() -> GeminiClient:
    return GeminiClient()

async def generate_rubric(db: Session, user: User, title: str, description: Optional[str],
                          max_points: int = 100, client: Optional[GeminiClient] = None) -> Dict[str, Any]:
    """Ask Gemini for a rubric, spending the caller's AI credits.

    Never fails on AI problems: without credits, or when the call or the
    parsing fails, the static fallback rubric is returned and nothing is
    deducted.
    """
    if not title or not title.strip():
        raise ValidationFailed("Title is required")
    if max_points <= 0:
        raise ValidationFailed("Maximum points must be a positive integer")

    settings = get_settings()
    cost = settings.AI_RUBRIC_COST
    user = check_and_reset_credits(db, user)
    if (user.ai_credits or 0) < cost:
        logger.info(f"User {user.id} has {user.ai_credits} AI credits, rubric needs {cost}; using fallback")
        return {"source": "fallback", "rubric": fallback_rubric(max_points), "credits_remaining": user.ai_credits}

    prompt = PROMPT_TEMPLATE.format(
        title=title.strip(),
        description=description or "Standard course assignment.",
        max_points=max_points
    )
    owns_client = client is None
    try:
        if owns_client:
            client = get_ai_client()
        text = await client.generate(prompt)
        rubric = parse_rubric(text)
    except (GeminiError, ValueError, ValidationError) as e:
        logger.warning(f"Rubric generation failed for user {user.id}: {e}")
        return {"source": "fallback", "rubric": fallback_rubric(max_points), "credits_remaining": user.ai_credits}
    finally:
        if owns_client and client is not None:
            await client.aclose()

    charged = deduct_credits(db, user.id, cost)
    db.refresh(user)
    if not charged:
        logger.warning(f"User {user.id} ran out of AI credits while generating a rubric; using fallback")
        return {"source": "fallback", "rubric": fallback_rubric(max_points), "credits_remaining": user.ai_credits}
    return {"source": "ai", "rubric": rubric, "credits_remaining": user.ai_credits}
