import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..config import OPENAI_API_KEY, SUMMARY_MODEL, SUGGESTION_MODEL, CHAT_MODEL
from ..errors import CapabilityUnavailableError, UpstreamFormatError

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


SUMMARY_PROMPT = """You are a helpful assistant that summarizes therapist treatment plans for parents.
Extract and organize the information into:
1. A clear summary of the treatment plan
2. Weekly goals with therapy type categories
3. Daily tasks with descriptions and "why it matters" explanations
4. Overall primary therapy type classification

Therapy type categories:
- "speech": Speech therapy, language development, communication skills, articulation
- "behavior": Applied Behavior Analysis (ABA), behavior modification, social skills
- "emotional": Social-emotional skills, emotional regulation, feelings management
- "motor": Physical therapy, occupational therapy, fine/gross motor skills, coordination

For each goal, determine which therapy type category it addresses.
The overall therapyType should be the most prominent category in the session.
Every daily task must reference one weekly goal by its 0-based weeklyGoalIndex.

IMPORTANT: You must respond with ONLY a valid JSON object, no other text.

Return the response as a JSON object with this structure:
{
  "summary": "Brief summary of the treatment plan",
  "therapyType": "speech" | "behavior" | "emotional" | "motor",
  "weeklyGoals": [{"goal": "Goal text", "category": "speech" | "behavior" | "emotional" | "motor"}],
  "dailyTasks": [
    {"title": "Task title", "description": "How to do the task",
     "whyItMatters": "Why this task is important", "weeklyGoalIndex": 0}
  ]
}"""

SUGGESTION_PROMPT = (
    "You are a helpful assistant that suggests what should be in a demonstration video "
    "for therapy tasks. Be specific and concise (2-3 sentences)."
)

INSIGHTS_PROMPT = (
    "You are a helpful assistant that provides insights on therapy progress. "
    "Be encouraging and specific."
)

CHAT_PROMPT = """You are a helpful therapy assistant chatbot. You help parents understand their child's therapy tasks, provide encouragement, and facilitate communication with therapists.

User context: {context}

You can:
- Answer questions about today's tasks
- Provide guidance on exercises
- Help parents log feedback
- Encourage and motivate families
- Bridge communication between parent and therapist"""

LANGUAGE_NAMES = {"ar": "Arabic", "en": "English"}


def localize(prompt: str, locale: str) -> str:
    """Ask for answers in the requested language; JSON keys and enum values stay in English"""
    language = LANGUAGE_NAMES.get((locale or "en").split("-")[0].lower())
    if language is None or language == "English":
        return prompt
    return (
        f"{prompt}\n\nWrite all free-text values in {language}. "
        f"Keep JSON keys and category values exactly as specified, in English."
    )


async def _complete(model: str, messages: List[Dict[str, str]], **kwargs) -> str:
    try:
        response = await get_client().chat.completions.create(
            model=model,
            messages=messages,
            **kwargs
        )
    except OpenAIError as e:
        logger.error("OpenAI call failed (model=%s): %s", model, e)
        raise CapabilityUnavailableError(f"Language model unavailable: {e}") from e
    return response.choices[0].message.content or ""


async def summarize_treatment_plan(transcript: str, locale: str = "en") -> str:
    """Raw JSON text of the structured plan; validation happens in the summarization stage"""
    content = await _complete(
        SUMMARY_MODEL,
        [
            {"role": "system", "content": localize(SUMMARY_PROMPT, locale)},
            {"role": "user", "content": transcript}
        ],
        response_format={"type": "json_object"}
    )
    if not content.strip():
        raise UpstreamFormatError("Summarization returned an empty response")
    return content


async def generate_demo_video_suggestion(task_description: str, locale: str = "en") -> str:
    return await _complete(
        SUGGESTION_MODEL,
        [
            {"role": "system", "content": localize(SUGGESTION_PROMPT, locale)},
            {"role": "user", "content": (
                "Suggest what should be shown in a 10-20 second demonstration video "
                f"for this therapy task: {task_description}"
            )}
        ]
    )


async def generate_progress_insights(progress_data: Dict[str, Any], locale: str = "en") -> str:
    return await _complete(
        CHAT_MODEL,
        [
            {"role": "system", "content": localize(INSIGHTS_PROMPT, locale)},
            {"role": "user", "content": (
                "Analyze this progress data and provide helpful insights: "
                f"{json.dumps(progress_data, default=str)}"
            )}
        ]
    )


async def chat_with_assistant(
        messages: List[Dict[str, str]],
        user_context: Dict[str, Any],
        locale: str = "en"
) -> str:
    system_prompt = CHAT_PROMPT.format(context=json.dumps(user_context, default=str))
    return await _complete(
        CHAT_MODEL,
        [{"role": "system", "content": localize(system_prompt, locale)}, *messages]
    )
