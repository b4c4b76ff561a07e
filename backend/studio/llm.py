"""
LLM module for handling AI model interactions
"""

from typing import Iterator, List, Optional

import openai
import requests

import config
from studio.errors import SystemBusyError
from studio.logger import get_logger
from studio.models import Bot, ChatMessage
from studio.prompt import build_system_instruction

logger = get_logger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# Initialize OpenRouter client
openrouter_client = (
    openai.OpenAI(
        base_url="https://openrouter.ai/api/v1",
        api_key=config.OPENROUTER_API_KEY,
    )
    if config.OPENROUTER_API_KEY
    else None
)


def build_messages(bot: Bot, history: List[ChatMessage], message: str) -> List[dict]:
    """Convert stored chat history to OpenAI-style messages"""
    messages = [{"role": "system", "content": build_system_instruction(bot)}]
    for item in history:
        if not item.text:
            continue
        role = "assistant" if item.role == "model" else "user"
        messages.append({"role": role, "content": item.text})
    messages.append({"role": "user", "content": message})
    return messages


def stream_chat(
    bot: Bot, history: List[ChatMessage], message: str, client=None
) -> Iterator[str]:
    """Yield text chunks of the bot's reply as they arrive"""
    client = client or openrouter_client
    if client is None:
        raise RuntimeError("OpenRouter client not initialized. Check OPENROUTER_API_KEY.")

    logger.info(f"Streaming chat for bot {bot.id} with model: {config.OPENROUTER_MODEL}")
    try:
        stream = client.chat.completions.create(
            model=config.OPENROUTER_MODEL,
            messages=build_messages(bot, history, message),
            temperature=bot.temperature,
            top_p=bot.top_p,
            extra_body={"top_k": bot.top_k},
            stream=True,
        )
        for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                yield text
    except openai.RateLimitError as e:
        logger.error(f"Chat backend rate limited bot {bot.id}: {e}")
        raise SystemBusyError("SYSTEM_BUSY") from e


def generate_image(prompt: str, timeout: int = 60) -> str:
    """Generate an image with Gemini and return it as a data URL"""
    if not config.GEMINI_API_KEY:
        raise RuntimeError("GEMINI_API_KEY is not set")

    url = GEMINI_URL.format(model=config.GEMINI_IMAGE_MODEL)
    headers = {"Content-Type": "application/json", "X-goog-api-key": config.GEMINI_API_KEY}
    data = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"imageConfig": {"aspectRatio": "1:1"}},
    }

    logger.info(f"Image request to {config.GEMINI_IMAGE_MODEL}, prompt length: {len(prompt)}")
    response = requests.post(url, headers=headers, json=data, timeout=timeout)
    if response.status_code != 200:
        logger.error(f"Image generation error: HTTP {response.status_code}: {response.text}")
        raise Exception(
            f"Image API returned status {response.status_code}: {response.text}"
        )

    inline = _find_inline_data(response.json())
    if inline is None:
        raise Exception("Image could not be generated")
    return f"data:{inline['mimeType']};base64,{inline['data']}"


def _find_inline_data(response_json: dict) -> Optional[dict]:
    candidates = response_json.get("candidates") or []
    if not candidates:
        return None
    for part in candidates[0].get("content", {}).get("parts", []):
        if part.get("inlineData"):
            return part["inlineData"]
    return None
