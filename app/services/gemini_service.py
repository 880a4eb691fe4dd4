import os
from dotenv import load_dotenv
import google.generativeai as genai
from app.utils.config import config
from app.utils.logger import logger

# Load environment variables from .env
load_dotenv()

gemini_cfg = config.get("gemini", {})
GEMINI_MODEL = gemini_cfg.get("model", "gemini-1.5-pro")

# Short, fairly free-form answers: explanations are capped at ~120 words
GENERATION_CONFIG = {
    "temperature": gemini_cfg.get("temperature", 0.6),
    "max_output_tokens": gemini_cfg.get("max_output_tokens", 200),
    "top_p": gemini_cfg.get("top_p", 0.8),
    "top_k": gemini_cfg.get("top_k", 40),
}

_model = None


class TextGenerationError(Exception):
    """Raised when Gemini cannot produce usable text."""


def get_model():
    """
    Return the shared Gemini model, configuring the SDK on first use.
    A missing key is reported per call so callers can fall back instead of failing at import.
    """
    global _model
    if _model is None:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise TextGenerationError("GEMINI_API_KEY not set in environment")
        genai.configure(api_key=api_key)
        _model = genai.GenerativeModel(GEMINI_MODEL, generation_config=GENERATION_CONFIG)
        logger.info(f"✅ Gemini model '{GEMINI_MODEL}' initialized")
    return _model


async def generate(prompt: str) -> str:
    """
    Send a prompt to Gemini and return the generated text.
    Raises TextGenerationError (or the SDK's own error) when no text comes back.
    """
    model = get_model()
    response = await model.generate_content_async(prompt)
    result = response.text.strip() if hasattr(response, "text") and response.text else None
    if not result:
        raise TextGenerationError("Gemini returned empty response")
    return result
