import dotenv
import os

dotenv.load_dotenv()

PORT = int(os.getenv("PORT", "8000"))
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() in ("1", "true", "yes")


if not PORT:
    raise ValueError("PORT is not set")

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "google/gemini-2.5-flash")

if not OPENROUTER_API_KEY:
    print("Warning: OPENROUTER_API_KEY is not set. Chat will not be available.")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")

# Undo/redo tuning for the document store
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))
CHECKPOINT_DELAY_SECONDS = float(os.getenv("CHECKPOINT_DELAY_SECONDS", "0.4"))

CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]
