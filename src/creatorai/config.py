import os
from dotenv import load_dotenv

load_dotenv()

# --- Models ---
# The same key is used for every call unless a request carries X-Gemini-Api-Key
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

API_MODELS = {
    # lesson plans, regeneration of lesson parts
    "generation": os.getenv("MODEL_GENERATION", "gemini-flash-latest"),
    # project specifications, file plans and file contents
    "project": os.getenv("MODEL_PROJECT", "gemini-flash-lite-latest"),
    # live prompt assistance, must stay cheap
    "suggestion": os.getenv("MODEL_SUGGESTION", "gemini-flash-lite-latest"),
}

LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))

# --- Storage / queue ---
APP_DATABASE_URL = os.getenv("APP_DATABASE_URL")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")

# --- Project file tree ---
# Root files that can be neither renamed nor deleted (compared lower-cased)
PROTECTED_ROOT_FILES = ("readme.md", "setup.md")

DEFAULT_NODE_NAMES = {
    "file": ("new-file", ".txt"),
    "folder": ("new-folder", ""),
}

# Files with these extensions are never sent to the model
BINARY_FILE_EXTENSIONS = (
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp",
    ".mp4", ".mov", ".woff", ".woff2", ".ttf", ".eot", ".otf",
)

# --- Prompt suggestions ---
SUGGESTION_DEBOUNCE_SECONDS = float(os.getenv("SUGGESTION_DEBOUNCE_SECONDS", "1.0"))
SUGGESTION_MIN_LENGTH = 10

# Mapping of session steps to the messages shown while they run
PROGRESS_MESSAGES = {
    "details_start": "Generating project specifications...",
    "lesson_start": "Generating lesson plan...",
    "planning": "Planning file structure...",
    "files": "Generating files...",
    "file_step": "Generating file {current} of {total}...",
    "binary_skip": "Skipping binary file: {path}",
    "lesson_step": "Generating lesson {current} of {total}...",
    "completed": "Done.",
    "discovery": "Generating curriculum outlines...",
    "vary_outline": "Re-planning the course...",
}

BINARY_PLACEHOLDER = "/* Binary file content for {path} is not generated. */"

# --- Discovery ---
# Curriculum filters a request may set, phrased for the model; "any" leaves a filter out
CURRICULUM_FILTERS = {
    "difficulty": 'All curriculums must be at the "{value}" difficulty level.',
    "numLessons": "Every curriculum must contain exactly {value} lessons.",
    "lessonDuration": "Each lesson should take about {value} minutes.",
    "audience": "The curriculums are aimed at {value}.",
}

DIFFICULTY_LEVELS = ("Beginner", "Intermediate", "Advanced")

# Longer content is cut before it is sent for andragogical analysis
ANALYSIS_MAX_CHARS = 20000
