"""Assessment constants shared across the engine, importer and UI layers."""

DEFAULT_SECONDS_PER_QUESTION: int = 60
CHOICES_PER_QUESTION: int = 3
NO_ANSWER: int = -1

CLASSIFICATION_DURATION_S: int = 600
CLASSIFICATION_FEEDBACK_S: int = 3

ACCESS_CODE_LENGTH: int = 8
ACCESS_CODE_ALPHABET: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CANDIDATE_LEVELS: tuple[str, ...] = ("C1", "C2", "C3")

IMPORT_MAX_QUESTIONS: int = 100
IMPORT_MAX_BYTES: int = 5 * 1024 * 1024

# Store layout
QUIZZES_KEY: str = "quizzes"
QUESTIONS_KEY: str = "questions"
CANDIDATES_KEY: str = "candidates"
SESSIONS_KEY: str = "testSessions"
CURRENT_SESSION_KEY: str = "currentSession"
