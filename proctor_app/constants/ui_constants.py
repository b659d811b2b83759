"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "ProctorQt Console"
CANDIDATE_URL_PLACEHOLDER: str = "http://<proctor-ip>:8000/"
REFRESH_INTERVAL_MS: int = 1000

BUTTON_IMPORT_QUESTIONS: str = "Import Questions"
BUTTON_ADD_CANDIDATE: str = "Add Candidate"
BUTTON_TOGGLE_QUIZ: str = "Activate / Deactivate Quiz"
BUTTON_EXPORT_RESULTS: str = "Export Results"

IMPORT_DIALOG_TITLE: str = "Select question file"
IMPORT_FILE_FILTER: str = "CSV files (*.csv);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save results to file"
EXPORT_FILE_FILTER: str = "CSV files (*.csv);;All files (*.*)"

TAB_SESSIONS: str = "Sessions"
TAB_INCIDENTS: str = "Incident Log"
TAB_CLASSIFICATION: str = "Classification Results"
TAB_SETUP: str = "Quizzes & Candidates"

SESSION_COLUMNS: tuple[str, ...] = (
    "Candidate",
    "Email",
    "Quiz",
    "Status",
    "Score",
    "Classification",
    "Duration",
    "Incidents",
)
INCIDENT_COLUMNS: tuple[str, ...] = ("Time", "Candidate", "Activity", "Severity")
CLASSIFICATION_COLUMNS: tuple[str, ...] = (
    "Candidate",
    "Quiz",
    "Quiz score",
    "Classification score",
    "Performance",
)

NO_QUIZ_SELECTED_MESSAGE: str = "Please select a quiz first."
STATS_TEMPLATE: str = (
    "{total} session(s) | {completed} completed | {in_progress} in progress | "
    "{cancelled} cancelled | average score {average:.0f}%"
)

BUTTON_ROTATE_CODE: str = "New Access Code"
BUTTON_DELETE_QUIZ: str = "Delete Quiz"
BUTTON_REMOVE_CANDIDATE: str = "Remove Candidate"
BUTTON_ABOUT: str = "About"
BUTTON_HELP: str = "Help"

QUIZ_COLUMNS: tuple[str, ...] = (
    "Name",
    "Access code",
    "Status",
    "Questions",
    "Time / question",
    "Classification",
)
CANDIDATE_COLUMNS: tuple[str, ...] = ("Candidate", "Email", "Department", "Level", "Access code")

NO_CANDIDATE_SELECTED_MESSAGE: str = "Please select a candidate first."
FILTER_MANAGER_PLACEHOLDER: str = "Filter by manager"
FILTER_DEPARTMENT_PLACEHOLDER: str = "Filter by department"
FILTER_NAME_PLACEHOLDER: str = "Filter by candidate name"
AUTOSAVE_INTERVAL_MS: int = 10_000
