"""Static metadata describing ProctorQt."""

APP_NAME = "ProctorQt"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ProctorQt runs timed multiple-choice assessments for remote candidates. "
    "Candidates take the test in their browser; this console shows live sessions, "
    "integrity incidents and results."
)

HELP_TEXT = (
    "Import questions from a CSV file with the columns:\n\n"
    "question,choix1,choix2,choix3,bonne_reponse,catégorie,temps\n\n"
    "bonne_reponse must be exactly choix1, choix2 or choix3. "
    "catégorie and temps (seconds) are optional.\n\n"
    "Each import creates a quiz with its own access code. Register candidates to "
    "give them a personal code, then share both codes and the candidate URL."
)
