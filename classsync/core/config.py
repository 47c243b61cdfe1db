import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Override with e.g. CLASSSYNC_DATABASE_URL=sqlite:///./other.db
DATABASE_URL = os.getenv("CLASSSYNC_DATABASE_URL", f"sqlite:///{BASE_DIR}/classsync.db")

# Letter grade breakpoints (minimum rounded percentage, letter), highest first
LETTER_GRADE_BREAKPOINTS = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)
FAILING_LETTER = "F"
LETTERS = ("A", "B", "C", "D", "F")

# Grade cell bands (percent of max points)
HIGH_BAND_MIN = 90
MID_BAND_MIN = 70

# 4.0 scale used for the student GPA
GPA_POINTS = {"A": 4.0, "B": 3.0, "C": 2.0, "D": 1.0, "F": 0.0}
