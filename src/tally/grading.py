"""
Student grading domain model.

Reads `id,full name,score` lines into Student records, grades them and writes
the text report. Problems in the input are collected in a stairval Notepad so
one malformed line does not stop the report.
"""

import logging
import pathlib
import typing

from dataclasses import dataclass

import pandas as pd
from stairval.notepad import Notepad

from .registry import DuplicateKeyError, InvalidValueError, TypedRegistry

# (lower bound, grade), checked top-down
GRADE_BOUNDARIES = [(80, "A"), (70, "B"), (60, "C"), (50, "D"), (0, "F")]
MIN_SCORE = 0
MAX_SCORE = 100
EXPECTED_FIELDS = 3


class MissingFieldError(InvalidValueError):
    """An input line lacks a field or has an empty one."""


class InvalidScoreFormatError(InvalidValueError):
    """An id or score field is not an integer, or the score is out of range."""


def grade_for(score: int) -> str:
    """
    Letter grade for a 0-100 score. Scores outside that range are rejected,
    never clamped.
    """
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidValueError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")
    for lower, grade in GRADE_BOUNDARIES:
        if score >= lower:
            return grade
    raise AssertionError("unreachable")


@dataclass(frozen=True)
class Student:
    """
    Attributes:
        id: Student number.
        full_name: Non-empty name as it appears on the report.
        score: Integer score 0-100.
    """

    id: int
    full_name: str
    score: int

    def __post_init__(self):
        if not self.full_name or not self.full_name.strip():
            raise MissingFieldError("Full name field is missing or empty.")
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise InvalidScoreFormatError(
                f"Score {self.score} is outside the valid range {MIN_SCORE}-{MAX_SCORE}."
            )

    @property
    def grade(self) -> str:
        return grade_for(self.score)

    def report_line(self) -> str:
        return f"{self.full_name} (ID: {self.id}): Score = {self.score}, Grade = {self.grade}"


def _parse_int(value: str) -> typing.Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def parse_student_line(line: str, line_number: int) -> Student:
    """Parse one `id,full name,score` line; raises a MissingFieldError or InvalidScoreFormatError."""
    parts = [part.strip() for part in line.split(",")]
    if len(parts) != EXPECTED_FIELDS:
        raise MissingFieldError(
            f"Line {line_number}: Expected {EXPECTED_FIELDS} fields but found {len(parts)}."
        )
    raw_id, full_name, raw_score = parts

    student_id = _parse_int(raw_id)
    if student_id is None:
        raise InvalidScoreFormatError(f"Line {line_number}: Invalid student ID format {raw_id!r}.")
    if not full_name:
        raise MissingFieldError(f"Line {line_number}: Full name field is missing or empty.")
    score = _parse_int(raw_score)
    if score is None:
        raise InvalidScoreFormatError(
            f"Line {line_number}: Unable to convert score {raw_score!r} to an integer."
        )
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidScoreFormatError(
            f"Line {line_number}: Score {score} is outside the valid range {MIN_SCORE}-{MAX_SCORE}."
        )
    return Student(student_id, full_name, score)


def read_students(
    input_path: typing.Union[str, pathlib.Path],
    notepad: typing.Optional[Notepad] = None,
    strict: bool = False,
) -> TypedRegistry[int, Student]:
    """
    Read a student file into a registry keyed by student id.

    - blank lines are skipped
    - strict=True raises the first problem found
    - otherwise problems go to `notepad` as errors and the line is skipped
    - a repeated student id is an error; the first occurrence wins
    - a file that is not UTF-8 raises InvalidValueError in either mode
    """
    if not strict and notepad is None:
        raise ValueError("A notepad is required unless strict=True")

    students: TypedRegistry[int, Student] = TypedRegistry(name="students")
    try:
        text = pathlib.Path(input_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidValueError(f"{input_path} is not valid UTF-8 text: {e}") from e
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            student = parse_student_line(line, line_number)
            students.add(student)
        except InvalidValueError as e:
            if strict:
                raise
            notepad.add_error(str(e))
        except DuplicateKeyError as e:
            # no line number in the message
            if strict:
                raise
            notepad.add_error(f"Line {line_number}: {e}")
    logging.info(f"Read {len(students)} students from {input_path}")
    return students


def write_report(students: typing.Iterable[Student], output_path: typing.Union[str, pathlib.Path]) -> int:
    """Write one report line per student; returns the number of lines written."""
    count = 0
    with open(output_path, "w", encoding="utf-8") as out_f:
        for student in students:
            out_f.write(student.report_line() + "\n")
            count += 1
    logging.info(f"Wrote {count} report lines to {output_path}")
    return count


def grade_summary(students: typing.Iterable[Student]) -> pd.DataFrame:
    """
    Grade distribution: one row per letter grade (A-F, all present) with the
    number of students and their mean score (NaN when nobody has that grade).
    """
    df = pd.DataFrame(
        [{"grade": s.grade, "score": s.score} for s in students],
        columns=["grade", "score"],
    )
    df["score"] = df["score"].astype(float)
    grades = [grade for _, grade in GRADE_BOUNDARIES]
    summary = df.groupby("grade")["score"].agg(["count", "mean"]).reindex(grades)
    summary["count"] = summary["count"].fillna(0).astype(int)
    summary.index.name = "grade"
    return summary
