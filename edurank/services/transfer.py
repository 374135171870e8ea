"""CSV and Excel import/export of class result sheets.

Parsing never touches the database. Parsed rows are handed to
``StudentService.import_rows`` which creates or updates the students.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from edurank.core.exceptions import ValidationError
from edurank.core.subjects import ClassLevel, ExamType, get_mark_key, get_subjects_for_class, parse_class_level
from edurank.schemas.results import CalculatedResult

logger = logging.getLogger(__name__)

# Imported marks are clamped to this range whatever the exam period
IMPORT_MIN_MARK = 0
IMPORT_MAX_MARK = 100

ROLL_NO_HEADERS = frozenset({"roll no", "roll", "id", "sr no"})
NAME_HEADERS = frozenset({"name", "student"})

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class ImportedRow:
    """One student parsed from an uploaded sheet."""

    roll_no: str
    name: str
    marks: dict[str, int] = field(default_factory=dict)
    row_number: int = 0


@dataclass
class ColumnMapping:
    """Which sheet header feeds which field. Subject mapping is keyed by subject key."""

    roll_no: str = ""
    name: str = ""
    subjects: dict[str, str] = field(default_factory=dict)


def parse_mark(value) -> int:
    """Read the leading integer of a cell. Anything non-numeric reads as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 0
        number = int(match.group(1))
    return min(IMPORT_MAX_MARK, max(IMPORT_MIN_MARK, number))


def _cell(values: Sequence[str], index: int) -> str:
    if 0 <= index < len(values):
        return values[index]
    return ""


def parse_csv(text: str, class_level: ClassLevel | str, exam_type: ExamType | str) -> list[ImportedRow]:
    """Parse a CSV result sheet for one class and exam period.

    The header row is matched case-insensitively. Roll number and name come
    from the ``Roll No`` and ``Name`` columns, falling back to the first two
    columns. Every subject of the class is read from the column headed by
    its label; subjects without a column import as 0.
    """
    level = parse_class_level(class_level)
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise ValidationError("File is empty or missing data")

    headers = [h.strip().lower() for h in lines[0].split(",")]
    subjects = get_subjects_for_class(level)

    def index_of(header: str) -> int:
        return headers.index(header) if header in headers else -1

    roll_idx = index_of("roll no")
    name_idx = index_of("name")
    subject_columns = {s.key: index_of(s.label.lower()) for s in subjects}

    rows = []
    for row_number, line in enumerate(lines[1:], start=2):
        values = [v.strip().removeprefix('"').removesuffix('"') for v in line.split(",")]
        if len(values) < 2:
            continue

        marks = {}
        for subject in subjects:
            column = subject_columns[subject.key]
            key = get_mark_key(exam_type, subject.key)
            marks[key] = parse_mark(_cell(values, column)) if column != -1 else 0

        rows.append(
            ImportedRow(
                roll_no=_cell(values, roll_idx) or values[0],
                name=_cell(values, name_idx) or values[1],
                marks=marks,
                row_number=row_number,
            )
        )

    logger.info("Parsed %d CSV rows for class %s (%s)", len(rows), level.value, exam_type)
    return rows


def _format_percentage(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return str(value)


def export_csv(
    results: Sequence[CalculatedResult],
    class_level: ClassLevel | str,
    exam_type: ExamType | str,
) -> str:
    """Render ranked results as CSV text."""
    if not results:
        raise ValidationError("No data to export")

    subjects = get_subjects_for_class(class_level)
    headers = ["Roll No", "Name", *(s.label for s in subjects), "Total", "Percentage", "Rank"]

    lines = [",".join(headers)]
    for result in results:
        escaped_name = result.name.replace('"', '""')
        row = [
            result.roll_no,
            f'"{escaped_name}"',
            *(str(result.marks.get(get_mark_key(exam_type, s.key), 0)) for s in subjects),
            str(result.total),
            f"{_format_percentage(result.percentage)}%",
            "" if result.rank is None else str(result.rank),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def export_filename(class_level: ClassLevel | str, on: date | None = None) -> str:
    level = parse_class_level(class_level)
    return f"Class_{level.value}_Results_{(on or date.today()).isoformat()}.csv"


def suggest_mapping(headers: Sequence[str], class_level: ClassLevel | str) -> ColumnMapping:
    """Guess the column mapping from header names."""
    subjects = get_subjects_for_class(class_level)
    mapping = ColumnMapping()
    for header in headers:
        lowered = header.lower()
        if lowered in ROLL_NO_HEADERS:
            mapping.roll_no = header
        if lowered in NAME_HEADERS:
            mapping.name = header
        for subject in subjects:
            if lowered in (subject.label.lower(), subject.key):
                mapping.subjects[subject.key] = header
    return mapping


def read_excel(file_content: bytes) -> tuple[list[str], list[list[str]]]:
    """Read headers and rows from the first sheet of a workbook."""
    try:
        wb = load_workbook(BytesIO(file_content), read_only=True, data_only=True)
        try:
            raw_rows = list(wb.worksheets[0].iter_rows(values_only=True))
        finally:
            wb.close()
    except Exception as e:
        raise ValidationError(f"Invalid Excel file: {str(e)}")

    if len(raw_rows) < 2:
        raise ValidationError("Invalid file format.")

    def text(value) -> str:
        if value is None:
            return ""
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    headers = [text(h) for h in raw_rows[0]]
    rows = [[text(v) for v in row] for row in raw_rows[1:]]
    return headers, rows


def parse_excel(
    file_content: bytes,
    class_level: ClassLevel | str,
    exam_type: ExamType | str,
    roll_column: str | None = None,
    name_column: str | None = None,
) -> tuple[list[ImportedRow], list[dict]]:
    """Parse a result workbook.

    Columns are mapped from the header row; ``roll_column`` and
    ``name_column`` override the detected roll number and name headers.
    Rows missing a roll number or name are reported back instead of aborting
    the import.
    """
    level = parse_class_level(class_level)
    headers, raw_rows = read_excel(file_content)

    mapping = suggest_mapping(headers, level)
    if roll_column:
        mapping.roll_no = roll_column
    if name_column:
        mapping.name = name_column
    if mapping.roll_no not in headers or mapping.name not in headers or not mapping.roll_no or not mapping.name:
        raise ValidationError(
            "Map columns first.",
            details={"headers": headers, "roll_no": mapping.roll_no, "name": mapping.name},
        )

    roll_idx = headers.index(mapping.roll_no)
    name_idx = headers.index(mapping.name)
    subject_columns = {key: headers.index(header) for key, header in mapping.subjects.items()}

    rows = []
    errors = []
    for row_number, values in enumerate(raw_rows, start=2):
        if not any(values):
            continue

        roll_no = _cell(values, roll_idx)
        name = _cell(values, name_idx)
        if not roll_no or not name:
            errors.append({"row": row_number, "error": "Roll No and Name are required"})
            continue

        marks = {
            get_mark_key(exam_type, key): parse_mark(_cell(values, column))
            for key, column in subject_columns.items()
        }
        rows.append(ImportedRow(roll_no=roll_no, name=name, marks=marks, row_number=row_number))

    logger.info("Parsed %d Excel rows for class %s (%s)", len(rows), level.value, exam_type)
    return rows, errors


def generate_template(class_level: ClassLevel | str) -> bytes:
    """Generate an Excel template for a class's result sheet."""
    subjects = get_subjects_for_class(class_level)

    wb = Workbook()
    ws = wb.active
    ws.title = "Results"

    # Write headers
    headers = ["Roll No", "Name", *(s.label for s in subjects)]
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    # Add sample row
    sample_data = ["1", "Student Name", *(0 for _ in subjects)]
    for col_idx, value in enumerate(sample_data, start=1):
        ws.cell(row=2, column=col_idx, value=value)

    ws.column_dimensions["A"].width = 10
    ws.column_dimensions["B"].width = 25

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()
