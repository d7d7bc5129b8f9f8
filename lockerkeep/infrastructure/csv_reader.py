from __future__ import annotations

import csv
import io
from collections.abc import Iterable

from lockerkeep.core.errors import ValidationError
from lockerkeep.core.use_cases.import_employees import EMPLOYEE_HEADERS


def decode_csv_upload(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded") from None


def read_csv_rows(
    text: str,
    *,
    required_headers: Iterable[str] = (),
    normalize_headers: bool = False,
) -> list[dict[str, str]]:
    """
    Parse CSV text with a header line into one dict per non-blank data row.

    Raises ValidationError when the file is empty or misses a required column.
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        raise ValidationError("CSV file is empty")

    reader = csv.DictReader(io.StringIO(text), skipinitialspace=True)
    headers = [h.strip() for h in (reader.fieldnames or [])]
    if normalize_headers:
        headers = [h.lower() for h in headers]
    reader.fieldnames = headers

    missing = [h for h in required_headers if h not in headers]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    rows: list[dict[str, str]] = []
    for record in reader:
        values = {k: (v or "").strip() for k, v in record.items() if k is not None}
        if not any(values.values()):
            continue
        rows.append(values)
    return rows


def employee_csv_template() -> str:
    lines = [
        ",".join(EMPLOYEE_HEADERS),
        "EMP001,John Doe,Engineering,true",
        "EMP002,Jane Smith,Marketing,true",
        "EMP003,Bob Wilson,Finance,false",
    ]
    return "\n".join(lines)
