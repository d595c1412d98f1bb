"""
Column sets of the record tables and header mapping for imports.

Export uses a table's columns verbatim as the header row, so an exported
file maps back onto the same columns when it is imported again.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .codec import Document
from .errors import ImportMappingError, UnknownTableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableColumns:
    name: str
    columns: Tuple[str, ...]
    required: Tuple[str, ...]


_CONTACT_COLUMNS = (
    "contact_name",
    "company_name",
    "position",
    "email",
    "phone_no",
    "mobile_no",
    "linkedin",
    "fax",
    "website",
    "contact_source",
    "lead_status",
    "industry",
    "no_of_employees",
    "annual_revenue",
    "city",
    "state",
    "country",
    "description",
)

TABLES: Dict[str, TableColumns] = {
    "contacts_module": TableColumns("contacts_module", _CONTACT_COLUMNS, ("contact_name",)),
    "leads": TableColumns("leads", _CONTACT_COLUMNS, ("contact_name",)),
    "meetings": TableColumns(
        "meetings",
        (
            "title",
            "start_time",
            "end_time",
            "location",
            "agenda",
            "outcome",
            "next_action",
            "status",
            "priority",
            "participants",
            "teams_link",
            "lead_id",
            "contact_id",
            "deal_id",
            "tags",
            "follow_up_required",
            "host",
        ),
        ("title", "start_time", "end_time"),
    ),
    "deals": TableColumns(
        "deals",
        (
            "deal_name",
            "amount",
            "closing_date",
            "stage",
            "probability",
            "type",
            "next_step",
            "description",
            "currency",
            "pipeline",
        ),
        ("deal_name",),
    ),
}

# Common spreadsheet headings and the column they land in.
HEADER_ALIASES: Dict[str, str] = {
    "name": "contact_name",
    "full_name": "contact_name",
    "contact": "contact_name",
    "company": "company_name",
    "organization": "company_name",
    "job_title": "position",
    "title": "position",
    "phone": "phone_no",
    "telephone": "phone_no",
    "mobile": "mobile_no",
    "cell": "mobile_no",
    "employees": "no_of_employees",
    "revenue": "annual_revenue",
    "source": "contact_source",
    "status": "lead_status",
    "lead": "lead_status",
    "meeting_title": "title",
    "subject": "title",
    "start": "start_time",
    "end": "end_time",
    "begin_time": "start_time",
    "finish_time": "end_time",
    "venue": "location",
    "place": "location",
    "discussion": "agenda",
    "description": "description",
    "result": "outcome",
    "conclusion": "outcome",
    "follow_up": "next_action",
    "action_items": "next_action",
    "attendees": "participants",
    "emails": "participants",
    "meeting_link": "teams_link",
    "video_link": "teams_link",
    "join_link": "teams_link",
}

# Meetings read a few generic headings differently.
MEETING_ALIASES: Dict[str, str] = {
    "title": "title",
    "status": "status",
    "description": "agenda",
}

_SEPARATORS = re.compile(r"[\s_-]+")


def get_table(name: str) -> TableColumns:
    try:
        return TABLES[name]
    except KeyError:
        raise UnknownTableError(name) from None


def normalize_header(header: str) -> str:
    return _SEPARATORS.sub("_", header.strip().lower())


def map_header(header: str, table: TableColumns) -> Optional[str]:
    """Column `header` lands in for `table`, or None when it is not recognized."""
    key = normalize_header(header)
    if key in table.columns:
        return key
    if table.name == "meetings" and key in MEETING_ALIASES:
        return MEETING_ALIASES[key]
    column = HEADER_ALIASES.get(key)
    # an alias only counts when the table actually has that column
    return column if column in table.columns else None


# Required columns that get a numbered placeholder when a row leaves them empty.
PLACEHOLDER_NAMES: Dict[str, str] = {
    "contact_name": "Contact",
    "title": "Meeting",
    "deal_name": "Deal",
}


@dataclass
class ImportResult:
    records: List[Dict[str, str]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class ImportPlan:
    table: TableColumns
    # (position in the document, target column)
    mapped: List[Tuple[int, str]] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)

    def record(self, row: Sequence[str], number: int) -> Dict[str, str]:
        """
        One row as a column -> text dict.

        Empty cells and cells past the row end are left out. A missing
        required name column gets a placeholder such as "Contact 3"; any other
        missing required column raises ImportMappingError.
        """
        record: Dict[str, str] = {}
        for index, column in self.mapped:
            if index < len(row) and row[index]:
                record[column] = row[index]

        for column in self.table.required:
            if record.get(column):
                continue
            if column not in PLACEHOLDER_NAMES:
                raise ImportMappingError(f"Missing required field: {column}")
            record[column] = f"{PLACEHOLDER_NAMES[column]} {number}"
        return record

    def build(self, rows: Sequence[Sequence[str]]) -> ImportResult:
        """Records for every usable row; rejected rows are reported as "Row N: reason"."""
        result = ImportResult()
        for number, row in enumerate(rows, start=1):
            try:
                result.records.append(self.record(row, number))
            except ImportMappingError as exc:
                result.errors.append(f"Row {number}: {exc}")
        if result.errors:
            logger.warning("skipped %d of %d %s row(s)", len(result.errors), len(rows), self.table.name)
        return result


def plan_import(document: Document, table: TableColumns) -> ImportPlan:
    plan = ImportPlan(table=table)
    for index, header in enumerate(document.headers):
        column = map_header(header, table)
        if column is None:
            plan.ignored.append(header)
        else:
            plan.mapped.append((index, column))

    if not plan.mapped:
        raise ImportMappingError("No valid headers found. Please check your CSV column names.")
    if plan.ignored:
        logger.warning("ignoring %d unrecognized column(s) for %s: %s",
                       len(plan.ignored), table.name, ", ".join(plan.ignored))
    return plan
