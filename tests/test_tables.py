import logging

import pytest

from record_csv.codec import decode, encode
from record_csv.errors import ImportMappingError, UnknownTableError
from record_csv.tables import TABLES, get_table, map_header, normalize_header, plan_import


def test_get_table_unknown():
    with pytest.raises(UnknownTableError) as excinfo:
        get_table("invoices")
    assert str(excinfo.value) == "Unknown table: invoices"


def test_contacts_and_leads_share_columns():
    assert TABLES["contacts_module"].columns == TABLES["leads"].columns


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Contact Name", "contact_name"),
        ("  contact-name ", "contact_name"),
        ("Phone  No", "phone_no"),
        ("MOBILE__NO", "mobile_no"),
    ],
)
def test_normalize_header(header, expected):
    assert normalize_header(header) == expected


@pytest.mark.parametrize(
    "table, header, expected",
    [
        ("contacts_module", "email", "email"),
        ("contacts_module", "Full Name", "contact_name"),
        ("contacts_module", "Organization", "company_name"),
        ("contacts_module", "Title", "position"),
        ("contacts_module", "Status", "lead_status"),
        ("contacts_module", "Description", "description"),
        ("leads", "Telephone", "phone_no"),
        ("meetings", "Title", "title"),
        ("meetings", "Status", "status"),
        ("meetings", "Description", "agenda"),
        ("meetings", "Attendees", "participants"),
        ("meetings", "Join Link", "teams_link"),
        ("meetings", "Begin Time", "start_time"),
        ("deals", "Deal Name", "deal_name"),
        ("deals", "Name", None),
        ("deals", "Shoe Size", None),
    ],
)
def test_map_header(table, header, expected):
    assert map_header(header, TABLES[table]) == expected


def test_plan_import_maps_and_ignores(caplog):
    doc = decode("Subject,Start,End,Mood\nKickoff,2024-01-01T09:00,2024-01-01T10:00,good\n")
    with caplog.at_level(logging.WARNING, logger="record_csv.tables"):
        plan = plan_import(doc, get_table("meetings"))

    assert plan.mapped == [(0, "title"), (1, "start_time"), (2, "end_time")]
    assert plan.ignored == ["Mood"]
    assert "Mood" in caplog.text
    assert plan.build(doc.rows).records == [
        {"title": "Kickoff", "start_time": "2024-01-01T09:00", "end_time": "2024-01-01T10:00"},
    ]


def test_plan_import_records_skip_empty_and_missing_cells():
    doc = decode("deal_name,amount,stage\nAlpha,,RFQ\nBeta\n")
    plan = plan_import(doc, get_table("deals"))
    assert plan.build(doc.rows).records == [
        {"deal_name": "Alpha", "stage": "RFQ"},
        {"deal_name": "Beta"},
    ]


def test_plan_import_without_known_headers():
    doc = decode("foo,bar\n1,2\n")
    with pytest.raises(ImportMappingError):
        plan_import(doc, get_table("contacts_module"))


@pytest.mark.parametrize("name", sorted(TABLES))
def test_export_header_maps_back_onto_table(name):
    table = TABLES[name]
    doc = decode(encode(table.columns, [{table.required[0]: "x"}]))
    plan = plan_import(doc, table)
    assert [column for _, column in plan.mapped] == list(table.columns)
    assert plan.ignored == []


@pytest.mark.parametrize(
    "table, text, expected",
    [
        ("contacts_module", "email,company\na@b.co,Acme\n", {"email": "a@b.co", "company_name": "Acme", "contact_name": "Contact 1"}),
        ("leads", "contact_name,city\n,Oslo\n", {"contact_name": "Contact 1", "city": "Oslo"}),
        ("deals", "deal_name,amount\n,100\n", {"deal_name": "Deal 1", "amount": "100"}),
        ("meetings", "start_time,end_time\n2024-01-01T09:00,2024-01-01T10:00\n",
         {"title": "Meeting 1", "start_time": "2024-01-01T09:00", "end_time": "2024-01-01T10:00"}),
    ],
)
def test_missing_name_column_gets_numbered_placeholder(table, text, expected):
    doc = decode(text)
    result = plan_import(doc, get_table(table)).build(doc.rows)
    assert result.records == [expected]
    assert result.errors == []


def test_placeholder_number_follows_data_row_position():
    doc = decode("deal_name,stage\nAlpha,RFQ\n,Won\n,Lost\n")
    result = plan_import(doc, get_table("deals")).build(doc.rows)
    assert [r["deal_name"] for r in result.records] == ["Alpha", "Deal 2", "Deal 3"]


def test_meeting_without_times_is_rejected():
    doc = decode("title,location\nKickoff,Room 1\n")
    result = plan_import(doc, get_table("meetings")).build(doc.rows)
    assert result.records == []
    assert result.errors == ["Row 1: Missing required field: start_time"]


def test_meeting_rows_are_checked_independently():
    doc = decode(
        "title,start_time,end_time\n"
        "Kickoff,2024-01-01T09:00,2024-01-01T10:00\n"
        "Review,2024-01-02T09:00,\n"
        ",2024-01-03T09:00,2024-01-03T10:00\n"
    )
    result = plan_import(doc, get_table("meetings")).build(doc.rows)
    assert [r["title"] for r in result.records] == ["Kickoff", "Meeting 3"]
    assert result.errors == ["Row 2: Missing required field: end_time"]
