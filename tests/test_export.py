import csv
import io
from datetime import datetime
from civicops.schemas.export import DateRange, ExportFilter
from civicops.services.export import CSV_HEADERS, ExportService

def test_export_rows_use_display_defaults(db_session, make_report):
    make_report(title=None, category=None, address=None, location={"latitude": 1, "longitude": 2})

    row = ExportService(db_session).get_reports_for_export(ExportFilter())[0]

    assert row.title == "No Title"
    assert row.category == "Uncategorized"
    assert row.assigned_to == "Unassigned"
    assert row.assigned_department == "Unassigned"
    assert row.location == "No Location"
    assert row.rating is None

def test_export_filters(db_session, make_report, make_user):
    dana = make_user(full_name="Dana Fixer")
    make_report(title="Dana's pothole", assigned_to="Dana Fixer", assigned_to_id=dana.id,
                category="Roads", created_at=datetime(2024, 3, 2))
    make_report(title="Old leak", category="Water", status="resolved", created_at=datetime(2024, 1, 5))
    make_report(title="New leak", category="Water", assigned_department="Water Services", created_at=datetime(2024, 3, 10))

    service = ExportService(db_session)

    def titles(**filters):
        return [row.title for row in service.get_reports_for_export(ExportFilter(**filters))]

    assert titles() == ["New leak", "Dana's pothole", "Old leak"]
    assert titles(assigned_to=dana.id) == ["Dana's pothole"]
    assert titles(category="Water") == ["New leak", "Old leak"]
    assert titles(status="resolved") == ["Old leak"]
    assert titles(department="Water Services") == ["New leak"]
    assert titles(status="all", category="all") == ["New leak", "Dana's pothole", "Old leak"]
    assert titles(date_range=DateRange(start=datetime(2024, 3, 1), end=datetime(2024, 3, 5))) == ["Dana's pothole"]

def test_export_resolves_assignee_name(db_session, make_report, make_user):
    dana = make_user(full_name="Dana Fixer")
    make_report(assigned_to="D. Fixer (old name)", assigned_to_id=dana.id)

    row = ExportService(db_session).get_reports_for_export(ExportFilter())[0]

    assert row.assigned_to == "Dana Fixer"

def test_csv_quotes_text_fields(db_session, make_report):
    make_report(
        title='Broken "smart" bench, east side',
        description="Line one\nline two",
        category="Parks",
        created_at=datetime(2024, 3, 1),
        rating=4,
    )
    service = ExportService(db_session)

    content = service.to_csv(service.get_reports_for_export(ExportFilter()))
    parsed = list(csv.reader(io.StringIO(content)))

    assert parsed[0] == CSV_HEADERS
    assert parsed[1][1] == 'Broken "smart" bench, east side'
    assert parsed[1][2] == "Line one\nline two"
    assert parsed[1][8] == "2024-03-01"
    assert parsed[1][11] == "4.0"
    assert '"Broken ""smart"" bench, east side"' in content

def test_csv_always_quotes_text_and_leaves_ratings_bare(db_session, make_report):
    make_report(title="Pothole", description="Deep", category="Roads", address="12 Elm St",
                feedback="Quick fix", created_at=datetime(2024, 3, 1), rating=5)
    make_report(title="Leak", description="", category="Water", created_at=datetime(2024, 2, 1))
    service = ExportService(db_session)

    lines = service.to_csv(service.get_reports_for_export(ExportFilter())).splitlines()

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1].endswith(',"Pothole","Deep","Roads","submitted","medium","Unassigned","Unassigned","2024-03-01","","12 Elm St",5.0,"Quick fix"')
    assert lines[2].endswith(',"Leak","","Water","submitted","medium","Unassigned","Unassigned","2024-02-01","","No Location","",""')

def test_html_escapes_values(db_session, make_report):
    make_report(title="<script>alert(1)</script>", category="Parks & Rec")
    service = ExportService(db_session)

    document = service.to_html(
        service.get_reports_for_export(ExportFilter()),
        title="March <export>",
        generated_at=datetime(2024, 3, 20),
    )

    assert "<script>" not in document
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in document
    assert "Parks &amp; Rec" in document
    assert "<title>March &lt;export&gt;</title>" in document
    assert "Generated on: 2024-03-20" in document
    assert "1 reports exported" in document
    assert "<td>N/A</td>" in document

def test_options_are_distinct_and_sorted(db_session, make_report, make_user):
    make_report(category="Water", assigned_department="Water Services")
    make_report(category="Roads", assigned_department="Road Maintenance")
    make_report(category="Water")
    make_user(full_name="Dana Fixer", department="Road Maintenance")
    make_user(full_name="Rita Resident", user_type="RESIDENT")

    service = ExportService(db_session)

    assert service.get_categories() == ["Roads", "Water"]
    assert service.get_departments() == ["Road Maintenance", "Water Services"]
    assert [(e.name, e.department) for e in service.get_employees()] == [("Dana Fixer", "Road Maintenance")]
