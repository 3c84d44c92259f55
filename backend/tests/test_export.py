"""Export projections."""
from classroll.models.attendance import AttendanceMethod
from classroll.services.export_service import CSV_COLUMNS, ExportService
from classroll.services.redemption_ledger import RedemptionLedger

def test_empty_export_has_header_only():
    assert ExportService.attendance_csv([]) == ','.join(CSV_COLUMNS) + '\n'
    assert ExportService.summary([]) == {'present': 0, 'total': 0, 'attendance_rate': 0}

def test_summary_and_rows(class_session, teacher, students, clock):
    ledger = RedemptionLedger()
    ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())
    ledger.override(class_session.id, teacher.id, students[1].id, clock(), present=False)
    ledger.redeem(class_session.id, students[2].id, AttendanceMethod.QR, clock())

    records = ledger.list_for_session(class_session.id)

    assert ExportService.summary(records) == {'present': 2, 'total': 3, 'attendance_rate': 67}
    rows = ExportService.attendance_rows(records)
    assert rows[1] == {
        'Name': 'Alan Turing',
        'Roll Number': 'R002',
        'Status': 'Absent',
        'Method': 'manual',
        'Marked At': '2026-03-02 09:00:00'
    }

def test_filename_uses_subject_slug(class_session, clock):
    assert ExportService.filename(class_session, clock().date()) == 'attendance-Mathematics-2026-03-02.csv'
