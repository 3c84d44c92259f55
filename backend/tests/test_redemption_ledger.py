"""Redemption ledger tests."""
import pytest

from classroll.exceptions import NotFound, Unauthorized
from classroll.models.attendance import AttendanceMethod, AttendanceRecord
from classroll.services.redemption_ledger import RedemptionLedger

@pytest.fixture
def ledger():
    return RedemptionLedger()

def test_redeem_creates_then_updates(ledger, class_session, students, clock):
    record, created, first_present = ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR,
                                                   clock(), latitude=30.0, longitude=31.2)
    record_id = record.id
    assert created is True
    assert first_present is True
    assert record.first_present_at == clock()
    assert record.latitude == 30.0

    clock.advance(minutes=3)
    record, created, first_present = ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())

    assert created is False
    assert first_present is False
    assert record.id == record_id
    assert record.marked_at == clock()
    # Location from the first scan is kept when the second has none
    assert record.latitude == 30.0

def test_lost_insert_race_becomes_update(ledger, class_session, students, clock, monkeypatch):
    """A duplicate insert rejected by the unique constraint updates the existing row."""
    first, _, _ = ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())
    first_id = first.id

    real_get = ledger.get
    calls = []

    def stale_get(session_id, subject_id):
        calls.append((session_id, subject_id))
        return None if len(calls) == 1 else real_get(session_id, subject_id)

    monkeypatch.setattr(ledger, 'get', stale_get)
    clock.advance(minutes=1)
    record, created, first_present = ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())

    assert created is False
    assert first_present is False
    assert record.id == first_id
    assert record.marked_at == clock()
    assert AttendanceRecord.query.filter_by(session_id=class_session.id).count() == 1

def test_first_presence_reported_once_per_student(ledger, class_session, teacher, students, clock):
    """Absent first, then present: only the first switch to present counts."""
    _, created, first_present = ledger.override(class_session.id, teacher.id, students[0].id, clock(),
                                                present=False)
    assert created is True
    assert first_present is False

    clock.advance(minutes=1)
    record, created, first_present = ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())
    assert created is False
    assert first_present is True
    assert record.first_present_at == clock()

    ledger.override(class_session.id, teacher.id, students[0].id, clock(), present=False)
    _, _, first_present = ledger.override(class_session.id, teacher.id, students[0].id, clock(), present=True)
    assert first_present is False

def test_redeem_unknown_session_or_student(ledger, class_session, students, clock):
    with pytest.raises(NotFound):
        ledger.redeem('missing', students[0].id, AttendanceMethod.QR, clock())
    with pytest.raises(NotFound):
        ledger.redeem(class_session.id, 'missing', AttendanceMethod.QR, clock())

def test_subject_must_be_enrolled_student(ledger, class_session, teacher, other_teacher, admin,
                                          make_user, clock):
    outsider = make_user(name='Not Enrolled')

    for staff in (other_teacher, admin):
        with pytest.raises(NotFound):
            ledger.override(class_session.id, teacher.id, staff.id, clock(), present=True)
    with pytest.raises(Unauthorized):
        ledger.override(class_session.id, teacher.id, outsider.id, clock(), present=True)
    with pytest.raises(Unauthorized):
        ledger.redeem(class_session.id, outsider.id, AttendanceMethod.QR, clock())
    assert AttendanceRecord.query.count() == 0

def test_override_requires_owner(ledger, class_session, other_teacher, students, clock):
    with pytest.raises(Unauthorized):
        ledger.override(class_session.id, other_teacher.id, students[0].id, clock(), present=True)

def test_override_toggle_without_record_marks_present(ledger, class_session, teacher, students, clock):
    record, created, first_present = ledger.override(class_session.id, teacher.id, students[0].id, clock())
    assert created is True
    assert first_present is True
    assert record.is_present is True

    record, created, _ = ledger.override(class_session.id, teacher.id, students[0].id, clock())
    assert created is False
    assert record.is_present is False

def test_list_for_session_search(ledger, class_session, teacher, students, clock):
    for student in students:
        ledger.override(class_session.id, teacher.id, student.id, clock(), present=True)

    names = [record.student.name for record in ledger.list_for_session(class_session.id)]
    assert names == ['Ada Lovelace', 'Alan Turing', 'Grace Hopper']

    found = ledger.list_for_session(class_session.id, search='turing')
    assert [record.student.roll_number for record in found] == ['R002']

    found = ledger.list_for_session(class_session.id, search='R003')
    assert [record.student.name for record in found] == ['Grace Hopper']

def test_list_for_student_newest_first(ledger, registry, class_session, school_class, teacher, students, clock):
    later = registry.create(teacher.id, school_class.id, clock().date(),
                            class_session.start_time.replace(hour=11), class_session.end_time.replace(hour=12))
    ledger.redeem(class_session.id, students[0].id, AttendanceMethod.QR, clock())
    clock.advance(hours=2)
    ledger.redeem(later.id, students[0].id, AttendanceMethod.QR, clock())

    history = ledger.list_for_student(students[0].id)
    assert [record.session_id for record in history] == [later.id, class_session.id]
    assert len(ledger.list_for_student(students[0].id, limit=1)) == 1
