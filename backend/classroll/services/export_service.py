"""Attendance export."""
from datetime import date
from typing import Dict, List

import pandas as pd

from classroll.models.attendance import AttendanceRecord
from classroll.models.session import Session

CSV_COLUMNS = ['Name', 'Roll Number', 'Status', 'Method', 'Marked At']

class ExportService:
    """Read-only projections of attendance records."""

    @staticmethod
    def attendance_rows(records: List[AttendanceRecord]) -> List[Dict]:
        return [
            {
                'Name': record.student.name,
                'Roll Number': record.student.roll_number or '',
                'Status': 'Present' if record.is_present else 'Absent',
                'Method': record.method.value if record.method else '',
                'Marked At': record.marked_at.isoformat(sep=' ', timespec='seconds')
                if record.marked_at else ''
            }
            for record in records
        ]

    @staticmethod
    def attendance_csv(records: List[AttendanceRecord]) -> str:
        df = pd.DataFrame(ExportService.attendance_rows(records), columns=CSV_COLUMNS)
        return df.to_csv(index=False, lineterminator='\n')

    @staticmethod
    def summary(records: List[AttendanceRecord]) -> Dict:
        total = len(records)
        present = sum(1 for record in records if record.is_present)
        return {
            'present': present,
            'total': total,
            'attendance_rate': round(present / total * 100) if total else 0
        }

    @staticmethod
    def filename(session: Session, on: date) -> str:
        subject = session.school_class.subject if session.school_class else 'session'
        slug = '-'.join(subject.split())
        return f"attendance-{slug}-{on.isoformat()}.csv"
