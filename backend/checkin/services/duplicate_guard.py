"""At most one attendance record per (session, student)."""
import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from checkin import db
from checkin.models.attendance import AttendanceRecord
from checkin.utils.errors import AlreadyCheckedIn, PersistenceFailed

logger = logging.getLogger(__name__)

class DuplicateGuard:
    """The unique constraint ``uq_attendance_session_student`` is the decision point.

    ``ensure_not_checked_in`` is only an early, advisory answer for the
    client; ``insert_once`` is authoritative.
    """

    @staticmethod
    def exists(session_id: int, student_id: int) -> bool:
        return db.session.query(
            AttendanceRecord.query.filter_by(
                session_id=session_id, student_id=student_id
            ).exists()
        ).scalar()

    @classmethod
    def ensure_not_checked_in(cls, session_id: int, student_id: int) -> None:
        if cls.exists(session_id, student_id):
            raise AlreadyCheckedIn()

    @classmethod
    def insert_once(cls, record: AttendanceRecord) -> AttendanceRecord:
        """Insert and commit ``record``, or raise without leaving a partial write."""
        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            if cls.exists(record.session_id, record.student_id):
                logger.info(
                    "Rejected duplicate check-in for session %s student %s",
                    record.session_id, record.student_id
                )
                raise AlreadyCheckedIn() from e
            logger.error("Integrity error saving attendance: %s", e)
            raise PersistenceFailed() from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Database error saving attendance: %s", e)
            raise PersistenceFailed() from e

        return record
