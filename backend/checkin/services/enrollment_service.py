"""Confirm that a claimed identity may check in to a session."""
import logging
from checkin.models.academic import Student, ClassMembership, EntityStatus
from checkin.models.attendance_session import AttendanceSession
from checkin.models.user import User
from checkin.utils.errors import IdentityNotFound, NotEnrolled

logger = logging.getLogger(__name__)

class EnrollmentService:
    """Read-only identity and enrollment checks."""

    @staticmethod
    def find_active_student(enrollment: str) -> Student:
        """Active student by enrollment number."""
        enrollment = (enrollment or '').strip()
        student = Student.query.filter_by(enrollment=enrollment).first() if enrollment else None

        if not student or not student.is_active:
            logger.warning("Enrollment %r not found or inactive", enrollment)
            raise IdentityNotFound()

        return student

    @staticmethod
    def student_for_user(user_id) -> Student:
        """Active student linked to an authenticated user."""
        user = User.get_by_id(int(user_id)) if user_id is not None else None
        student = user.student_profile if user and user.is_active else None

        if not student or not student.is_active:
            logger.warning("User %s has no active student profile", user_id)
            raise IdentityNotFound("No active student is linked to this account")

        return student

    @staticmethod
    def is_actively_enrolled(student: Student, class_id: int) -> bool:
        membership = ClassMembership.query.filter_by(
            student_id=student.id,
            class_id=class_id,
            status=EntityStatus.ACTIVE
        ).first()
        return membership is not None and membership.is_current()

    @classmethod
    def validate(cls, session: AttendanceSession, enrollment: str = None, user_id=None) -> Student:
        """Resolve the claimed student and check their membership in the session's class.

        ``user_id`` (from an authenticated context) takes precedence over the
        free-text ``enrollment``.
        """
        if user_id is not None:
            student = cls.student_for_user(user_id)
        else:
            student = cls.find_active_student(enrollment)

        if not cls.is_actively_enrolled(student, session.class_id):
            logger.warning(
                "Student %s is not enrolled in class %s", student.enrollment, session.class_id
            )
            raise NotEnrolled()

        return student
