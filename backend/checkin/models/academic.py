"""Classes, students and class memberships.

These rows are maintained by the administration module; the check-in
protocol only reads them.
"""
from datetime import date
from enum import Enum
from checkin import db
from checkin.models.base import BaseModel

class EntityStatus(Enum):
    """Active/inactive flag shared by classes, students and memberships."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'

class ClassGroup(BaseModel):
    """A class (turma) that attendance sessions belong to."""

    __tablename__ = 'classes'

    code = db.Column(db.String(30), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    period = db.Column(db.String(30), nullable=True)
    status = db.Column(db.Enum(EntityStatus), nullable=False, default=EntityStatus.ACTIVE)

    memberships = db.relationship('ClassMembership', backref='class_group', lazy='dynamic')
    sessions = db.relationship('AttendanceSession', backref='class_group', lazy='dynamic')

    @classmethod
    def find_active_by_code(cls, code: str) -> 'ClassGroup':
        """Find an active class by its human-entered code."""
        normalized = (code or '').strip().upper()
        if not normalized:
            return None
        return cls.query.filter(
            db.func.upper(cls.code) == normalized,
            cls.status == EntityStatus.ACTIVE
        ).first()

    def __repr__(self):
        return f'<ClassGroup {self.code}>'

class Student(BaseModel):
    """Student identified by an enrollment number."""

    __tablename__ = 'students'

    enrollment = db.Column(db.String(30), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.Enum(EntityStatus), nullable=False, default=EntityStatus.ACTIVE)

    # Optional link for students that also have a login
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, unique=True)

    user = db.relationship('User', backref=db.backref('student_profile', uselist=False))
    memberships = db.relationship('ClassMembership', backref='student', lazy='dynamic')

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE

    def to_summary(self) -> dict:
        """Public summary returned to the check-in client."""
        return {
            'id': self.id,
            'enrollment': self.enrollment,
            'name': self.name
        }

    def __repr__(self):
        return f'<Student {self.enrollment}>'

class ClassMembership(BaseModel):
    """Link between a student and a class."""

    __tablename__ = 'class_students'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', name='uq_class_student'),
    )

    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    status = db.Column(db.Enum(EntityStatus), nullable=False, default=EntityStatus.ACTIVE)
    start_date = db.Column(db.Date, nullable=False, default=date.today)
    end_date = db.Column(db.Date, nullable=True)

    def is_current(self, on: date = None) -> bool:
        """Active and not past its end date."""
        on = on or date.today()
        if self.status != EntityStatus.ACTIVE:
            return False
        return self.end_date is None or self.end_date >= on
