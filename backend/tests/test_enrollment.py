"""Identity and class membership checks."""
import pytest
from checkin.services.enrollment_service import EnrollmentService
from checkin.utils.errors import IdentityNotFound, NotEnrolled

def test_active_enrolled_student(classroom):
    student = EnrollmentService.validate(classroom.session, enrollment=' 2024001 ')
    assert student.id == classroom.student.id

@pytest.mark.parametrize('enrollment', ['2024003', '9999999', '', None])
def test_missing_or_inactive_student(classroom, enrollment):
    with pytest.raises(IdentityNotFound):
        EnrollmentService.validate(classroom.session, enrollment=enrollment)

@pytest.mark.parametrize('enrollment', ['2024004', '2024005', '2024006'])
def test_student_without_current_membership(classroom, enrollment):
    with pytest.raises(NotEnrolled) as excinfo:
        EnrollmentService.validate(classroom.session, enrollment=enrollment)
    assert excinfo.value.field == 'enrollment'

def test_membership_is_per_class(classroom):
    with pytest.raises(NotEnrolled):
        EnrollmentService.validate(classroom.geo_session, enrollment='2024002')

def test_authenticated_user_resolves_linked_student(classroom, student_user):
    student = EnrollmentService.validate(classroom.session, user_id=str(student_user.id))
    assert student.id == classroom.student.id

def test_authenticated_user_without_student(classroom, teacher_user):
    with pytest.raises(IdentityNotFound):
        EnrollmentService.validate(classroom.session, user_id=teacher_user.id)
