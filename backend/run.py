"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from checkin import create_app, db
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.cli.command()
@with_appcontext
def create_db():
    """Create database tables."""
    db.create_all()
    click.echo('Database tables created successfully!')

@app.cli.command()
@with_appcontext
def drop_db():
    """Drop all database tables."""
    if click.confirm('Are you sure you want to drop all tables?'):
        db.drop_all()
        click.echo('Database tables dropped successfully!')

@app.cli.command()
@with_appcontext
def seed_demo():
    """Seed a demo class with two enrolled students and a teacher."""
    from checkin.models import ClassGroup, Student, ClassMembership, User, UserRole

    class_group = ClassGroup.query.filter_by(code='DEMO01').first()
    if not class_group:
        class_group = ClassGroup(code='DEMO01', name='Demo Class', period='morning')
        db.session.add(class_group)
        db.session.flush()

    teacher = User.query.filter_by(email='teacher@example.com').first()
    if not teacher:
        teacher = User(email='teacher@example.com', name='Demo Teacher', role=UserRole.TEACHER)
        teacher.set_password('teacher123')
        db.session.add(teacher)

    for enrollment, name in [('2024001', 'Ana Souza'), ('2024002', 'Bruno Lima')]:
        student = Student.query.filter_by(enrollment=enrollment).first()
        if not student:
            student = Student(enrollment=enrollment, name=name)
            db.session.add(student)
            db.session.flush()
            db.session.add(ClassMembership(class_id=class_group.id, student_id=student.id))

    db.session.commit()

    click.echo('Demo data created: class DEMO01, students 2024001 and 2024002')
    click.echo('Teacher: teacher@example.com / teacher123')
    click.echo('Open a session with: flask --app run open-session DEMO01')

if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.run(host=host, port=port, debug=debug)
