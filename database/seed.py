"""
Seed data script for the AI Schoolmate backend.
Creates sample students, grades and events for local testing and demos.
"""
from datetime import date, timedelta
import random
from database import get_db_context, init_db, Student, Grade, Event


SUBJECT_TOPICS = {
    "Math": ["Fractions", "Algebra", "Geometry"],
    "Physics": ["Kinematics", "Optics"],
    "History": ["Ancient World", "Middle Ages"],
    "English": ["Grammar", "Essay Writing"],
}


def seed_database(rng: random.Random = None) -> dict:
    """
    Populate database with sample data.

    Returns:
        Dictionary with the created student ids and row counts
    """
    rng = rng or random.Random()

    with get_db_context() as db:
        # Clear existing data
        db.query(Grade).delete()
        db.query(Event).delete()
        db.query(Student).delete()

        students = [
            Student(name="Aruzhan Sadykova", class_name="10A", email="aruzhan@example.edu"),
            Student(name="Daniyar Akhmetov", class_name="10A", email="daniyar@example.edu"),
            Student(name="Madina Nurlanovna", class_name="10B", email="madina@example.edu"),
            Student(name="Timur Bekov", class_name="11A", email="timur@example.edu"),
        ]
        db.add_all(students)
        db.flush()

        grades = []
        base_date = date.today() - timedelta(days=90)
        for student in students:
            # Each student gets one deliberately weaker subject
            weak_subject = rng.choice(list(SUBJECT_TOPICS))
            for subject, topics in SUBJECT_TOPICS.items():
                low, high = (40, 68) if subject == weak_subject else (65, 100)
                for topic in topics:
                    for _ in range(2):
                        grades.append(Grade(
                            student_id=student.id,
                            subject=subject,
                            topic=topic,
                            score=round(rng.uniform(low, high), 1),
                            grade_date=base_date + timedelta(days=rng.randint(1, 85)),
                        ))
        db.add_all(grades)

        today = date.today()
        events = [
            Event(
                title="Regional Math Olympiad",
                description="Individual olympiad for grades 9-11.",
                event_date=today + timedelta(days=14),
                type="Olympiad",
                location="School No. 12, Hall A",
                invitation_link="https://example.edu/olympiad/math",
            ),
            Event(
                title="Robotics Competition",
                event_date=today + timedelta(days=30),
                type="Competition",
                location="City Youth Center",
            ),
            Event(
                title="Science Fair",
                event_date=today + timedelta(days=45),
                type="School Event",
            ),
        ]
        db.add_all(events)
        db.flush()

        summary = {
            "students": [(s.id, s.name) for s in students],
            "grades": len(grades),
            "events": len(events),
        }

    return summary


if __name__ == "__main__":
    print("Initializing database...")
    init_db()
    print("Seeding database...")
    result = seed_database()
    print("Database seeded successfully!")
    print(f"  - {len(result['students'])} students")
    print(f"  - {result['grades']} grades")
    print(f"  - {result['events']} events")
    print("\nReference IDs:")
    for student_id, name in result["students"]:
        print(f"  {student_id}  {name}")
