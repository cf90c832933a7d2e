import os
import sys
import django
import random
from decimal import Decimal
from datetime import time, timedelta
from django.utils import timezone
from faker import Faker

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set up Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tutor_marketplace.settings')
django.setup()

from core import lifecycle, messaging, reviews
from core.exceptions import Conflict
from core.models import (
    AvailabilitySlot, AvailableDay, LessonRequest, Subject, TeacherSubject, User
)

fake = Faker()

CITIES = ['Almaty', 'Astana', 'Shymkent', 'Karaganda', 'Aktobe']


def create_users(num_students=10, num_teachers=5):
    print(f"Creating {num_students} students and {num_teachers} teachers...")

    students = []
    teachers = []

    # Create Students
    for _ in range(num_students):
        email = fake.unique.email()
        user = User.objects.create_user(
            username=email.split('@')[0],
            email=email,
            password='password123',
            name=fake.name(),
            role=User.ROLE_STUDENT,
            city=random.choice(CITIES),
            age=random.randint(12, 30),
        )
        students.append(user)

    # Create Teachers
    for _ in range(num_teachers):
        email = fake.unique.email()
        user = User.objects.create_user(
            username=email.split('@')[0],
            email=email,
            password='password123',
            name=fake.name(),
            role=User.ROLE_TEACHER,
            city=random.choice(CITIES),
            bio=fake.paragraph(nb_sentences=3),
            experience=f"{random.randint(1, 20)} years",
            education=fake.company(),
            specialization=fake.job(),
            price_per_lesson=Decimal(random.randint(5, 80)),
            online_offline_format=random.choice(
                [User.FORMAT_ONLINE, User.FORMAT_OFFLINE, User.FORMAT_BOTH]
            ),
        )
        teachers.append(user)

    print(f"Created {len(students)} students and {len(teachers)} teachers.")
    return students, teachers


def assign_subjects(teachers):
    print("Assigning subjects...")
    subjects = list(Subject.objects.all())
    if not subjects:
        print("No subjects found. Run migrations first.")
        return

    for teacher in teachers:
        for subject in random.sample(subjects, random.randint(1, min(3, len(subjects)))):
            TeacherSubject.objects.get_or_create(teacher=teacher, subject=subject)


def create_availability(teachers):
    print("Creating availability...")
    today = timezone.localdate()

    for teacher in teachers:
        for day_of_week in random.sample(range(7), random.randint(2, 5)):
            start_hour = random.randint(8, 14)
            AvailableDay.objects.get_or_create(
                teacher=teacher,
                day_of_week=day_of_week,
                defaults={
                    'start_time': time(start_hour, 0),
                    'end_time': time(start_hour + random.randint(2, 6), 0),
                },
            )

        for offset in random.sample(range(1, 30), 5):
            start_hour = random.randint(9, 18)
            AvailabilitySlot.objects.get_or_create(
                teacher=teacher,
                date=today + timedelta(days=offset),
                start_time=time(start_hour, 0),
                defaults={
                    'end_time': time(start_hour + 1, 0),
                    'is_available': random.random() > 0.2,
                },
            )


def create_lesson_requests(students, teachers):
    print("Creating lesson requests...")
    confirmed = []

    for student in students:
        for teacher in random.sample(teachers, random.randint(1, min(3, len(teachers)))):
            lesson_request = lifecycle.create_lesson_request(
                student,
                teacher.id,
                requested_date=timezone.localdate() + timedelta(days=random.randint(1, 14)),
                requested_time=time(random.randint(9, 19), 0),
                message=fake.sentence(),
            )

            outcome = random.choice(['confirm', 'reject', 'cancel', 'leave'])
            if outcome == 'confirm':
                lifecycle.transition_lesson_request(
                    lesson_request.id, teacher, LessonRequest.STATUS_CONFIRMED
                )
                confirmed.append(lesson_request)
            elif outcome == 'reject':
                lifecycle.transition_lesson_request(
                    lesson_request.id, teacher, LessonRequest.STATUS_REJECTED
                )
            elif outcome == 'cancel':
                lifecycle.cancel_lesson_request(lesson_request.id, student)

    print(f"Confirmed {len(confirmed)} lesson requests.")
    return confirmed


def create_conversations(confirmed):
    print("Creating chat messages...")
    count = 0

    for lesson_request in confirmed:
        chat = lifecycle.ensure_chat(
            lesson_request.student_id, lesson_request.teacher_id, lesson_request.id
        )
        participants = [lesson_request.student, lesson_request.teacher]
        for _ in range(random.randint(1, 6)):
            messaging.send_message(chat.id, random.choice(participants), fake.sentence())
            count += 1

    print(f"Created {count} messages.")


def create_reviews(confirmed):
    print("Creating reviews...")
    count = 0

    for lesson_request in confirmed:
        if random.random() < 0.3:
            continue
        try:
            reviews.create_review(
                lesson_request.student,
                lesson_request.teacher_id,
                random.randint(3, 5),
                comment=fake.sentence(),
                lesson_request_id=lesson_request.id,
            )
            count += 1
        except Conflict:
            pass

    print(f"Created {count} reviews.")


def main():
    print("Starting database population...")

    students, teachers = create_users(num_students=20, num_teachers=10)
    assign_subjects(teachers)
    create_availability(teachers)

    confirmed = create_lesson_requests(students, teachers)
    create_conversations(confirmed)
    create_reviews(confirmed)

    print("Database population completed successfully!")


if __name__ == '__main__':
    main()
