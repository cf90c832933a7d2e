from django.db import migrations

INITIAL_SUBJECTS = ['Math', 'History', 'English', 'Biology']


def seed_subjects(apps, schema_editor):
    Subject = apps.get_model('core', 'Subject')
    for name in INITIAL_SUBJECTS:
        Subject.objects.get_or_create(name=name)


def unseed_subjects(apps, schema_editor):
    Subject = apps.get_model('core', 'Subject')
    Subject.objects.filter(name__in=INITIAL_SUBJECTS, teacher_subjects__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_subjects, unseed_subjects),
    ]
