import core.models
import core.validators
import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('student', 'Student'), ('teacher', 'Teacher')], help_text='Required. Whether the user is a student or a teacher.', max_length=10, verbose_name='role')),
                ('name', models.CharField(blank=True, default='', help_text='Name shown to other users.', max_length=255, verbose_name='display name')),
                ('bio', models.TextField(blank=True, default='', verbose_name='bio')),
                ('avatar', models.ImageField(blank=True, help_text='Optional. Profile picture (max 5MB, formats: jpg, png, webp).', null=True, upload_to=core.models.user_avatar_upload_path, validators=[core.validators.validate_avatar_image], verbose_name='avatar')),
                ('city', models.CharField(blank=True, default='', max_length=255, verbose_name='city')),
                ('age', models.PositiveSmallIntegerField(blank=True, help_text='Student only.', null=True, verbose_name='age')),
                ('experience', models.TextField(blank=True, help_text='Teacher only.', null=True, verbose_name='experience')),
                ('education', models.TextField(blank=True, help_text='Teacher only.', null=True, verbose_name='education')),
                ('specialization', models.TextField(blank=True, help_text='Teacher only.', null=True, verbose_name='specialization')),
                ('price_per_lesson', models.DecimalField(blank=True, decimal_places=2, help_text='Teacher only.', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'), message='Price cannot be negative.')], verbose_name='price per lesson')),
                ('online_offline_format', models.CharField(blank=True, choices=[('online', 'Online'), ('offline', 'Offline'), ('both', 'Online and offline')], help_text='Teacher only. Where lessons take place.', max_length=20, null=True, verbose_name='lesson format')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['role'], name='core_user_role_idx'),
                    models.Index(fields=['city'], name='core_user_city_idx'),
                    models.Index(fields=['price_per_lesson'], name='core_user_price_idx'),
                ],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Subject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='name')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
            ],
            options={
                'verbose_name': 'subject',
                'verbose_name_plural': 'subjects',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='TeacherSubject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teacher_subjects', to='core.subject')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teacher_subjects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'teacher subject',
                'verbose_name_plural': 'teacher subjects',
                'constraints': [
                    models.UniqueConstraint(fields=('teacher', 'subject'), name='unique_teacher_subject'),
                ],
            },
        ),
        migrations.AddField(
            model_name='user',
            name='subjects',
            field=models.ManyToManyField(blank=True, related_name='teachers', through='core.TeacherSubject', to='core.subject'),
        ),
        migrations.CreateModel(
            name='LessonRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('rejected', 'Rejected'), ('cancelled', 'Cancelled')], default='pending', max_length=20, verbose_name='status')),
                ('requested_date', models.DateField(blank=True, null=True, verbose_name='requested date')),
                ('requested_time', models.TimeField(blank=True, null=True, verbose_name='requested time')),
                ('message', models.TextField(blank=True, null=True, verbose_name='message')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('student', models.ForeignKey(help_text='Student asking for lessons', on_delete=django.db.models.deletion.CASCADE, related_name='student_lesson_requests', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(help_text='Teacher being asked', on_delete=django.db.models.deletion.CASCADE, related_name='teacher_lesson_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'lesson request',
                'verbose_name_plural': 'lesson requests',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['student'], name='core_lr_student_idx'),
                    models.Index(fields=['teacher'], name='core_lr_teacher_idx'),
                    models.Index(fields=['status'], name='core_lr_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Chat',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('lesson_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='chats', to='core.lessonrequest')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='student_chats', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teacher_chats', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'chat',
                'verbose_name_plural': 'chats',
                'ordering': ['-updated_at', '-id'],
                'indexes': [
                    models.Index(fields=['student'], name='core_chat_student_idx'),
                    models.Index(fields=['teacher'], name='core_chat_teacher_idx'),
                    models.Index(fields=['lesson_request'], name='core_chat_request_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'teacher', 'lesson_request'), name='unique_chat_per_lesson_request'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content', models.TextField(verbose_name='content')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('read_at', models.DateTimeField(blank=True, null=True, verbose_name='read at')),
                ('chat', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='core.chat')),
                ('sender', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_messages', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'message',
                'verbose_name_plural': 'messages',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['chat', 'created_at'], name='core_msg_chat_created_idx'),
                    models.Index(fields=['chat', 'read_at'], name='core_msg_chat_read_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('lesson_request', 'New lesson request'), ('lesson_confirmed', 'Lesson confirmed'), ('lesson_rejected', 'Lesson rejected'), ('lesson_cancelled', 'Lesson cancelled'), ('message', 'New message')], max_length=50, verbose_name='type')),
                ('title', models.CharField(max_length=255, verbose_name='title')),
                ('message', models.TextField(verbose_name='message')),
                ('related_id', models.PositiveBigIntegerField(blank=True, null=True, verbose_name='related id')),
                ('related_type', models.CharField(blank=True, choices=[('lesson_request', 'Lesson request'), ('chat', 'Chat')], max_length=50, null=True, verbose_name='related type')),
                ('is_read', models.BooleanField(default=False, verbose_name='read')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('user', models.ForeignKey(help_text='Recipient', on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'notification',
                'verbose_name_plural': 'notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['user', 'is_read'], name='core_notif_user_read_idx'),
                    models.Index(fields=['created_at'], name='core_notif_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Favorite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorites', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorited_by', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'favorite',
                'verbose_name_plural': 'favorites',
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'teacher'), name='unique_favorite_per_student_teacher'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AvailabilitySlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(verbose_name='date')),
                ('start_time', models.TimeField(verbose_name='start time')),
                ('end_time', models.TimeField(verbose_name='end time')),
                ('is_available', models.BooleanField(default=True, verbose_name='available')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='availability_slots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'availability slot',
                'verbose_name_plural': 'availability slots',
                'ordering': ['date', 'start_time'],
                'indexes': [
                    models.Index(fields=['teacher'], name='core_slot_teacher_idx'),
                    models.Index(fields=['date'], name='core_slot_date_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('teacher', 'date', 'start_time'), name='unique_slot_per_teacher_date_start'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AvailableDay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Sunday'), (1, 'Monday'), (2, 'Tuesday'), (3, 'Wednesday'), (4, 'Thursday'), (5, 'Friday'), (6, 'Saturday')], validators=[core.validators.validate_day_of_week], verbose_name='day of week')),
                ('start_time', models.TimeField(verbose_name='start time')),
                ('end_time', models.TimeField(verbose_name='end time')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='available_days', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'available day',
                'verbose_name_plural': 'available days',
                'ordering': ['day_of_week', 'start_time'],
                'indexes': [
                    models.Index(fields=['teacher'], name='core_day_teacher_idx'),
                    models.Index(fields=['day_of_week'], name='core_day_dow_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('teacher', 'day_of_week'), name='unique_available_day_per_teacher'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rating', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1, message='Rating must be at least 1.'), django.core.validators.MaxValueValidator(5, message='Rating must be at most 5.')], verbose_name='rating')),
                ('comment', models.TextField(blank=True, null=True, verbose_name='comment')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('lesson_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviews', to='core.lessonrequest')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews_given', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews_received', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'review',
                'verbose_name_plural': 'reviews',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['teacher'], name='core_review_teacher_idx'),
                    models.Index(fields=['student'], name='core_review_student_idx'),
                    models.Index(fields=['rating'], name='core_review_rating_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('teacher', 'student', 'lesson_request'), name='unique_review_per_lesson'),
                ],
            },
        ),
    ]
