import apps.hafalan.verses
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


STATUS_CHOICES = [
    ('PROGRESS', 'Sedang hafalan'),
    ('COMPLETE_WAITING_RECHECK', 'Menunggu recheck'),
    ('RECHECK_PASSED', 'Lulus recheck'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('quran', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='HafalanRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('completed_verses', apps.hafalan.verses.VerseSetField(default=apps.hafalan.verses.VerseSet)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='PROGRESS', max_length=32)),
                ('notes', models.TextField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('kaca', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='hafalan_records', to='quran.kaca')),
                ('student', models.ForeignKey(limit_choices_to={'role': 'student'}, on_delete=django.db.models.deletion.PROTECT, related_name='hafalan_records', to='accounts.profile')),
                ('teacher', models.ForeignKey(blank=True, limit_choices_to={'role': 'teacher'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_hafalan_records', to='accounts.profile')),
            ],
            options={
                'ordering': ['-submitted_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status__in', ['PROGRESS', 'COMPLETE_WAITING_RECHECK'])),
                        fields=('student', 'kaca'),
                        name='unique_open_hafalan_per_kaca',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='RecheckRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('round_number', models.PositiveIntegerField()),
                ('rechecked_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('scope', apps.hafalan.verses.VerseSetField(default=apps.hafalan.verses.VerseSet)),
                ('failed_verses', apps.hafalan.verses.VerseSetField(default=apps.hafalan.verses.VerseSet)),
                ('all_passed', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True, null=True)),
                ('hafalan_record', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rechecks', to='hafalan.hafalanrecord')),
                ('rechecked_by', models.ForeignKey(limit_choices_to={'role': 'teacher'}, on_delete=django.db.models.deletion.PROTECT, related_name='rechecks_done', to='accounts.profile')),
            ],
            options={
                'ordering': ['hafalan_record', 'round_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('hafalan_record', 'round_number'), name='unique_recheck_round'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HafalanHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('occurred_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('action', models.CharField(choices=[
                    ('VERSES_ADDED', 'Verses added'),
                    ('RECHECK_SUBMITTED', 'Recheck submitted'),
                    ('NOTES_UPDATED', 'Notes updated'),
                    ('TEACHER_REASSIGNED', 'Teacher reassigned'),
                    ('PARTIAL_PROMOTED', 'Partial hafalan promoted'),
                ], max_length=32)),
                ('completed_verses_snapshot', apps.hafalan.verses.VerseSetField(default=apps.hafalan.verses.VerseSet)),
                ('status_snapshot', models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ('note_snapshot', models.TextField(blank=True, null=True)),
                ('hafalan_record', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='hafalan.hafalanrecord')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='hafalan_history', to='accounts.profile')),
            ],
            options={
                'verbose_name_plural': 'hafalan history',
                'ordering': ['occurred_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='PartialHafalan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('verse_number', models.PositiveSmallIntegerField()),
                ('progress_note', models.CharField(max_length=500)),
                ('percentage', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(99)])),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'Sedang berjalan'), ('COMPLETED', 'Selesai'), ('CANCELLED', 'Dibatalkan')], default='IN_PROGRESS', max_length=16)),
                ('started_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('kaca', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='partial_hafalan', to='quran.kaca')),
                ('linked_record', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='promoted_partials', to='hafalan.hafalanrecord')),
                ('student', models.ForeignKey(limit_choices_to={'role': 'student'}, on_delete=django.db.models.deletion.PROTECT, related_name='partial_hafalan', to='accounts.profile')),
                ('teacher', models.ForeignKey(blank=True, limit_choices_to={'role': 'teacher'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='partial_hafalan_supervised', to='accounts.profile')),
            ],
            options={
                'verbose_name_plural': 'partial hafalan',
                'ordering': ['-started_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'IN_PROGRESS')),
                        fields=('student', 'kaca', 'verse_number'),
                        name='unique_active_partial_per_verse',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('percentage__gte', 1), ('percentage__lte', 99)),
                        name='partial_percentage_1_99',
                    ),
                ],
            },
        ),
    ]
