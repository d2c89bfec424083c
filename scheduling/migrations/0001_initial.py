import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='HolidaySet',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Subject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='HolidayWindow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('school_year', models.CharField(blank=True, default='', max_length=20)),
                ('holiday_set', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='windows', to='scheduling.holidayset')),
            ],
            options={
                'ordering': ['start_date', 'id'],
                'indexes': [models.Index(fields=['holiday_set', 'start_date', 'end_date'], name='scheduling__holiday_3b9f1e_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('start_date__lte', models.F('end_date'))), name='holiday_window_start_before_end')],
            },
        ),
        migrations.CreateModel(
            name='Site',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('holiday_set', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sites', to='scheduling.holidayset')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('site', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='scheduling.site')),
            ],
            options={
                'ordering': ['site', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('participant_ids', models.JSONField(blank=True, default=list, help_text='Identifiers of enrolled participants')),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('duration_minutes', models.PositiveIntegerField(default=90, validators=[django.core.validators.MinValueValidator(1)])),
                ('note', models.TextField(blank=True, default='')),
                ('completed', models.BooleanField(default=False)),
                ('series_id', models.UUIDField(blank=True, db_index=True, help_text='Shared by all sessions generated from one recurring request', null=True)),
                ('weekday', models.PositiveSmallIntegerField(blank=True, choices=[(0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'), (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday')], help_text='Weekday the series was anchored to (0=Monday, 6=Sunday)', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sessions', to='scheduling.room')),
                ('site', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to='scheduling.site')),
                ('staff', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='scheduled_sessions', to=settings.AUTH_USER_MODEL)),
                ('subjects', models.ManyToManyField(blank=True, related_name='sessions', to='scheduling.subject')),
            ],
            options={
                'ordering': ['date', 'start_time', 'id'],
                'indexes': [
                    models.Index(fields=['staff', 'date'], name='scheduling__staff_i_5c2a8d_idx'),
                    models.Index(fields=['series_id', 'date'], name='scheduling__series__e41b07_idx'),
                    models.Index(fields=['site', 'date'], name='scheduling__site_id_9a6c3f_idx'),
                ],
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('series_id__isnull', True), ('weekday__isnull', True)), models.Q(('series_id__isnull', False), ('weekday__isnull', False)), _connector='OR'), name='session_series_id_with_weekday')],
            },
        ),
    ]
