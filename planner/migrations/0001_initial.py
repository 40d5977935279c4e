import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Trip',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('current_location', models.CharField(help_text='Starting location address', max_length=500)),
                ('pickup_location', models.CharField(help_text='Pickup location address', max_length=500)),
                ('dropoff_location', models.CharField(help_text='Dropoff location address', max_length=500)),
                ('current_location_lat', models.FloatField(blank=True, null=True)),
                ('current_location_lon', models.FloatField(blank=True, null=True)),
                ('pickup_location_lat', models.FloatField(blank=True, null=True)),
                ('pickup_location_lon', models.FloatField(blank=True, null=True)),
                ('dropoff_location_lat', models.FloatField(blank=True, null=True)),
                ('dropoff_location_lon', models.FloatField(blank=True, null=True)),
                ('cycle_hours_used', models.FloatField(default=0, help_text='Hours already used in the 8-day cycle', validators=[django.core.validators.MinValueValidator(0)])),
                ('total_distance_miles', models.FloatField(blank=True, null=True)),
                ('total_driving_hours', models.FloatField(blank=True, null=True)),
                ('total_on_duty_hours', models.FloatField(blank=True, null=True)),
                ('total_days', models.IntegerField(blank=True, null=True)),
                ('cycle_compliant', models.BooleanField(default=True)),
                ('driving_prohibited', models.BooleanField(default=False)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('route_geometry', models.JSONField(blank=True, default=list, help_text='Route points as [lat, lng]')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Trip',
                'verbose_name_plural': 'Trips',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DailyLogRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('day_of_trip', models.IntegerField(help_text='Day number of the trip (1, 2, 3...)')),
                ('log_date', models.DateField()),
                ('grid', models.JSONField(default=list, help_text='96 duty statuses, one per 15 minutes')),
                ('duty_status_changes', models.JSONField(blank=True, default=list)),
                ('total_drive_time', models.FloatField(default=0)),
                ('total_on_duty_time', models.FloatField(default=0)),
                ('total_off_duty_time', models.FloatField(default=0)),
                ('total_sleeper_berth_time', models.FloatField(default=0)),
                ('odometer_start', models.FloatField(default=0)),
                ('odometer_end', models.FloatField(default=0)),
                ('distance_traveled', models.FloatField(default=0)),
                ('cycle_hours_used', models.FloatField(default=0)),
                ('prior_off_duty_hours', models.FloatField(blank=True, null=True)),
                ('violations', models.JSONField(blank=True, default=list)),
                ('hos_compliant', models.BooleanField(default=True)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='daily_logs', to='planner.trip')),
            ],
            options={
                'verbose_name': 'Daily Log',
                'verbose_name_plural': 'Daily Logs',
                'ordering': ['trip', 'day_of_trip'],
                'unique_together': {('trip', 'day_of_trip')},
            },
        ),
        migrations.CreateModel(
            name='TripStop',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('stop_type', models.CharField(choices=[('rest', 'Rest Stop (10-hour off-duty)'), ('fuel', 'Fuel Stop')], max_length=20)),
                ('day_number', models.IntegerField(help_text='Trip day on which the stop happens')),
                ('latitude', models.FloatField()),
                ('longitude', models.FloatField()),
                ('miles_from_start', models.FloatField(help_text='Miles from trip start')),
                ('duration_hours', models.FloatField(help_text='Stop duration in hours')),
                ('notes', models.CharField(blank=True, max_length=500)),
                ('sequence', models.IntegerField(help_text='Order of this stop in the trip')),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stops', to='planner.trip')),
            ],
            options={
                'verbose_name': 'Trip Stop',
                'verbose_name_plural': 'Trip Stops',
                'ordering': ['trip', 'sequence'],
            },
        ),
    ]
