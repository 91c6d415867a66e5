import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Device',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('device_id', models.CharField(help_text='External device identifier (IMEI, device UUID, etc.)', max_length=100, unique=True)),
                ('display_name', models.CharField(help_text='Friendly name for the device', max_length=200)),
                ('phone_number', models.CharField(blank=True, help_text='Optional phone number of the device', max_length=50, null=True)),
                ('last_seen_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Last registration or location update from this device')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='When this device was first registered')),
            ],
            options={
                'verbose_name': 'Device',
                'verbose_name_plural': 'Devices',
                'db_table': 'devices',
                'ordering': ['-last_seen_at'],
            },
        ),
        migrations.CreateModel(
            name='LocationSample',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('latitude', models.FloatField(help_text='Latitude in decimal degrees (-90 to +90)')),
                ('longitude', models.FloatField(help_text='Longitude in decimal degrees (-180 to +180)')),
                ('accuracy', models.FloatField(blank=True, help_text='Accuracy of the fix in meters', null=True)),
                ('altitude', models.FloatField(blank=True, help_text='Altitude in meters, negative below sea level', null=True)),
                ('battery_level', models.IntegerField(blank=True, help_text='Battery percentage 0-100', null=True)),
                ('recorded_at', models.DateTimeField(help_text='Server time at which the sample was ingested')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='When this row was written')),
                ('device', models.ForeignKey(db_column='device_ref', help_text='The device that reported this location', on_delete=django.db.models.deletion.CASCADE, related_name='locations', to='phone_tracker.device')),
            ],
            options={
                'verbose_name': 'Location sample',
                'verbose_name_plural': 'Location samples',
                'db_table': 'locations',
                'ordering': ['-recorded_at', '-id'],
                'indexes': [models.Index(fields=['device', '-recorded_at', '-id'], name='locations_device_recent_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('latitude__gte', -90), ('latitude__lte', 90)), name='locations_latitude_range'),
                    models.CheckConstraint(condition=models.Q(('longitude__gte', -180), ('longitude__lte', 180)), name='locations_longitude_range'),
                    models.CheckConstraint(condition=models.Q(('accuracy__isnull', True), ('accuracy__gte', 0), _connector='OR'), name='locations_accuracy_non_negative'),
                    models.CheckConstraint(condition=models.Q(('battery_level__isnull', True), models.Q(('battery_level__gte', 0), ('battery_level__lte', 100)), _connector='OR'), name='locations_battery_level_range'),
                ],
            },
        ),
    ]
