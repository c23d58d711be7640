from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.CharField(max_length=80, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(db_index=True, max_length=64)),
                ('patient_name', models.CharField(blank=True, default='', max_length=200)),
                ('card_number', models.CharField(blank=True, default='', max_length=64)),
                ('insurer_name', models.CharField(blank=True, default='', max_length=120)),
                ('authorization_number', models.CharField(blank=True, default='', max_length=64)),
                ('authorization_date', models.CharField(blank=True, default='', max_length=32)),
                ('professional', models.CharField(db_index=True, max_length=200)),
                ('date', models.DateField(db_index=True)),
                ('time', models.CharField(max_length=5)),
                ('type', models.CharField(choices=[('insurance', 'Insurance'), ('private', 'Private')], default='private', max_length=16)),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='scheduled', max_length=16)),
                ('note', models.TextField(blank=True, default='')),
                ('cache_order', models.PositiveIntegerField(db_index=True, default=0)),
                ('extra_data', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Appointment (Cache)',
                'verbose_name_plural': 'Appointments (Cache)',
                'db_table': 'appointments_cache',
                'ordering': ['cache_order', 'id'],
                'indexes': [models.Index(fields=['date', 'time'], name='appointment_date_time_idx')],
            },
        ),
    ]
