from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('birth_date', models.DateField(blank=True, null=True)),
                ('age_bracket', models.CharField(blank=True, choices=[('child', 'Child'), ('adult', 'Adult')], default='', max_length=8)),
                ('guardian', models.CharField(blank=True, default='', max_length=200)),
                ('address', models.CharField(blank=True, default='', max_length=300)),
                ('phone', models.CharField(blank=True, default='', max_length=64)),
                ('email', models.CharField(blank=True, default='', max_length=254)),
                ('origin', models.CharField(blank=True, default='', max_length=200)),
                ('insurer', models.CharField(blank=True, default='', max_length=120)),
                ('card_number', models.CharField(blank=True, default='', max_length=64)),
                ('authorization_number', models.CharField(blank=True, default='', max_length=64)),
                ('authorization_date', models.CharField(blank=True, default='', max_length=32)),
                ('professionals', models.JSONField(blank=True, default=list)),
                ('specialties', models.JSONField(blank=True, default=list)),
                ('extra_data', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Patient (Cache)',
                'verbose_name_plural': 'Patients (Cache)',
                'db_table': 'patients_cache',
                'ordering': ['name', 'id'],
            },
        ),
        migrations.CreateModel(
            name='InsurancePlan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('active', models.BooleanField(default=True)),
                ('total_sessions', models.PositiveIntegerField(default=10)),
                ('used_sessions', models.PositiveIntegerField(default=0)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('frequency', models.CharField(choices=[('1x Semana', 'Weekly'), ('2x Semana', 'Twice a week'), ('Quinzenal', 'Every two weeks'), ('Outro', 'Other')], default='1x Semana', max_length=16)),
                ('alert_email', models.CharField(blank=True, default='', max_length=254)),
                ('history', models.JSONField(blank=True, default=list)),
                ('patient', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='insurance_plan', to='patients.patient')),
            ],
            options={
                'verbose_name': 'Insurance Plan',
                'verbose_name_plural': 'Insurance Plans',
                'db_table': 'patients_insurance_plan',
            },
        ),
    ]
