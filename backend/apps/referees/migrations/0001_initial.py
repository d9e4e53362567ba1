# Generated migration for referees app

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('authentication', '0001_initial'),
        ('tournaments', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Referee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('certification_level', models.CharField(choices=[('BASIC', 'Basic'), ('ADVANCED', 'Advanced'), ('PROFESSIONAL', 'Professional')], default='BASIC', max_length=20)),
                ('experience_years', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='referee_profile', to='authentication.user')),
            ],
            options={
                'db_table': 'referees',
            },
        ),
        migrations.CreateModel(
            name='RefereeJoinRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], default='PENDING', max_length=10)),
                ('message', models.TextField(blank=True, default='')),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('referee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='join_requests', to='referees.referee')),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='authentication.user')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='referee_requests', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'referee_join_requests',
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(fields=('tournament', 'referee'), name='unique_referee_request')],
            },
        ),
    ]
