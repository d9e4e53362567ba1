# Generated migration for tournaments app

from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('authentication', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Tournament',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('location', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('SINGLES', 'Singles'), ('DOUBLES', 'Doubles'), ('MIXED_DOUBLES', 'Mixed doubles'), ('ROUND_ROBIN', 'Round robin'), ('KNOCKOUT', 'Knockout'), ('LEAGUE', 'League')], default='SINGLES', max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('REGISTRATION_OPEN', 'Registration open'), ('REGISTRATION_CLOSED', 'Registration closed'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='DRAFT', max_length=20)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField()),
                ('registration_open_date', models.DateTimeField(blank=True, null=True)),
                ('registration_close_date', models.DateTimeField()),
                ('max_participants', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(2)])),
                ('entry_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('prize_money', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('fantasy_settings', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organizer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='organized_tournaments', to='authentication.user')),
            ],
            options={
                'db_table': 'tournaments',
                'ordering': ['-start_date'],
                'indexes': [models.Index(fields=['status'], name='tournaments_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='Player',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('country', models.CharField(blank=True, default='', max_length=100)),
                ('age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, default='', max_length=10)),
                ('image_url', models.URLField(blank=True, default='')),
                ('skill_level', models.CharField(choices=[('BEGINNER', 'Beginner'), ('INTERMEDIATE', 'Intermediate'), ('ADVANCED', 'Advanced'), ('PROFESSIONAL', 'Professional')], default='INTERMEDIATE', max_length=20)),
                ('ranking', models.PositiveIntegerField(blank=True, null=True)),
                ('total_points', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='player_profile', to='authentication.user')),
            ],
            options={
                'db_table': 'players',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teams', to='tournaments.tournament')),
                ('players', models.ManyToManyField(related_name='teams', to='tournaments.player')),
            ],
            options={
                'db_table': 'teams',
                'ordering': ['name'],
                'constraints': [models.UniqueConstraint(fields=('tournament', 'name'), name='unique_team_name_per_tournament')],
            },
        ),
        migrations.CreateModel(
            name='TournamentEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('seed', models.PositiveIntegerField(blank=True, null=True)),
                ('payment_status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid'), ('WAIVED', 'Waived')], default='PENDING', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='tournaments.player')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'tournament_entries',
                'ordering': ['created_at'],
                'constraints': [models.UniqueConstraint(fields=('tournament', 'player'), name='unique_player_per_tournament')],
            },
        ),
        migrations.CreateModel(
            name='PlayerStats',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('matches_played', models.PositiveIntegerField(default=0)),
                ('wins', models.PositiveIntegerField(default=0)),
                ('losses', models.PositiveIntegerField(default=0)),
                ('points_scored', models.PositiveIntegerField(default=0)),
                ('points_conceded', models.PositiveIntegerField(default=0)),
                ('fantasy_points', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stats', to='tournaments.player')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='player_stats', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'player_stats',
                'ordering': ['-wins'],
                'constraints': [models.UniqueConstraint(fields=('tournament', 'player'), name='unique_stats_per_tournament')],
            },
        ),
    ]
