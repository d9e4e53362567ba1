# Generated migration for matches app

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
            name='Match',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('round', models.CharField(default='Round 1', max_length=50)),
                ('court_number', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('scheduled_time', models.DateTimeField(blank=True, null=True)),
                ('is_doubles', models.BooleanField(default=False)),
                ('player1_score', models.PositiveSmallIntegerField(default=0)),
                ('player2_score', models.PositiveSmallIntegerField(default=0)),
                ('current_set', models.PositiveSmallIntegerField(default=1)),
                ('sets', models.PositiveSmallIntegerField(default=1)),
                ('max_score', models.PositiveSmallIntegerField(default=11)),
                ('is_golden_point', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('SCHEDULED', 'Scheduled'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='SCHEDULED', max_length=20)),
                ('winner_side', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('player1', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_player1', to='tournaments.player')),
                ('player2', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_player2', to='tournaments.player')),
                ('referee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='refereed_matches', to='authentication.user')),
                ('team1', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_team1', to='tournaments.team')),
                ('team2', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_team2', to='tournaments.team')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matches', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'matches',
                'ordering': ['scheduled_time', 'id'],
                'indexes': [
                    models.Index(fields=['tournament', 'status'], name='matches_tournament_status_idx'),
                    models.Index(fields=['referee', 'status'], name='matches_referee_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SetScore',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('set_number', models.PositiveSmallIntegerField()),
                ('team1_score', models.PositiveSmallIntegerField()),
                ('team2_score', models.PositiveSmallIntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('match', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='set_scores', to='matches.match')),
            ],
            options={
                'db_table': 'set_scores',
                'ordering': ['set_number'],
                'constraints': [models.UniqueConstraint(fields=('match', 'set_number'), name='unique_set_per_match')],
            },
        ),
        migrations.CreateModel(
            name='PointEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('set_number', models.PositiveSmallIntegerField()),
                ('side', models.PositiveSmallIntegerField(choices=[(1, 'Side 1'), (2, 'Side 2')])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='authentication.user')),
                ('match', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='point_events', to='matches.match')),
            ],
            options={
                'db_table': 'point_events',
                'ordering': ['-id'],
                'indexes': [models.Index(fields=['match', 'set_number'], name='point_events_match_set_idx')],
            },
        ),
        migrations.CreateModel(
            name='MatchResult',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('winner_side', models.PositiveSmallIntegerField()),
                ('team1_sets', models.PositiveSmallIntegerField()),
                ('team2_sets', models.PositiveSmallIntegerField()),
                ('final_score', models.CharField(max_length=100)),
                ('bonus_points', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('match', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='result', to='matches.match')),
            ],
            options={
                'db_table': 'match_results',
            },
        ),
        migrations.CreateModel(
            name='MatchPerformance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('points', models.PositiveIntegerField(default=0)),
                ('aces', models.PositiveIntegerField(default=0)),
                ('faults', models.PositiveIntegerField(default=0)),
                ('winners', models.PositiveIntegerField(default=0)),
                ('errors', models.PositiveIntegerField(default=0)),
                ('rallies_won', models.PositiveIntegerField(default=0)),
                ('other_stats', models.JSONField(blank=True, default=dict)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('match', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='performances', to='matches.match')),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='performances', to='tournaments.player')),
            ],
            options={
                'db_table': 'match_performances',
                'constraints': [models.UniqueConstraint(fields=('match', 'player'), name='unique_performance_per_match')],
            },
        ),
    ]
