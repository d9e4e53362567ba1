# Generated migration for fantasy app

import apps.fantasy.models
from decimal import Decimal
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('authentication', '0001_initial'),
        ('tournaments', '0001_initial'),
        ('matches', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FantasyContest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('description', models.TextField(blank=True, default='')),
                ('entry_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('prize_pool', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('max_entries', models.PositiveIntegerField(default=100)),
                ('current_entries', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('OPEN', 'Open'), ('ONGOING', 'Ongoing'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='DRAFT', max_length=10)),
                ('rules', models.JSONField(blank=True, default=apps.fantasy.models.default_contest_rules)),
                ('prize_breakdown', models.JSONField(blank=True, default=list)),
                ('is_prizes_distributed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contests', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'fantasy_contests',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='FantasyTeam',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('total_points', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('rank', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('contest', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teams', to='fantasy.fantasycontest')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fantasy_teams', to='authentication.user')),
            ],
            options={
                'db_table': 'fantasy_teams',
                'ordering': ['-total_points', 'created_at'],
                'constraints': [models.UniqueConstraint(fields=('user', 'contest'), name='unique_team_per_user_contest')],
            },
        ),
        migrations.CreateModel(
            name='FantasyTeamPlayer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_captain', models.BooleanField(default=False)),
                ('is_vice_captain', models.BooleanField(default=False)),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fantasy_selections', to='tournaments.player')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='selections', to='fantasy.fantasyteam')),
            ],
            options={
                'db_table': 'fantasy_team_players',
                'constraints': [models.UniqueConstraint(fields=('team', 'player'), name='unique_player_per_fantasy_team')],
            },
        ),
        migrations.CreateModel(
            name='FantasyPoints',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('points', models.DecimalField(decimal_places=2, max_digits=8)),
                ('category', models.CharField(choices=[('MATCH_WIN', 'Match win'), ('MATCH_PARTICIPATION', 'Match participation'), ('PERFORMANCE', 'Performance'), ('POSITION_BONUS', 'Position bonus'), ('MVP_BONUS', 'MVP bonus')], max_length=20)),
                ('description', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('match', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='fantasy_points', to='matches.match')),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fantasy_points', to='tournaments.player')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fantasy_points', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'fantasy_points',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['tournament', 'player'], name='fantasy_pts_tourn_player_idx')],
            },
        ),
        migrations.CreateModel(
            name='PrizeDistributionRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rank', models.PositiveIntegerField()),
                ('percentage', models.DecimalField(decimal_places=3, max_digits=6)),
                ('min_players', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('contest', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='prize_rules', to='fantasy.fantasycontest')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prize_rules', to='tournaments.tournament')),
            ],
            options={
                'db_table': 'prize_distribution_rules',
                'ordering': ['rank'],
            },
        ),
        migrations.CreateModel(
            name='PrizeDisbursement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rank', models.PositiveIntegerField()),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('processing_fee', models.DecimalField(decimal_places=2, max_digits=10)),
                ('net_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PROCESSING', 'Processing'), ('COMPLETED', 'Completed'), ('FAILED', 'Failed')], default='PENDING', max_length=10)),
                ('payout_id', models.CharField(blank=True, default='', max_length=100)),
                ('failure_reason', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('contest', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disbursements', to='fantasy.fantasycontest')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disbursements', to='fantasy.fantasyteam')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prize_disbursements', to='authentication.user')),
            ],
            options={
                'db_table': 'prize_disbursements',
                'ordering': ['rank', 'id'],
            },
        ),
    ]
