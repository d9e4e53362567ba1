"""
Test factories for creating consistent test data.
"""
from datetime import timedelta
from decimal import Decimal

import bcrypt
import factory
from django.utils import timezone
from faker import Faker

from apps.authentication.models import ApprovalStatus, User
from apps.core.permissions import Role
from apps.fantasy.models import ContestStatus, FantasyContest
from apps.matches.models import Match
from apps.payments.models import BankAccount, Payment
from apps.referees.models import Referee, RefereeJoinRequest
from apps.tournaments.models import (
    Player,
    PlayerStats,
    SkillLevel,
    Team,
    Tournament,
    TournamentEntry,
    TournamentStatus,
)

fake = Faker()

DEFAULT_PASSWORD = 'password123'
# Low cost keeps the suite fast; check_password reads the cost from the hash
DEFAULT_PASSWORD_HASH = bcrypt.hashpw(DEFAULT_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    email = factory.Sequence(lambda n: f'user{n}@example.com')
    name = factory.Faker('name')
    phone = ''
    password_hash = DEFAULT_PASSWORD_HASH
    role = Role.USER
    approval_status = ApprovalStatus.APPROVED
    is_active = True


class PlayerUserFactory(UserFactory):
    role = Role.PLAYER


class RefereeUserFactory(UserFactory):
    role = Role.REFEREE


class AdminFactory(UserFactory):
    role = Role.TOURNAMENT_ADMIN


class MasterAdminFactory(UserFactory):
    role = Role.MASTER_ADMIN


class TournamentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Tournament

    name = factory.LazyAttribute(lambda obj: f'{fake.city()} Open')
    location = factory.Faker('city')
    status = TournamentStatus.REGISTRATION_OPEN
    start_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))
    end_date = factory.LazyAttribute(lambda obj: obj.start_date + timedelta(days=3))
    registration_close_date = factory.LazyAttribute(lambda obj: obj.start_date - timedelta(days=2))
    max_participants = 32
    entry_fee = Decimal('0.00')
    organizer = factory.SubFactory(AdminFactory)


class PlayerFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Player

    name = factory.Faker('name')
    country = factory.Faker('country')
    skill_level = SkillLevel.INTERMEDIATE


class TournamentEntryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = TournamentEntry

    tournament = factory.SubFactory(TournamentFactory)
    player = factory.SubFactory(PlayerFactory)
    payment_status = 'WAIVED'

    @factory.post_generation
    def stats(obj, create, extracted, **kwargs):
        if create:
            PlayerStats.objects.get_or_create(tournament=obj.tournament, player=obj.player)


class TeamFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Team

    name = factory.Sequence(lambda n: f'Team {n}')
    tournament = factory.SubFactory(TournamentFactory)

    @factory.post_generation
    def players(obj, create, extracted, **kwargs):
        if create and extracted:
            obj.players.set(extracted)


class MatchFactory(factory.django.DjangoModelFactory):
    """Singles match; pass registered players or let the factory register two."""

    class Meta:
        model = Match

    tournament = factory.SubFactory(TournamentFactory)
    round = 'Round 1'
    referee = factory.LazyAttribute(lambda obj: obj.tournament.organizer)
    player1 = factory.LazyAttribute(
        lambda obj: TournamentEntryFactory(tournament=obj.tournament).player
    )
    player2 = factory.LazyAttribute(
        lambda obj: TournamentEntryFactory(tournament=obj.tournament).player
    )
    sets = 1
    max_score = 11


class RefereeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Referee

    user = factory.SubFactory(RefereeUserFactory)


class JoinRequestFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = RefereeJoinRequest

    tournament = factory.SubFactory(TournamentFactory)
    referee = factory.SubFactory(RefereeFactory)


class FantasyContestFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = FantasyContest

    tournament = factory.SubFactory(TournamentFactory)
    name = factory.Sequence(lambda n: f'Contest {n}')
    entry_fee = Decimal('0.00')
    max_entries = 100
    status = ContestStatus.OPEN
    rules = factory.LazyFunction(lambda: {
        'teamSize': 3,
        'walletSize': 100000,
        'playerCategories': {},
        'allowTeamChanges': False,
        'maxPlayersToChange': 2,
    })


class PaymentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Payment

    user = factory.SubFactory(UserFactory)
    contest = factory.SubFactory(FantasyContestFactory, entry_fee=Decimal('100.00'))
    tournament = factory.LazyAttribute(lambda obj: obj.contest.tournament)
    amount = factory.LazyAttribute(lambda obj: obj.contest.entry_fee)
    razorpay_order_id = factory.Sequence(lambda n: f'order_test_{n}')
    prize_pool_share = factory.LazyAttribute(lambda obj: obj.amount * Decimal('0.8'))


class BankAccountFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = BankAccount

    user = factory.SubFactory(UserFactory)
    account_holder_name = factory.Faker('name')
    ifsc_code = 'HDFC0001234'
    bank_name = 'HDFC Bank'
    is_primary = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Encrypt the account number the way the service does."""
        account_number = kwargs.pop('account_number', '123456789012')
        instance = model_class(*args, **kwargs)
        instance.set_account_number(account_number)
        instance.save()
        return instance
