"""Repository layer for centralized database access."""

from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.repositories.member_repository import MemberRepository
from rugby_club.repositories.player_repository import PlayerRepository
from rugby_club.repositories.coach_repository import CoachRepository
from rugby_club.repositories.squad_repository import SquadRepository
from rugby_club.repositories.game_repository import GameRepository
from rugby_club.repositories.training_repository import TrainingRepository
from rugby_club.repositories.announcement_repository import AnnouncementRepository
from rugby_club.repositories.user_repository import UserRepository

__all__ = [
    'BaseRepository',
    'MemberRepository',
    'PlayerRepository',
    'CoachRepository',
    'SquadRepository',
    'GameRepository',
    'TrainingRepository',
    'AnnouncementRepository',
    'UserRepository',
]
