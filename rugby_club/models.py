from datetime import datetime
from typing import Optional
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Date, Table, Text
from sqlalchemy.schema import UniqueConstraint
from sqlalchemy.orm import relationship
from rugby_club.database import Base
from rugby_club.utils.validators import parse_final_score
import enum as python_enum


class UserRole(python_enum.Enum):
    SECRETARY = 'Secretary'
    COACH = 'Coach'
    PLAYER = 'Player'
    MEMBER = 'Member'


# Shirt number -> position name
RUGBY_POSITIONS = {
    1: 'Loose-head prop',
    2: 'Hooker',
    3: 'Tight-head prop',
    4: 'Second-row',
    5: 'Second-row',
    6: 'Blindside flanker',
    7: 'Open side flanker',
    8: 'Number 8',
    9: 'Scrum-half',
    10: 'Fly-half',
    11: 'Left wing',
    12: 'Inside centre',
    13: 'Outside centre',
    14: 'Right wing',
    15: 'Full-back',
}


def position_for_number(number: int) -> Optional[str]:
    """Position name for a shirt number 1-15, None otherwise"""
    return RUGBY_POSITIONS.get(number)


def all_positions() -> list[str]:
    """Distinct position names in shirt-number order"""
    return list(dict.fromkeys(RUGBY_POSITIONS.values()))


# Relationships below are read-side only (eager loading in queries).
# Writes go through the foreign key columns so association rows inserted by
# statement never disagree with a collection cached in the session.

class Member(Base):
    """Base identity and contact record for any person at the club"""
    __tablename__ = 'member'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True, unique=True)
    phone = Column(String, nullable=True, index=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {'version_id_col': version}


# Association table for many-to-many coach assignments
coach_squad = Table(
    'coach_squad',
    Base.metadata,
    Column('coach_id', Integer, ForeignKey('coach.id'), primary_key=True),
    Column('squad_id', Integer, ForeignKey('squad.id'), primary_key=True),
)


class Squad(Base):
    """Team grouping of players and coaches for one age grade"""
    __tablename__ = 'squad'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    age_grade = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    players = relationship('Player', viewonly=True)
    coaches = relationship('Coach', secondary=coach_squad, viewonly=True)

    __mapper_args__ = {'version_id_col': version}


class Player(Base):
    __tablename__ = 'player'

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey('member.id'), nullable=True, unique=True)
    name = Column(String, nullable=False, index=True)
    position = Column(String, nullable=False)
    age_grade = Column(String, nullable=True, index=True)
    squad_id = Column(Integer, ForeignKey('squad.id'), nullable=True, index=True)
    emergency_contact_id = Column(Integer, ForeignKey('member.id'), nullable=True)
    medical_conditions = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    member = relationship('Member', foreign_keys=[member_id], viewonly=True)
    emergency_contact = relationship('Member', foreign_keys=[emergency_contact_id], viewonly=True)
    squad = relationship('Squad', viewonly=True)
    game_stats = relationship('GameStats', viewonly=True)
    attendance_records = relationship('TrainingAttendance', viewonly=True)

    __mapper_args__ = {'version_id_col': version}


class Coach(Base):
    __tablename__ = 'coach'

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey('member.id'), nullable=True, unique=True)
    name = Column(String, nullable=False, index=True)
    qualifications = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    member = relationship('Member', viewonly=True)
    squads = relationship('Squad', secondary=coach_squad, viewonly=True)

    __mapper_args__ = {'version_id_col': version}


class Game(Base):
    """Fixture played by a squad"""
    __tablename__ = 'game'

    id = Column(Integer, primary_key=True)
    squad_id = Column(Integer, ForeignKey('squad.id'), nullable=False, index=True)
    opponent = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    venue = Column(String, nullable=True)
    final_score = Column(String, nullable=True)  # "ours - theirs", e.g. "24 - 17"
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    squad = relationship('Squad', viewonly=True)
    stats = relationship('GameStats', viewonly=True)

    __mapper_args__ = {'version_id_col': version}

    @property
    def score(self) -> Optional[tuple[int, int]]:
        """(points for, points against) or None if no usable score"""
        return parse_final_score(self.final_score)


class GameStats(Base):
    """Performance of one player in one game"""
    __tablename__ = 'game_stats'

    id = Column(Integer, primary_key=True)
    game_id = Column(Integer, ForeignKey('game.id'), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey('player.id'), nullable=False, index=True)
    tackles = Column(Integer, default=0)
    passes = Column(Integer, default=0)
    tries = Column(Integer, default=0)
    kicks = Column(Integer, default=0)
    overall_rating = Column(Integer, nullable=True)
    attended = Column(Boolean, default=True)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    game = relationship('Game', viewonly=True)
    player = relationship('Player', viewonly=True)

    __table_args__ = (
        UniqueConstraint('game_id', 'player_id', name='game_stats_game_player_unique'),
    )
    __mapper_args__ = {'version_id_col': version}


class Training(Base):
    """Training session for a squad"""
    __tablename__ = 'training'

    id = Column(Integer, primary_key=True)
    squad_id = Column(Integer, ForeignKey('squad.id'), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    focus_area = Column(String, nullable=True)
    coach_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    squad = relationship('Squad', viewonly=True)
    attendance_records = relationship('TrainingAttendance', viewonly=True)

    __mapper_args__ = {'version_id_col': version}


class TrainingAttendance(Base):
    __tablename__ = 'training_attendance'

    id = Column(Integer, primary_key=True)
    training_id = Column(Integer, ForeignKey('training.id'), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey('player.id'), nullable=False, index=True)
    present = Column(Boolean, nullable=False, default=False)
    player_notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    training = relationship('Training', viewonly=True)
    player = relationship('Player', viewonly=True)

    __table_args__ = (
        UniqueConstraint('training_id', 'player_id', name='training_attendance_training_player_unique'),
    )
    __mapper_args__ = {'version_id_col': version}


class Announcement(Base):
    """Broadcast message from a club official"""
    __tablename__ = 'announcement'

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=True)
    sent_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    sent_by = Column(String, nullable=False, index=True)  # username of the sender
    recipient = Column(String, nullable=True, index=True)  # e.g. "All Members", a squad name
    is_important = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {'version_id_col': version}


class User(Base):
    """Login account linked to a member"""
    __tablename__ = 'user'

    id = Column(Integer, primary_key=True)
    username = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)
    member_id = Column(Integer, ForeignKey('member.id'), nullable=True, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    member = relationship('Member', viewonly=True)

    __mapper_args__ = {'version_id_col': version}

    @property
    def password(self) -> Optional[str]:
        """Plain password waiting to be hashed by the repository; never persisted"""
        return getattr(self, '_plain_password', None)

    @password.setter
    def password(self, value: Optional[str]) -> None:
        self._plain_password = value
