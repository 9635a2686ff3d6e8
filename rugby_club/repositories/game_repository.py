"""Repository for Game and GameStats models."""

import logging
from datetime import date
from typing import Optional, List
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.exceptions import ValidationError
from rugby_club.models import Game, GameStats
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.schemas import SquadRecord
from rugby_club.utils.validators import FieldValidators, parse_final_score

logger = logging.getLogger(__name__)

_STATS_FIELDS = ('tackles', 'passes', 'tries', 'kicks', 'overall_rating', 'attended')


class GameRepository(BaseRepository[Game]):
    """Repository for Game operations and per-player game statistics."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Game)

    def _default_order(self) -> list:
        return [Game.date, Game.id]

    async def find_by_squad(self, squad_id: int) -> List[Game]:
        stmt = select(Game).where(Game.squad_id == squad_id).order_by(Game.date, Game.id)
        return await self._scalars(stmt)

    async def find_by_opponent(self, opponent: str) -> List[Game]:
        """Find games whose opponent contains the text, ignoring case."""
        stmt = select(Game).where(Game.opponent.icontains(opponent, autoescape=True)).order_by(Game.date, Game.id)
        return await self._scalars(stmt)

    async def find_games_after_date(self, on_or_after: date) -> List[Game]:
        """Games on or after the date."""
        return await self._find_in_date_range(Game.date, start=on_or_after)

    async def find_games_before_date(self, on_or_before: date) -> List[Game]:
        """Games on or before the date."""
        return await self._find_in_date_range(Game.date, end=on_or_before)

    async def find_games_between_dates(self, start_date: date, end_date: date) -> List[Game]:
        """Games from start_date to end_date inclusive."""
        if not FieldValidators.validate_date_range(start_date, end_date):
            return []
        return await self._find_in_date_range(Game.date, start=start_date, end=end_date)

    async def find_upcoming_games(self) -> List[Game]:
        """Games from today onwards, soonest first."""
        return await self._find_in_date_range(Game.date, start=date.today())

    async def find_recent_games(self, limit: Optional[int] = None) -> List[Game]:
        """Games played before today, most recent first."""
        stmt = select(Game).where(Game.date < date.today()).order_by(Game.date.desc(), Game.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._scalars(stmt)

    async def get_squad_record(self, squad_id: int) -> SquadRecord:
        """Count wins, losses and draws from the squad's final scores.

        Games without a parseable "ours - theirs" score are not counted.
        """
        result = await self.execute(select(Game.id, Game.final_score).where(Game.squad_id == squad_id))
        record = SquadRecord()
        for game_id, final_score in result.all():
            score = parse_final_score(final_score)
            if score is None:
                if final_score:
                    logger.debug(f"Skipping game {game_id} with unparseable score {final_score!r}")
                continue
            ours, theirs = score
            if ours > theirs:
                record.wins += 1
            elif ours < theirs:
                record.losses += 1
            else:
                record.draws += 1
        return record

    # Game statistics

    async def add_game_stats(self, stats: GameStats) -> bool:
        """Insert one player's stats for a game.

        Raises ConflictError if the player already has stats for the game.
        """
        stats.id = None
        self._validate_stats(stats)
        self.db.add(stats)
        await self._commit(f"add GameStats for Player {stats.player_id} in Game {stats.game_id}")
        logger.info(f"Recorded stats for player {stats.player_id} in game {stats.game_id}")
        return True

    async def update_game_stats(self, stats: GameStats) -> bool:
        """Overwrite the stats row for (game, player). False if none exists."""
        row = await self.get_player_game_stats(stats.game_id, stats.player_id)
        if row is None:
            return False
        if row is not stats:
            for field in _STATS_FIELDS:
                value = getattr(stats, field)
                if value is not None:
                    setattr(row, field, value)
        await self._commit(f"update GameStats for Player {stats.player_id} in Game {stats.game_id}")
        return True

    async def get_game_stats(self, game_id: int) -> List[GameStats]:
        stmt = select(GameStats).where(GameStats.game_id == game_id).order_by(GameStats.player_id)
        return await self._scalars(stmt)

    async def get_stats_by_player(self, player_id: int) -> List[GameStats]:
        stmt = (
            select(GameStats)
            .join(Game, Game.id == GameStats.game_id)
            .where(GameStats.player_id == player_id)
            .order_by(Game.date, Game.id)
        )
        return await self._scalars(stmt)

    async def get_player_game_stats(self, game_id: int, player_id: int) -> Optional[GameStats]:
        stmt = select(GameStats).where(
            GameStats.game_id == game_id,
            GameStats.player_id == player_id,
        )
        return await self._one_or_none(stmt)

    def _validate_stats(self, stats: GameStats) -> None:
        missing = [key for key in ('game_id', 'player_id') if getattr(stats, key) is None]
        if missing:
            raise ValidationError(
                f"Invalid GameStats: missing {', '.join(missing)}",
                details={"missing": missing, "invalid": {}},
            )

    def _field_errors(self, entity: Game) -> dict[str, str]:
        errors = {}
        if entity.final_score and not FieldValidators.validate_final_score(entity.final_score):
            errors['final_score'] = 'Score must look like "24 - 17"'
        return errors

    async def _delete_dependents(self, entity: Game) -> None:
        await self.execute(delete(GameStats).where(GameStats.game_id == entity.id))
