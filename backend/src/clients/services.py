import logging
from sqlalchemy.ext.asyncio import AsyncSession
from src.common.services import AppService
from src.clients.models import Client
from src.clients.schemas import ClientCreate, ClientUpdate, ClientMatchRequest
from src.matching.schemas import EntityKind, MatchResult
from src.matching.service import match_entities

logger = logging.getLogger(__name__)


class ClientService(AppService[Client, ClientCreate, ClientUpdate]):
    def __init__(self, session: AsyncSession):
        super().__init__(model=Client, session=session)

    async def match(self, partial: ClientMatchRequest, user_id: str) -> MatchResult:
        """
        Rank the user's saved clients against partially known client details.

        Args:
            partial: Any subset of name, email, phone, address and tax number
            user_id: Owner whose clients are searched

        Returns:
            MatchResult with up to three Client rows
        """
        candidates = await self.list_for_user(user_id)
        result = match_entities(partial, candidates, EntityKind.CLIENT)
        logger.info(f"Client match for user {user_id}: {len(result.matches)} matches, confidence {result.confidence.value}")
        return result
