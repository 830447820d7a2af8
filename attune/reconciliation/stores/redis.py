"""Redis implementation of ReconciliationStore.

Records are stored as pydantic JSON documents. The three atomic
read-modify-write operations run server-side:
- direction compare-and-set and create-if-absent as Lua scripts
- the refinement counter as a Lua script over a hash
- the context-shared guard as SET NX
"""

from uuid import UUID

import redis.asyncio as redis

from attune.observability.logging import get_logger
from attune.reconciliation.exceptions import StoreConnectionError
from attune.reconciliation.models import (
    DirectionState,
    EmpathyAttempt,
    ReconcilerResult,
    ShareOffer,
    ValidationFeedback,
    utc_now,
)
from attune.reconciliation.store import ReconciliationStore

logger = get_logger(__name__)


_CREATE_DIRECTION_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
  return 0
end
redis.call('HSET', KEYS[1], 'version', ARGV[1], 'doc', ARGV[2])
redis.call('SADD', KEYS[2], ARGV[3])
return 1
"""

_COMPARE_AND_SET_SCRIPT = """
local current = redis.call('HGET', KEYS[1], 'version')
if current == false or current ~= ARGV[1] then
  return 0
end
redis.call('HSET', KEYS[1], 'version', ARGV[2], 'doc', ARGV[3])
return 1
"""

_INCREMENT_ATTEMPTS_SCRIPT = """
local attempts = tonumber(redis.call('HGET', KEYS[1], 'attempts') or '0')
local last = tonumber(redis.call('HGET', KEYS[1], 'last_revision') or '0')
local revision = tonumber(ARGV[1])
if revision > 0 and last >= revision then
  return {attempts, 0}
end
attempts = redis.call('HINCRBY', KEYS[1], 'attempts', 1)
if revision > 0 then
  redis.call('HSET', KEYS[1], 'last_revision', revision)
end
return {attempts, 1}
"""


class RedisReconciliationStore(ReconciliationStore):
    """Redis implementation of ReconciliationStore.

    Expects a client created with decode_responses=True.

    Key structure:
    - {prefix}:direction:{key} - hash of version + JSON state
    - {prefix}:session:{session_id}:directions - set of direction keys
    - {prefix}:attempts:{key} - hash of revision -> JSON attempt
    - {prefix}:counter:{key} - hash of attempts + last_revision
    - {prefix}:context-shared:{key} - guard flag, never cleared
    - {prefix}:results:{key} - list of JSON results
    - {prefix}:offer:{offer_id} - JSON offer
    - {prefix}:offers:{key} - list of offer IDs
    - {prefix}:expressed:{session_id}:{participant_id} - list of texts
    - {prefix}:feedback:{key} - list of JSON feedback
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "attune") -> None:
        """Initialize Redis reconciliation store.

        Args:
            client: Redis client instance
            key_prefix: Namespace for every key written
        """
        self._client = client
        self._prefix = key_prefix
        self._create_direction_script = client.register_script(_CREATE_DIRECTION_SCRIPT)
        self._compare_and_set_script = client.register_script(_COMPARE_AND_SET_SCRIPT)
        self._increment_attempts_script = client.register_script(
            _INCREMENT_ATTEMPTS_SCRIPT
        )

    def _direction_key(self, key: str) -> str:
        return f"{self._prefix}:direction:{key}"

    def _session_index_key(self, session_id: UUID) -> str:
        return f"{self._prefix}:session:{session_id}:directions"

    def _attempts_key(self, key: str) -> str:
        return f"{self._prefix}:attempts:{key}"

    def _counter_key(self, key: str) -> str:
        return f"{self._prefix}:counter:{key}"

    def _guard_key(self, key: str) -> str:
        return f"{self._prefix}:context-shared:{key}"

    def _results_key(self, key: str) -> str:
        return f"{self._prefix}:results:{key}"

    def _offer_key(self, offer_id: UUID) -> str:
        return f"{self._prefix}:offer:{offer_id}"

    def _offers_index_key(self, key: str) -> str:
        return f"{self._prefix}:offers:{key}"

    def _expressed_key(self, session_id: UUID, participant_id: UUID) -> str:
        return f"{self._prefix}:expressed:{session_id}:{participant_id}"

    def _feedback_key(self, key: str) -> str:
        return f"{self._prefix}:feedback:{key}"

    # Direction state

    async def get_direction(self, key: str) -> DirectionState | None:
        """Get the state of a direction."""
        try:
            data = await self._client.hget(self._direction_key(key), "doc")
        except redis.RedisError as e:
            logger.error("redis_get_direction_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to get direction: {e}", cause=e) from e
        return DirectionState.model_validate_json(data) if data else None

    async def create_direction(self, state: DirectionState) -> bool:
        """Create a direction if it does not exist yet."""
        try:
            created = await self._create_direction_script(
                keys=[
                    self._direction_key(state.key),
                    self._session_index_key(state.direction.session_id),
                ],
                args=[state.version, state.model_dump_json(), state.key],
            )
        except redis.RedisError as e:
            logger.error("redis_create_direction_error", direction=state.key, error=str(e))
            raise StoreConnectionError(f"Failed to create direction: {e}", cause=e) from e
        return bool(created)

    async def compare_and_set_direction(
        self, state: DirectionState, expected_version: int
    ) -> bool:
        """Replace a direction's state if its stored version matches."""
        try:
            written = await self._compare_and_set_script(
                keys=[self._direction_key(state.key)],
                args=[expected_version, state.version, state.model_dump_json()],
            )
        except redis.RedisError as e:
            logger.error("redis_save_direction_error", direction=state.key, error=str(e))
            raise StoreConnectionError(f"Failed to save direction: {e}", cause=e) from e
        return bool(written)

    async def list_directions(self, session_id: UUID) -> list[DirectionState]:
        """List all directions of a session."""
        try:
            keys = await self._client.smembers(self._session_index_key(session_id))
            states = []
            for key in sorted(keys):
                data = await self._client.hget(self._direction_key(key), "doc")
                if data:
                    states.append(DirectionState.model_validate_json(data))
        except redis.RedisError as e:
            logger.error(
                "redis_list_directions_error", session_id=str(session_id), error=str(e)
            )
            raise StoreConnectionError(f"Failed to list directions: {e}", cause=e) from e
        return states

    # Empathy attempts

    async def save_attempt(self, attempt: EmpathyAttempt) -> UUID:
        """Save an attempt revision, returning its ID."""
        try:
            await self._client.hset(
                self._attempts_key(attempt.direction.key),
                str(attempt.revision),
                attempt.model_dump_json(),
            )
        except redis.RedisError as e:
            logger.error(
                "redis_save_attempt_error", direction=attempt.direction.key, error=str(e)
            )
            raise StoreConnectionError(f"Failed to save attempt: {e}", cause=e) from e
        return attempt.attempt_id

    async def get_attempt(self, key: str, revision: int) -> EmpathyAttempt | None:
        """Get one revision of a direction's attempt."""
        try:
            data = await self._client.hget(self._attempts_key(key), str(revision))
        except redis.RedisError as e:
            logger.error("redis_get_attempt_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to get attempt: {e}", cause=e) from e
        return EmpathyAttempt.model_validate_json(data) if data else None

    async def list_attempts(self, key: str) -> list[EmpathyAttempt]:
        """List all revisions of a direction's attempt, oldest first."""
        try:
            data = await self._client.hgetall(self._attempts_key(key))
        except redis.RedisError as e:
            logger.error("redis_list_attempts_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to list attempts: {e}", cause=e) from e
        return [
            EmpathyAttempt.model_validate_json(data[revision])
            for revision in sorted(data, key=int)
        ]

    # Refinement attempt counter

    async def increment_refinement_attempts(
        self, key: str, revision: int | None = None
    ) -> tuple[int, bool]:
        """Atomically create-or-increment the counter for a direction."""
        try:
            attempts, claimed = await self._increment_attempts_script(
                keys=[self._counter_key(key)],
                args=[revision or 0],
            )
        except redis.RedisError as e:
            logger.error("redis_increment_attempts_error", direction=key, error=str(e))
            raise StoreConnectionError(
                f"Failed to increment refinement attempts: {e}", cause=e
            ) from e
        return int(attempts), bool(claimed)

    async def get_refinement_attempts(self, key: str) -> int:
        """Read the counter without modifying it (0 if absent)."""
        try:
            value = await self._client.hget(self._counter_key(key), "attempts")
        except redis.RedisError as e:
            logger.error("redis_get_attempts_error", direction=key, error=str(e))
            raise StoreConnectionError(
                f"Failed to read refinement attempts: {e}", cause=e
            ) from e
        return int(value) if value else 0

    # Context-shared guard flag

    async def mark_context_shared(self, key: str) -> bool:
        """Set the guard flag permanently."""
        try:
            flipped = await self._client.set(self._guard_key(key), "1", nx=True)
        except redis.RedisError as e:
            logger.error("redis_mark_context_shared_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to set guard flag: {e}", cause=e) from e
        return bool(flipped)

    async def is_context_shared(self, key: str) -> bool:
        """Read the guard flag."""
        try:
            return bool(await self._client.exists(self._guard_key(key)))
        except redis.RedisError as e:
            logger.error("redis_read_guard_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to read guard flag: {e}", cause=e) from e

    # Reconciler results

    async def save_result(self, result: ReconcilerResult) -> UUID:
        """Save a result as the current one, superseding the previous one.

        Results of one direction are only written by the pass that holds
        the direction's ANALYZING status, so the read below cannot race.
        """
        results_key = self._results_key(result.direction.key)
        try:
            latest = await self._client.lindex(results_key, -1)
            async with self._client.pipeline(transaction=True) as pipe:
                if latest:
                    previous = ReconcilerResult.model_validate_json(latest)
                    if previous.superseded_at is None:
                        previous.superseded_at = utc_now()
                        pipe.lset(results_key, -1, previous.model_dump_json())
                pipe.rpush(results_key, result.model_dump_json())
                await pipe.execute()
        except redis.RedisError as e:
            logger.error(
                "redis_save_result_error", direction=result.direction.key, error=str(e)
            )
            raise StoreConnectionError(f"Failed to save result: {e}", cause=e) from e
        return result.result_id

    async def get_current_result(self, key: str) -> ReconcilerResult | None:
        """Get the latest result for a direction."""
        try:
            data = await self._client.lindex(self._results_key(key), -1)
        except redis.RedisError as e:
            logger.error("redis_get_result_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to get result: {e}", cause=e) from e
        return ReconcilerResult.model_validate_json(data) if data else None

    async def list_results(self, key: str) -> list[ReconcilerResult]:
        """List all results for a direction, oldest first."""
        try:
            items = await self._client.lrange(self._results_key(key), 0, -1)
        except redis.RedisError as e:
            logger.error("redis_list_results_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to list results: {e}", cause=e) from e
        return [ReconcilerResult.model_validate_json(item) for item in items]

    # Share offers

    async def save_offer(self, offer: ShareOffer) -> UUID:
        """Create or update a share offer."""
        offer_key = self._offer_key(offer.offer_id)
        data = offer.model_dump_json()
        try:
            created = await self._client.set(offer_key, data, nx=True)
            if created:
                await self._client.rpush(
                    self._offers_index_key(offer.direction.key), str(offer.offer_id)
                )
            else:
                await self._client.set(offer_key, data)
        except redis.RedisError as e:
            logger.error(
                "redis_save_offer_error", offer_id=str(offer.offer_id), error=str(e)
            )
            raise StoreConnectionError(f"Failed to save offer: {e}", cause=e) from e
        return offer.offer_id

    async def get_offer(self, offer_id: UUID) -> ShareOffer | None:
        """Get a share offer by ID."""
        try:
            data = await self._client.get(self._offer_key(offer_id))
        except redis.RedisError as e:
            logger.error("redis_get_offer_error", offer_id=str(offer_id), error=str(e))
            raise StoreConnectionError(f"Failed to get offer: {e}", cause=e) from e
        return ShareOffer.model_validate_json(data) if data else None

    async def list_offers(self, key: str) -> list[ShareOffer]:
        """List all offers made for a direction, oldest first."""
        try:
            offer_ids = await self._client.lrange(self._offers_index_key(key), 0, -1)
            offers = []
            for offer_id in offer_ids:
                data = await self._client.get(self._offer_key(UUID(offer_id)))
                if data:
                    offers.append(ShareOffer.model_validate_json(data))
        except redis.RedisError as e:
            logger.error("redis_list_offers_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to list offers: {e}", cause=e) from e
        return offers

    # Subject expressed content

    async def append_expressed_content(
        self, session_id: UUID, participant_id: UUID, content: str
    ) -> None:
        """Append something a participant expressed about themselves."""
        try:
            await self._client.rpush(self._expressed_key(session_id, participant_id), content)
        except redis.RedisError as e:
            logger.error(
                "redis_append_expressed_error", session_id=str(session_id), error=str(e)
            )
            raise StoreConnectionError(
                f"Failed to append expressed content: {e}", cause=e
            ) from e

    async def get_expressed_content(
        self, session_id: UUID, participant_id: UUID
    ) -> list[str]:
        """Get everything a participant expressed, oldest first."""
        try:
            return list(
                await self._client.lrange(
                    self._expressed_key(session_id, participant_id), 0, -1
                )
            )
        except redis.RedisError as e:
            logger.error(
                "redis_get_expressed_error", session_id=str(session_id), error=str(e)
            )
            raise StoreConnectionError(
                f"Failed to read expressed content: {e}", cause=e
            ) from e

    # Validation feedback

    async def save_validation_feedback(self, feedback: ValidationFeedback) -> UUID:
        """Record the subject's judgment of a revealed attempt."""
        try:
            await self._client.rpush(
                self._feedback_key(feedback.direction.key), feedback.model_dump_json()
            )
        except redis.RedisError as e:
            logger.error(
                "redis_save_feedback_error", direction=feedback.direction.key, error=str(e)
            )
            raise StoreConnectionError(f"Failed to save feedback: {e}", cause=e) from e
        return feedback.feedback_id

    async def list_validation_feedback(self, key: str) -> list[ValidationFeedback]:
        """List feedback recorded for a direction, oldest first."""
        try:
            items = await self._client.lrange(self._feedback_key(key), 0, -1)
        except redis.RedisError as e:
            logger.error("redis_list_feedback_error", direction=key, error=str(e))
            raise StoreConnectionError(f"Failed to list feedback: {e}", cause=e) from e
        return [ValidationFeedback.model_validate_json(item) for item in items]
