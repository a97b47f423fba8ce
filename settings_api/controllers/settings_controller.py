import logging
import re
from typing import List
from urllib.parse import unquote_plus

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from settings_api.db.models import Setting
from settings_api.db.postgres import SettingsStore
from settings_api.schemas.setting_schema import SettingPayload, SettingResponse
from settings_api.utils.errors import BackendError, NotFoundError, ValidationError
from settings_api.utils.redis_util import SettingsCache

logger = logging.getLogger(__name__)

_INTEGER_KEY = re.compile(r"[+-]?[0-9]+")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INT64_MAX = 2 ** 63 - 1


def parse_lookup_key(raw: str) -> str:
    """
    Lookup keys on the read path must be integer-shaped. The store is queried with
    the canonical decimal form, so "007" and "+7" both find key "7".
    """
    if not _INTEGER_KEY.fullmatch(raw):
        raise ValidationError("invalid key")
    number = int(raw)
    if not -_INT64_MAX - 1 <= number <= _INT64_MAX:
        raise ValidationError("invalid key")
    return str(number)


def unescape_key(raw: str) -> str:
    """Query-style unescape of a path key: "+" becomes a space, "%XX" is decoded."""
    if _BAD_ESCAPE.search(raw):
        raise ValidationError("invalid key")
    try:
        return unquote_plus(raw, errors="strict")
    except UnicodeDecodeError:
        raise ValidationError("invalid key")


async def _with_ttl(setting: Setting, cache: SettingsCache) -> SettingResponse:
    response = SettingResponse.model_validate(setting)
    # Best effort: a cache failure leaves ttl at 0 rather than failing the read
    try:
        response.ttl = await cache.remaining_expiry(setting.key) or 0
    except RedisError as e:
        logger.warning(f"Could not read TTL for key {setting.key!r}: {e}")
    return response


async def get_setting(raw_key: str, store: SettingsStore, cache: SettingsCache) -> SettingResponse:
    key = parse_lookup_key(raw_key)
    try:
        setting = await store.get_by_key(key)
    except SQLAlchemyError as e:
        logger.error(f"Failed to get setting {key!r}: {e}")
        raise BackendError("failed to get setting") from e

    if setting is None:
        raise NotFoundError("setting not found")
    return await _with_ttl(setting, cache)


async def get_settings(store: SettingsStore, cache: SettingsCache) -> List[SettingResponse]:
    try:
        rows = await store.list_all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list settings: {e}")
        raise BackendError("failed to get settings") from e

    return [await _with_ttl(setting, cache) for setting in rows]


async def create_setting(payload: SettingPayload, store: SettingsStore, cache: SettingsCache) -> dict:
    """
    Inserts the row, then mirrors the value into Redis with the requested TTL.
    The two writes are independent: a cache failure after the insert is reported
    as a 500 and the row stays.
    """
    if payload.key == "":
        raise ValidationError("key is required")
    if payload.value == "":
        raise ValidationError("value is required")
    if payload.ttl <= 0:
        raise ValidationError("ttl must be greater than 0")

    try:
        await store.insert(payload.key, payload.value)
    except SQLAlchemyError as e:
        logger.error(f"Failed to insert setting {payload.key!r}: {e}")
        raise BackendError("failed to insert setting into database") from e

    try:
        await cache.set_with_expiry(payload.key, payload.value, payload.ttl)
    except RedisError as e:
        logger.error(f"Failed to cache setting {payload.key!r}: {e}")
        raise BackendError("failed to store setting in Redis") from e

    logger.info(f"Created setting {payload.key!r} with TTL {payload.ttl}s")
    return payload.echo()


async def update_setting(raw_key: str, payload: SettingPayload, store: SettingsStore, cache: SettingsCache) -> dict:
    key = unescape_key(raw_key)

    if payload.value == "" and payload.ttl == 0:
        raise ValidationError("at least one field (value, or ttl) is required")

    if payload.value != "":
        try:
            await store.update_value(key, payload.value)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update setting {key!r}: {e}")
            raise BackendError("failed to update setting in database") from e

    try:
        setting = await store.get_by_key(key)
    except SQLAlchemyError as e:
        logger.error(f"Failed to re-read setting {key!r}: {e}")
        raise BackendError("failed to get setting") from e
    if setting is None:
        raise NotFoundError("setting not found")

    if payload.ttl > 0:
        try:
            await cache.set_with_expiry(key, setting.value, payload.ttl)
        except RedisError as e:
            logger.error(f"Failed to refresh cache for setting {key!r}: {e}")
            raise BackendError("failed to update setting in Redis cache") from e

    return payload.echo_all()
