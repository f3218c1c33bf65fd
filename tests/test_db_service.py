import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from postgrest.exceptions import APIError

from beauty_studio.core.errors import ConflictError, StoreError
from beauty_studio.services.db_service import DBService

QUERY_METHODS = ("select", "insert", "update", "eq", "in_", "gte", "lte", "order", "limit")

RECORD = {
    "service_id": "bridal",
    "date": "2025-04-10",
    "time": "10:00",
    "client_name": "Elena Petrova",
    "client_email": "elena@example.com",
    "client_phone": "+359888000111",
    "status": "pending",
}


def make_query(execute: AsyncMock) -> MagicMock:
    """Supabase query builder stand-in: every builder call chains, execute() is awaited."""
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    query.execute = execute
    return query


def api_error(code: str) -> APIError:
    return APIError({"code": code, "message": f"postgres error {code}", "details": "", "hint": ""})


@pytest.fixture
def table():
    """Patches DBService._table and lets each test set what execute() does."""
    execute = AsyncMock()
    with patch.object(DBService, "_table", new=AsyncMock(return_value=make_query(execute))):
        yield execute


@pytest.mark.asyncio
async def test_insert_unique_violation_is_conflict(table):
    table.side_effect = api_error("23505")

    with pytest.raises(ConflictError):
        await DBService().insert_booking(RECORD)


@pytest.mark.asyncio
async def test_update_unique_violation_is_conflict(table):
    table.side_effect = api_error("23505")

    with pytest.raises(ConflictError):
        await DBService().update_status("b-1", "confirmed")


@pytest.mark.asyncio
async def test_malformed_id_reads_as_missing(table):
    table.side_effect = api_error("22P02")

    assert await DBService().get_booking("not-a-uuid") is None
    assert await DBService().update_status("not-a-uuid", "confirmed") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("method, args", [
    ("insert_booking", (RECORD,)),
    ("get_booking", ("b-1",)),
    ("update_status", ("b-1", "cancelled")),
])
async def test_other_api_errors_are_store_errors(table, method, args):
    table.side_effect = api_error("42P01")

    with pytest.raises(StoreError):
        await getattr(DBService(), method)(*args)


@pytest.mark.asyncio
async def test_network_failure_on_read_is_store_error(table):
    table.side_effect = ConnectionError("connection reset")

    with pytest.raises(StoreError):
        await DBService().find_active("2025-04-10", "10:00")


@pytest.mark.asyncio
async def test_insert_returns_stored_row(table):
    table.return_value = MagicMock(data=[{**RECORD, "id": "b-1"}])

    row = await DBService().insert_booking(RECORD)

    assert row["id"] == "b-1"


@pytest.mark.asyncio
async def test_missing_credentials_is_store_error():
    with patch.object(DBService, "_client", None), \
         patch("beauty_studio.services.db_service.settings.SUPABASE_URL", ""), \
         patch("beauty_studio.services.db_service.settings.SUPABASE_KEY", ""):
        with pytest.raises(StoreError):
            await DBService().list_bookings()
