import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from rugby_club.exceptions import StorageError, ValidationError
from rugby_club.utils.retry import is_connection_error, retry_on_connection_error


class TestRetry:
    """Test retry helper for transient connection errors"""

    def test_is_connection_error(self):
        """Test which errors count as transient"""
        assert is_connection_error(OperationalError("SELECT 1", {}, Exception("database is locked")))
        assert is_connection_error(StorageError("Storage failure"))
        assert is_connection_error(ConnectionError())
        assert is_connection_error(RuntimeError("connection is closed"))
        assert not is_connection_error(IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")))
        assert not is_connection_error(ValidationError("bad input"))

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        """Test a transient failure is retried"""
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("connection refused")
            return 42

        assert await retry_on_connection_error(flaky, max_retries=3, initial_delay=0) == 42
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        """Test the last error is raised once retries run out"""
        calls = []

        async def always_down():
            calls.append(1)
            raise StorageError("Storage failure")

        with pytest.raises(StorageError):
            await retry_on_connection_error(always_down, max_retries=2, initial_delay=0)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_not_retried(self):
        """Test validation failures propagate immediately"""
        calls = []

        async def invalid():
            calls.append(1)
            raise ValidationError("Invalid Member: missing name")

        with pytest.raises(ValidationError):
            await retry_on_connection_error(invalid, initial_delay=0)
        assert len(calls) == 1
