import asyncpg
import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from pgmapper.config import ConnectionConfig


@pytest.fixture(scope="session")
def postgres_container():
    """Start a PostgreSQL test container for the session."""
    postgres = PostgresContainer("postgres:17")
    try:
        postgres.start()
    except Exception as exc:
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield postgres
    finally:
        postgres.stop()


@pytest.fixture
def connection_config(postgres_container):
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return ConnectionConfig(
        dsn=f"postgresql://{postgres_container.username}:{postgres_container.password}@{host}:{port}/{postgres_container.dbname}"
    )


@pytest_asyncio.fixture
async def users_table(connection_config):
    """Create public.users before each test and truncate it afterwards."""
    conn = await asyncpg.connect(connection_config.dsn_string())
    try:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS public.users (
                id SERIAL PRIMARY KEY,
                name VARCHAR(255),
                age INTEGER
            );
            """
        )
        yield conn
        await conn.execute("TRUNCATE TABLE public.users RESTART IDENTITY;")
    finally:
        await conn.close()
