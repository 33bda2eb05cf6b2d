"""
Users Example

Maps a User dataclass onto public.users and runs every mapper operation
against a local PostgreSQL. Connection settings come from PGHOST, PGPORT,
PGDATABASE, PGUSER and PGPASSWORD (or PGMAPPER_DSN).
"""

import asyncio
from dataclasses import dataclass
from typing import Annotated

import asyncpg

from pgmapper import Column, ConnectionConfig, Id, Mapper, MapperConfig, table, track_queries
from pgmapper.logging import configure_logging


@table("users", schema="public")
@dataclass
class User:
    id: Annotated[int, Id("id")]
    name: Annotated[str, Column("name")]
    age: Annotated[int, Column("age")]


async def setup_example_schema(config: ConnectionConfig):
    """Create public.users if it doesn't exist and empty it."""
    conn = await asyncpg.connect(config.dsn_string())
    try:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS public.users (
                id SERIAL PRIMARY KEY,
                name VARCHAR(255),
                age INTEGER
            );
            TRUNCATE TABLE public.users RESTART IDENTITY;
            """
        )
    finally:
        await conn.close()
    print("✅ Users table ready")


async def main():
    configure_logging("DEBUG")
    config = ConnectionConfig.from_env()
    await setup_example_schema(config)

    mapper = Mapper.from_config(config)

    async with track_queries() as tracker:
        # The id is left to the SERIAL column
        await mapper.insert(User(0, "Ann", 30))
        await mapper.insert(User(0, "Bob", 41))

        ann = await mapper.select_by_id(User, 1)
        print(f"Loaded: {ann}")

        ann.age += 1
        await mapper.update(ann)
        await mapper.delete_by_id(User, 2)

        print(f"Remaining: {await mapper.select_all(User)}")

    print(f"\nTotal statements executed: {tracker.count()}")
    for query_log in tracker.get_queries():
        print(f"  {query_log.query}  {query_log.params}")

    # The same statements with values embedded, as SQL text
    literal = Mapper.from_config(config, MapperConfig(literal_sql=True))
    print(literal.statements(User).insert(User(0, "Cid", 25)).to_sql())


if __name__ == "__main__":
    asyncio.run(main())
