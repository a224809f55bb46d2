import asyncio
import sys

from quizapp.database import engine, Base

# models must be imported so their tables are registered on Base
import quizapp.models  # noqa: F401


async def create_tables(drop_first: bool = False):
    async with engine.begin() as conn:
        if drop_first:
            print("Dropping quiz platform tables...")
            await conn.run_sync(Base.metadata.drop_all)

        print("Creating quiz platform tables...")
        await conn.run_sync(Base.metadata.create_all)
        print(f"Ready: {', '.join(sorted(Base.metadata.tables))}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_tables(drop_first="--drop-first" in sys.argv))
