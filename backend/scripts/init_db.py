"""
Initialize the database: create all tables.
Run with: python -m scripts.init_db
"""

import asyncio

from physiome.database import close_db, init_db


async def init():
    print("Creating database tables...")
    await init_db()
    print("All tables created successfully.")
    await close_db()


if __name__ == "__main__":
    asyncio.run(init())
