"""Database seeder: an admin account plus a catalogue of sample items."""
import asyncio
import argparse
import random
import time

from storefront.config import settings
from storefront.database import async_session, init_models
from storefront.models import User, Item
from storefront.permissions import Permission
from storefront.security import hash_password

ADJECTIVES = ["Vintage", "Dark", "Fuzzy", "Limited", "Classic", "Oversized",
              "Hand-made", "Tiny", "Retro", "Wool"]
NOUNS = ["Hoodie", "Belt", "Mug", "Shoes", "Hat", "Backpack", "Socks",
         "Sunglasses", "Scarf", "Jacket"]


async def seed(admin_email: str, admin_password: str, num_items: int):
    print(f"Seeding: 1 admin, {num_items} items")
    start = time.perf_counter()

    await init_models(drop=True)

    async with async_session() as session:
        admin = User(
            email=admin_email.lower(),
            name="Admin",
            password=hash_password(admin_password, settings.BCRYPT_ROUNDS),
            permissions=Permission.USER | Permission.ADMIN,
        )
        session.add(admin)
        await session.flush()
        print(f"  Created admin {admin.email} (id={admin.id})")

        for i in range(num_items):
            title = f"{random.choice(ADJECTIVES)} {random.choice(NOUNS)}"
            session.add(Item(
                title=title,
                description=f"Item {i}: a {title.lower()} you did not know you needed.",
                price=random.randint(5, 500) * 100,
                user_id=admin.id,
            ))
        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the storefront database")
    parser.add_argument("--admin-email", default="admin@example.com")
    parser.add_argument("--admin-password", default="admin")
    parser.add_argument("-n", "--items", type=int, default=20, help="Number of sample items")
    args = parser.parse_args()
    asyncio.run(seed(args.admin_email, args.admin_password, args.items))


if __name__ == "__main__":
    main()
