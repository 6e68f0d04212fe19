import asyncio
import sys

from sqlalchemy.future import select

from freight.core.enums import UserRole
from freight.core.security import hash_password
from freight.db.init_db import create_tables
from freight.db.session import AsyncSessionLocal, engine
from freight.models.user import User


async def create_admin_user(email: str, password: str, name: str = "Administrator") -> bool:
    try:
        await create_tables(engine)

        async with AsyncSessionLocal() as db:
            res = await db.execute(select(User).where(User.email == email.lower()))
            if res.scalars().first():
                print(f"Error: User '{email}' already exists")
                return False

            user = User.create(
                email=email.lower(),
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
                name=name,
            )
            db.add(user)
            await db.commit()

            print(f"Admin user '{email}' created successfully")
            print(f"User ID: {user.id}")
            print(f"Role: {user.role}")
            return True

    except Exception as e:
        print(f"Error creating admin user: {str(e)}")
        return False
    finally:
        await engine.dispose()


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <email> <password> [name]")
        sys.exit(1)

    email = sys.argv[1]
    password = sys.argv[2]
    name = sys.argv[3] if len(sys.argv) > 3 else "Administrator"

    if not email or not password:
        print("Error: email and password cannot be empty")
        sys.exit(1)

    success = asyncio.run(create_admin_user(email, password, name))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
