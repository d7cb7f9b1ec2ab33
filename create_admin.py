import sys
import asyncio
from sqlalchemy.future import select
from eventure.core.security import hash_password
from eventure.core.enums import UserRole
from eventure.db.session import AsyncSessionLocal, init_models
from eventure.models.user import User
from eventure.schemas.auth import MIN_PASSWORD_LENGTH


async def create_admin_user(username: str, password: str, session_factory=AsyncSessionLocal) -> bool:
    username = username.strip().lower()
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {MIN_PASSWORD_LENGTH} characters")
        return False

    try:
        async with session_factory() as db:
            res = await db.execute(select(User).where(User.username == username))
            if res.scalars().first():
                print(f"Error: User '{username}' already exists")
                return False

            user = User(username=username, password_hash=hash_password(password), role=UserRole.ADMIN)
            db.add(user)
            await db.commit()
            await db.refresh(user)

        print(f"Admin user '{username}' created successfully")
        print(f"User ID: {user.id}")
        print(f"Role: {user.role}")
        return True

    except Exception as e:
        print(f"Error creating admin user: {str(e)}")
        return False


async def run(username: str, password: str) -> bool:
    await init_models()
    return await create_admin_user(username, password)


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <username> <password>")
        sys.exit(1)

    username = sys.argv[1]
    password = sys.argv[2]

    if not username or not password:
        print("Error: username and password cannot be empty")
        sys.exit(1)

    success = asyncio.run(run(username, password))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
