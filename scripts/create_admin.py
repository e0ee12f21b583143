import os
import sys
import uuid
import argparse
import getpass

from dotenv import load_dotenv
from sqlalchemy import text

sys.path.append(os.getcwd())
load_dotenv()

from app.core.database import SessionLocal, engine  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.models import Base  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402


def create_admin(name, email, mobile, password):
    with engine.connect() as conn:
        conn.execute(text("CREATE SCHEMA IF NOT EXISTS udin"))
        conn.commit()
    print("✓ Schema verified")

    Base.metadata.create_all(bind=engine)
    print("✓ Tables verified")

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = "admin"
            db.commit()
            print(f"✓ Existing user promoted to admin: {email}")
            return

        user = User(
            id=str(uuid.uuid4()),
            user_id=AuthService.generate_user_id(db),
            name=name,
            email=email,
            mobile=mobile,
            hashed_password=get_password_hash(password),
            is_email_verified=True,
            role="admin",
        )
        db.add(user)
        db.commit()
        print(f"✓ Admin created: {email}")
    except Exception as e:
        db.rollback()
        print(f"❌ Error: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--mobile", required=True)
    args = parser.parse_args()
    create_admin(args.name, args.email, args.mobile, getpass.getpass("Password: "))
