"""Mint an admin API key and print the raw token once."""
import argparse

from app.db import get_sessionmaker, init_engine
from app.models.api_key import ApiKey, ApiScope
from app.utils.apikey import gen_key


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--name", default="bootstrap-admin")
    parser.add_argument("--user-id", type=int, default=None, help="link the key to a user so it can own alerts")
    args = parser.parse_args()

    init_engine()
    db = get_sessionmaker()()

    raw_token, prefix, key_hash = gen_key()
    try:
        api_key = ApiKey(
            name=args.name,
            prefix=prefix,
            key_hash=key_hash,
            scope=ApiScope.admin,
            user_id=args.user_id,
            is_active=True,
        )
        db.add(api_key)
        db.commit()
        db.refresh(api_key)

        print("==========================================")
        print("Admin API key created")
        print("Use this key in your Authorization header:")
        print(f"    Authorization: Bearer {raw_token}")
        print(f"(DB id: {api_key.id}, scope: {api_key.scope.value})")
        print("==========================================")
    finally:
        db.close()


if __name__ == "__main__":
    main()
