import argparse

from catalog_service import otp as otp_service
from catalog_service import products as product_service
from catalog_service.database import SessionLocal, init_db
from catalog_service.models import User


def main(argv=None):
    parser = argparse.ArgumentParser(description="Product catalog maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create missing tables")

    code = sub.add_parser("request-code", help="issue a login code for an identifier")
    code.add_argument("identifier", type=str)

    listing = sub.add_parser("list-products", help="list the products of a user")
    listing.add_argument("identifier", type=str)
    listing.add_argument("--published", choices=["true", "false"], default=None)

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
        print("Tables checked/created.")
        return 0

    db = SessionLocal()
    try:
        if args.command == "request-code":
            otp, user = otp_service.request_code(db, args.identifier)
            print(f"userId={user.id} otp={otp}")
            return 0

        user = db.query(User).filter(User.email_or_phone == args.identifier.strip()).first()
        if user is None:
            print(f"No user for {args.identifier}")
            return 1
        flag = None if args.published is None else args.published == "true"
        items = product_service.list_products(db, user, flag)
        print(f"{len(items)} product(s):")
        for i, p in enumerate(items):
            state = "published" if p.is_published else "draft"
            print(f"{i+1}. {p.product_name} | {p.product_type} | {p.selling_price} | {state}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
