import argparse
import sys

from app.config import settings
from app.database import Base, SessionLocal, engine
from app.errors import InvalidCredential, InvalidSubmission
from app.models.invitation import Invitation
from app.security import generate_invitation_code
from app.services.invitations import MODE_EMAIL, create_invitation, normalize_key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a wedding invitation.")
    parser.add_argument("--name", required=True, help="Family name for the invitation")
    parser.add_argument("--guests", type=int, default=2, help="Maximum number of guests allowed")
    parser.add_argument("--email", default="", help="Contact email")
    parser.add_argument("--phone", default="", help="Contact phone")
    parser.add_argument("--code", default="", help="Custom invitation code, generated if omitted")
    return parser


def invitation_url(key: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/auth/invite/{key}"


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    name = args.name.strip()
    if not name:
        print("Family name is required.")
        return 1

    try:
        if settings.invitation_mode == MODE_EMAIL:
            key = normalize_key(args.email, MODE_EMAIL)
        elif args.code:
            key = normalize_key(args.code, settings.invitation_mode)
        else:
            key = generate_invitation_code()
    except InvalidCredential:
        print("Invalid invitation code or email.")
        return 1

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.get(Invitation, key) is not None:
            print(f"Invitation {key} already exists.")
            return 1

        try:
            create_invitation(
                db,
                key=key,
                max_guests=args.guests,
                display_name=name,
                contact_email=args.email.strip() or None,
                contact_phone=args.phone.strip() or None,
            )
        except InvalidSubmission as exc:
            print(exc.message)
            return 1
        db.commit()
    finally:
        db.close()

    print("Invitation created successfully!")
    print("-----------------------------------")
    print(f"Family: {name}")
    print(f"Max Guests: {args.guests}")
    if args.email:
        print(f"Email: {args.email}")
    if args.phone:
        print(f"Phone: {args.phone}")
    print("-----------------------------------")
    print(f"Invitation Code: {key}")
    print(f"Invitation URL: {invitation_url(key)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
