from __future__ import annotations

import argparse

from sms_gateway.phone import format_phone_number, is_valid_phone_number
from sms_gateway.twilio_client import brand_message


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Show how the gateway would validate and format a number (no SMS is sent)."
    )
    parser.add_argument("phone", type=str)
    parser.add_argument("--message", type=str, default="", help="Also preview the branded body.")
    args = parser.parse_args()

    if not is_valid_phone_number(args.phone):
        print(f"invalid: {args.phone!r} does not look like a phone number")
        raise SystemExit(1)

    print(f"input:     {args.phone}")
    print(f"formatted: {format_phone_number(args.phone)}")

    if args.message:
        print()
        print(brand_message(args.message))


if __name__ == "__main__":
    main()
