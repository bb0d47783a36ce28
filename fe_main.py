import argparse
import logging
import sys

from application.bootstrap import create_account_repository
from application.config import load_settings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and maintain stored player balances.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("version", help="print the stored schema version")
    commands.add_parser("list", help="print every account")
    top = commands.add_parser("top", help="print the richest accounts")
    top.add_argument("size", nargs="?", type=int, default=10)
    commands.add_parser("clean", help="remove default-balance accounts")
    remove = commands.add_parser("remove", help="remove one account")
    remove.add_argument("name")
    remove.add_argument("uuid", nargs="?", default=None)
    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # No game server is attached here, so nobody counts as online.
    repo = create_account_repository(settings, is_active=lambda name: False)
    try:
        if not repo.init():
            logging.getLogger(__name__).error("%s storage is not available.", repo.name)
            return 1

        if args.command == "version":
            print(repo.get_version())
        elif args.command == "list":
            for account in repo.get_accounts():
                print(f"{account.name}\t{account.uuid or '-'}\t{account.money:.2f}")
        elif args.command == "top":
            for rank, account in enumerate(repo.load_top_accounts(args.size), start=1):
                print(f"{rank}. {account.name}\t{account.money:.2f}")
        elif args.command == "clean":
            repo.clean()
        elif args.command == "remove":
            repo.remove_account(args.name, args.uuid)
        return 0
    finally:
        repo.close()


if __name__ == "__main__":
    sys.exit(main())
