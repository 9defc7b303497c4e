# main.py

import argparse
import json
import sys

from dotenv import load_dotenv

from clients import ServiceClients
from identity import CredentialError, build_credential
from settings import load_settings
from subscription_service import SubscriptionService, UpstreamError, summarize


def _print_table(records) -> None:
    if not records:
        print("No subscriptions found. Did you run 'az login'?")
        return
    print("Accessible subscriptions:")
    for r in records:
        print(f"  {r.display_name} ({r.subscription_id}) - {r.state} [tenant {r.tenant_id}]")


def cmd_list(args) -> int:
    settings = load_settings()
    try:
        clients = ServiceClients(build_credential(settings.azure_client_id), settings)
        records = SubscriptionService(clients.subscription_client, debug=settings.debug).get_subscriptions()
    except (CredentialError, UpstreamError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summarize(records), indent=2))
    else:
        _print_table(records)
    return 0


def cmd_serve(args) -> int:
    from app import create_app

    create_app().run(host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hello-azd", description="List Azure subscriptions for the current identity.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Print subscriptions visible to the credential chain")
    p_list.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    p_list.set_defaults(func=cmd_list)

    p_serve = sub.add_parser("serve", help="Run the web app (Flask development server)")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
