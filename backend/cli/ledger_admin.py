"""CLI for ledger database migrations and network administration."""
import argparse
import json
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from depin.core.database import get_session_local
from depin.core.errors import LedgerError
from depin.services.network_state_manager import NetworkStateManager


def _state_dict(state):
    return {
        "authority": state.authority,
        "total_devices": state.total_devices,
        "total_rewards_distributed": state.total_rewards_distributed,
        "is_active": state.is_active,
    }


def _with_manager(action):
    """Run action(manager) on a fresh session and print the resulting state."""
    db = get_session_local()()
    try:
        state = action(NetworkStateManager(db))
        print(json.dumps(_state_dict(state), indent=2))
        return 0
    except LedgerError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    finally:
        db.close()


def cmd_migrate(args):
    """Run alembic upgrade to a revision (default head)."""
    rev = args.revision or "head"
    return subprocess.call([sys.executable, "-m", "alembic", "upgrade", rev], cwd=str(ROOT))


def cmd_init_network(args):
    """Create the network state with the given authority."""
    return _with_manager(lambda manager: manager.initialize(args.authority))


def cmd_show_state(args):
    """Print the network state."""
    return _with_manager(lambda manager: manager.get_state())


def cmd_pause(args):
    return _with_manager(lambda manager: manager.pause(args.authority))


def cmd_resume(args):
    return _with_manager(lambda manager: manager.resume(args.authority))


def build_parser():
    p = argparse.ArgumentParser(prog="ledger-admin")
    sub = p.add_subparsers(dest="cmd")
    s = sub.add_parser("migrate", help="Run migrations (upgrade head)")
    s.add_argument("--revision", "-r", help="Revision to upgrade to", default="head")
    s.set_defaults(func=cmd_migrate)
    s = sub.add_parser("init-network", help="Initialize the network state")
    s.add_argument("--authority", required=True, help="Identity of the network authority")
    s.set_defaults(func=cmd_init_network)
    s = sub.add_parser("show-state", help="Show the network state")
    s.set_defaults(func=cmd_show_state)
    s = sub.add_parser("pause", help="Pause the network")
    s.add_argument("--authority", required=True, help="Identity of the network authority")
    s.set_defaults(func=cmd_pause)
    s = sub.add_parser("resume", help="Resume the network")
    s.add_argument("--authority", required=True, help="Identity of the network authority")
    s.set_defaults(func=cmd_resume)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        p.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
