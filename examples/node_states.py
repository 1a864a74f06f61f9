"""
Prints the state changes of a node during a minting period, as derived from its
uptime events. By default the current period is used, which means the timeline
most likely ends with the node in an unknown state, since the period is not
over yet.

python examples/node_states.py 42 --period 80 --network test
"""

import argparse, datetime, logging

from grid3_uptime.network import GridNetwork, NETWORKS
from grid3_uptime.period import Period
from grid3_uptime.uptime import (
    Offline,
    Booted,
    ImpossibleReboot,
    Drift,
    Unknown,
)


def fmt_time(ts):
    return datetime.datetime.fromtimestamp(ts).strftime("%d/%m/%Y %H:%M:%S")


def describe(state):
    if isinstance(state, Offline):
        return "Node went down at {}".format(fmt_time(state.since))
    elif isinstance(state, Booted):
        return "Node booted at {}".format(fmt_time(state.at))
    elif isinstance(state, ImpossibleReboot):
        return "Supposed boot at {} which conflicts with other info".format(
            fmt_time(state.at)
        )
    elif isinstance(state, Drift):
        return "Uptime drift of {} seconds detected".format(state.delta)
    elif isinstance(state, Unknown):
        return "Node status is unknown since {}, presumed down".format(
            fmt_time(state.since)
        )
    return repr(state)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("node_id", help="Specify the node id to check", type=int)
    parser.add_argument(
        "-p",
        "--period",
        help="Minting period offset to check. If omitted, the current period is used",
        type=int,
    )
    parser.add_argument(
        "-n",
        "--network",
        help="Which network the node is on",
        choices=NETWORKS,
        default="main",
    )
    parser.add_argument(
        "-v", "--verbose", help="Log queries and anomalies", action="store_true"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.period is None:
        period = Period()
    else:
        period = Period(offset=args.period)

    print(
        "Node {} state changes from {} to {} ({} {})".format(
            args.node_id,
            fmt_time(period.start),
            fmt_time(period.end),
            period.month_name,
            period.year,
        )
    )

    network = GridNetwork(args.network)
    for change in network.node_period_state_changes(args.node_id, period):
        print(fmt_time(change.detected_at), describe(change.state))
