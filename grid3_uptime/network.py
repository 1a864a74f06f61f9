import logging

import grid3_uptime.graphql
from grid3_uptime.period import POST_PERIOD_UPTIME_FETCH
from grid3_uptime.uptime import calculate_node_state_changes, sort_uptime_events

NETWORKS = ["main", "test", "qa", "dev"]

log = logging.getLogger(__name__)


def network_graphql_url(net):
    if net not in NETWORKS:
        raise ValueError(
            "Unknown network {}, expected one of: {}".format(net, ", ".join(NETWORKS))
        )

    if net == "main":
        return "https://graphql.grid.tf/graphql"
    else:
        return "https://graphql.{}.grid.tf/graphql".format(net)


class GridNetwork:
    """
    The data sources of a given network, and the glue between them and the node state calculation. The GraphQL URL for the network can be overridden, for example to use a local indexer.
    """

    def __init__(self, net="main", graphql_url=None):
        self.net = net

        if graphql_url is None:
            graphql_url = network_graphql_url(net)

        self.graphql = grid3_uptime.graphql.GraphQL(graphql_url)

    def node_state_changes(
        self, node_id, start, end, post_period=POST_PERIOD_UPTIME_FETCH
    ):
        """
        Fetch the uptime events of a node and calculate its state changes in [start, end].

        We also fetch events up to post_period seconds past the end, so that the first report after the end tells us if the node was still up at that point.
        """
        events = self.sorted_uptime_events(node_id, start, end + post_period)
        return calculate_node_state_changes(events, start, end)

    def node_period_state_changes(self, node_id, period):
        events = self.sorted_uptime_events(node_id, *period.fetch_range())
        return calculate_node_state_changes(events, period.start, period.end)

    def sorted_uptime_events(self, node_id, start, end):
        events = self.graphql.uptime_events(node_id, start, end)
        if not events:
            log.info(
                "No uptime events found for node %s, node is down for the entire period",
                node_id,
            )

        # We ask the server for sorted events, but it's cheap to make sure
        sort_uptime_events(events)
        return events
