import logging

from gql import Client, gql
from gql.transport.requests import RequestsHTTPTransport

from grid3_uptime.uptime import UptimeEvent

USER_AGENT = "tfgrid_graphql_client"

UPTIME_EVENTS_QUERY = """
query get_uptime_events($node_id: Int, $start: BigInt, $end: BigInt) {
    uptimeEvents(where: {nodeID_eq: $node_id, timestamp_gte: $start, timestamp_lte: $end}, orderBy: timestamp_ASC) {
        timestamp
        uptime
    }
}
"""

log = logging.getLogger(__name__)


class GraphQL:
    """
    Abstraction of a Grid GraphQL endpoint at a given URL, corresponding to a given network.

    This is the source of the uptime events we feed into the state calculation. We only need a couple of fixed queries, so unlike the general purpose client this doesn't fetch the schema or build queries dynamically.
    """

    def __init__(self, url, timeout=30):
        self.url = url
        self.transport = RequestsHTTPTransport(
            url=url,
            headers={"User-Agent": USER_AGENT},
            verify=True,
            retries=3,
            timeout=timeout,
        )
        self.client = Client(transport=self.transport)

    def __repr__(self):
        return "GraphQL({})".format(self.url)

    def execute(self, query, variables=None):
        return self.client.execute(gql(query), variable_values=variables)

    def uptime_events(self, node_id, start, end):
        """
        Fetch the uptime events of a node with timestamps in [start, end], in ascending timestamp order.

        Timestamps and uptimes are BigInts in the schema, which come back as strings. They are decoded into regular ints here, and a record which can't be decoded raises ValueError.
        """
        variables = {"node_id": node_id, "start": start, "end": end}
        log.debug(
            "Fetching uptime events for node %s from %s to %s", node_id, start, end
        )
        result = self.execute(UPTIME_EVENTS_QUERY, variables)

        events = [
            UptimeEvent.from_graphql(record) for record in result["uptimeEvents"]
        ]
        log.debug("Got %s uptime events for node %s", len(events), node_id)
        return events
