"""Node state changes derived from the uptime events a node reports on the grid.

Nodes periodically report how long they have been up. Taken one at a time,
each report only tells us when the node claims to have booted. Taken as a
series, consecutive reports tell us whether the node stayed up, went down and
rebooted in between, or is telling us something that can't be true. This
module turns such a series into a timeline of state changes over a given
period.

The calculation is a pure function of its inputs: no queries, no clock reads.
Fetching the events is up to the caller (see grid3_uptime.network).
"""

import collections, itertools, logging
from operator import attrgetter

from grid3_uptime.compat import de_i64, de_u64, I64_MAX, I64_MIN

# Allowed difference between an advancement in uptime and an advancement in
# timestamp between 2 consecutive events. Set to 5 minutes, same as minting.
ALLOWED_UPTIME_DRIFT = 60 * 5

log = logging.getLogger(__name__)


class UptimeEvent(collections.namedtuple("UptimeEvent", "timestamp, uptime")):
    """An uptime report from a node. Events order by timestamp only, so
    sorting a list of them keeps the input order for equal timestamps."""

    __slots__ = ()

    @classmethod
    def from_graphql(cls, record):
        # GraphQL hands out BigInts as strings, but we take plain numbers too
        return cls(de_i64(record["timestamp"]), de_u64(record["uptime"]))

    def boot_time(self):
        return self.timestamp - self.uptime

    def __lt__(self, other):
        if not isinstance(other, UptimeEvent):
            return NotImplemented
        return self.timestamp < other.timestamp

    def __le__(self, other):
        if not isinstance(other, UptimeEvent):
            return NotImplemented
        return self.timestamp <= other.timestamp

    def __gt__(self, other):
        if not isinstance(other, UptimeEvent):
            return NotImplemented
        return self.timestamp > other.timestamp

    def __ge__(self, other):
        if not isinstance(other, UptimeEvent):
            return NotImplemented
        return self.timestamp >= other.timestamp


def sort_uptime_events(events):
    """Sorts a list of uptime events in place, in ascending timestamp order."""
    events.sort(key=attrgetter("timestamp"))


class NodeState:
    """The state of a node. Each kind of state carries a single integer,
    whose meaning depends on the kind, see the subclasses."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __repr__(self):
        return "{}({})".format(type(self).__name__, self.value)


class Offline(NodeState):
    """Node went offline. The value is the last moment the node was known to
    be up, or the period start if it was already down then."""

    __slots__ = ()

    @property
    def since(self):
        return self.value


class Booted(NodeState):
    """Node came (back) online. The value is the boot time implied by the
    report that established the state."""

    __slots__ = ()

    @property
    def at(self):
        return self.value


class ImpossibleReboot(NodeState):
    """A reboot is reported which is not possible, since it would have
    happened before a report the node had already sent."""

    __slots__ = ()

    @property
    def at(self):
        return self.value


class Drift(NodeState):
    """Uptime difference compared to timestamp difference is too large. The
    value is the additional uptime increase compared to the timestamp increase.
    A negative value means timestamp increased more than uptime."""

    __slots__ = ()

    @property
    def delta(self):
        return self.value


class Unknown(NodeState):
    """State is unknown since the value, for minting reasons this is presumed
    down unless a new uptime event arrives in time which proves otherwise."""

    __slots__ = ()

    @property
    def since(self):
        return self.value


# The timestamp is the moment the change was detected, which is not the moment
# it actually happened. That one is held by the state, where applicable
NodeStateChange = collections.namedtuple("NodeStateChange", "detected_at, state")


def clamp_i64(value):
    return max(I64_MIN, min(I64_MAX, value))


def reports_impossible_boot(event):
    # Would the boot time of this event be out of the signed 64 bit range?
    return event.uptime > I64_MAX or event.timestamp - event.uptime < I64_MIN


def calculate_node_state_changes(
    events, start, end, allowed_drift=ALLOWED_UPTIME_DRIFT
):
    """
    Calculate the state changes of a node in the period [start, end] based on
    a series of uptime events. It is the caller's responsibility to make sure
    all events in the period are given.

    The events are expected to be sorted in ascending timestamp order already,
    oldest first. They aren't sorted here, use sort_uptime_events for input
    that might not be.

    The state at the start of the period is derived from the first event. To
    know the state at the end of the period, an event which happened after the
    period ended must be included. Otherwise the timeline ends with an Unknown
    state, detected at the end of the period.
    """
    state_changes = []

    if not events or start > end:
        return state_changes

    # Starting state
    first = events[0]
    if reports_impossible_boot(first):
        log.debug(
            "Node reported uptime of %s seconds at %s, which can't be a valid boot",
            first.uptime,
            first.timestamp,
        )
        state_changes.append(
            NodeStateChange(
                first.timestamp, ImpossibleReboot(clamp_i64(first.boot_time()))
            )
        )
    else:
        boot_time = first.boot_time()
        if boot_time > start:
            state_changes.append(NodeStateChange(first.timestamp, Offline(start)))
        state_changes.append(NodeStateChange(first.timestamp, Booted(boot_time)))

    for previous, current in itertools.pairwise(events):
        # We expect 1 event to be past the end of the period. Since the events
        # are sorted, once the first of a pair is past the end, so is every
        # pair after it
        if previous.timestamp > end:
            break

        ts_delta = current.timestamp - previous.timestamp

        if reports_impossible_boot(current):
            log.debug(
                "Node reported uptime of %s seconds at %s, which can't be a valid boot",
                current.uptime,
                current.timestamp,
            )
            state_changes.append(
                NodeStateChange(
                    current.timestamp, ImpossibleReboot(clamp_i64(current.boot_time()))
                )
            )
            continue

        # A node that was up the whole time reports an uptime covering the
        # full gap. Less than that means it went down somewhere in between and
        # came back
        if current.uptime < ts_delta:
            state_changes.append(
                NodeStateChange(current.timestamp, Offline(previous.timestamp))
            )
            state_changes.append(
                NodeStateChange(current.timestamp, Booted(current.boot_time()))
            )
            continue

        # Uptime covers the gap, but went down. The reboot would have happened
        # before the previous report, which therefore can't have been sent
        if current.uptime < previous.uptime:
            log.debug(
                "Impossible reboot at %s, previous report at %s had uptime %s",
                current.timestamp,
                previous.timestamp,
                previous.uptime,
            )
            state_changes.append(
                NodeStateChange(
                    current.timestamp, ImpossibleReboot(current.boot_time())
                )
            )
            continue

        uptime_delta = current.uptime - previous.uptime
        drift = uptime_delta - ts_delta
        if abs(drift) > allowed_drift:
            log.debug(
                "Uptime drift of %s seconds between reports at %s and %s",
                drift,
                previous.timestamp,
                current.timestamp,
            )
            state_changes.append(
                NodeStateChange(current.timestamp, Drift(clamp_i64(drift)))
            )
            continue

        # Regular report, nothing to do. A node which is offline can't report
        # uptime, so the last change so far is always a boot or a conflict

    # Is the state at the end of the period covered?
    last_timestamp = events[-1].timestamp
    if last_timestamp < end:
        state_changes.append(NodeStateChange(end, Unknown(last_timestamp)))

    return state_changes


STATE_LABELS = {
    Offline: "Down",
    Booted: "Up",
    ImpossibleReboot: "Up",
    Drift: "Up",
    Unknown: "Unknown",
}


def node_state_history(state_changes):
    """Returns (detected_at, label) for each state change, where label is the
    state of the node after that change: "Up", "Down" or "Unknown". A node
    reporting impossible reboots or drift is still up, its history just
    doesn't add up."""
    return [
        (change.detected_at, STATE_LABELS[type(change.state)])
        for change in state_changes
    ]


def node_state_at(state_changes):
    """The state the node ends up in after all the given changes, or None
    if there are none."""
    history = node_state_history(state_changes)
    if not history:
        return None
    return history[-1][1]
