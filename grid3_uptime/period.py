import time, datetime

# Timestamp of the start of the first period.
FIRST_PERIOD_START_TIMESTAMP = 1522501000
# The duration of a standard period, as used by minting, in seconds.
STANDARD_PERIOD_DURATION = 24 * 60 * 60 * (365 * 3 + 366 * 2) // 60
# How long after a period ends we still look for the next uptime event. Nodes
# report every 40 minutes or so, but this leaves room for a bit of downtime
POST_PERIOD_UPTIME_FETCH = 3 * 60 * 60


class Period:
    """A minting period, which is also the window we usually want the state
    changes of a node for. When instantiated with no args, the period
    containing the current point in time is returned. Otherwise, either a
    timestamp or a minting period offset can be passed.

    All calculations should match the canonical forms found in the minting
    code:

    https://github.com/threefoldtech/minting_v3/blob/master/minting/src/period.rs

    There are 12 minting periods per year, with the boundaries falling
    roughly at normal month boundaries.
    """

    def __init__(self, timestamp=None, offset=None):
        if offset is None:
            if timestamp is None:
                timestamp = time.time()
            self.offset = int(
                (timestamp - FIRST_PERIOD_START_TIMESTAMP) // STANDARD_PERIOD_DURATION
            )
        else:
            self.offset = offset

        self.start = int(
            FIRST_PERIOD_START_TIMESTAMP + (STANDARD_PERIOD_DURATION * self.offset)
        )
        self.end = self.start + STANDARD_PERIOD_DURATION

        # Each minting period falls almost entirely into a single month. The
        # start or end day might be in a different month though. So using the
        # middle of the period, we get the "human" interpretation of which
        # month this period corresponds to
        middle = datetime.datetime.fromtimestamp(
            (self.start + self.end) / 2, tz=datetime.timezone.utc
        )
        self.month = middle.month
        self.month_name = middle.strftime("%B")
        self.year = middle.year

    def __repr__(self):
        return "Period(offset: {}, start: {}, end: {})".format(
            self.offset, self.start, self.end
        )

    # The duration of the period in seconds.
    def duration(self):
        return self.end - self.start

    # Indicates if a given timestamp is part of the period or not.
    def timestamp_in_period(self, ts):
        return ts >= self.start and ts <= self.end

    # Adjusts the start time of this period.
    def scale_start(self, ts):
        if ts >= self.end:
            raise ValueError("New start must be before period end")
        self.start = ts


    def fetch_range(self, post_period=POST_PERIOD_UPTIME_FETCH):
        """The timestamps to fetch uptime events for to know the state of a node
        over this period. It reaches past the end so the first report after the
        period, if any, is included."""
        return self.start, self.end + post_period
