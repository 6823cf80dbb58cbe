"""
Per-relay bandwidth statistics and the table that owns them.
"""


class RelayStats(object):
    """
    The bandwidth figures the aggregator keeps for one relay.

    descriptor_bandwidth and advertised_bandwidth are what the relay claims,
    mean_bandwidth and filtered_bandwidth are derived from measurements and
    new_bandwidth is the weight assigned in the latest publish round.
    """

    def __init__(self, identity, nickname="Unnamed", descriptor_bandwidth=0,
                 advertised_bandwidth=0, mean_bandwidth=0, filtered_bandwidth=0):
        self.identity = identity
        self.nickname = nickname
        self.descriptor_bandwidth = descriptor_bandwidth
        self.advertised_bandwidth = advertised_bandwidth
        self.mean_bandwidth = mean_bandwidth
        self.filtered_bandwidth = filtered_bandwidth
        self.new_bandwidth = 0

    def __repr__(self):
        return ('<RelayStats %s (%s) desc=%d adv=%d mean=%d filt=%d new=%d>' %
                (self.identity, self.nickname, self.descriptor_bandwidth,
                 self.advertised_bandwidth, self.mean_bandwidth,
                 self.filtered_bandwidth, self.new_bandwidth))


class RelayStatsStore(object):
    """
    Mapping of relay identity to its RelayStats.

    Upserting a record replaces whatever was stored for that identity.
    Iteration walks a copy of the current records, so the store must not be
    mutated by anyone else while an aggregation pass is running.
    """

    def __init__(self):
        self._relays = {}

    def upsert(self, stats):
        self._relays[stats.identity] = stats

    def lookup(self, identity):
        return self._relays.get(identity)

    def snapshot(self):
        return list(self._relays.values())

    def clear(self):
        self._relays.clear()

    def __iter__(self):
        return iter(self.snapshot())

    def __len__(self):
        return len(self._relays)

    def __contains__(self, identity):
        return identity in self._relays
