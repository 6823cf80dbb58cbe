"""
Turn measured relay bandwidths into the weights published in the v3bw file.
"""
from bwaggregator.logger import log


class EmptyStoreError(ValueError):
    pass


def ratio(value, average):
    if average == 0:
        return 0.0
    return value / average


def compute_new_bandwidths(relay_stats, node_cap):
    """
    Set new_bandwidth on every RelayStats in relay_stats and return the total
    bandwidth before capping.

    Each relay's advertised bandwidth is scaled by the better of its mean and
    filtered bandwidth ratios to the network averages, because that is what
    TorFlow does. Afterwards no relay may hold more than node_cap of the total.
    """
    relay_stats = list(relay_stats)
    if not relay_stats:
        raise EmptyStoreError("Cannot compute bandwidth weights without any relays")

    avg_mean_bw = sum(r.mean_bandwidth for r in relay_stats) / len(relay_stats)
    avg_filt_bw = sum(r.filtered_bandwidth for r in relay_stats) / len(relay_stats)

    total_bw = 0
    for relay in relay_stats:
        best_ratio = max(ratio(relay.mean_bandwidth, avg_mean_bw),
                         ratio(relay.filtered_bandwidth, avg_filt_bw))
        relay.new_bandwidth = int(relay.advertised_bandwidth * best_ratio)
        total_bw += relay.new_bandwidth

    cap = int(total_bw * node_cap)
    for relay in relay_stats:
        if relay.new_bandwidth > cap:
            log.info("Capping bandwidth for extremely fast relay {nick} ({identity})",
                     nick=relay.nickname, identity=relay.identity)
            relay.new_bandwidth = cap

    return total_bw
