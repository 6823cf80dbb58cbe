"""
Relay nicknames and self reported bandwidths from Tor's server descriptors.
"""
from stem.descriptor import parse_file

from bwaggregator.logger import log


def load_descriptors(path):
    """
    Parse a cached-descriptors file. Returns a dict of fingerprint to
    (nickname, average_bandwidth, burst_bandwidth, observed_bandwidth).
    """
    descriptors = {}
    for desc in parse_file(path, descriptor_type='server-descriptor 1.0'):
        descriptors[desc.fingerprint] = (desc.nickname, desc.average_bandwidth,
                                         desc.burst_bandwidth, desc.observed_bandwidth)
    log.info("Loaded {count} server descriptors from {path}", count=len(descriptors), path=path)
    return descriptors


def apply_descriptors(relays, descriptors):
    """
    Copy nickname and bandwidths from descriptors onto the matching relays.
    Returns the number of relays updated.
    """
    changes = 0
    for relay in relays:
        try:
            nickname, average, burst, observed = descriptors[relay.identity]
        except KeyError:
            log.debug("No descriptor found for {identity}", identity=relay.identity)
            continue
        relay.nickname = nickname
        relay.descriptor_bandwidth = average
        # descriptors without an observed bandwidth advertise their rate limits
        relay.advertised_bandwidth = min(bw for bw in (average, burst, observed)
                                         if bw is not None)
        changes += 1
    return changes
