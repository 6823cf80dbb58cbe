"""
Relays as handed over by the probers, and the estimators used on their
bandwidth samples.
"""
import glob
import json
import os

from bwaggregator.logger import log


class MeasuredRelay(object):
    def __init__(self, identity, nickname="Unnamed", descriptor_bandwidth=0,
                 advertised_bandwidth=0, bandwidths=None):
        self.identity = identity
        self.nickname = nickname
        self.descriptor_bandwidth = descriptor_bandwidth
        self.advertised_bandwidth = advertised_bandwidth
        self.bandwidths = list(bandwidths or [])
        self.failures = 0

    @property
    def measure_count(self):
        return len(self.bandwidths)

    def __repr__(self):
        return '<MeasuredRelay %s (%s) %d samples>' % (self.identity, self.nickname,
                                                        self.measure_count)


def mean_bandwidth(relay):
    if not relay.bandwidths:
        return 0
    return int(sum(relay.bandwidths) // len(relay.bandwidths))


def filtered_bandwidth(relay, mean_bw):
    """
    Mean of the samples that are at least as fast as mean_bw.
    """
    filtered_bws = [bw for bw in relay.bandwidths if bw >= mean_bw]
    if not filtered_bws:
        return 0
    return int(sum(filtered_bws) // len(filtered_bws))


def load_json_measurements(scan_dirs):
    for directory in scan_dirs:
        for name in sorted(glob.glob(os.path.join(directory, "*.json"))):
            with open(name, 'r') as json_file:
                try:
                    for y in json.load(json_file):
                        yield dict(y)
                except ValueError:
                    log.error("Error reading JSON measurement file {name}", name=name)


def load_measurement_data(scan_dirs):
    """
    Build a MeasuredRelay for every relay found in the JSON measurement
    files of scan_dirs, keyed by fingerprint (without the leading $).
    """
    relays = {}
    for item in load_json_measurements(scan_dirs):
        desc_bws = item.get('path_desc_bws') or []
        for position, relay_fp in enumerate(item.get('path', [])):
            identity = relay_fp.lstrip("$")
            relay = relays.setdefault(identity, MeasuredRelay(identity))
            if 'failure' in item:
                relay.failures += 1
                continue
            relay.bandwidths.append(int(item['circ_bw']))
            if position < len(desc_bws) and desc_bws[position]:
                average, burst, observed = desc_bws[position]
                relay.descriptor_bandwidth = average
                relay.advertised_bandwidth = min(bw for bw in (average, burst, observed)
                                                 if bw is not None)

    log.info("Loaded measurements for {count} relays.", count=len(relays))
    return relays
