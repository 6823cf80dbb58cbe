"""
Collect the measurements of all slices and publish the v3bw file once every
measurable slice has reported.
"""
from bwaggregator.logger import log
from bwaggregator.measurement import filtered_bandwidth, mean_bandwidth
from bwaggregator.publisher import ReportPublisher
from bwaggregator.slices import SliceTracker
from bwaggregator.stats import RelayStats, RelayStatsStore
from bwaggregator.v3bw import V3BWReadError, read_v3bw
from bwaggregator.weights import EmptyStoreError, compute_new_bandwidths


class Aggregator(object):
    def __init__(self, filepath, slice_size, node_cap, measurements_per_slice=1,
                 publisher=None, clock=None,
                 mean_bandwidth=mean_bandwidth, filtered_bandwidth=filtered_bandwidth):
        """
        filepath: the stable v3bw path, read once for initial advertisements
        and afterwards kept linked to the latest published file
        slice_size: the number of relays in each prober's slice
        node_cap: the largest fraction of the total bandwidth a relay may get
        measurements_per_slice: samples a relay needs before its measurement
        is used
        publisher: anything with a publish(relay_stats) method, by default a
        ReportPublisher writing next to filepath
        mean_bandwidth, filtered_bandwidth: estimators applied to each
        measured relay
        """
        self.filepath = filepath
        self.slice_size = slice_size
        self.node_cap = node_cap
        self.measurements_per_slice = measurements_per_slice
        if publisher is None:
            publisher = ReportPublisher(filepath, clock=clock)
        self.publisher = publisher
        self.mean_bandwidth = mean_bandwidth
        self.filtered_bandwidth = filtered_bandwidth

        self.relay_stats = RelayStatsStore()
        self.slices = SliceTracker()
        self.loaded_initial = False

    def read_initial_advertisements(self):
        """
        Seed the relay stats from the existing v3bw file, so relays that are
        not measured again this round keep their previous bandwidth.
        """
        if self.loaded_initial:
            log.debug("Already loaded initial advertisements")
            return

        try:
            relays = read_v3bw(self.filepath)
        except (IOError, OSError) as e:
            log.critical("Could not open v3bw file {path} for reading: {error}",
                         path=self.filepath, error=e)
            return
        except (V3BWReadError, ValueError) as e:
            log.critical("Error reading from v3bw file {path}: {error}",
                         path=self.filepath, error=e)
            return

        for relay in relays:
            self.relay_stats.upsert(relay)

        num_slices = (len(self.relay_stats) + self.slice_size - 1) // self.slice_size
        self.slices.start(num_slices)
        self.loaded_initial = True

    def load_from_presets(self, relays):
        """
        Fill in descriptor and advertised bandwidth of relays that have none
        yet from the initial v3bw file. Returns the number of relays changed.
        """
        if not self.loaded_initial:
            self.read_initial_advertisements()

        changes = 0
        for relay in relays:
            stats = self.relay_stats.lookup(relay.identity)
            if stats is None:
                log.warn("Relay {identity} read in descriptor from torctl port, but not "
                         "found in initialization file", identity=relay.identity)
                continue
            log.debug("For ${identity}, descriptor bandwidth was {desc}, advertised "
                      "bandwidth was {adv}", identity=relay.identity,
                      desc=relay.descriptor_bandwidth, adv=relay.advertised_bandwidth)
            if relay.descriptor_bandwidth == 0:
                relay.descriptor_bandwidth = stats.descriptor_bandwidth
                relay.advertised_bandwidth = stats.advertised_bandwidth
                changes += 1
        return changes

    def report_measurements(self, measured_relays, slice_size, slice_index):
        """
        Store the measurements of slice slice_index of measured_relays and
        publish a new v3bw file when all measurable slices are in.
        """
        start = slice_size * slice_index
        for relay in measured_relays[start:start + slice_size]:
            if relay.measure_count < self.measurements_per_slice:
                continue
            mean_bw = self.mean_bandwidth(relay)
            stats = RelayStats(relay.identity, relay.nickname,
                               descriptor_bandwidth=relay.descriptor_bandwidth,
                               advertised_bandwidth=relay.advertised_bandwidth,
                               mean_bandwidth=mean_bw,
                               filtered_bandwidth=self.filtered_bandwidth(relay, mean_bw))
            self.relay_stats.upsert(stats)
            log.info("Stored new measurements for {nick} ({identity}) desc={desc} adv={adv} "
                     "mean={mean} filtered={filtered}", nick=stats.nickname,
                     identity=stats.identity, desc=stats.descriptor_bandwidth,
                     adv=stats.advertised_bandwidth, mean=stats.mean_bandwidth,
                     filtered=stats.filtered_bandwidth)

        if self.slices.report_slice_seen(slice_index):
            log.info("All measurable slices have been measured ({actual} measurable "
                     "out of {expected} expected)", actual=self.slices.num_slices_actual,
                     expected=self.slices.num_slices_expected)
            self.publish()

    def set_num_slices_computed(self, prober_id, num_slices):
        self.slices.set_actual_slice_count(num_slices, prober_id)

    def publish(self):
        relay_stats = self.relay_stats.snapshot()
        try:
            compute_new_bandwidths(relay_stats, self.node_cap)
        except EmptyStoreError:
            log.error("No relay measurements to publish, not writing a v3bw file")
            return None
        return self.publisher.publish(relay_stats)
