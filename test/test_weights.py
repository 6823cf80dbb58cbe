from twisted.logger import formatEvent, globalLogPublisher
from twisted.trial import unittest

from bwaggregator.stats import RelayStats
from bwaggregator.weights import EmptyStoreError, compute_new_bandwidths


def relay(identity, mean, filtered, advertised, nickname=None):
    return RelayStats(identity, nickname or identity, descriptor_bandwidth=advertised,
                      advertised_bandwidth=advertised, mean_bandwidth=mean,
                      filtered_bandwidth=filtered)


class ComputeNewBandwidthsTests(unittest.TestCase):

    def test_ratio_and_cap(self):
        a = relay("A", 100, 90, 1000)
        b = relay("B", 300, 270, 1000, nickname="fastrelay")
        events = []
        globalLogPublisher.addObserver(events.append)
        self.addCleanup(globalLogPublisher.removeObserver, events.append)

        total_bw = compute_new_bandwidths([a, b], 0.5)

        self.assertEqual(total_bw, 2000)
        self.assertEqual(a.new_bandwidth, 500)
        self.assertEqual(b.new_bandwidth, 1000)
        capped = [formatEvent(e) for e in events if "Capping" in formatEvent(e)]
        self.assertEqual(len(capped), 1)
        self.assertIn("fastrelay", capped[0])

    def test_better_ratio_is_used(self):
        # A is slow on average but has a good filtered bandwidth
        a = relay("A", 100, 400, 1000)
        b = relay("B", 300, 400, 1000)
        compute_new_bandwidths([a, b], 1.0)
        # avg mean 200, avg filtered 400
        self.assertEqual(a.new_bandwidth, 1000)
        self.assertEqual(b.new_bandwidth, 1500)

    def test_weights_are_truncated(self):
        a = relay("A", 1, 1, 1000)
        b = relay("B", 2, 2, 1000)
        compute_new_bandwidths([a, b], 1.0)
        # ratios 2/3 and 4/3
        self.assertEqual(a.new_bandwidth, 666)
        self.assertEqual(b.new_bandwidth, 1333)

    def test_no_relay_exceeds_cap(self):
        relays = [relay("R%d" % i, 50 * (i + 1) ** 2, 40 * (i + 1) ** 2, 1000 + 100 * i)
                  for i in range(20)]
        node_cap = 0.05
        total_bw = compute_new_bandwidths(relays, node_cap)
        cap = int(total_bw * node_cap)
        self.assertTrue(sum(r.new_bandwidth for r in relays) < total_bw)
        for r in relays:
            self.assertTrue(r.new_bandwidth <= cap)
        # the fastest relay gets clamped to exactly the cap
        self.assertEqual(relays[-1].new_bandwidth, cap)
        self.assertTrue(relays[0].new_bandwidth < cap)

    def test_zero_average(self):
        a = relay("A", 0, 100, 1000)
        b = relay("B", 0, 300, 1000)
        compute_new_bandwidths([a, b], 1.0)
        self.assertEqual(a.new_bandwidth, 500)
        self.assertEqual(b.new_bandwidth, 1500)

    def test_empty(self):
        self.assertRaises(EmptyStoreError, compute_new_bandwidths, [], 0.05)
        self.assertRaises(ValueError, compute_new_bandwidths, iter([]), 0.05)
