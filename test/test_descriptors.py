from unittest import mock

from twisted.trial import unittest

from bwaggregator.descriptors import apply_descriptors, load_descriptors
from bwaggregator.measurement import MeasuredRelay


class FakeDescriptor(object):
    def __init__(self, fingerprint, nickname, average, burst, observed):
        self.fingerprint = fingerprint
        self.nickname = nickname
        self.average_bandwidth = average
        self.burst_bandwidth = burst
        self.observed_bandwidth = observed


class DescriptorTests(unittest.TestCase):

    def test_load(self):
        descs = [FakeDescriptor("AAAA", "relayA", 3000, 4000, 2000),
                 FakeDescriptor("BBBB", "relayB", 1000, 1000, 5000)]
        with mock.patch("bwaggregator.descriptors.parse_file", return_value=iter(descs)) as parse:
            descriptors = load_descriptors("cached-descriptors")
        parse.assert_called_once_with("cached-descriptors",
                                      descriptor_type="server-descriptor 1.0")
        self.assertEqual(descriptors, {"AAAA": ("relayA", 3000, 4000, 2000),
                                       "BBBB": ("relayB", 1000, 1000, 5000)})

    def test_apply(self):
        relays = [MeasuredRelay("AAAA"), MeasuredRelay("CCCC"), MeasuredRelay("DDDD")]
        descriptors = {"AAAA": ("relayA", 3000, 4000, 2000),
                       "DDDD": ("relayD", 1000, 2000, None)}

        self.assertEqual(apply_descriptors(relays, descriptors), 2)
        self.assertEqual(relays[0].nickname, "relayA")
        self.assertEqual(relays[0].descriptor_bandwidth, 3000)
        self.assertEqual(relays[0].advertised_bandwidth, 2000)
        self.assertEqual(relays[1].nickname, "Unnamed")
        self.assertEqual(relays[1].advertised_bandwidth, 0)
        self.assertEqual(relays[2].advertised_bandwidth, 1000)
