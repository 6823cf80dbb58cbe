import json
import os
from shutil import rmtree
from tempfile import mkdtemp

from twisted.trial import unittest

from bwaggregator.measurement import (MeasuredRelay, filtered_bandwidth, load_measurement_data,
                                      mean_bandwidth)


class EstimatorTests(unittest.TestCase):

    def test_mean(self):
        self.assertEqual(mean_bandwidth(MeasuredRelay("A", bandwidths=[100, 200, 301])), 200)
        self.assertEqual(mean_bandwidth(MeasuredRelay("A")), 0)

    def test_filtered(self):
        relay = MeasuredRelay("A", bandwidths=[100, 200, 400, 500])
        self.assertEqual(filtered_bandwidth(relay, mean_bandwidth(relay)), 450)
        self.assertEqual(filtered_bandwidth(relay, 1000), 0)

    def test_measure_count(self):
        self.assertEqual(MeasuredRelay("A", bandwidths=[1, 2]).measure_count, 2)


class LoadMeasurementDataTests(unittest.TestCase):

    def setUp(self):
        self.tmpdir = mkdtemp()
        self.addCleanup(rmtree, self.tmpdir)

    def write_json(self, name, data):
        with open(os.path.join(self.tmpdir, name), "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_load(self):
        self.write_json("1-scan.json", [
            {"path": ["$AAAA", "$EXIT"], "circ_bw": 1000,
             "path_desc_bws": [[3000, 4000, 2000], [9000, 9000, 9000]]},
            {"path": ["$AAAA", "$EXIT"], "circ_bw": 3000},
        ])
        self.write_json("2-scan.json", [
            {"path": ["$BBBB", "$EXIT"], "failure": "<Failure>"},
        ])
        self.write_json("3-scan.json", "not json")

        relays = load_measurement_data([self.tmpdir])

        self.assertEqual(sorted(relays), ["AAAA", "BBBB", "EXIT"])
        self.assertEqual(relays["AAAA"].bandwidths, [1000, 3000])
        self.assertEqual(relays["AAAA"].descriptor_bandwidth, 3000)
        self.assertEqual(relays["AAAA"].advertised_bandwidth, 2000)
        self.assertEqual(relays["EXIT"].measure_count, 2)
        self.assertEqual(relays["EXIT"].advertised_bandwidth, 9000)
        self.assertEqual(relays["BBBB"].measure_count, 0)
        self.assertEqual(relays["BBBB"].failures, 1)

    def test_missing_observed_bandwidth(self):
        self.write_json("1-scan.json", [
            {"path": ["$AAAA"], "circ_bw": 1000, "path_desc_bws": [[3000, 4000, None]]},
        ])
        relays = load_measurement_data([self.tmpdir])
        self.assertEqual(relays["AAAA"].descriptor_bandwidth, 3000)
        self.assertEqual(relays["AAAA"].advertised_bandwidth, 3000)
