import glob
import os
import re

import click

from bwaggregator import __version__
from bwaggregator.aggregator import Aggregator
from bwaggregator.configutil import read_config
from bwaggregator.descriptors import apply_descriptors, load_descriptors
from bwaggregator.logger import setup_logging, log
from bwaggregator.measurement import load_measurement_data
from bwaggregator.publisher import ReportPublisher


APP_NAME = 'bwaggregator'
DATA_DIR = os.environ.get("BWAGGREGATOR_DATADIR", click.get_app_dir(APP_NAME))
CONFIG_FILE = 'config.ini'
LOG_FILE = 'bwaggregator.log'


class AggregateInstance(object):
    """
    Store the configuration shared by the CLI commands.
    """
    def __init__(self, data_dir, v3bw_file=None):
        self.data_dir = data_dir
        if v3bw_file is None:
            self.v3bw_file = os.path.join(data_dir, 'v3bw')
        else:
            self.v3bw_file = v3bw_file

    def __repr__(self):
        return '<BWAggregate %r>' % self.data_dir


pass_instance = click.make_pass_decorator(AggregateInstance)


# pylint: disable=no-value-for-parameter
@click.group()
@click.option('--data-dir', type=click.Path(),
              help='Directory where the v3bw files are published.')
@click.option('--v3bw-file', type=click.Path(),
              help='Stable path of the published v3bw file '
              '(default: DATA_DIR/v3bw).')
@click.option('-l', '--loglevel',
              help='The logging level the aggregator will use (default: info)',
              type=click.Choice(
                      ['debug', 'info', 'warn', 'error', 'critical']))
@click.option('-f', '--logfile', type=click.Path(),
              help='The file the log will be written to')
@click.version_option(__version__)
@click.pass_context
def cli(ctx, data_dir, v3bw_file, loglevel, logfile):
    """
    The bwaggregate tool combines the relay bandwidth measurements of the
    probers into the v3bw file used by the Tor bandwidth authorities.
    """
    for k, v in (ctx.default_map or {}).items():
        if ctx.params.get(k) is None:
            ctx.params[k] = v

    data_dir = ctx.params.get('data_dir') or DATA_DIR
    ctx.obj = AggregateInstance(data_dir, ctx.params.get('v3bw_file'))

    if not os.path.isdir(ctx.obj.data_dir):
        os.makedirs(ctx.obj.data_dir)

    # Set up the logger to only output log lines of level `loglevel` and above.
    setup_logging(log_level=ctx.params.get('loglevel') or 'info',
                  log_name=ctx.params.get('logfile') or os.path.join(data_dir, LOG_FILE))


@cli.command(short_help="Aggregate measurements into a v3bw file.")
@click.option('--slice-size', type=int, default=50,
              help='Number of relays measured by each prober (default: 50).')
@click.option('--node-cap', type=float, default=0.05,
              help='Largest fraction of the total bandwidth given to a single '
              'relay (default: 0.05).')
@click.option('--measurements-per-slice', type=int, default=1,
              help='Measurements a relay needs before it is included (default: 1).')
@click.option('--descriptors', type=click.Path(exists=True),
              help='Tor cached-descriptors file with relay nicknames and '
              'advertised bandwidths.')
@click.argument('scan_dirs', nargs=-1, required=True, type=click.Path(exists=True))
@pass_instance
def aggregate(instance, slice_size, node_cap, measurements_per_slice, descriptors, scan_dirs):
    """
    Combine the measurements found in SCAN_DIRS and publish a new v3bw file.
    """
    relays = load_measurement_data(scan_dirs)
    if not relays:
        log.warn("No measurements found in {scan_dirs}", scan_dirs=", ".join(scan_dirs))
        return

    measured_relays = sorted(relays.values(), key=lambda relay: relay.identity)
    if descriptors:
        updated = apply_descriptors(measured_relays, load_descriptors(descriptors))
        log.info("Updated {count} relays from server descriptors.", count=updated)

    # never overwrite a file the stable link may point at
    publisher = ReportPublisher(instance.v3bw_file, version=next_version(instance.v3bw_file))
    aggregator = Aggregator(instance.v3bw_file, slice_size, node_cap,
                            measurements_per_slice=measurements_per_slice,
                            publisher=publisher)
    changes = aggregator.load_from_presets(measured_relays)
    log.info("Seeded {count} relays from the previous v3bw file.", count=changes)

    num_slices = (len(measured_relays) + slice_size - 1) // slice_size
    if not aggregator.slices.done:
        # slices beyond the previous report are not tracked, so they can't
        # be waited for
        num_slices_measurable = min(num_slices, aggregator.slices.num_slices_expected)
    else:
        num_slices_measurable = num_slices
    aggregator.set_num_slices_computed(APP_NAME, num_slices_measurable)
    # the tracked slices come last, so every measurement is stored before the
    # one completing the round
    for slice_index in reversed(range(num_slices)):
        aggregator.report_measurements(measured_relays, slice_size, slice_index)


def next_version(v3bw_file):
    published = get_published_versions(v3bw_file)
    if not published:
        return 0
    return int(published[0][len(v3bw_file) + 1:]) + 1


def get_published_versions(v3bw_file):
    versions = []
    for name in glob.glob(glob.escape(v3bw_file) + ".*"):
        match = re.match(r'^\.(\d+)$', name[len(v3bw_file):])
        if match:
            versions.append((int(match.group(1)), name))
    return [name for _, name in sorted(versions, reverse=True)]


@cli.command(short_help="List published v3bw files.")
@pass_instance
def list(instance):
    """
    List the published versions of the v3bw file, newest first.
    """
    published = get_published_versions(instance.v3bw_file)
    if published:
        for name in published:
            click.echo(click.format_filename(name))
    else:
        log.warn("No published v3bw files found for {v3bw_file}",
                 v3bw_file=instance.v3bw_file)


def start():
    config = read_config(os.path.join(DATA_DIR, CONFIG_FILE))
    # options of the aggregate command are looked up in their own section
    config['aggregate'] = {k: config.pop(k) for k in
                           ('slice_size', 'node_cap', 'measurements_per_slice') if k in config}
    return cli(default_map=config)
