#
""""""
import os.path
import click

DEFAULT = {
    'data_dir': click.get_app_dir('bwaggregator'),
    'v3bw_file': os.path.join(click.get_app_dir('bwaggregator'), 'v3bw'),
    'logfile': os.path.join(click.get_app_dir('bwaggregator'),
                            'bwaggregator.log'),
    'loglevel': 'info',
    # relays handed to each prober
    'slice_size': 50,
    # no relay may carry more than this fraction of the total weight
    'node_cap': 0.05,
    'measurements_per_slice': 1,
}
