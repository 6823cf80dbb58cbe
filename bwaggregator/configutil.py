import os.path
import pkgutil
from configparser import ConfigParser

from bwaggregator.config import DEFAULT
from bwaggregator.logger import log


def read_config(cfg_path):
    """
    Read the [default] section of the config file at cfg_path, creating it
    from the packaged template first if it does not exist yet.
    """
    log.debug("Reading config {cfg_path}", cfg_path=cfg_path)
    if not config_exists(cfg_path):
        copy_config(cfg_path)
    parser = ConfigParser()
    parser.read([cfg_path])
    cfg_dict = dict(DEFAULT)
    cfg_dict.update(parser.items('default'))
    int_keys = parser.get('default', 'int_keys', fallback='').split()
    float_keys = parser.get('default', 'float_keys', fallback='').split()
    bool_keys = parser.get('default', 'bool_keys', fallback='').split()
    for k in int_keys:
        cfg_dict[k] = parser.getint('default', k)
    for k in float_keys:
        cfg_dict[k] = parser.getfloat('default', k)
    for k in bool_keys:
        cfg_dict[k] = parser.getboolean('default', k)
    for k in ('int_keys', 'float_keys', 'bool_keys'):
        cfg_dict.pop(k, None)
    return cfg_dict


def config_exists(cfg_path):
    return os.path.isfile(cfg_path)


def copy_config(cfg_path, cfg_default_path=None):
    if cfg_default_path is None:
        content = pkgutil.get_data('bwaggregator', 'data/config.ini')
    else:
        with open(cfg_default_path, 'rb') as fp:
            content = fp.read()
    cfg_dir = os.path.dirname(cfg_path)
    if cfg_dir and not os.path.isdir(cfg_dir):
        os.makedirs(cfg_dir)
    log.debug("Writing default config to {cfg_path}", cfg_path=cfg_path)
    with open(cfg_path, 'wb') as fp:
        fp.write(content)
