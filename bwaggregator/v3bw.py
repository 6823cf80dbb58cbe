r"""
Reading and writing the v3bw bandwidth file.

The format, where the first line is a unix timestamp::

    1546300800
    node_id=$<fingerprint>\tbw=<bandwidth>\tnick=<nickname>
    [...]

Every line, including the last one, ends with a newline.
"""
from bwaggregator.logger import log
from bwaggregator.stats import RelayStats


class V3BWReadError(Exception):
    pass


def parse_relay_line(line, source="v3bw file"):
    """
    Parse one relay line into a RelayStats. Returns None when the line has
    no node_id.
    """
    identity = None
    nickname = "Unnamed"
    bandwidth = 0
    for token in line.rstrip("\r\n").split("\t"):
        key, sep, value = token.partition("=")
        if not sep or not key:
            log.warn("Error parsing token {token!r} from {source}", token=token, source=source)
            continue
        if key == "node_id":
            identity = value[1:] if value.startswith("$") else value
        elif key == "nick":
            nickname = value
        elif key == "bw":
            try:
                bandwidth = int(value)
            except ValueError:
                log.warn("Invalid bandwidth {value!r} in {source}", value=value, source=source)
        elif key == "measured_at":
            # recognized, but not needed
            pass
        else:
            log.warn("Unrecognized field {key} in {source}", key=key, source=source)

    if not identity:
        log.warn("No node_id found in line {line!r} in {source}", line=line, source=source)
        return None

    return RelayStats(identity, nickname,
                      descriptor_bandwidth=bandwidth,
                      advertised_bandwidth=bandwidth,
                      mean_bandwidth=bandwidth,
                      filtered_bandwidth=bandwidth)


def parse_v3bw(lines, source="v3bw file"):
    """
    Parse an iterable of v3bw lines. The first line is the timestamp and has
    to be there, but its value is not used.
    """
    lines = iter(lines)
    try:
        next(lines)
    except StopIteration:
        raise V3BWReadError("Error reading timestamp from {}".format(source))

    relays = []
    for line in lines:
        if not line.strip():
            continue
        relay = parse_relay_line(line, source)
        if relay is not None:
            relays.append(relay)
    return relays


def read_v3bw(path):
    with open(path, 'r', encoding='utf-8') as v3bw_file:
        return parse_v3bw(v3bw_file, source=path)


def format_relay_line(relay):
    return "node_id=${}\tbw={}\tnick={}\n".format(relay.identity, relay.new_bandwidth,
                                                   relay.nickname)


def write_v3bw(fp, relay_stats, timestamp):
    fp.write("{}\n".format(int(timestamp)))
    for relay in relay_stats:
        fp.write(format_relay_line(relay))
