"""
Publish v3bw files behind a stable symlink.

Every publish writes a new versioned file next to the configured path and
only then points the configured path at it, so readers of the configured
path always find a complete file (or nothing at all).
"""
import os

from bwaggregator.logger import log
from bwaggregator.v3bw import write_v3bw


def update_authoritative_link(configured_path, new_path):
    """
    Make configured_path a symlink to new_path.

    A regular file already sitting at configured_path is the initial v3bw
    file and is kept as configured_path + ".init". Returns True if the link
    was created.
    """
    if os.path.isdir(configured_path):
        log.error("Configured path '{path}' for v3bw file must not be a directory",
                  path=configured_path)
        return False

    # clear the way for the new link
    if os.path.islink(configured_path):
        try:
            os.unlink(configured_path)
        except OSError as e:
            log.warn("Unable to remove old link {path}: {error}",
                     path=configured_path, error=e)
            return False
    elif os.path.isfile(configured_path):
        backup_path = configured_path + ".init"
        try:
            os.rename(configured_path, backup_path)
        except OSError as e:
            log.warn("Unable to move initial v3bw file {path} to {backup}: {error}",
                     path=configured_path, backup=backup_path, error=e)
            return False

    # the link lives in the same directory as its target
    link_ref = os.path.basename(new_path)
    try:
        os.symlink(link_ref, configured_path)
    except OSError as e:
        log.warn("Unable to create symlink at {path} pointing to {ref}: {error}",
                 path=configured_path, ref=link_ref, error=e)
        return False

    if not (os.path.islink(configured_path) and os.path.isfile(configured_path)):
        log.warn("Symlink at {path} does not resolve to a regular file", path=configured_path)
    else:
        log.info("New v3bw file '{ref}' now linked at '{path}'", ref=link_ref, path=configured_path)
    return True


class ReportPublisher(object):
    """
    Write versioned v3bw files (path.0, path.1, ...) and keep path linked
    to the most recent one.

    clock: normally the twisted reactor; tests pass a task.Clock.
    version: number of the first file written, which must not be the one
    path currently links to.
    """

    def __init__(self, path, clock=None, version=0):
        if clock is None:
            from twisted.internet import reactor as clock
        self.path = path
        self.clock = clock
        self.version = version

    def now(self):
        return int(self.clock.seconds())

    def next_path(self):
        new_path = "{}.{}".format(self.path, self.version)
        self.version += 1
        return new_path

    def publish(self, relay_stats):
        """
        Write relay_stats to the next versioned file and link it. Returns the
        path of the written file, or None if it could not be written.
        """
        new_path = self.next_path()
        try:
            with open(new_path, 'w', encoding='utf-8') as v3bw_file:
                write_v3bw(v3bw_file, relay_stats, self.now())
        except (IOError, OSError) as e:
            log.error("Unable to write v3bw file {path}: {error}", path=new_path, error=e)
            return None

        update_authoritative_link(self.path, new_path)
        return new_path
