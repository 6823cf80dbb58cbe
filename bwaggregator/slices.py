"""
Keep track of which relay slices the probers have reported.
"""
from bwaggregator.logger import log


class SlicesActive(object):
    """
    Still waiting for slices; seen[i] is True once slice i was reported.
    """
    def __init__(self, num_slices):
        self.seen = [False] * num_slices

    @property
    def num_seen(self):
        return sum(1 for s in self.seen if s)


class SlicesDone(object):
    """
    Every measurable slice was reported. Nothing is tracked any more.
    """


class SliceTracker(object):
    """
    Decide when all measurable slices have been reported.

    num_slices_expected comes from the size of the initial report, while
    num_slices_actual is what the probers could actually measure (relays
    without the Fast flag are skipped so it may be lower). The tracker is
    done as soon as the number of seen slices reaches num_slices_actual.

    A fresh tracker is done until start() is called; the aggregator only
    starts it after a successful initial load.
    """

    def __init__(self):
        self.num_slices_expected = 0
        self.num_slices_actual = 0
        self.state = SlicesDone()

    @property
    def done(self):
        return isinstance(self.state, SlicesDone)

    def start(self, num_slices_expected):
        self.num_slices_expected = num_slices_expected
        self.state = SlicesActive(num_slices_expected)
        log.debug("Expecting at least {count} slices", count=num_slices_expected)

    def set_actual_slice_count(self, num_slices, prober_id=None):
        # All probers should see the same descriptors and so compute the same
        # number of slices. If they don't, the first value is kept.
        if self.num_slices_actual == 0:
            self.num_slices_actual = num_slices
        elif self.num_slices_actual != num_slices:
            log.critical("Prober '{prober}' reported {num} slices, but another prober "
                         "reported {actual}. Probers do not agree on the actual number "
                         "of slices! They probably got a different set of descriptors "
                         "from Tor. List index math will be off.",
                         prober=prober_id or "unknownid", num=num_slices,
                         actual=self.num_slices_actual)

    def report_slice_seen(self, index):
        """
        Mark slice index as seen and return True if the tracker is done.
        """
        if self.done:
            return True

        if 0 <= index < len(self.state.seen):
            self.state.seen[index] = True
        else:
            log.warn("Slice {index} is out of range, only {count} slices were expected",
                     index=index, count=self.num_slices_expected)

        num_seen = self.state.num_seen
        log.info("We have seen measurements from {seen} slices, {actual} are "
                 "measurable, {expected} were expected",
                 seen=num_seen, actual=self.num_slices_actual,
                 expected=self.num_slices_expected)

        if num_seen >= self.num_slices_actual:
            self.state = SlicesDone()
        return self.done
