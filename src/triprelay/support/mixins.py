"""
Mixins for small value objects: readings, events and retry strategies.
"""


def quote(val):
    return "None" if val is None else "'%s'" % val


class StringerMixin:

    def __str__(self):
        """
        The class name followed by the attributes, sorted by name.
        """
        return "%s:{%s}" % (self.__class__.__name__, self._sorted_items_string())

    def _sorted_items_string(self):
        return ", ".join("'%s': %s" % (key, quote(val)) for key, val in sorted(vars(self).items()))


class CommonEqualityMixin:
    """ Objects are equal when they have the same class and attribute values. """

    def __eq__(self, other):
        return isinstance(other, self.__class__) and vars(self) == vars(other)

    def __ne__(self, other):
        return not self.__eq__(other)
