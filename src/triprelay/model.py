"""
The values reported by the device in one sensor frame.
"""
import json

from triprelay.support.mixins import CommonEqualityMixin

# positions of the values within a frame
HUMIDITY, TEMPERATURE, RADIATION_CPM, HEADING, DISTANCE_LEFT, DISTANCE_RIGHT, DISTANCE_FORWARD = range(7)

# attribute name -> name used in the serialized form
json_names = (
    ('id', 'id'),
    ('humidity', 'humidity'),
    ('temperature', 'temperature'),
    ('radiation_cpm', 'radiationCpm'),
    ('heading', 'heading'),
    ('distance_left', 'distanceLeft'),
    ('distance_right', 'distanceRight'),
    ('distance_forward', 'distanceForward'),
)


class Reading(CommonEqualityMixin):
    """
    A decoded sensor frame. The default of each value means the value was not
    present in the frame. Readings cannot be modified once constructed.
    """

    def __init__(self, humidity=-1.0, temperature=-1.0, radiation_cpm=-1, heading=0,
                 distance_left=-1, distance_right=-1, distance_forward=-1, id=None):
        values = dict(id=id, humidity=humidity, temperature=temperature, radiation_cpm=radiation_cpm,
                      heading=heading, distance_left=distance_left, distance_right=distance_right,
                      distance_forward=distance_forward)
        for name, value in values.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError("Reading is read-only, cannot set '%s'" % name)

    def __delattr__(self, name):
        raise AttributeError("Reading is read-only, cannot delete '%s'" % name)

    def to_dict(self):
        return {json_name: getattr(self, name) for name, json_name in json_names}

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)

    def __repr__(self):
        return "Reading(%s)" % ", ".join("%s=%r" % (name, getattr(self, name)) for name, _ in json_names)

    def __str__(self):
        return "Id=%s, hum=%s, temp=%s, radiation cpm=%s, heading=%s, " \
               "distance left=%s, distance right=%s, distance forward=%s." % \
               (self.id, self.humidity, self.temperature, self.radiation_cpm, self.heading,
                self.distance_left, self.distance_right, self.distance_forward)
