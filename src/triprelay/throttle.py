class PublishThrottle:
    """
    Decides which frames are published. One frame in every `frequency` frames is
    published, the others are archived.

    The counter cycles through 1..frequency. A frame arriving when the counter
    is a multiple of the frequency is published and the counter restarts at 1.
    """

    def __init__(self, frequency=1):
        if frequency < 1:
            raise ValueError("publish frequency must be at least 1, not %s" % frequency)
        self.frequency = frequency
        self.counter = 1

    def should_publish(self) -> bool:
        return self.counter % self.frequency == 0

    def advance(self) -> bool:
        """
        Advances the counter for a newly completed frame.
        :return: True if the frame should be published, False if it should only be archived.
        """
        publish = self.should_publish()
        if publish:
            self.counter = 1
        else:
            self.counter += 1
        return publish
