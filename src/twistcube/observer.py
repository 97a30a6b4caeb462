"""
Watches the TwistCube "dynamic_attributes" dictionary.

The dictionary reports that something changed but not what, so the
observer keeps the last seen "_touched" and "size" values and diffs
against them. A change to "_touched" (an Interact click) wins over a size
change in the same notification.
"""

import logging

from twistcube.attributes import to_int


log = logging.getLogger(__name__)


class DynamicAttributeObserver:

    def __init__(self, session, animator):
        self.session = session
        self.animator = animator
        self.touched = 0
        self.size = session.size

    def on_erase_entity(self, entity):
        log.info('Entity Erased!')

    def on_change_entity(self, entity):
        if entity.deleted:
            return
        touched = to_int(entity['_touched'])
        if self.touched != touched:
            self.touched = touched
            self.animator.start(self.touched == 1)
            self.session.model.active_view.animation = self.animator
            return
        size = to_int(entity['size'])
        if self.size != size:
            self.size = size
            log.info('Size changed to %d', size)
            self.session.resize(size)
