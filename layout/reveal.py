"""
Reveal tracking for rendered grid items.

Each image id moves one way, unseen -> revealed, the first time its box
enters the viewport. How visibility is detected belongs to the host view,
which plugs in through the ViewportObserver interface.
"""

import logging

DEFAULT_THRESHOLD = 0.1
DEFAULT_ROOT_MARGIN_PX = 50
DEFAULT_STAGGER_MS = 50


def reveal_delay_ms(global_index, stagger_ms=DEFAULT_STAGGER_MS):
    """Transition delay for the image at ``global_index`` in descriptor order."""
    return max(global_index, 0) * stagger_ms


class VisibilityState:
    """Set of revealed image ids. Grows monotonically; ids are never removed."""
    __slots__ = ('_revealed',)

    def __init__(self, revealed=()):
        self._revealed = frozenset(str(i) for i in revealed)

    @property
    def revealed(self):
        return self._revealed

    def is_revealed(self, image_id):
        return str(image_id) in self._revealed

    def reveal(self, *image_ids):
        """Return a state that also contains ``image_ids``.

        Returns self when nothing new was revealed.
        """
        new_ids = {str(i) for i in image_ids} - self._revealed
        if not new_ids:
            return self
        return VisibilityState(self._revealed | new_ids)

    def to_list(self):
        return sorted(self._revealed)

    def __contains__(self, image_id):
        return self.is_revealed(image_id)

    def __len__(self):
        return len(self._revealed)

    def __repr__(self):
        return f"VisibilityState({len(self._revealed)} revealed)"


class ViewportObserver:
    """Capability the host view implements to report viewport entry."""

    def observe(self, image_id, callback, threshold=DEFAULT_THRESHOLD,
                root_margin_px=DEFAULT_ROOT_MARGIN_PX):
        """Call ``callback(image_id)`` once the element enters the viewport.

        Returns an opaque subscription handle.
        """
        raise NotImplementedError

    def teardown(self, subscription):
        """Stop observing the element behind ``subscription``."""
        raise NotImplementedError


class ManualViewportObserver(ViewportObserver):
    """Observer driven by explicit intersection reports.

    Hosts that compute visibility themselves (or tests) call ``report`` with
    the current intersection ratio of an element.
    """

    def __init__(self):
        self._subscriptions = {}
        self._next_handle = 0

    def observe(self, image_id, callback, threshold=DEFAULT_THRESHOLD,
                root_margin_px=DEFAULT_ROOT_MARGIN_PX):
        self._next_handle += 1
        self._subscriptions[self._next_handle] = (str(image_id), callback, threshold)
        return self._next_handle

    def teardown(self, subscription):
        self._subscriptions.pop(subscription, None)

    @property
    def observed_ids(self):
        return sorted(image_id for image_id, _, _ in self._subscriptions.values())

    def report(self, image_id, intersection_ratio):
        """Report how much of ``image_id`` is visible (0.0 - 1.0)."""
        image_id = str(image_id)
        for image_key, callback, threshold in list(self._subscriptions.values()):
            if image_key == image_id and intersection_ratio >= threshold:
                callback(image_id)


class RevealTracker:
    """Keeps observers attached to the currently rendered, unseen items.

    Usage:
        tracker = RevealTracker(observer)
        tracker.sync(plan.image_ids)   # after every layout pass
        tracker.should_reveal(image_id)
    """

    def __init__(self, observer: ViewportObserver, state=None,
                 threshold=DEFAULT_THRESHOLD, root_margin_px=DEFAULT_ROOT_MARGIN_PX):
        self.observer = observer
        self.state = state if state is not None else VisibilityState()
        self.threshold = threshold
        self.root_margin_px = root_margin_px
        self._subscriptions = {}

    def sync(self, image_ids):
        """Re-establish observation for the rendered ``image_ids``.

        Subscriptions for ids no longer rendered are torn down; rendered ids
        that are still unseen get a subscription.
        """
        rendered = {str(i) for i in image_ids}
        for image_id in list(self._subscriptions):
            if image_id not in rendered:
                self.observer.teardown(self._subscriptions.pop(image_id))
        for image_id in rendered:
            if image_id in self._subscriptions or self.state.is_revealed(image_id):
                continue
            self._subscriptions[image_id] = self.observer.observe(
                image_id, self._on_visible,
                threshold=self.threshold, root_margin_px=self.root_margin_px,
            )

    def _on_visible(self, image_id):
        self.state = self.state.reveal(image_id)
        subscription = self._subscriptions.pop(image_id, None)
        if subscription is not None:
            self.observer.teardown(subscription)
        logging.debug(f"Revealed grid image {image_id}")

    def should_reveal(self, image_id):
        return self.state.is_revealed(image_id)

    @property
    def observed_ids(self):
        return sorted(self._subscriptions)

    def close(self):
        """Tear down every subscription; the revealed set is kept."""
        for subscription in self._subscriptions.values():
            self.observer.teardown(subscription)
        self._subscriptions.clear()
