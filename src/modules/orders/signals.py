"""Signals sent by the Order Store."""

from django.dispatch import Signal

# Sent inside the transition's transaction once the order row and its
# history row are written.  Receivers share that transaction, so an
# exception in a receiver rolls the transition back.
# Arguments: ``order``, ``old_status``, ``new_status``.
order_transitioned = Signal()
