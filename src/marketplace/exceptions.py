"""Error taxonomy for the marketplace domain.

Every error is a protean ``ValidationError`` so callers can handle them the
same way as field validation failures: ``exc.messages`` maps the offending
field to a list of human-readable messages.
"""

from protean.exceptions import ValidationError


def _label(status):
    return getattr(status, "value", status)


class UnknownStateError(ValidationError):
    """A status value outside the order status enumeration."""

    def __init__(self, value):
        self.value = value
        super().__init__({"status": [f"Unknown order status: {value!r}"]})


class InvalidTransitionError(ValidationError):
    """The requested status is not reachable from the current one."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__({"status": [f"Cannot transition from {_label(current)} to {_label(requested)}"]})


class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__({"lines": ["Cannot check out an empty cart"]})


class MixedVendorCartError(ValidationError):
    """Cart lines tagged with more than one vendor were passed as one order."""

    def __init__(self, vendor_ids):
        self.vendor_ids = list(vendor_ids)
        super().__init__({"vendor_id": [f"Cart spans multiple vendors: {', '.join(self.vendor_ids)}"]})


class ClaimNotAllowedError(ValidationError):
    """A claim was applied without its preconditions holding."""

    def __init__(self, order_id, rider_id):
        self.order_id = order_id
        self.rider_id = rider_id
        super().__init__({"rider_id": [f"Rider {rider_id} cannot claim order {order_id}"]})
