"""Cart lines: a menu item and quantity, before or after checkout.

The cart itself is just a sequence of ``CartLine`` values owned by the
calling application. The functions below return a new tuple of lines and
never leave a zero-quantity line behind: taking away the last unit of an
item removes its line.
"""

from protean.exceptions import ValidationError
from protean.fields import Decimal, Integer, String

from marketplace.domain import marketplace
from marketplace.exceptions import MixedVendorCartError


@marketplace.value_object
class CartLine:
    """One menu item and its quantity.

    ``unit_price`` is snapshotted when the item is added to the cart and is
    never looked up again, so later menu price changes do not affect it. It
    is held as an exact decimal so fractional and very large prices keep
    every digit until checkout rounds the subtotal.
    """

    menu_item_id = String(required=True, max_length=255)
    unit_price = Decimal(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    special_instructions = String(max_length=500)
    vendor_id = String(max_length=255)
    name = String(max_length=255)


def _with_quantity(line, quantity):
    return CartLine(
        menu_item_id=line.menu_item_id,
        unit_price=line.unit_price,
        quantity=quantity,
        special_instructions=line.special_instructions,
        vendor_id=line.vendor_id,
        name=line.name,
    )


def _index_of(lines, menu_item_id):
    index = next((i for i, line in enumerate(lines) if line.menu_item_id == str(menu_item_id)), None)
    if index is None:
        raise ValidationError({"menu_item_id": ["Item not found in cart"]})
    return index


def add_line(lines, line):
    """Add ``line``, or increase the quantity of the line for the same menu item.

    An existing line keeps the price it was first added with.
    """
    lines = tuple(lines)
    existing = next((i for i, current in enumerate(lines) if current.menu_item_id == line.menu_item_id), None)
    if existing is None:
        return lines + (line,)

    merged = _with_quantity(lines[existing], lines[existing].quantity + line.quantity)
    return lines[:existing] + (merged,) + lines[existing + 1 :]


def set_quantity(lines, menu_item_id, quantity):
    """Set the quantity of an item; zero removes its line."""
    if quantity < 0:
        raise ValidationError({"quantity": ["Quantity cannot be negative"]})

    lines = tuple(lines)
    index = _index_of(lines, menu_item_id)
    if quantity == 0:
        return lines[:index] + lines[index + 1 :]
    return lines[:index] + (_with_quantity(lines[index], quantity),) + lines[index + 1 :]


def remove_one(lines, menu_item_id):
    """Take one unit of an item out of the cart."""
    lines = tuple(lines)
    index = _index_of(lines, menu_item_id)
    return set_quantity(lines, menu_item_id, lines[index].quantity - 1)


def partition_by_vendor(lines) -> dict:
    """Group lines by ``vendor_id``, keeping the order vendors first appear in.

    Untagged lines are grouped under ``None``.
    """
    partitions = {}
    for line in lines:
        partitions.setdefault(line.vendor_id, []).append(line)
    return {vendor_id: tuple(vendor_lines) for vendor_id, vendor_lines in partitions.items()}


def require_single_vendor(lines):
    """Return the one vendor the tagged lines belong to (``None`` if none are tagged).

    Raises:
        MixedVendorCartError: the lines name more than one vendor.
    """
    vendor_ids = [vendor_id for vendor_id in partition_by_vendor(lines) if vendor_id is not None]
    if len(vendor_ids) > 1:
        raise MixedVendorCartError(vendor_ids)
    return vendor_ids[0] if vendor_ids else None
