from django import template

from ..formfields import humanize
from ..services.lookups import format_money

register = template.Library()

GOOD = {'COMPLETED', 'ACTIVE', 'PAID', 'YES', 'TRUE', 'READ'}
PENDING = {'SCHEDULED', 'PENDING', 'IN_PROGRESS', 'NORMAL', 'LOW'}
BAD = {'CANCELLED', 'FAILED', 'EXPIRED', 'NO_SHOW', 'REFUNDED', 'URGENT', 'HIGH', 'NO', 'FALSE', 'UNREAD'}


@register.filter
def humanize_key(value):
    """``IN_PROGRESS`` / ``medical-records`` / ``firstName`` -> title words."""
    text = str(value or '').replace('-', ' ').replace('_', ' ')
    if text.isupper() or text.islower():
        return text.title()
    return humanize(text)


@register.filter
def badge(value):
    key = str(value or '').upper()
    if key in GOOD:
        return 'badge-ok'
    if key in PENDING:
        return 'badge-warn'
    if key in BAD:
        return 'badge-bad'
    return ''


@register.filter
def money(value):
    return format_money(value)
