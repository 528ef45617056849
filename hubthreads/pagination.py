import functools
import operator
from dataclasses import dataclass, field

from mongoengine.queryset.visitor import Q

from hubthreads.errors import ValidationFailure


@dataclass
class Page:
    records: list = field(default_factory=list)
    has_next: bool = False


def search_filter(search_string, fields=('username', 'name')):
    """Case-insensitive substring match on any of ``fields``.

    A blank search string matches everything.
    """
    if not search_string or not search_string.strip():
        return Q()
    clauses = [Q(**{f'{name}__icontains': search_string}) for name in fields]
    return functools.reduce(operator.or_, clauses)


def sort_order(sort_by='desc'):
    if sort_by not in ('asc', 'desc'):
        raise ValidationFailure(f"Invalid sort order: {sort_by}")
    prefix = '-' if sort_by == 'desc' else '+'
    return (f'{prefix}created_at', f'{prefix}id')


def paginate(queryset, page_number=1, page_size=20):
    if page_number < 1:
        raise ValidationFailure("Page number must be at least 1")
    if page_size < 1:
        raise ValidationFailure("Page size must be at least 1")

    skip_amount = (page_number - 1) * page_size
    total_count = queryset.count()
    records = list(queryset.skip(skip_amount).limit(page_size))
    has_next = total_count > skip_amount + len(records)

    return Page(records=records, has_next=has_next)
