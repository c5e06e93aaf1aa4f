"""Async surfaces: ResultTask, MaybeTask and sequential combination.

Examples:
    >>> from klaw_outcome.async_ import ResultTask, combine_async
    >>>
    >>> async def fetch(id: int) -> Result[dict]:
    ...     return success({'id': id})
    >>>
    >>> async def main():
    ...     # Use ResultTask for chaining
    ...     result = await ResultTask(fetch(1)).map(lambda d: d['id'])
    ...
    ...     # Combine several pending results, awaited in order
    ...     results = await combine_async([fetch(1), fetch(2), fetch(3)])
"""

from klaw_outcome.async_.itertools import combine_async, combine_unit_async
from klaw_outcome.async_.option import MaybeTask
from klaw_outcome.async_.result import ResultTask

__all__ = [
    'MaybeTask',
    'ResultTask',
    'combine_async',
    'combine_unit_async',
]
