from ..config import settings
from ..models import AggregationResult, Page


class Paginator:
    def __init__(self, page_size: int = settings.VIDEOS_PER_PAGE):
        self.page_size = page_size

    def page(self, result: AggregationResult, page_index: int, page_size: int = None) -> Page:
        """Slices one 1-based page out of an aggregation result.

        Pages past the end come back empty; total_count is always the full length.
        """
        size = page_size if page_size is not None else self.page_size
        if size <= 0:
            raise ValueError(f"page_size must be positive, got {size}")

        total = len(result.items)
        raw_start = (page_index - 1) * size
        start = min(max(raw_start, 0), total)
        end = min(max(raw_start + size, 0), total)

        return Page(
            items=result.items[start:end],
            total_count=total,
            page_index=page_index,
            page_size=size,
        )
