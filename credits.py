"""Attribution records for the layers drawn on a sheet."""
from typing import Iterable, List, NamedTuple

import pandas as pd

from config import Z_RANK


class CreditRecord(NamedTuple):
    slot: str
    variant_id: str
    authors: str = ""
    licenses: str = ""
    urls: str = ""


def merge(records: Iterable[CreditRecord]) -> List[CreditRecord]:
    """Deduplicate credit records, ordered by slot z-rank then variant id."""
    return sorted(set(records), key=lambda r: (Z_RANK[r.slot], r.variant_id, r))


def credits_frame(records: Iterable[CreditRecord]) -> pd.DataFrame:
    """Tabulate merged credits, one row per variant."""
    return pd.DataFrame(merge(records), columns=CreditRecord._fields)
