from datetime import datetime
from typing import Optional

from pytz import timezone

# Brazil timezone constant
SAO_PAULO_TZ = timezone('America/Sao_Paulo')

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d/%m/%y", "%d-%m-%Y", "%Y-%m-%d %H:%M:%S")


def get_current_time() -> datetime:
    """Get current time in Sao Paulo timezone."""
    return datetime.now(SAO_PAULO_TZ)


def parse_match_date(value) -> Optional[datetime]:
    """Parse a CSV date string and localize it to SAO_PAULO_TZ; None if unparseable."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    for fmt in DATE_FORMATS:
        try:
            return SAO_PAULO_TZ.localize(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None
