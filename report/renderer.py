"""
Report renderer: format a Results object as text, JSON, indented JSON or CSV.
"""

import csv
import io
import json
from models import Results

FORMATS = ('text', 'json', 'indent', 'csv')


def render_text(res: Results) -> str:
    """Two-line table: name with column headings, then the window and hours/minutes."""
    header = f"{res.user.display_name:<25}{'Hours':>8}{'Minutes':>8}"
    row = f"{res.start:>10} - {res.end:>10}: {res.hours:>8}{res.minutes:>8}"
    return header + "\n" + row


def render_json(res: Results, indent: bool = False) -> str:
    if indent:
        return json.dumps(res.to_dict(), indent=4)
    return json.dumps(res.to_dict(), separators=(',', ':'))


def render_csv(res: Results) -> str:
    """Single CSV row, no header: name,email,start,end,timezone,hours,minutes,totalSeconds."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow([
        res.user.display_name,
        res.user.email_address,
        res.start,
        res.end,
        res.user.time_zone,
        res.hours,
        res.minutes,
        res.total_seconds,
    ])
    return output.getvalue().rstrip('\n')


def render(res: Results, fmt: str = 'text') -> str:
    """Main render function. Raises ValueError for an unknown format."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l == 'text':
        return render_text(res)
    if fmt_l == 'json':
        return render_json(res)
    if fmt_l == 'indent':
        return render_json(res, indent=True)
    if fmt_l == 'csv':
        return render_csv(res)
    raise ValueError(f"Unknown output format: {fmt}")
