from codedash.report.text import format_entry, format_group, print_report, summary, top

__all__ = ["format_entry", "format_group", "print_report", "summary", "top"]
